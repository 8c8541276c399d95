"""Screen-level retrieval and moderation."""

from .content_detail import ContentDetailPage, ContentDetailService
from .home import BoardSection, FacilityCard, HomePage, facility_cards, format_date_only, summarize_posts
from .post_detail import PostDetailPage, PostDetailService, Surface

__all__ = [
    "ContentDetailPage",
    "ContentDetailService",
    "BoardSection",
    "FacilityCard",
    "HomePage",
    "facility_cards",
    "format_date_only",
    "summarize_posts",
    "PostDetailPage",
    "PostDetailService",
    "Surface"
]

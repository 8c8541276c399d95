"""
Bulletin: the front-end core of a board and page content management system.

Converts rich documents to and from stored markup, uploads editor images,
resolves attachment and board references and drives the post, comment and
page screens of both the CMS and the public site.
"""

__version__ = "0.1.0"
__author__ = "Bulletin Project"

# Import main components
from .api import ApiClient, IdentityContext
from .attachments import build_attachment_link, resolve_download_url
from .boards import BoardDirectory, resolve_container_id
from .converters import HtmlConverter, parse_markup, serialize_document
from .editor import EditorSession, ResourceUploader
from .models import Document
from .retrieval import ContentDetailPage, HomePage, PostDetailPage, PostDetailService, Surface

__all__ = [
    "ApiClient",
    "IdentityContext",
    "build_attachment_link",
    "resolve_download_url",
    "BoardDirectory",
    "resolve_container_id",
    "HtmlConverter",
    "parse_markup",
    "serialize_document",
    "EditorSession",
    "ResourceUploader",
    "Document",
    "ContentDetailPage",
    "HomePage",
    "PostDetailPage",
    "PostDetailService",
    "Surface"
]

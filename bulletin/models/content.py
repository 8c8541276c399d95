"""
Content models for Bulletin.

These mirror the records served by the persistence API. Field aliases match
the camelCase names the backend sends; every model can also be populated by
its Python field names.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiModel(BaseModel):
    """Base for models read from the content API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value, info):
        # The backend sends null for empty text columns
        field = cls.model_fields[info.field_name]
        if value is None and field.annotation is str and not field.is_required():
            return field.default
        return value


class Board(ApiModel):
    """
    A container of posts (e.g. the notice board).

    ``board_num`` is the stable human-facing code; ``board_id`` is the
    internal identifier, which changes when a board is recreated.
    """

    board_id: int = Field(..., alias="boardId", description="Internal numeric board identifier")
    board_num: str = Field(..., alias="boardNum", description="Stable category code, e.g. '01'")
    board_title: str = Field(default="", alias="boardTitle", description="Display title")
    board_use: str = Field(default="N", alias="boardUse", description="'Y' when the board is active")

    @field_validator("board_num", mode="before")
    @classmethod
    def _code_as_string(cls, value):
        return str(value) if isinstance(value, int) else value

    @property
    def active(self) -> bool:
        return self.board_use == "Y"


class Post(ApiModel):
    """A single post on a board."""

    post_id: int = Field(..., alias="postId")
    board_id: Optional[int] = Field(default=None, alias="boardId")
    post_title: str = Field(default="", alias="postTitle")
    post_content: str = Field(default="", alias="postContent", description="Stored markup body")
    member_id: Optional[str] = Field(default=None, alias="memberId")
    member_name: Optional[str] = Field(default=None, alias="memberName")
    post_reg_date: Optional[str] = Field(default=None, alias="postRegDate")
    post_view_count: Optional[int] = Field(default=None, alias="postViewCount")
    post_file_path: Optional[str] = Field(default=None, alias="postFilePath",
                                          description="Stored relative attachment path")

    @property
    def author(self) -> str:
        return self.member_name or self.member_id or ""


class Comment(ApiModel):
    """A comment attached to one post."""

    comment_id: int = Field(..., alias="commentsId")
    post_id: Optional[int] = Field(default=None, alias="postId")
    member_id: Optional[str] = Field(default=None, alias="memberId")
    member_name: Optional[str] = Field(default=None, alias="memberName")
    content: str = Field(default="")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @property
    def author(self) -> str:
        return self.member_name or self.member_id or ""


class ContentPage(ApiModel):
    """An informational page (usage guide, facility guide, ...)."""

    content_id: int = Field(..., alias="contentId")
    content_title: str = Field(default="", alias="contentTitle")
    content_content: str = Field(default="", alias="contentContent", description="Stored markup body")
    content_type: Optional[str] = Field(default=None, alias="contentType", description="First-level category")
    content_num: Optional[int] = Field(default=None, alias="contentNum", description="Ordinal within the category")
    content_use: Optional[str] = Field(default=None, alias="contentUse")
    content_reg_date: Optional[str] = Field(default=None, alias="contentRegDate")
    content_mod_date: Optional[str] = Field(default=None, alias="contentModDate")
    content_file_path: Optional[str] = Field(default=None, alias="contentFilePath")


class PostSummary(BaseModel):
    """A row in a board listing."""

    post_id: int
    post_title: str
    member_name: Optional[str] = None
    post_view_count: Optional[int] = None
    date: str = Field(default="", description="Registration date as YYYY-MM-DD")


class AttachmentLink(BaseModel):
    """A resolved, fetchable attachment."""

    url: str = Field(..., description="Fully qualified download URL")
    file_name: str = Field(..., description="Last segment of the stored path")


class Facility(ApiModel):
    """A bookable facility shown on the home page."""

    facility_id: int = Field(..., alias="facilityId")
    facility_name: str = Field(default="", alias="facilityName")
    facility_image_path: Optional[str] = Field(default=None, alias="facilityImagePath",
                                               description="Stored image path, possibly a bare file name")
    facility_type: Optional[str] = Field(default=None, alias="facilityType")

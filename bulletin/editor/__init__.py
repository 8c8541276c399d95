"""Rich document editing."""

from .session import EditorSession, EditorState
from .uploads import ResourceReference, ResourceUploader, UploadResult

__all__ = ["EditorSession", "EditorState", "ResourceReference", "ResourceUploader", "UploadResult"]

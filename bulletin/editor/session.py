"""
Editing surface for Bulletin.

An EditorSession owns one Document and the cursor inside it. Every mutation
replaces the Document with a new snapshot, serializes it and hands the markup
to the ``on_change`` callback before returning. Image uploads run out of band:
the user keeps editing while they are in flight, and each finished upload is
inserted wherever the cursor is when it completes.
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from ..converters import BaseConverter, HtmlConverter
from ..converters.html import STYLE_TAGS
from ..exceptions import ResourceConsumedError, UploadError
from ..models import BlockType, Document, InlineRun, Position, RunKind
from ..models.document import canonical_styles, split_runs
from .uploads import ResourceReference, ResourceUploader


class EditorState(str, Enum):
    """Lifecycle of an editing session."""

    EMPTY = "empty"
    LOADED = "loaded"
    EDITED = "edited"
    EMITTED = "emitted"


class EditorSession:
    """
    A single editing surface.

    ``alerts`` collects blocking messages for uploads that failed in the
    background.
    """

    UPLOAD_ERROR = "Image upload failed."

    def __init__(self, on_change: Optional[Callable[[str], None]] = None,
                 default_value: Optional[str] = None,
                 converter: Optional[BaseConverter] = None,
                 uploader: Optional[ResourceUploader] = None):
        """
        Initialize the session.

        Args:
            on_change: Called with the serialized markup after every mutation
            default_value: Stored markup to edit, when modifying existing content
            converter: Markup converter (HTML by default)
            uploader: Uploader used by insert_resource
        """
        self.on_change = on_change
        self.converter = converter or HtmlConverter()
        self.uploader = uploader
        self.document = Document.empty()
        self.cursor: Optional[Position] = None
        self.state = EditorState.EMPTY
        self._consumed: Set[str] = set()
        self.alerts: List[str] = []

        if default_value:
            self.load(default_value)

    @property
    def markup(self) -> str:
        return self.converter.serialize(self.document)

    def load(self, markup: Optional[str]) -> None:
        """Replace the document with parsed stored markup. Does not emit."""
        if not markup:
            return
        document = self.converter.parse(markup)
        if document.is_empty:
            return
        self.document = document
        self.cursor = self._end_position(document)
        self.state = EditorState.LOADED
        logging.debug(f"Loaded document with {len(self.document.blocks)} blocks")

    # Cursor

    def move_cursor(self, node_id: int, offset: int) -> Position:
        """Place the cursor; raises KeyError for an unknown block."""
        self.cursor = self.document.clamp(Position(node_id=node_id, offset=max(0, offset)))
        return self.cursor

    @staticmethod
    def _end_position(document: Document) -> Optional[Position]:
        if document.is_empty:
            return None
        last = document.blocks[-1]
        return Position(node_id=last.node_id, offset=last.length)

    def _editable(self) -> Tuple[Document, Position]:
        """Current document and a valid cursor, creating a first paragraph if needed."""
        document = self.document
        if document.is_empty:
            document, node_id = document.insert_block()
            return document, Position(node_id=node_id, offset=0)
        cursor = self.cursor
        if cursor is None or all(block.node_id != cursor.node_id for block in document.blocks):
            return document, self._end_position(document)
        return document, document.clamp(cursor)

    def _commit(self, document: Document, cursor: Optional[Position]) -> str:
        self.document = document
        self.cursor = cursor
        self.state = EditorState.EDITED
        markup = self.converter.serialize(document)
        if self.on_change:
            self.on_change(markup)
        self.state = EditorState.EMITTED
        return markup

    # Mutations

    def type_text(self, text: str) -> str:
        document, cursor = self._editable()
        document = document.insert_text(cursor, text)
        return self._commit(document, Position(node_id=cursor.node_id, offset=cursor.offset + len(text)))

    def delete_backward(self) -> str:
        document, cursor = self._editable()
        if cursor.offset > 0:
            document = document.delete_range(cursor.node_id, cursor.offset - 1, cursor.offset)
            return self._commit(document, Position(node_id=cursor.node_id, offset=cursor.offset - 1))
        document, cursor = document.merge_with_previous(cursor.node_id)
        return self._commit(document, cursor)

    def split_block(self) -> str:
        document, cursor = self._editable()
        document, cursor = document.split_block(cursor)
        return self._commit(document, cursor)

    def set_block_type(self, block_type: BlockType, level: Optional[int] = None) -> str:
        document, cursor = self._editable()
        return self._commit(document.set_block_type(cursor.node_id, block_type, level), cursor)

    def set_alignment(self, align: Optional[str]) -> str:
        document, cursor = self._editable()
        return self._commit(document.set_alignment(cursor.node_id, align), cursor)

    def toggle_style(self, start: int, end: int, style: str) -> str:
        """
        Toggle an inline style on a range of the cursor's block. The style is
        removed if every text run in the range already has it, added otherwise.
        """
        if style in STYLE_TAGS:
            style = STYLE_TAGS[style]
        canonical_styles([style])
        document, cursor = self._editable()
        block = document.block(cursor.node_id)
        _, rest = split_runs(block.runs, start)
        selected, _ = split_runs(rest, max(0, end - start))
        text_runs = [run for run in selected if run.kind != RunKind.IMAGE and run.text]
        enabled = not text_runs or not all(style in run.styles for run in text_runs)
        return self._commit(document.apply_style(cursor.node_id, start, end, style, enabled), cursor)

    def insert_link(self, text: str, href: str) -> str:
        document, cursor = self._editable()
        run = InlineRun(kind=RunKind.LINK, text=text, href=href)
        document = document.insert_run(cursor, run)
        return self._commit(document, Position(node_id=cursor.node_id, offset=cursor.offset + run.length))

    def insert_image(self, src: str, alt: Optional[str] = None,
                     resource_id: Optional[str] = None) -> str:
        document, cursor = self._editable()
        run = InlineRun(kind=RunKind.IMAGE, src=src, alt=alt, resource_id=resource_id)
        document = document.insert_run(cursor, run)
        return self._commit(document, Position(node_id=cursor.node_id, offset=cursor.offset + 1))

    # Resource insertion

    def insert_reference(self, reference: ResourceReference) -> str:
        """
        Inline an uploaded resource at the current cursor.

        Raises:
            ResourceConsumedError: If the reference was already inserted
        """
        if reference.local_id in self._consumed:
            raise ResourceConsumedError(f"Resource {reference.local_id} was already inserted")
        self._consumed.add(reference.local_id)
        return self.insert_image(reference.url, resource_id=reference.local_id)

    async def insert_resource(self, data: bytes, filename: str, content_type: str) -> ResourceReference:
        """
        Upload an image and inline it once the upload completes.

        The image goes wherever the cursor is when the upload finishes. On
        failure nothing is inserted and the upload error propagates.

        Raises:
            UploadError: If the upload fails
        """
        if self.uploader is None:
            raise RuntimeError("EditorSession has no uploader configured")

        local_id = uuid.uuid4().hex
        logging.info(f"Uploading {filename} as resource {local_id}")
        result = await self.uploader.upload(data, filename, content_type)

        reference = ResourceReference(local_id=local_id, url=result.url)
        self.insert_reference(reference)
        return reference

    def start_resource_upload(self, data: bytes, filename: str,
                              content_type: str) -> "asyncio.Task[Optional[ResourceReference]]":
        """
        Schedule an upload on the running loop and return its task.

        A failed upload records UPLOAD_ERROR in ``alerts`` and the task
        resolves to None.
        """
        return asyncio.get_running_loop().create_task(
            self._upload_in_background(data, filename, content_type)
        )

    async def _upload_in_background(self, data: bytes, filename: str,
                                    content_type: str) -> Optional[ResourceReference]:
        try:
            return await self.insert_resource(data, filename, content_type)
        except UploadError as e:
            logging.error(f"Upload of {filename} failed, nothing inserted: {e}")
            self.alerts.append(self.UPLOAD_ERROR)
            return None

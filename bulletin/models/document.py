"""
Document model for Bulletin.

A Document is the in-memory form of an authored post body. It is an ordered
arena of blocks addressed by stable integer node ids; each block holds inline
runs (styled text, links and images). Documents are immutable snapshots: every
editing method returns a new Document and leaves the receiver untouched.
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BlockType(str, Enum):
    """Block-level node kinds."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    UNORDERED_LIST_ITEM = "unordered-list-item"
    ORDERED_LIST_ITEM = "ordered-list-item"
    BLOCKQUOTE = "blockquote"
    CODE = "code-block"


class RunKind(str, Enum):
    """Inline run kinds."""

    TEXT = "text"
    LINK = "link"
    IMAGE = "image"


# Canonical style order; also the nesting order used by the serializer
STYLE_ORDER = (
    "bold",
    "italic",
    "underline",
    "strikethrough",
    "code",
    "superscript",
    "subscript",
)

ALIGNMENTS = ("left", "center", "right", "justify")


def canonical_styles(styles: Iterable[str]) -> Tuple[str, ...]:
    """Return ``styles`` deduplicated and sorted into canonical order."""
    wanted = set(styles)
    unknown = wanted.difference(STYLE_ORDER)
    if unknown:
        raise ValueError(f"Unknown inline styles: {sorted(unknown)}")
    return tuple(style for style in STYLE_ORDER if style in wanted)


class Position(BaseModel):
    """A cursor location: a block and a character offset inside it."""

    model_config = ConfigDict(frozen=True)

    node_id: int = Field(..., description="Node id of the block holding the cursor")
    offset: int = Field(default=0, ge=0, description="Offset in characters; an image counts as one")


class InlineRun(BaseModel):
    """
    A single inline run inside a block.

    Text and link runs carry text and formatting. Image runs carry a source
    URL and, when the image came from an editor upload, the opaque id of the
    resource reference that produced it.
    """

    model_config = ConfigDict(frozen=True)

    kind: RunKind = Field(default=RunKind.TEXT, description="Run kind")
    text: str = Field(default="", description="Text content; empty for images")
    styles: Tuple[str, ...] = Field(default=(), description="Inline styles in canonical order")
    color: Optional[str] = Field(default=None, description="CSS text color")
    font_size: Optional[str] = Field(default=None, description="CSS font size")
    href: Optional[str] = Field(default=None, description="Link target for link runs")
    src: Optional[str] = Field(default=None, description="Image URL for image runs")
    alt: Optional[str] = Field(default=None, description="Image alternative text")
    resource_id: Optional[str] = Field(
        default=None,
        description="Local id of the uploaded resource an image run was created from"
    )

    @field_validator("styles", mode="before")
    @classmethod
    def _canonical_styles(cls, value):
        return canonical_styles(value or ())

    @model_validator(mode="after")
    def _check_kind(self):
        if self.kind == RunKind.IMAGE:
            if not self.src:
                raise ValueError("Image runs require a src")
            if self.text:
                raise ValueError("Image runs cannot carry text")
        elif self.kind == RunKind.LINK and not self.href:
            raise ValueError("Link runs require an href")
        return self

    @property
    def length(self) -> int:
        """Number of cursor positions the run occupies."""
        return 1 if self.kind == RunKind.IMAGE else len(self.text)

    def same_format(self, other: "InlineRun") -> bool:
        """True when two text runs can be merged into one."""
        if self.kind == RunKind.IMAGE or other.kind == RunKind.IMAGE:
            return False
        return (
            self.kind == other.kind
            and self.styles == other.styles
            and self.color == other.color
            and self.font_size == other.font_size
            and self.href == other.href
        )


class Block(BaseModel):
    """A block-level node: paragraph, heading, list item, quote or code block."""

    model_config = ConfigDict(frozen=True)

    node_id: int = Field(..., ge=0, description="Stable arena index of this block")
    block_type: BlockType = Field(default=BlockType.PARAGRAPH, description="Block kind")
    level: Optional[int] = Field(default=None, description="Heading level, 1 to 6")
    align: Optional[str] = Field(default=None, description="Text alignment")
    runs: Tuple[InlineRun, ...] = Field(default=(), description="Inline runs in order")

    @model_validator(mode="after")
    def _check_level(self):
        if self.block_type == BlockType.HEADING:
            if self.level is None or not 1 <= self.level <= 6:
                raise ValueError(f"Heading level must be between 1 and 6, got {self.level}")
        elif self.level is not None:
            raise ValueError("Only headings carry a level")
        if self.align is not None and self.align not in ALIGNMENTS:
            raise ValueError(f"Unsupported alignment: {self.align}")
        return self

    @property
    def length(self) -> int:
        return sum(run.length for run in self.runs)

    @property
    def text(self) -> str:
        """Plain text of the block; images are dropped."""
        return "".join(run.text for run in self.runs)

    def with_runs(self, runs: Iterable[InlineRun]) -> "Block":
        return self.model_copy(update={"runs": normalize_runs(runs)})


def normalize_runs(runs: Iterable[InlineRun]) -> Tuple[InlineRun, ...]:
    """Drop empty text runs and merge neighbours with identical formatting."""
    result: List[InlineRun] = []
    for run in runs:
        if run.kind != RunKind.IMAGE and not run.text:
            continue
        if result and result[-1].same_format(run):
            result[-1] = result[-1].model_copy(update={"text": result[-1].text + run.text})
        else:
            result.append(run)
    return tuple(result)


def split_runs(runs: Iterable[InlineRun], offset: int) -> Tuple[List[InlineRun], List[InlineRun]]:
    """Split runs at a character offset, cutting a text run in two if needed."""
    left: List[InlineRun] = []
    right: List[InlineRun] = []
    consumed = 0
    for run in runs:
        if consumed >= offset:
            right.append(run)
        elif consumed + run.length <= offset:
            left.append(run)
        else:
            cut = offset - consumed
            left.append(run.model_copy(update={"text": run.text[:cut]}))
            right.append(run.model_copy(update={"text": run.text[cut:]}))
        consumed += run.length
    return left, right


class Document(BaseModel):
    """
    An immutable snapshot of an authored document.

    Blocks are stored in display order. ``next_id`` is the node id handed to
    the next block created by an edit, so ids are never reused within the
    lifetime of one editing session.
    """

    model_config = ConfigDict(frozen=True)

    blocks: Tuple[Block, ...] = Field(default=(), description="Blocks in display order")
    next_id: int = Field(default=0, ge=0, description="Next free node id")

    @model_validator(mode="after")
    def _check_ids(self):
        ids = [block.node_id for block in self.blocks]
        if len(ids) != len(set(ids)):
            raise ValueError("Block node ids must be unique within a document")
        if ids and max(ids) >= self.next_id:
            raise ValueError("next_id must be greater than every block node id")
        return self

    @classmethod
    def empty(cls) -> "Document":
        return cls()

    @classmethod
    def from_blocks(cls, blocks: Iterable[Tuple[BlockType, Optional[int], Optional[str], Iterable[InlineRun]]]) -> "Document":
        """
        Build a document from ``(block_type, level, align, runs)`` tuples,
        numbering the blocks from zero.
        """
        built = tuple(
            Block(node_id=index, block_type=block_type, level=level, align=align,
                  runs=normalize_runs(runs))
            for index, (block_type, level, align, runs) in enumerate(blocks)
        )
        return cls(blocks=built, next_id=len(built))

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def index_of(self, node_id: int) -> int:
        for index, block in enumerate(self.blocks):
            if block.node_id == node_id:
                return index
        raise KeyError(f"No block with node id {node_id}")

    def block(self, node_id: int) -> Block:
        return self.blocks[self.index_of(node_id)]

    def plain_text(self) -> str:
        return "\n".join(block.text for block in self.blocks)

    def clamp(self, position: Position) -> Position:
        """Clamp a position into the bounds of its block."""
        block = self.block(position.node_id)
        return Position(node_id=block.node_id, offset=min(position.offset, block.length))

    # Structural edits

    def replace_block(self, block: Block) -> "Document":
        index = self.index_of(block.node_id)
        blocks = self.blocks[:index] + (block,) + self.blocks[index + 1:]
        return self.model_copy(update={"blocks": blocks})

    def insert_block(self, after: Optional[int] = None,
                     block_type: BlockType = BlockType.PARAGRAPH,
                     level: Optional[int] = None, align: Optional[str] = None,
                     runs: Iterable[InlineRun] = ()) -> Tuple["Document", int]:
        """
        Insert a new block after the block ``after`` (or append when None).

        Returns:
            The new document and the node id of the inserted block
        """
        node_id = self.next_id
        block = Block(node_id=node_id, block_type=block_type, level=level,
                      align=align, runs=normalize_runs(runs))
        if after is None:
            blocks = self.blocks + (block,)
        else:
            index = self.index_of(after) + 1
            blocks = self.blocks[:index] + (block,) + self.blocks[index:]
        return self.model_copy(update={"blocks": blocks, "next_id": node_id + 1}), node_id

    def remove_block(self, node_id: int) -> "Document":
        index = self.index_of(node_id)
        return self.model_copy(update={"blocks": self.blocks[:index] + self.blocks[index + 1:]})

    def set_block_type(self, node_id: int, block_type: BlockType,
                       level: Optional[int] = None) -> "Document":
        block = self.block(node_id)
        updated = Block(node_id=node_id, block_type=block_type,
                        level=level if block_type == BlockType.HEADING else None,
                        align=block.align, runs=block.runs)
        return self.replace_block(updated)

    def set_alignment(self, node_id: int, align: Optional[str]) -> "Document":
        block = self.block(node_id)
        return self.replace_block(Block(node_id=node_id, block_type=block.block_type,
                                        level=block.level, align=align, runs=block.runs))

    def split_block(self, position: Position) -> Tuple["Document", Position]:
        """Split a block at ``position``; the tail becomes a new block of the same kind."""
        position = self.clamp(position)
        block = self.block(position.node_id)
        left, right = split_runs(block.runs, position.offset)
        document = self.replace_block(block.with_runs(left))
        document, node_id = document.insert_block(after=block.node_id,
                                                  block_type=block.block_type,
                                                  level=block.level, align=block.align,
                                                  runs=right)
        return document, Position(node_id=node_id, offset=0)

    def merge_with_previous(self, node_id: int) -> Tuple["Document", Position]:
        """Append a block's runs to the block before it and drop the block."""
        index = self.index_of(node_id)
        if index == 0:
            return self, Position(node_id=node_id, offset=0)
        previous = self.blocks[index - 1]
        current = self.blocks[index]
        document = self.replace_block(previous.with_runs(previous.runs + current.runs))
        document = document.remove_block(node_id)
        return document, Position(node_id=previous.node_id, offset=previous.length)

    # Inline edits

    def insert_run(self, position: Position, run: InlineRun) -> "Document":
        position = self.clamp(position)
        block = self.block(position.node_id)
        left, right = split_runs(block.runs, position.offset)
        return self.replace_block(block.with_runs(left + [run] + right))

    def insert_text(self, position: Position, text: str) -> "Document":
        """
        Insert text at ``position``, inheriting the formatting of the run
        immediately before it (or after it at the start of a block).
        """
        if not text:
            return self
        position = self.clamp(position)
        block = self.block(position.node_id)
        left, right = split_runs(block.runs, position.offset)

        template = None
        if left and left[-1].kind != RunKind.IMAGE:
            template = left[-1]
        elif not left and right and right[0].kind != RunKind.IMAGE:
            template = right[0]

        if template is None:
            run = InlineRun(text=text)
        else:
            run = template.model_copy(update={"text": text})
        return self.replace_block(block.with_runs(left + [run] + right))

    def delete_range(self, node_id: int, start: int, end: int) -> "Document":
        block = self.block(node_id)
        start = max(0, min(start, block.length))
        end = max(start, min(end, block.length))
        left, _ = split_runs(block.runs, start)
        _, right = split_runs(block.runs, end)
        return self.replace_block(block.with_runs(left + right))

    def apply_style(self, node_id: int, start: int, end: int, style: str,
                    enabled: bool = True) -> "Document":
        """Add or remove an inline style on the text between two offsets."""
        canonical_styles([style])
        block = self.block(node_id)
        left, rest = split_runs(block.runs, start)
        middle, right = split_runs(rest, max(0, end - start))

        styled = []
        for run in middle:
            if run.kind == RunKind.IMAGE:
                styled.append(run)
                continue
            styles = set(run.styles)
            if enabled:
                styles.add(style)
            else:
                styles.discard(style)
            styled.append(run.model_copy(update={"styles": canonical_styles(styles)}))
        return self.replace_block(block.with_runs(left + styled + right))

    def apply_link(self, node_id: int, start: int, end: int, href: str) -> "Document":
        """Turn the text between two offsets into a link."""
        block = self.block(node_id)
        left, rest = split_runs(block.runs, start)
        middle, right = split_runs(rest, max(0, end - start))
        linked = [
            run if run.kind == RunKind.IMAGE
            else run.model_copy(update={"kind": RunKind.LINK, "href": href})
            for run in middle
        ]
        return self.replace_block(block.with_runs(left + linked + right))

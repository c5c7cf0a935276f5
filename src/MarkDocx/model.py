from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Block:
    """Base class for block-level nodes."""


@dataclass
class Document:
    blocks: List[Block]


@dataclass
class Heading(Block):
    level: int
    inline: List["InlineElement"]


@dataclass
class Paragraph(Block):
    inline: List["InlineElement"]


@dataclass
class ListItem:
    blocks: List[Block]


@dataclass
class ListBlock(Block):
    items: List[ListItem]
    ordered: bool


@dataclass
class CodeBlock(Block):
    lines: List[str]


@dataclass
class Quote(Block):
    blocks: List[Block]


@dataclass
class HorizontalRule(Block):
    """Horizontal rule / thematic break."""


@dataclass
class TableRow:
    cells: List[List["InlineElement"]]
    header: bool = False


@dataclass
class TableBlock(Block):
    rows: List[TableRow]


@dataclass
class InlineElement:
    """Base class for inline nodes."""


@dataclass
class InlineText(InlineElement):
    text: str


@dataclass
class Emphasis(InlineElement):
    # 1 = italic, 2 = bold, 3 = bold + italic
    delimiters: int
    children: List[InlineElement] = field(default_factory=list)


@dataclass
class CodeSpan(InlineElement):
    text: str


@dataclass
class LineBreak(InlineElement):
    """Hard line break inside a paragraph."""


@dataclass
class Link(InlineElement):
    url: str
    children: List[InlineElement] = field(default_factory=list)
    title: str | None = None
    is_image: bool = False

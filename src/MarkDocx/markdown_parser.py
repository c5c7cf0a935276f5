from __future__ import annotations

import logging
from typing import List, Sequence

from markdown_it import MarkdownIt

from .model import (
    Block,
    CodeBlock,
    CodeSpan,
    Document,
    Emphasis,
    Heading,
    HorizontalRule,
    InlineElement,
    InlineText,
    LineBreak,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    Quote,
    TableBlock,
    TableRow,
)

logger = logging.getLogger(__name__)

_LIST_CLOSE = {
    "bullet_list_open": "bullet_list_close",
    "ordered_list_open": "ordered_list_close",
}


def parse_markdown(text: str) -> Document:
    md = MarkdownIt("commonmark").enable(["table"])
    tokens = md.parse(text)
    blocks, _ = _parse_blocks(tokens, 0, stop_types=set())
    return Document(blocks=blocks)


def _parse_blocks(tokens, index: int, stop_types: set[str]) -> tuple[list[Block], int]:
    blocks: List[Block] = []
    i = index
    while i < len(tokens):
        tok = tokens[i]
        if tok.type in stop_types:
            break
        if tok.type == "heading_open":
            level = int(tok.tag[1])
            inline = tokens[i + 1]
            blocks.append(Heading(level=level, inline=parse_inline(inline.children or [])))
            i += 3
        elif tok.type == "paragraph_open":
            inline = tokens[i + 1]
            blocks.append(Paragraph(inline=parse_inline(inline.children or [])))
            i += 3
        elif tok.type in _LIST_CLOSE:
            ordered = tok.type == "ordered_list_open"
            close_type = _LIST_CLOSE[tok.type]
            i += 1
            items: list[ListItem] = []
            while i < len(tokens) and tokens[i].type != close_type:
                if tokens[i].type == "list_item_open":
                    item_blocks, i = _parse_blocks(tokens, i + 1, stop_types={"list_item_close"})
                    items.append(ListItem(blocks=item_blocks))
                    i += 1  # skip list_item_close
                else:
                    i += 1
            blocks.append(ListBlock(items=items, ordered=ordered))
            i += 1  # skip list close
        elif tok.type == "blockquote_open":
            quoted, i = _parse_blocks(tokens, i + 1, stop_types={"blockquote_close"})
            blocks.append(Quote(blocks=quoted))
            i += 1
        elif tok.type in ("fence", "code_block"):
            blocks.append(CodeBlock(lines=_code_lines(tok.content)))
            i += 1
        elif tok.type == "hr":
            blocks.append(HorizontalRule())
            i += 1
        elif tok.type == "table_open":
            table_block, i = _parse_table(tokens, i)
            blocks.append(table_block)
        else:
            logger.debug("Skipping unsupported block token %s", tok.type)
            i += 1
    return blocks, i


def _code_lines(content: str) -> list[str]:
    if not content:
        return []
    return content.rstrip("\n").split("\n")


def _parse_table(tokens, index: int) -> tuple[TableBlock, int]:
    rows: list[TableRow] = []
    in_header = False
    i = index + 1
    while i < len(tokens):
        tok = tokens[i]
        if tok.type == "thead_open":
            in_header = True
            i += 1
        elif tok.type == "thead_close":
            in_header = False
            i += 1
        elif tok.type == "tr_open":
            cells: list[list[InlineElement]] = []
            i += 1
            while tokens[i].type != "tr_close":
                if tokens[i].type in {"td_open", "th_open"}:
                    inline = tokens[i + 1]
                    cells.append(parse_inline(inline.children or []))
                    i += 3  # skip cell open, inline, cell close
                else:
                    i += 1
            rows.append(TableRow(cells=cells, header=in_header))
            i += 1  # skip tr_close
        elif tok.type == "table_close":
            break
        else:
            i += 1
    return TableBlock(rows=rows), i + 1


def parse_inline(children: Sequence) -> list[InlineElement]:
    result, _ = _parse_inline(list(children), 0, closing_type=None)
    return result


def _parse_inline(tokens: list, index: int, closing_type: str | None) -> tuple[list[InlineElement], int]:
    result: list[InlineElement] = []
    i = index
    while i < len(tokens):
        tok = tokens[i]
        if closing_type is not None and tok.type == closing_type:
            return result, i + 1
        if tok.type in ("text", "text_special"):
            # markdown-it emits empty text tokens around delimiter runs
            if tok.content:
                result.append(InlineText(tok.content))
            i += 1
        elif tok.type == "softbreak":
            result.append(InlineText(" "))
            i += 1
        elif tok.type == "hardbreak":
            result.append(LineBreak())
            i += 1
        elif tok.type == "strong_open":
            children, i = _parse_inline(tokens, i + 1, "strong_close")
            result.append(_emphasis(2, children))
        elif tok.type == "em_open":
            children, i = _parse_inline(tokens, i + 1, "em_close")
            result.append(_emphasis(1, children))
        elif tok.type == "code_inline":
            result.append(CodeSpan(tok.content))
            i += 1
        elif tok.type == "link_open":
            href = tok.attrGet("href") or ""
            title = tok.attrGet("title")
            children, i = _parse_inline(tokens, i + 1, "link_close")
            result.append(Link(url=str(href), children=children, title=title and str(title)))
        elif tok.type == "image":
            src = tok.attrGet("src") or ""
            title = tok.attrGet("title")
            alt = parse_inline(tok.children or [])
            result.append(Link(url=str(src), children=alt, title=title and str(title), is_image=True))
            i += 1
        else:
            logger.debug("Skipping unsupported inline token %s", tok.type)
            i += 1
    return result, i


def _emphasis(delimiters: int, children: list[InlineElement]) -> Emphasis:
    # `***text***` arrives as em wrapping strong; fold it into one node.
    if len(children) == 1 and isinstance(children[0], Emphasis):
        inner = children[0]
        if inner.delimiters + delimiters == 3:
            return Emphasis(delimiters=3, children=inner.children)
    return Emphasis(delimiters=delimiters, children=children)

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from docx import Document as DocxDocument
from docx.shared import Inches, Pt

from . import markdown_parser, styles
from .config import ConverterConfig
from .exceptions import ConversionError
from .fetch import ImageFetcher
from .inline import add_text_run, render_inlines
from .model import (
    Block,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    ListBlock,
    Paragraph,
    Quote,
    TableBlock,
)
from .state import RenderState
from .styles import PLAIN, RunStyle

logger = logging.getLogger(__name__)


def convert_markdown(
    markdown_text: str,
    *,
    config: ConverterConfig | None = None,
    fetcher: ImageFetcher | None = None,
    asset_root: Path | None = None,
) -> bytes:
    """Convert Markdown text to the bytes of a .docx file."""
    try:
        document = markdown_parser.parse_markdown(markdown_text)
    except Exception as exc:
        raise ConversionError(f"Failed to parse Markdown: {exc}") from exc
    logger.debug("Parsed %d top-level blocks", len(document.blocks))
    return render_to_bytes(document, config=config, fetcher=fetcher, asset_root=asset_root)


def render_to_bytes(
    doc: Document,
    *,
    config: ConverterConfig | None = None,
    fetcher: ImageFetcher | None = None,
    asset_root: Path | None = None,
) -> bytes:
    state = RenderState(config=config or ConverterConfig(), fetcher=fetcher, asset_root=asset_root)
    docx = build_document(doc, state)
    buffer = BytesIO()
    try:
        docx.save(buffer)
    except Exception as exc:
        raise ConversionError(f"Failed to package document: {exc}") from exc
    return buffer.getvalue()


def render_document(
    doc: Document,
    output_path: str | Path,
    *,
    config: ConverterConfig | None = None,
    fetcher: ImageFetcher | None = None,
    asset_root: Path | None = None,
) -> None:
    output_path = Path(output_path)
    data = render_to_bytes(doc, config=config, fetcher=fetcher, asset_root=asset_root)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)


def build_document(doc: Document, state: RenderState) -> DocxDocument:
    try:
        docx = DocxDocument()
    except Exception as exc:
        raise ConversionError(f"Failed to create document package: {exc}") from exc
    for block in doc.blocks:
        dispatch_block(docx, block, state)
    return docx


def dispatch_block(docx: DocxDocument, block: Block, state: RenderState) -> None:
    if isinstance(block, Heading):
        _render_heading(docx, block, state)
    elif isinstance(block, Paragraph):
        _render_paragraph(docx, block, state)
    elif isinstance(block, ListBlock):
        _render_list(docx, block, state)
    elif isinstance(block, TableBlock):
        _render_table_block(docx, block, state)
    elif isinstance(block, CodeBlock):
        _render_code_block(docx, block, state)
    elif isinstance(block, Quote):
        _render_quote(docx, block, state)
    elif isinstance(block, HorizontalRule):
        _render_horizontal_rule(docx, state)
    else:
        # Unknown blocks are dropped rather than dumped as raw text.
        logger.debug("Skipping unsupported block %s", type(block).__name__)


def _render_heading(docx: DocxDocument, heading: Heading, state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    style = RunStyle(bold=True, size=styles.heading_size(heading.level))
    render_inlines(heading.inline, paragraph, state, style)


def _render_paragraph(docx: DocxDocument, block: Paragraph, state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    render_inlines(block.inline, paragraph, state)


def _render_list(docx: DocxDocument, block: ListBlock, state: RenderState) -> None:
    level = state.list_depth + 1
    for number, item in enumerate(block.items, start=1):
        prefix = f"{number}. " if block.ordered else f"{styles.BULLET} "
        paragraph = docx.add_paragraph()
        styles.set_hanging_indent(paragraph, level)
        add_text_run(paragraph, prefix, PLAIN, state)

        remaining_blocks = item.blocks
        if item.blocks and isinstance(item.blocks[0], Paragraph):
            render_inlines(item.blocks[0].inline, paragraph, state)
            remaining_blocks = item.blocks[1:]

        state.list_depth += 1
        try:
            for sub_block in remaining_blocks:
                dispatch_block(docx, sub_block, state)
        finally:
            state.list_depth -= 1


def _render_table_block(docx: DocxDocument, block: TableBlock, state: RenderState) -> None:
    if not block.rows:
        return
    col_count = max(len(row.cells) for row in block.rows) or 1
    table = docx.add_table(rows=len(block.rows), cols=col_count)
    table.style = "Table Grid"
    styles.set_table_grid(table)

    for row_block, row in zip(block.rows, table.rows):
        style = RunStyle(bold=True) if row_block.header else PLAIN
        for c_idx, cell in enumerate(row.cells):
            if row_block.header:
                styles.shade_cell(cell, state.config.header_shade)
            paragraph = cell.paragraphs[0] if cell.paragraphs else cell.add_paragraph()
            if c_idx < len(row_block.cells):
                render_inlines(row_block.cells[c_idx], paragraph, state, style)

    docx.add_paragraph()


def _render_code_block(docx: DocxDocument, block: CodeBlock, state: RenderState) -> None:
    # One paragraph per line keeps the shading continuous and the font per line.
    lines = block.lines or [""]
    last = len(lines) - 1
    code = RunStyle(monospace=True)
    for idx, line in enumerate(lines):
        paragraph = docx.add_paragraph()
        styles.shade_paragraph(paragraph, state.config.code_shade)
        fmt = paragraph.paragraph_format
        fmt.space_before = Pt(styles.CODE_BLOCK_SPACING_PT if idx == 0 else 0)
        fmt.space_after = Pt(styles.CODE_BLOCK_SPACING_PT if idx == last else 0)
        fmt.line_spacing = 1.0
        if line:
            add_text_run(paragraph, line, code, state)


def _render_quote(docx: DocxDocument, block: Quote, state: RenderState) -> None:
    for child in block.blocks:
        if isinstance(child, Paragraph):
            paragraph = docx.add_paragraph()
            styles.add_paragraph_border(paragraph, "left", state.config.rule_color, size=12)
            paragraph.paragraph_format.left_indent = Inches(styles.QUOTE_INDENT_IN)
            render_inlines(child.inline, paragraph, state)
        else:
            dispatch_block(docx, child, state)


def _render_horizontal_rule(docx: DocxDocument, state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    styles.add_paragraph_border(paragraph, "bottom", state.config.rule_color)

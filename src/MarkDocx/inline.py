from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from .hyperlinks import create_hyperlink
from .images import embed_image, render_image_fallback
from .model import CodeSpan, Emphasis, InlineElement, InlineText, LineBreak, Link
from .state import RenderState
from .styles import PLAIN, RunStyle, apply_run_style, emphasis_style, preserve_whitespace

logger = logging.getLogger(__name__)


class Attachment(Enum):
    """Where inline content is being written.

    PARAGRAPH targets accept hyperlinks; RUN targets (the label of a
    hyperlink) do not, so links met there are written as plain runs.
    """

    PARAGRAPH = "paragraph"
    RUN = "run"


def code_style(state: RenderState) -> RunStyle:
    return RunStyle(monospace=True, color=state.config.code_color, shade=state.config.code_shade)


def link_style(state: RenderState) -> RunStyle:
    return RunStyle(underline=True, color=state.config.link_color)


def add_text_run(target, text: str, style: RunStyle, state: RenderState):
    run = target.add_run(text)
    apply_run_style(run, style, state.config.code_font)
    preserve_whitespace(run)
    return run


def render_inlines(
    inlines: Iterable[InlineElement],
    target,
    state: RenderState,
    style: RunStyle = PLAIN,
    attachment: Attachment = Attachment.PARAGRAPH,
) -> None:
    for inline in inlines:
        render_inline(inline, target, state, style, attachment)


def render_inline(inline: InlineElement, target, state: RenderState, style: RunStyle, attachment: Attachment) -> None:
    if isinstance(inline, InlineText):
        add_text_run(target, inline.text, style, state)
    elif isinstance(inline, Emphasis):
        # Links inside emphasis still become paragraph-level hyperlinks; the
        # emphasis reaches them through the merged style of their label runs.
        render_inlines(inline.children, target, state, style.merge(emphasis_style(inline.delimiters)), attachment)
    elif isinstance(inline, CodeSpan):
        add_text_run(target, inline.text, style.merge(code_style(state)), state)
    elif isinstance(inline, LineBreak):
        target.add_run().add_break()
    elif isinstance(inline, Link) and inline.is_image:
        _render_image(inline, target, state, style)
    elif isinstance(inline, Link):
        _render_link(inline, target, state, style, attachment)
    else:
        logger.debug("Skipping unsupported inline %s", type(inline).__name__)


def _render_link(link: Link, target, state: RenderState, style: RunStyle, attachment: Attachment) -> None:
    if not link.url.strip():
        render_inlines(link.children, target, state, style, attachment)
        return

    label = link.children if _has_label(link.children) else [InlineText(link.url)]
    if attachment is Attachment.RUN:
        render_inlines(label, target, state, style, attachment)
        return

    label_style = style.merge(link_style(state))

    def write_label(hyperlink) -> None:
        render_inlines(label, hyperlink, state, label_style, Attachment.RUN)

    if not create_hyperlink(target, link.url, write_label):
        render_inlines(label, target, state, style, Attachment.RUN)


def _render_image(image: Link, target, state: RenderState, style: RunStyle) -> None:
    alt_text = inline_text(image.children).strip() or (image.title or "")
    run = target.add_run()
    if not image.url.strip():
        render_image_fallback(run, alt_text, state, style)
        return
    embed_image(run, image.url, alt_text, state, style)


def _has_label(inlines: Iterable[InlineElement]) -> bool:
    for inline in inlines:
        if isinstance(inline, Link) and inline.is_image:
            return True
        if isinstance(inline, (Emphasis, Link)):
            if _has_label(inline.children):
                return True
        elif isinstance(inline, (InlineText, CodeSpan)) and inline.text.strip():
            return True
    return False


def inline_text(inlines: Iterable[InlineElement]) -> str:
    """Plain text of an inline sequence, formatting dropped."""
    parts: list[str] = []
    for inline in inlines:
        if isinstance(inline, (InlineText, CodeSpan)):
            parts.append(inline.text)
        elif isinstance(inline, LineBreak):
            parts.append(" ")
        elif isinstance(inline, (Emphasis, Link)):
            parts.append(inline_text(inline.children))
    return "".join(parts)

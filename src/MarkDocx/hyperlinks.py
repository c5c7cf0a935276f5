"""Relationship-backed hyperlinks.

python-docx has no public API for writing hyperlinks, so the ``w:hyperlink``
element is assembled by hand: the target URI is registered as an external
relationship on the paragraph's part and the element refers to it by id.
Hyperlinks must be direct children of a paragraph; a run cannot contain one.
"""

from __future__ import annotations

import logging
import re
from typing import Callable
from urllib.parse import urlsplit

from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.text.run import Run

logger = logging.getLogger(__name__)

INVALID_URL_PLACEHOLDER = "about:blank"

# markdown-it percent-encodes backslashes in link destinations
_ENCODED_BACKSLASH = re.compile(r"%5c", re.IGNORECASE)


def normalize_url(url: str) -> str:
    return _ENCODED_BACKSLASH.sub("/", url.strip().replace("\\", "/"))


def resolve_target(url: str) -> str:
    """Return a URI safe to register, or the placeholder if ``url`` cannot be parsed."""
    normalized = normalize_url(url)
    try:
        urlsplit(normalized)
    except ValueError:
        logger.warning("Unparseable link target %r, using %s", url, INVALID_URL_PLACEHOLDER)
        return INVALID_URL_PLACEHOLDER
    return normalized


class HyperlinkLabel:
    """Writes runs into a ``w:hyperlink`` the way ``Paragraph.add_run`` does."""

    def __init__(self, element, paragraph) -> None:
        self._element = element
        self._paragraph = paragraph

    def add_run(self, text: str | None = None) -> Run:
        r = OxmlElement("w:r")
        self._element.append(r)
        run = Run(r, self._paragraph)
        if text:
            run.text = text
        return run


def create_hyperlink(paragraph, url: str, write_label: Callable[[HyperlinkLabel], None]) -> bool:
    """Append a hyperlink to ``url`` whose label runs are produced by ``write_label``.

    Returns False, leaving the paragraph untouched, when the hyperlink cannot
    be built; the caller is expected to render the label as plain text.
    """
    target = resolve_target(url)
    part = r_id = None
    element = OxmlElement("w:hyperlink")
    try:
        part = paragraph.part
        r_id = part.relate_to(target, RT.HYPERLINK, is_external=True)
        element.set(qn("r:id"), r_id)
        write_label(HyperlinkLabel(element, paragraph))
    except Exception:
        logger.warning("Could not build hyperlink to %r, rendering label as text", url, exc_info=True)
        if r_id is not None:
            part.drop_rel(r_id)
            # and any label images registered before the failure
            for embed_id in element.xpath(".//a:blip/@r:embed"):
                part.drop_rel(embed_id)
        return False
    paragraph._p.append(element)
    return True

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.oxml.shape import CT_Inline
from docx.parts.image import ImagePart
from docx.shared import Inches

from .fetch import FetchFailure
from .state import RenderState
from .styles import PLAIN, RunStyle, apply_run_style, preserve_whitespace

logger = logging.getLogger(__name__)

# extension -> (content type, extension used in the part name)
IMAGE_TYPES = {
    ".png": (CT.PNG, "png"),
    ".jpg": (CT.JPEG, "jpeg"),
    ".jpeg": (CT.JPEG, "jpeg"),
    ".gif": (CT.GIF, "gif"),
    ".bmp": (CT.BMP, "bmp"),
    ".tif": (CT.TIFF, "tiff"),
    ".tiff": (CT.TIFF, "tiff"),
}
DEFAULT_IMAGE_TYPE = (CT.JPEG, "jpeg")

# response media type -> same pair, for URLs without a known extension
MEDIA_TYPES = {content_type: (content_type, ext) for content_type, ext in IMAGE_TYPES.values()}


def _url_path(url: str) -> PurePosixPath:
    try:
        return PurePosixPath(urlsplit(url).path)
    except ValueError:
        return PurePosixPath(url)


def classify_image(url: str, media_type: str | None = None) -> tuple[str, str]:
    """Content type and part-name extension for an image.

    The URL extension wins; a server-declared ``media_type`` is consulted only
    when the extension is missing or unknown. JPEG otherwise.
    """
    by_extension = IMAGE_TYPES.get(_url_path(url).suffix.lower())
    if by_extension:
        return by_extension
    if media_type:
        return MEDIA_TYPES.get(media_type.split(";", 1)[0].strip().lower(), DEFAULT_IMAGE_TYPE)
    return DEFAULT_IMAGE_TYPE


def _next_media_partname(package, ext: str) -> PackURI:
    # Numbered across all extensions: image1.png, image2.gif, ...
    used = {str(p.partname).rsplit(".", 1)[0] for p in package.iter_parts()}
    n = 1
    while f"/word/media/image{n}" in used:
        n += 1
    return PackURI(f"/word/media/image{n}.{ext}")


def register_image_part(part, blob: bytes, content_type: str, ext: str) -> tuple[ImagePart, str]:
    partname = _next_media_partname(part.package, ext)
    image_part = ImagePart(partname, content_type, blob)
    r_id = part.relate_to(image_part, RT.IMAGE)
    return image_part, r_id


def embed_image(run, url: str, alt_text: str, state: RenderState, style: RunStyle = PLAIN) -> bool:
    """Put a fixed-size drawing of the image at ``url`` into ``run``.

    Any failure leaves an italic ``[Image: alt]`` caption in the run instead.
    Returns True when the drawing was embedded.
    """
    result = state.load_image(url)
    if isinstance(result, FetchFailure):
        logger.warning("Image %s not embedded: %s", url, result.reason)
        render_image_fallback(run, alt_text, state, style)
        return False

    content_type, ext = classify_image(url, result.content_type)
    try:
        part = run.part
        _, r_id = register_image_part(part, result.content, content_type, ext)
        filename = _url_path(url).name or f"image.{ext}"
        inline = CT_Inline.new_pic_inline(
            part.next_id,
            r_id,
            filename,
            Inches(state.config.image_width_in),
            Inches(state.config.image_height_in),
        )
        run._r.add_drawing(inline)
    except Exception:
        logger.warning("Could not embed image %s", url, exc_info=True)
        render_image_fallback(run, alt_text, state, style)
        return False
    logger.debug("Embedded %s (%d bytes) as %s", url, len(result.content), content_type)
    return True


def render_image_fallback(run, alt_text: str, state: RenderState, style: RunStyle = PLAIN) -> None:
    run.text = f"[Image: {alt_text}]"
    caption = style.merge(RunStyle(italic=True, color=state.config.caption_color))
    apply_run_style(run, caption, state.config.code_font)
    preserve_whitespace(run)

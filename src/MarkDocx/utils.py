from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .exceptions import InvalidInputError

MARKDOWN_EXTENSIONS = frozenset({".md", ".markdown", ".txt"})


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def resolve_output_path(input_path: Path, output: Optional[str]) -> Path:
    if output:
        out_path = Path(output)
        if out_path.is_dir():
            out_path = out_path / f"{input_path.stem}.docx"
        return out_path
    return input_path.with_suffix(".docx")


def is_markdown_file(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_EXTENSIONS


def read_markdown(path: Path) -> str:
    if not path.exists():
        raise InvalidInputError(f"Input file not found: {path}")
    if not is_markdown_file(path):
        raise InvalidInputError(f"Not a Markdown file (.md, .markdown or .txt): {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"Input file is not valid UTF-8: {path}") from exc
    except OSError as exc:
        raise InvalidInputError(f"Cannot read input file {path}: {exc}") from exc
    if not text.strip():
        raise InvalidInputError(f"Input file is empty: {path}")
    return text

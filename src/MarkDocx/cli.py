from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import renderer_docx
from .config import load_config
from .exceptions import MarkDocxError
from .fetch import ImageFetcher
from .utils import configure_logging, read_markdown, resolve_output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markdocx",
        description="Convert Markdown into a Word (.docx) document.",
    )
    parser.add_argument("input", type=str, help="Path to Markdown file (.md, .markdown, .txt)")
    parser.add_argument("-o", "--output", type=str, help="Output DOCX path or directory")
    parser.add_argument("--config", type=str, help="YAML file with style and fetch settings")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    input_path = Path(args.input).expanduser()
    output_path = resolve_output_path(input_path, args.output)

    try:
        config = load_config(args.config)
        logging.info("Reading %s", input_path)
        markdown_text = read_markdown(input_path)
        logging.debug("Markdown length: %d chars", len(markdown_text))

        logging.info("Rendering DOCX to %s", output_path)
        with ImageFetcher.from_config(config) as fetcher:
            data = renderer_docx.convert_markdown(
                markdown_text,
                config=config,
                fetcher=fetcher,
                asset_root=input_path.parent,
            )
    except MarkDocxError as exc:
        logging.error("%s", exc)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    logging.info("Done. Saved to %s", output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

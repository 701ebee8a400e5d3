"""Print the OCR text that falls inside body-text lines of a layout document.

Usage::

    python scripts/run_visible_text.py page.tsv layout.xml --page 1
    python scripts/run_visible_text.py page.tsv layout.xml \\
        --out visible.txt --summary summary.json \\
        --overlay overlay.png --pdf source.pdf
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))
import argparse
import logging

from hyperpaper import FormatError, MatchConfig, run_page
from hyperpaper.config import ConfigValidationError
from hyperpaper.export import (
    format_visible_text,
    write_page_summary_json,
    write_visible_text,
)
from hyperpaper.ingest import RenderError, render_page_image

log = logging.getLogger("hyperpaper.run_visible_text")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Emit OCR text that overlaps body-text layout lines"
    )
    parser.add_argument("tsv", type=Path, help="pdftotext -tsv export")
    parser.add_argument("layout", type=Path, help="XML layout document")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument("--out", type=Path, default=None, help="Write text here")
    parser.add_argument(
        "--summary", type=Path, default=None, help="Write JSON page summary here"
    )
    parser.add_argument(
        "--overlay", type=Path, default=None, help="Write debug overlay PNG here"
    )
    parser.add_argument(
        "--pdf", type=Path, default=None, help="Source PDF for overlay background"
    )
    parser.add_argument(
        "--margin",
        type=float,
        default=0.0,
        help="Grow layout rects by this normalized margin before matching",
    )
    parser.add_argument(
        "--strict-page",
        action="store_true",
        help="Only match layout lines under the same PAGE marker ordinal",
    )
    parser.add_argument(
        "--separator",
        type=str,
        default="\n",
        help="Separator between text fragments (default: newline)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        cfg = MatchConfig(
            target_page=args.page,
            overlap_margin=args.margin,
            strict_page=args.strict_page,
            output_separator=args.separator,
            enable_overlay=args.overlay is not None,
        )
    except ConfigValidationError as exc:
        log.error("Invalid option: %s", exc)
        return 2

    background = None
    if args.overlay is not None and args.pdf is not None:
        try:
            background = render_page_image(
                args.pdf, args.page, resolution=cfg.overlay_resolution
            )
        except RenderError as exc:
            log.warning("Overlay background unavailable: %s", exc)

    try:
        with args.tsv.open("rb") as tsv, args.layout.open("rb") as layout:
            result = run_page(
                tsv,
                layout,
                cfg=cfg,
                overlay_path=args.overlay,
                background=background,
            )
    except OSError as exc:
        log.error("Cannot read input: %s", exc)
        return 1
    except FormatError as exc:
        log.error("Malformed input: %s", exc)
        return 2

    if args.out is not None:
        write_visible_text(result.visible_text, args.out, cfg.output_separator)
    else:
        text = format_visible_text(result.visible_text, cfg.output_separator)
        if text:
            print(text)

    if args.summary is not None:
        write_page_summary_json(result, args.summary)

    return 0


if __name__ == "__main__":
    sys.exit(main())

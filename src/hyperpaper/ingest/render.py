"""Page rendering for debug-overlay backgrounds.

The OCR export is normally produced from a PDF (``pdftotext -tsv``); when
that PDF is at hand, a rendered page makes the visibility overlay much
easier to read.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pdfplumber
from PIL import Image

from ..errors import HyperpaperError

log = logging.getLogger(__name__)


class RenderError(HyperpaperError):
    """Raised when a PDF page cannot be rendered."""


def _validate_pdf_path(pdf_path: Path) -> None:
    """Raise :class:`RenderError` for missing / empty / wrong-extension files."""
    if not pdf_path.exists():
        raise RenderError(f"File not found: {pdf_path}")
    if not pdf_path.is_file():
        raise RenderError(f"Not a file: {pdf_path}")
    if pdf_path.stat().st_size == 0:
        raise RenderError(f"Empty file: {pdf_path}")
    if pdf_path.suffix.lower() != ".pdf":
        raise RenderError(f"Not a PDF (suffix={pdf_path.suffix!r}): {pdf_path}")


def render_page_image(
    pdf_path: Path | str,
    page_num: int,
    resolution: int = 150,
) -> Image.Image:
    """Render one PDF page to an RGB PIL Image at *resolution* DPI.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the PDF.
    page_num : int
        1-based page number, matching the OCR export's ``page_num`` column.
    resolution : int
        Render resolution in DPI.

    Raises
    ------
    RenderError
        When the file is invalid, the page does not exist, or pdfplumber
        cannot open it.
    """
    pdf_path = Path(pdf_path)
    _validate_pdf_path(pdf_path)

    try:
        with pdfplumber.open(pdf_path) as pdf:
            if not 1 <= page_num <= len(pdf.pages):
                raise RenderError(
                    f"page {page_num} out of range (1..{len(pdf.pages)}): {pdf_path}"
                )
            img_page = pdf.pages[page_num - 1].to_image(resolution=resolution)
            img = img_page.original.copy()
    except RenderError:
        raise
    except Exception as exc:
        raise RenderError(f"Cannot render PDF page: {exc}") from exc

    if img.mode != "RGB":
        img = img.convert("RGB")
    log.debug(
        "Rendered %s page %d at %d DPI (%dx%d)",
        pdf_path.name,
        page_num,
        resolution,
        img.width,
        img.height,
    )
    return img

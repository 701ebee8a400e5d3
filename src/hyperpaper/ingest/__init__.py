"""Input parsing — OCR word-box export, XML layout document, page rendering.

Public API
----------
- :func:`load_bounding_boxes` — normalized word boxes from a ``pdftotext -tsv`` export
- :func:`load_ocr_export` — same, plus the declared page size
- :func:`extract_visible_rects` — normalized rects of body-text layout lines
- :func:`extract_layout_lines` — body-text lines with page ordinal and text
- :func:`render_page_image` — render a PDF page for overlay backgrounds
"""

from .layout_xml import extract_layout_lines, extract_visible_rects
from .ocr_tsv import OcrExport, load_bounding_boxes, load_ocr_export
from .render import RenderError, render_page_image

__all__ = [
    "OcrExport",
    "load_bounding_boxes",
    "load_ocr_export",
    "extract_layout_lines",
    "extract_visible_rects",
    "RenderError",
    "render_page_image",
]

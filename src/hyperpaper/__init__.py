"""Reconcile OCR word boxes with a ground-truth layout to find visible text.

Frequently-used symbols are re-exported here for convenience.
For specialised imports (overlay rendering, stage gating, etc.) import
directly from the relevant submodule — e.g.::

    from hyperpaper.export.overlay import draw_visibility_overlay
    from hyperpaper.pipeline import gate, run_stage
"""

# ── Core models & config ──────────────────────────────────────────────

from .config import ConfigValidationError, MatchConfig
from .errors import FormatError, HyperpaperError, InternalConsistencyError
from .models import BoundingBox, LayoutLine, PageDimensions, Rect, overlaps

# ── Parsing ───────────────────────────────────────────────────────────

from .ingest import (
    extract_layout_lines,
    extract_visible_rects,
    load_bounding_boxes,
    load_ocr_export,
)

# ── Matching & pipeline ───────────────────────────────────────────────

from .pipeline import PageResult, StageResult, run_page
from .visibility import (
    VisibilityMatch,
    find_visible_text,
    match_layout_lines,
    match_visible_boxes,
)

__all__ = [
    # Models & config
    "MatchConfig",
    "ConfigValidationError",
    "Rect",
    "BoundingBox",
    "LayoutLine",
    "PageDimensions",
    "overlaps",
    # Errors
    "HyperpaperError",
    "FormatError",
    "InternalConsistencyError",
    # Parsing
    "load_bounding_boxes",
    "load_ocr_export",
    "extract_layout_lines",
    "extract_visible_rects",
    # Matching
    "VisibilityMatch",
    "find_visible_text",
    "match_visible_boxes",
    "match_layout_lines",
    # Pipeline
    "PageResult",
    "StageResult",
    "run_page",
]

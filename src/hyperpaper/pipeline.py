"""Pipeline stage infrastructure: gating, timing, and stage-result recording.

Provides the single-page flow::

    ocr → layout → match → overlay

Every stage produces a :class:`StageResult` that ends up in the page
summary.  Gating logic is centralised in :func:`gate` so that the runner
script and tests behave identically.

:func:`run_page` orchestrates one page and returns a :class:`PageResult`
without touching the filesystem, except for the optional debug overlay.
"""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Generator, List, Optional

from .config import MatchConfig

if TYPE_CHECKING:
    from PIL import Image

    from .ingest.ocr_tsv import Source
    from .models import BoundingBox, LayoutLine
    from .visibility import VisibilityMatch

logger = logging.getLogger("hyperpaper.pipeline")

# ── Skip reasons ───────────────────────────────────────────────────────


class SkipReason(str, Enum):
    """Why a pipeline stage was skipped."""

    disabled_by_config = "disabled_by_config"
    missing_inputs = "missing_inputs"
    not_applicable = "not_applicable"


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    enabled: bool = False
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    skip_reason: Optional[str] = None
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "enabled": self.enabled,
            "ran": self.ran,
            "status": self.status,
        }
        if self.skip_reason is not None:
            d["skip_reason"] = self.skip_reason
        d["duration_ms"] = self.duration_ms
        if self.counts:
            d["counts"] = self.counts
        if self.inputs:
            d["inputs"] = self.inputs
        if self.outputs:
            d["outputs"] = self.outputs
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Canonical gating function ──────────────────────────────────────────

STAGE_ORDER: List[str] = ["ocr", "layout", "match", "overlay"]


def gate(
    stage: str,
    cfg: MatchConfig,
    inputs: Dict[str, Any] | None = None,
) -> tuple[bool, Optional[str]]:
    """Decide whether *stage* should run.

    Returns ``(should_run, skip_reason)``.
    """
    if inputs is None:
        inputs = {}

    # Parsing and matching always run; a parse failure aborts the page.
    if stage in ("ocr", "layout", "match"):
        return True, None

    if stage == "overlay":
        if not cfg.enable_overlay:
            return False, SkipReason.disabled_by_config.value
        if not inputs.get("out_path"):
            return False, SkipReason.missing_inputs.value
        return True, None

    return False, SkipReason.not_applicable.value


# ── Stage context manager ──────────────────────────────────────────────


@contextmanager
def run_stage(
    stage: str,
    cfg: MatchConfig,
    inputs: Dict[str, Any] | None = None,
) -> Generator[StageResult, None, None]:
    """Context manager that wraps a pipeline stage with gating + timing.

    Usage::

        with run_stage("ocr", cfg) as sr:
            if sr.ran:
                sr.counts["boxes"] = 42

    Failures are recorded on the yielded :class:`StageResult` and then
    re-raised.
    """
    should_run, skip_reason = gate(stage, cfg, inputs)

    sr = StageResult(stage=stage)
    sr.enabled = cfg.enable_overlay if stage == "overlay" else True
    if inputs:
        sr.inputs = inputs

    if not should_run:
        sr.skip_reason = skip_reason
        yield sr
        return

    sr.ran = True
    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


# ── Page-level result container ────────────────────────────────────────


@dataclass
class PageResult:
    """Everything :func:`run_page` produced for one page."""

    page: int = 1
    page_width: float = 0.0
    page_height: float = 0.0

    stages: Dict[str, StageResult] = field(default_factory=dict)

    boxes: List[BoundingBox] = field(default_factory=list)
    layout_lines: List[LayoutLine] = field(default_factory=list)
    matches: List[VisibilityMatch] = field(default_factory=list)
    visible_text: List[str] = field(default_factory=list)

    overlay_path: Optional[Path] = None

    def boxes_on_page(self) -> List[BoundingBox]:
        """OCR boxes belonging to the reported page."""
        return [b for b in self.boxes if b.page == self.page]

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a lightweight summary suitable for JSON serialisation."""
        d: Dict[str, Any] = {
            "page": self.page,
            "page_width": self.page_width,
            "page_height": self.page_height,
            "stages": {n: sr.to_dict() for n, sr in self.stages.items()},
            "counts": {
                "boxes": len(self.boxes),
                "boxes_on_page": len(self.boxes_on_page()),
                "layout_lines": len(self.layout_lines),
                "visible": len(self.matches),
            },
            "visible_text": list(self.visible_text),
            "matches": [m.to_dict() for m in self.matches],
        }
        if self.overlay_path is not None:
            d["overlay_path"] = str(self.overlay_path)
        return d


# ── Orchestration ──────────────────────────────────────────────────────


def run_page(
    tsv: Source,
    layout_xml: Source,
    cfg: Optional[MatchConfig] = None,
    target_page: Optional[int] = None,
    overlay_path: Path | str | None = None,
    background: Optional[Image.Image] = None,
) -> PageResult:
    """Run the visibility pipeline for a single page.

    Parameters
    ----------
    tsv : bytes, str, or stream
        ``pdftotext -tsv`` word-box export.
    layout_xml : bytes, str, or stream
        Layout document with PAGE / LINE elements.
    cfg : MatchConfig, optional
        Effective configuration; defaults to ``MatchConfig()``.
    target_page : int, optional
        1-based page to report; overrides ``cfg.target_page``.
    overlay_path : Path or str, optional
        Where the debug overlay PNG is written when ``cfg.enable_overlay``.
    background : PIL.Image.Image, optional
        Page image drawn under the overlay.

    Raises
    ------
    FormatError
        Propagated from either parser; no partial result is returned.
    """
    from .ingest.layout_xml import extract_layout_lines
    from .ingest.ocr_tsv import load_ocr_export
    from .visibility import match_layout_lines

    if cfg is None:
        cfg = MatchConfig()
    page = target_page if target_page is not None else cfg.target_page
    pr = PageResult(page=page)

    with run_stage("ocr", cfg) as sr:
        export = load_ocr_export(tsv, cfg)
        pr.page_width = export.dimensions.width
        pr.page_height = export.dimensions.height
        pr.boxes = export.boxes
        sr.counts = {
            "boxes": len(pr.boxes),
            "boxes_on_page": len(pr.boxes_on_page()),
        }
    pr.stages["ocr"] = sr

    with run_stage("layout", cfg) as sr:
        pr.layout_lines = extract_layout_lines(layout_xml, cfg)
        sr.counts = {
            "lines": len(pr.layout_lines),
            "pages": len({ln.page for ln in pr.layout_lines}),
        }
    pr.stages["layout"] = sr

    with run_stage("match", cfg) as sr:
        pr.matches = match_layout_lines(
            pr.boxes,
            page,
            pr.layout_lines,
            margin=cfg.overlap_margin,
            strict_page=cfg.strict_page,
        )
        pr.visible_text = [m.box.text for m in pr.matches]
        sr.counts = {"visible": len(pr.matches)}
        sr.inputs = {
            "page": page,
            "margin": cfg.overlap_margin,
            "strict_page": cfg.strict_page,
        }
    pr.stages["match"] = sr

    overlay_inputs = {"out_path": str(overlay_path) if overlay_path else None}
    with run_stage("overlay", cfg, overlay_inputs) as sr:
        if sr.ran:
            from .export.overlay import draw_visibility_overlay

            draw_visibility_overlay(
                boxes=pr.boxes_on_page(),
                layout_lines=pr.layout_lines,
                matches=pr.matches,
                page_width=pr.page_width,
                page_height=pr.page_height,
                out_path=overlay_path,
                scale=cfg.overlay_scale,
                background=background,
            )
            pr.overlay_path = Path(overlay_path)
            sr.outputs = {"overlay_path": str(pr.overlay_path)}
    pr.stages["overlay"] = sr

    logger.info(
        "Page %d: %d boxes on page, %d layout lines, %d visible",
        page,
        len(pr.boxes_on_page()),
        len(pr.layout_lines),
        len(pr.matches),
    )
    return pr

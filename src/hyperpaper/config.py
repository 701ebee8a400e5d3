from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a MatchConfig field has an invalid value."""


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


def _check_non_empty(name: str, value: str) -> None:
    if not value:
        raise ConfigValidationError(f"{name} must not be empty")


@dataclass
class MatchConfig:
    """Tunables for OCR / layout visibility matching."""

    # ── OCR export (pdftotext -tsv) ────────────────────────────────────
    # Text column value of the page-size declaration row.
    page_sentinel: str = "###PAGE###"
    # Confidence value marking structural (non-text) rows.
    structural_confidence: str = "-1"
    # Reject page-size rows / PAGE markers with zero or negative dimensions.
    reject_degenerate_pages: bool = True

    # ── Layout document ────────────────────────────────────────────────
    # LINE TYPE attribute value that counts as body text.
    body_text_type: str = "本文"
    # Bytes handed to the XML pull parser per read.
    xml_chunk_size: int = 65536

    # ── Matching ───────────────────────────────────────────────────────
    # 1-based page whose OCR boxes are reported.
    target_page: int = 1
    # Normalized margin added around each layout rect before overlap tests.
    overlap_margin: float = 0.0
    # Only compare against layout lines read under the target page's PAGE marker.
    strict_page: bool = False

    # ── Output ─────────────────────────────────────────────────────────
    output_separator: str = "\n"

    # ── Debug overlay ──────────────────────────────────────────────────
    enable_overlay: bool = False
    # Overlay pixels per page pixel.
    overlay_scale: float = 1.0
    # Render resolution (DPI) for an optional PDF page background.
    overlay_resolution: int = 150

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        _check_non_empty("page_sentinel", self.page_sentinel)
        _check_non_empty("structural_confidence", self.structural_confidence)
        _check_non_empty("body_text_type", self.body_text_type)

        _check_non_negative("overlap_margin", self.overlap_margin)
        _check_positive("overlay_scale", self.overlay_scale)

        # -- Positive ints --
        for name in ("target_page", "xml_chunk_size", "overlay_resolution"):
            val = getattr(self, name)
            if val < 1:
                raise ConfigValidationError(f"{name}={val} must be >= 1")

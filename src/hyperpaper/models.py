"""Normalized page geometry and the records built from OCR / layout input.

All rectangles are expressed as fractions of their own page's width and
height so that boxes from the OCR export and lines from the layout document
can be compared even though both sources use different pixel scales.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in normalized page units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        """Right edge."""
        return self.x + self.width

    @property
    def y1(self) -> float:
        """Bottom edge."""
        return self.y + self.height

    def area(self) -> float:
        """Area, clamped to zero."""
        return max(0.0, self.width) * max(0.0, self.height)

    def bbox(self) -> Tuple[float, float, float, float]:
        """Bounding box as ``(x0, y0, x1, y1)``."""
        return (self.x, self.y, self.x1, self.y1)

    def overlaps(self, other: "Rect") -> bool:
        """Return True if this rect touches or intersects *other*."""
        return overlaps(self, other)

    def expanded(self, margin: float) -> "Rect":
        """Return a copy grown by *margin* on every side."""
        if margin == 0:
            return self
        return Rect(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )

    def scaled(
        self, page_width: float, page_height: float
    ) -> Tuple[float, float, float, float]:
        """Project back to pixel space as ``(x0, y0, x1, y1)``."""
        return (
            self.x * page_width,
            self.y * page_height,
            self.x1 * page_width,
            self.y1 * page_height,
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "x": round(self.x, 6),
            "y": round(self.y, 6),
            "width": round(self.width, 6),
            "height": round(self.height, 6),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Rect":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(x=d["x"], y=d["y"], width=d["width"], height=d["height"])


def overlaps(a: Rect, b: Rect) -> bool:
    """Axis-aligned separation test with inclusive edges.

    Two rects fail to overlap only when one lies strictly to the left of or
    strictly above the other.  Rects that share an edge or a corner overlap.
    """
    if a.x + a.width < b.x or b.x + b.width < a.x:
        return False
    if a.y + a.height < b.y or b.y + b.height < a.y:
        return False
    return True


def _as_array(rects: Sequence[Rect]) -> np.ndarray:
    """Stack rects into an ``(n, 4)`` array of ``x0, y0, x1, y1``."""
    if not rects:
        return np.empty((0, 4), dtype=np.float64)
    return np.array([r.bbox() for r in rects], dtype=np.float64)


def overlap_matrix(boxes: Sequence[Rect], rects: Sequence[Rect]) -> np.ndarray:
    """Evaluate :func:`overlaps` for every ``(boxes[i], rects[j])`` pair.

    Returns a boolean array of shape ``(len(boxes), len(rects))``.
    """
    a = _as_array(boxes)[:, None, :]
    b = _as_array(rects)[None, :, :]
    # Same separation test as overlaps(), negated and broadcast.
    with np.errstate(invalid="ignore"):
        separated = (
            (a[..., 2] < b[..., 0])
            | (b[..., 2] < a[..., 0])
            | (a[..., 3] < b[..., 1])
            | (b[..., 3] < a[..., 1])
        )
    return ~separated


@dataclass(frozen=True)
class PageDimensions:
    """Pixel size of the page currently being parsed."""

    width: float
    height: float

    def is_degenerate(self) -> bool:
        """True when either dimension is zero or negative."""
        return not (self.width > 0 and self.height > 0)

    def normalize(self, x: float, y: float, width: float, height: float) -> Rect:
        """Convert a pixel rectangle into page fractions.

        Division follows IEEE semantics, so degenerate dimensions yield
        ``inf`` / ``nan`` fields instead of raising.
        """
        pixels = np.array([x, y, width, height], dtype=np.float64)
        dims = np.array(
            [self.width, self.height, self.width, self.height], dtype=np.float64
        )
        with np.errstate(divide="ignore", invalid="ignore"):
            fx, fy, fw, fh = (pixels / dims).tolist()
        return Rect(x=fx, y=fy, width=fw, height=fh)


@dataclass(frozen=True)
class BoundingBox:
    """One recognized text fragment from the OCR export."""

    page: int
    rect: Rect
    text: str
    confidence: float = 0.0

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "page": self.page,
            "rect": self.rect.to_dict(),
            "text": self.text,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class LayoutLine:
    """A body-text line from the layout document.

    ``page`` is the 1-based ordinal of the PAGE marker that was active when
    the line was read; ``text`` is the line's ``STRING`` attribute, if any.
    """

    rect: Rect
    page: int = 1
    text: str = ""

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {"page": self.page, "rect": self.rect.to_dict(), "text": self.text}

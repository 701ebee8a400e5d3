"""Text and JSON output for visibility results.

The matcher hands back an ordered list of strings; how they are joined is
decided here so the core never commits to a separator.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..pipeline import PageResult

log = logging.getLogger(__name__)


def format_visible_text(texts: Sequence[str], separator: str = "\n") -> str:
    """Join visible text fragments with *separator*."""
    return separator.join(texts)


def write_visible_text(
    texts: Sequence[str],
    out_path: Path | str,
    separator: str = "\n",
) -> Path:
    """Write the joined fragments to *out_path* (UTF-8, trailing newline)."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    body = format_visible_text(texts, separator)
    if body and not body.endswith("\n"):
        body += "\n"
    out_path.write_text(body, encoding="utf-8")
    log.info("Wrote %d visible fragments to %s", len(texts), out_path)
    return out_path


def write_page_summary_json(page_result: "PageResult", out_path: Path | str) -> Path:
    """Dump :meth:`PageResult.to_summary_dict` as indented JSON."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(page_result.to_summary_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    log.info("Wrote page summary to %s", out_path)
    return out_path

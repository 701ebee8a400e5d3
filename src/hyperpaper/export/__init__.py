from .overlay import draw_visibility_overlay
from .text_export import (
    format_visible_text,
    write_page_summary_json,
    write_visible_text,
)

__all__ = [
    "draw_visibility_overlay",
    "format_visible_text",
    "write_page_summary_json",
    "write_visible_text",
]

"""Panel geometry shared by every view."""
from __future__ import annotations

from dataclasses import dataclass, replace

FRAME_WIDTH = 2
FRAME_HEIGHT = 2
MIN_LEFT_WIDTH = 30
LEFT_PADDING = 4


@dataclass(frozen=True)
class Layout:
    """Terminal size and derived panel sizes."""

    width: int = 80
    height: int = 24
    left_width: int = 30
    top_height: int = 3
    summary_height: int = 4
    full_transaction_view: bool = False

    def resized(self, width: int, height: int) -> "Layout":
        return replace(self, width=width, height=height)

    def with_left_width(self, left_width: int) -> "Layout":
        return replace(self, left_width=left_width)

    def with_summary_rows(self, rows: int) -> "Layout":
        return replace(self, summary_height=rows + FRAME_HEIGHT + 1)

    def with_help_rows(self, rows: int) -> "Layout":
        """Top bar holds the header, the status line and the key legend."""
        return replace(self, top_height=rows + 2)

    def with_full_view(self, enabled: bool) -> "Layout":
        return replace(self, full_transaction_view=enabled)

    def list_height(self, has_summary: bool = False) -> int:
        """Rows available to a bordered list below the top bar."""
        rows = self.height - FRAME_HEIGHT - self.top_height
        if has_summary:
            rows -= self.summary_height
        return max(0, rows)

    def right_width(self) -> int:
        return max(0, self.width - self.left_width)


def left_width_for(layout: Layout, summary_width: int) -> int:
    """Left panel width fitting the widest summary row, capped at half the screen."""
    return min(max(MIN_LEFT_WIDTH, summary_width + LEFT_PADDING), layout.width // 2)

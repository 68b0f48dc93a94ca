"""Small markdown helpers shared by the report and summary builders."""
from __future__ import annotations

from datetime import datetime


def format_timestamp(value: datetime) -> str:
    """Format as ``YYYY-MM-DD HH:MM:SS +HH:MM``.

    Naive datetimes are taken as local time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    offset = value.strftime("%z")  # +HHMM
    return f"{value:%Y-%m-%d %H:%M:%S} {offset[:3]}:{offset[3:]}"


def escape_cell(text: str | None) -> str:
    """Make text safe for a single markdown table cell."""
    if text is None or not text.strip():
        return ""
    return text.replace("|", "\\|").replace("\n", " ").replace("\r", "")


def code(text: str) -> str:
    return f"`{text}`"


class MarkdownWriter:
    """Accumulates markdown lines, each terminated with a newline."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def line(self, text: str = "") -> MarkdownWriter:
        self._lines.append(text)
        return self

    def heading(self, level: int, text: str) -> MarkdownWriter:
        """Append a heading followed by a blank line."""
        self._lines.append(f"{'#' * level} {text}")
        self._lines.append("")
        return self

    def field(self, label: str, value: str) -> MarkdownWriter:
        """Append a ``**Label:** value`` paragraph followed by a blank line."""
        self._lines.append(f"**{label}:** {value}")
        self._lines.append("")
        return self

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)

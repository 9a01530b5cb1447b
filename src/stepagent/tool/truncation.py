"""Output truncation — bound tool output before it enters the conversation."""

from __future__ import annotations

import re

MAX_LINES = 2000
MAX_BYTES = 50 * 1024  # 50KB

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")


def truncate_output(
    text: str,
    max_lines: int = MAX_LINES,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Truncate tool output to fit within the conversation budget.

    The whole conversation is resent to the model every round, so an
    oversized observation is paid for on every later call. Keeps the head
    of the output and prefixes a notice describing what was dropped.

    Args:
        text: Raw tool output.
        max_lines: Maximum number of lines to keep.
        max_bytes: Maximum bytes to keep.

    Returns:
        The original text, or a truncated version with a notice.
    """
    if not text:
        return text

    lines = text.split("\n")
    byte_count = len(text.encode("utf-8", errors="replace"))

    if len(lines) <= max_lines and byte_count <= max_bytes:
        return text

    kept = lines[:max_lines]
    skipped_lines = len(lines) - len(kept)

    result = "\n".join(kept)
    result_bytes = result.encode("utf-8", errors="replace")
    skipped_bytes = 0
    if len(result_bytes) > max_bytes:
        # Cut at a safe UTF-8 boundary
        result = result_bytes[:max_bytes].decode("utf-8", errors="ignore")
        skipped_bytes = len(result_bytes) - max_bytes

    notice_parts = []
    if skipped_lines > 0:
        notice_parts.append(f"{skipped_lines} lines skipped")
    if skipped_bytes > 0:
        notice_parts.append(f"{skipped_bytes} bytes skipped")

    notice = (
        f"[Output truncated: {', '.join(notice_parts)}. "
        f"Total: {len(lines)} lines, {byte_count} bytes]"
    )
    return f"{notice}\n{result}"


def strip_ansi(text: str) -> str:
    """Strip ANSI escape sequences from text."""
    return _ANSI_RE.sub("", text)

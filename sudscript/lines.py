"""Line-level helpers for reading script source: splitting, indentation, IDs and metadata."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple

TAB_INDENT = 4
"""Indent value a tab counts for when measuring a line's indentation."""

DEFAULT_METADATA_KEY = "Comment"

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_TEXT_ID_RE = re.compile(r"(@([0-9a-fA-F]+)@)")
_GOSUB_ID_RE = re.compile(r"(@GS([0-9a-fA-F]+)@)")
_METADATA_RE = re.compile(r"#([=+])\s*(?:(\S*)\s*:\s*)?(.*)")


class TaggedLine(NamedTuple):
    """A line with a trailing ``@...@`` identifier removed."""

    text: str
    id: str
    number: int


@dataclass(frozen=True)
class CommentMetadata:
    """Metadata declared in a ``#=`` (next entry only) or ``#+`` (persistent) comment."""

    persistent: bool
    key: str
    value: str


def split_lines(text: str) -> list[str]:
    """Split on ``\\r\\n``, ``\\r`` or ``\\n``; the text after the last break is always kept."""
    return _LINE_BREAK_RE.split(text)


def trim_line(line: str, tab_indent: int = TAB_INDENT) -> tuple[str, int]:
    """Strip surrounding whitespace and measure the leading indentation.

    Each leading tab counts ``tab_indent``; any other whitespace character counts one.
    """
    stripped = line.lstrip()
    leading = line[: len(line) - len(stripped)]
    indent = sum(tab_indent if ch == "\t" else 1 for ch in leading)
    return stripped.rstrip(), indent


def is_comment_line(line: str) -> bool:
    """True if an already trimmed line is a comment."""
    return line.startswith("#")


def _extract(pattern: re.Pattern[str], line: str) -> TaggedLine | None:
    match = pattern.search(line)
    if match is None:
        return None
    remainder = line[: match.start(1)].rstrip()
    return TaggedLine(remainder, match.group(1), int(match.group(2), 16))


def extract_text_id(line: str) -> TaggedLine | None:
    """Find a text ID such as ``@001f@``; return the line left of it, the ID and its number."""
    return _extract(_TEXT_ID_RE, line)


def extract_gosub_id(line: str) -> TaggedLine | None:
    """Find a gosub ID such as ``@GS0003@``; return the line left of it, the ID and its number."""
    return _extract(_GOSUB_ID_RE, line)


def parse_comment_metadata(line: str) -> CommentMetadata | None:
    """Parse a trimmed comment line holding metadata, or return None if it holds none.

    ``#= [Key:] value`` applies to the next entry only, ``#+ [Key:] value``
    persists; without a key the key is ``Comment``.
    """
    match = _METADATA_RE.fullmatch(line)
    if match is None:
        return None
    key = match.group(2) or DEFAULT_METADATA_KEY
    return CommentMetadata(
        persistent=match.group(1) == "+",
        key=key,
        value=match.group(3).strip(),
    )


def format_text_id(number: int) -> str:
    """Format a text ID number the way it is written in script files."""
    return f"@{number:04x}@"
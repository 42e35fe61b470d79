"""Parser interfaces for flow CLI text output."""

from __future__ import annotations

from enum import Enum
from typing import Any

# Bump when the expected CLI output grammar changes so drift shows up in tests.
GRAMMAR_VERSION = "1"


class LineTag(str, Enum):
    """Classification of a single line of ``list`` output."""

    DIAGNOSTIC = "diagnostic"
    UNGROUPED = "ungrouped"
    GROUP_HEADER = "group_header"
    ENTRY = "entry"
    UNMATCHED = "unmatched"


class ParserError(RuntimeError):
    """Raised when a parser is requested that is not registered."""


class BaseParser:
    """Base interface for CLI output parsers.

    Implementations are best-effort: unrecognized text yields empty or default
    structures instead of raising.
    """

    name: str = "base"

    def parse(self, stdout: str, stderr: str = "") -> Any:
        raise NotImplementedError("Parsers must implement parse()")

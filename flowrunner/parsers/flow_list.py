"""Parser for ``najie-flow list`` output.

Expected grammar (version 1)::

    ℹ 找到 3 个流程图            <- diagnostic banner, ignored
      Prod                       <- group header
        graph-1  My Flow         <- entry: id, 2+ spaces, name
      未分组                     <- ungrouped marker, group resets to None
        graph-2  Scratch

Lines are classified in this order: diagnostic, ungrouped marker, group
header, entry. Anything else is skipped.
"""

from __future__ import annotations

import re

from flowrunner.models import FlowSummary

from .base import BaseParser, LineTag

INFO_GLYPH = "ℹ"
FOUND_MARKER = "找到"
UNGROUPED_MARKER = "未分组"

GROUP_HEADER_PATTERN = re.compile(r"^\s+(\S(?:.*\S)?)\s*$")
ENTRY_PATTERN = re.compile(r"^\s+(\S+)\s{2,}(\S.*?)\s*$")
_GAP = re.compile(r"\s{2,}")
_WORD = re.compile(r"\w")


def classify_line(line: str) -> tuple[LineTag, re.Match[str] | None]:
    """Tag one line of listing output, returning the match that produced the tag."""

    if INFO_GLYPH in line or FOUND_MARKER in line:
        return LineTag.DIAGNOSTIC, None
    if UNGROUPED_MARKER in line:
        return LineTag.UNGROUPED, None

    header = GROUP_HEADER_PATTERN.match(line)
    if header and not _GAP.search(header.group(1)) and _WORD.search(header.group(1)):
        return LineTag.GROUP_HEADER, header

    entry = ENTRY_PATTERN.match(line)
    if entry:
        return LineTag.ENTRY, entry

    return LineTag.UNMATCHED, None


def _group_name(match: re.Match[str]) -> str:
    return match.group(1).rstrip(":：").strip()


def parse_flow_list(text: str | None) -> list[FlowSummary]:
    """Convert listing text into flow summaries in input order."""

    flows: list[FlowSummary] = []
    current_group: str | None = None

    for line in (text or "").splitlines():
        tag, match = classify_line(line)
        if tag is LineTag.UNGROUPED:
            current_group = None
        elif tag is LineTag.GROUP_HEADER:
            current_group = _group_name(match) or None
        elif tag is LineTag.ENTRY:
            flows.append(FlowSummary(id=match.group(1), name=match.group(2).strip(), group=current_group))

    return flows


class FlowListParser(BaseParser):
    """Parse stdout emitted by ``najie-flow list``."""

    name = "flow_list"

    def parse(self, stdout: str, stderr: str = "") -> list[FlowSummary]:
        return parse_flow_list(stdout)

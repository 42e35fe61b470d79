"""Parser for ``najie-flow show <id> -e`` output.

Expected grammar (version 1)::

    ID: g1
    名称: Demo
    节点数: 3
    边数: 2
    节点列表:
    - n1 (start): Begin
    - n2 (task): Work

Scalar fields are picked up wherever they appear; node lines are collected
in order from the ``节点列表`` heading to the end of the text.
"""

from __future__ import annotations

import re

from flowrunner.models import FlowDetail, NodeInfo

from .base import BaseParser

# (field, markers); both ASCII and full-width colons are accepted.
FIELD_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("id", ("ID:", "ID：")),
    ("name", ("名称:", "名称：")),
    ("node_count", ("节点数:", "节点数：")),
    ("edge_count", ("边数:", "边数：")),
)
INTEGER_FIELDS = {"node_count", "edge_count"}
FIELD_ALIASES = {"id": "id", "name": "name", "node_count": "nodeCount", "edge_count": "edgeCount"}

NODE_SECTION_MARKER = "节点列表"
NODE_PATTERN = re.compile(r"^\s*-\s*(\S+)\s*\(([^)]*)\)\s*[:：]\s*(.*?)\s*$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(raw: str) -> int | None:
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def _extract_fields(lines: list[str]) -> dict[str, object]:
    found: dict[str, object] = {}
    for line in lines:
        for field_name, markers in FIELD_MARKERS:
            if field_name in found:
                continue
            for marker in markers:
                if marker not in line:
                    continue
                remainder = line.split(marker, 1)[1].strip()
                if field_name in INTEGER_FIELDS:
                    number = _parse_int(remainder)
                    if number is not None:
                        found[field_name] = number
                elif remainder:
                    found[field_name] = remainder
                break
    return found


def _extract_nodes(lines: list[str]) -> list[NodeInfo]:
    nodes: list[NodeInfo] = []
    in_section = False
    for line in lines:
        if not in_section:
            in_section = NODE_SECTION_MARKER in line
            continue
        if "-" not in line:
            continue
        match = NODE_PATTERN.match(line)
        if match:
            nodes.append(NodeInfo(id=match.group(1), type=match.group(2).strip(), label=match.group(3)))
    return nodes


def parse_flow_show(text: str | None) -> FlowDetail:
    """Convert detail text into a FlowDetail; never raises on odd input."""

    lines = (text or "").splitlines()
    fields = _extract_fields(lines)
    missing = [alias for field_name, alias in FIELD_ALIASES.items() if field_name not in fields]
    return FlowDetail(
        id=fields.get("id"),
        name=fields.get("name"),
        node_count=fields.get("node_count", 0),
        edge_count=fields.get("edge_count", 0),
        nodes=_extract_nodes(lines),
        missing_fields=missing,
    )


class FlowShowParser(BaseParser):
    """Parse stdout emitted by ``najie-flow show <id> -e``."""

    name = "flow_show"

    def parse(self, stdout: str, stderr: str = "") -> FlowDetail:
        return parse_flow_show(stdout)

"""Parser registry for flowrunner."""

from __future__ import annotations

from .base import GRAMMAR_VERSION, BaseParser, LineTag, ParserError
from .flow_list import FlowListParser, classify_line, parse_flow_list
from .flow_show import FlowShowParser, parse_flow_show

_PARSER_CLASSES: dict[str, type[BaseParser]] = {
    FlowListParser.name: FlowListParser,
    FlowShowParser.name: FlowShowParser,
}


def get_parser(name: str) -> BaseParser:
    normalized = (name or "").lower()
    if normalized not in _PARSER_CLASSES:
        raise ParserError(f"No parser registered for '{name}'")
    parser_cls = _PARSER_CLASSES[normalized]
    return parser_cls()


__all__ = [
    "GRAMMAR_VERSION",
    "BaseParser",
    "FlowListParser",
    "FlowShowParser",
    "LineTag",
    "ParserError",
    "classify_line",
    "get_parser",
    "parse_flow_list",
    "parse_flow_show",
]

"""Flow Runner: HTTP bridge that executes najie-flow CLI commands and parses their output."""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Settings, get_settings, load_settings  # noqa: E402
from .parsers import parse_flow_list, parse_flow_show  # noqa: E402
from .runner import ProcessRunner  # noqa: E402
from .service import FlowService  # noqa: E402

__all__ = [
    "FlowService",
    "ProcessRunner",
    "Settings",
    "__version__",
    "get_settings",
    "load_settings",
    "parse_flow_list",
    "parse_flow_show",
]

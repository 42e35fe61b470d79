"""Runtime structures for CLI invocations and the flow records parsed from their output."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, computed_field


@dataclass(frozen=True)
class InvocationRequest:
    """One CLI invocation: argv (without program name) plus per-call options."""

    argv: tuple[str, ...]
    cwd: str | None = None
    extra_env: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "argv", tuple(str(arg) for arg in self.argv))
        object.__setattr__(self, "extra_env", MappingProxyType(dict(self.extra_env)))


class FailureKind(str, Enum):
    SPAWN_FAILURE = "spawn_failure"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMEOUT = "timeout"


@dataclass
class InvocationSuccess:
    """Process exited with status 0."""

    stdout: str
    stderr: str
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return True


@dataclass
class InvocationFailure:
    """Process could not be started, timed out, or exited non-zero.

    ``exit_code`` is only set for ``FailureKind.NON_ZERO_EXIT``.
    """

    message: str
    kind: FailureKind
    exit_code: int | None = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return False


InvocationResult = InvocationSuccess | InvocationFailure


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FlowSummary(_CamelModel):
    """One entry of ``list`` output."""

    id: str = Field(..., min_length=1)
    name: str = ""
    group: str | None = None


class NodeInfo(_CamelModel):
    """One node line of ``show`` output."""

    id: str = Field(..., min_length=1)
    type: str = ""
    label: str = ""


class FlowDetail(_CamelModel):
    """Best-effort view of ``show <id> -e`` output."""

    id: str | None = None
    name: str | None = None
    node_count: int = Field(default=0, alias="nodeCount")
    edge_count: int = Field(default=0, alias="edgeCount")
    nodes: list[NodeInfo] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list, alias="missingFields")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complete(self) -> bool:
        return not self.missing_fields


class FlowRunRequest(_CamelModel):
    """Body of ``POST /api/flows/{id}/run``."""

    input: str | None = None
    max_iterations: int | None = Field(default=None, alias="maxIterations")


class FlowListResponse(_CamelModel):
    success: bool
    data: list[FlowSummary] | None = None
    error: str | None = None


class FlowDetailResponse(_CamelModel):
    success: bool
    data: FlowDetail | None = None
    error: str | None = None


class FlowRunResponse(_CamelModel):
    success: bool
    output: str | None = None
    error: str | None = None

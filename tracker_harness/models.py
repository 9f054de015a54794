"""Data models for the health tracker API harness."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class ResultStatus(Enum):
    """Status of a verification step or section."""

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


@dataclass
class Session:
    """Authentication state shared by every call of a single run.

    Populated by the authentication and profile steps, read-only afterwards.
    """

    token: Optional[str] = None
    user_id: Optional[Any] = None


@dataclass(frozen=True)
class RequestOk:
    """A completed exchange with a 2xx status."""

    status: int
    duration_ms: float
    body: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class RequestErr:
    """A completed exchange with a non-2xx status, or an unusable body."""

    status: Optional[int]
    duration_ms: float
    error: Any = None

    @property
    def ok(self) -> bool:
        return False


RequestOutcome = Union[RequestOk, RequestErr]


@dataclass(frozen=True)
class ResourceSpec:
    """Parameters for driving one CRUD-shaped endpoint."""

    key: str
    name: str
    base_path: str
    create_payload: dict[str, Any]
    update_payload: dict[str, Any]


@dataclass(frozen=True)
class CategorySpec:
    """Parameters for the category -> item nested resource."""

    key: str
    name: str
    category_name: str
    item_payload: dict[str, Any]
    updated_note: str


@dataclass
class StepResult:
    """Result of a single assertion-bearing step."""

    name: str
    status: ResultStatus
    message: str


@dataclass
class SectionResult:
    """Steps recorded for one section of the run (auth, a resource, ...)."""

    name: str
    steps: list[StepResult] = field(default_factory=list)
    aborted: bool = False

    def add(self, step: StepResult) -> StepResult:
        self.steps.append(step)
        return step

    def count(self, status: ResultStatus) -> int:
        return sum(1 for s in self.steps if s.status == status)

    @property
    def status(self) -> ResultStatus:
        """FAIL beats WARN beats PASS."""
        if self.aborted or self.count(ResultStatus.FAIL):
            return ResultStatus.FAIL
        if self.count(ResultStatus.WARN):
            return ResultStatus.WARN
        return ResultStatus.PASS

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "aborted": self.aborted,
            "steps": [
                {"name": step.name, "status": step.status.value, "message": step.message}
                for step in self.steps
            ],
        }

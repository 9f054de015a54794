"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tracker_harness.models import SectionResult, StepResult
    from tracker_harness.runner import RunResult


class Reporter(ABC):
    """Abstract base class for harness reporters."""

    @abstractmethod
    def on_section_start(self, name: str) -> None:
        """Called when a section (auth, profile, a resource) starts."""
        pass

    @abstractmethod
    def on_request(
        self,
        method: str,
        endpoint: str,
        status: Optional[int],
        duration_ms: float,
    ) -> None:
        """Called once per HTTP call; status is None when the server was unreachable."""
        pass

    @abstractmethod
    def on_step_complete(self, section: str, result: "StepResult") -> None:
        """Called when a verification step completes."""
        pass

    @abstractmethod
    def on_section_complete(self, result: "SectionResult") -> None:
        """Called when all steps of a section are done."""
        pass

    @abstractmethod
    def on_run_complete(self, result: "RunResult") -> None:
        """Called when the whole run is complete."""
        pass

    @abstractmethod
    def on_fatal(
        self,
        message: str,
        sections: Optional[list["SectionResult"]] = None,
    ) -> None:
        """Called when the run is aborted, with the sections recorded so far."""
        pass


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_section_start(self, name: str) -> None:
        for reporter in self._reporters:
            reporter.on_section_start(name)

    def on_request(self, method, endpoint, status, duration_ms) -> None:
        for reporter in self._reporters:
            reporter.on_request(method, endpoint, status, duration_ms)

    def on_step_complete(self, section, result) -> None:
        for reporter in self._reporters:
            reporter.on_step_complete(section, result)

    def on_section_complete(self, result) -> None:
        for reporter in self._reporters:
            reporter.on_section_complete(result)

    def on_run_complete(self, result) -> None:
        for reporter in self._reporters:
            reporter.on_run_complete(result)

    def on_fatal(self, message, sections=None) -> None:
        for reporter in self._reporters:
            reporter.on_fatal(message, sections)

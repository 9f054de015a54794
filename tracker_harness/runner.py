"""Main harness runner and orchestrator.

Runs the sections of a harness pass strictly in sequence:
- Optional health check
- Registration and login (a missing token aborts the run)
- Profile and BMI
- CRUD verification of each flat resource
- Category and item verification
"""

import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

import httpx

from tracker_harness.client import ApiClient, HarnessFatalError
from tracker_harness.config import HarnessConfig
from tracker_harness.models import RequestOutcome, ResultStatus, SectionResult, Session, StepResult
from tracker_harness.resources import (
    CATEGORY_KEY,
    RESOURCE_KEYS,
    build_category_spec,
    build_resource_specs,
)
from tracker_harness.responses import MalformedResponseError, describe_error, extract_field
from tracker_harness.verifier import CategoryVerifier, ResourceVerifier, failed, passed


class AuthenticationError(HarnessFatalError):
    """Raised when registration does not yield a token."""

    pass


@dataclass
class RunResult:
    """Result of one harness run."""

    base_url: str
    sections: list[SectionResult]
    total_duration: float
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))

    def count(self, status: ResultStatus) -> int:
        return sum(section.count(status) for section in self.sections)

    @property
    def has_failures(self) -> bool:
        """Check if any section failed."""
        return any(s.status == ResultStatus.FAIL for s in self.sections)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dict matching the JSON output schema
        """
        return {
            "timestamp": self.timestamp,
            "base_url": self.base_url,
            "duration_seconds": self.total_duration,
            "sections": [section.to_dict() for section in self.sections],
            "summary": {
                "passed": self.count(ResultStatus.PASS),
                "warned": self.count(ResultStatus.WARN),
                "failed": self.count(ResultStatus.FAIL),
                "all_passed": not self.has_failures,
            },
        }


class HarnessRunner:
    """Runs every section against one backend.

    Coordinates:
    - The httpx client lifecycle and the run's Session
    - Section ordering and the authentication precondition
    - Reporter callbacks for progress
    """

    def __init__(
        self,
        config: HarnessConfig,
        reporter: Optional[Any] = None,
        resource_keys: Optional[list[str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the runner.

        Args:
            config: Harness configuration
            reporter: Optional reporter for progress callbacks
            resource_keys: Resources to verify (defaults to all, in run order)
            transport: Optional httpx transport, e.g. for a mocked backend
        """
        self.config = config
        self.reporter = reporter
        self.resource_keys = resource_keys or list(RESOURCE_KEYS)
        self.transport = transport

    def run(self) -> RunResult:
        """Run all sections.

        Returns:
            RunResult with one SectionResult per section that ran

        Raises:
            ServerUnreachableError: If any request cannot reach the server
            AuthenticationError: If registration yields no token

            Either error carries the sections recorded before the abort.
        """
        start_time = time.time()
        sections: list[SectionResult] = []

        try:
            with httpx.Client(timeout=self.config.timeout, transport=self.transport) as http_client:
                client = ApiClient(http_client, self.config.base_url, Session(), self.reporter)
                self._run_sections(client, sections)
        except HarnessFatalError as e:
            e.sections[:0] = sections
            raise

        run_result = RunResult(
            base_url=self.config.base_url,
            sections=sections,
            total_duration=time.time() - start_time,
        )

        if self.reporter:
            self.reporter.on_run_complete(run_result)

        return run_result

    def _run_sections(self, client: ApiClient, sections: list[SectionResult]) -> None:
        if self.config.health_check:
            sections.append(self._run_section("Health", self.check_health(client)))

        auth = self._run_section("Authentication", self.authenticate(client))
        sections.append(auth)
        if not client.session.token:
            raise AuthenticationError(f"{auth.steps[0].message}. Aborting tests.")

        sections.append(self._run_section("Profile", self.check_profile(client)))

        resource_verifier = ResourceVerifier(client)
        for spec in build_resource_specs():
            if spec.key in self.resource_keys:
                sections.append(self._run_section(
                    spec.name,
                    resource_verifier.verify(spec),
                    expected_steps=len(ResourceVerifier.STEPS),
                ))

        if CATEGORY_KEY in self.resource_keys:
            spec = build_category_spec()
            sections.append(self._run_section(
                spec.name,
                CategoryVerifier(client).verify(spec),
                expected_steps=len(CategoryVerifier.STEPS),
            ))

    def _run_section(
        self,
        name: str,
        steps: Iterable[StepResult],
        expected_steps: Optional[int] = None,
    ) -> SectionResult:
        """Consume a step generator, reporting each step as it completes.

        A fatal error raised mid-section marks the section aborted and
        records it on the error before propagating.
        """
        if self.reporter:
            self.reporter.on_section_start(name)

        section = SectionResult(name=name)
        try:
            for step in steps:
                section.add(step)
                if self.reporter:
                    self.reporter.on_step_complete(name, step)
        except HarnessFatalError as e:
            section.aborted = True
            e.sections.append(section)
            raise

        if expected_steps is not None and len(section.steps) < expected_steps:
            section.aborted = True

        if self.reporter:
            self.reporter.on_section_complete(section)

        return section

    def check_health(self, client: ApiClient) -> Iterator[StepResult]:
        outcome = client.call("/health", "GET")
        if not outcome.ok:
            yield failed("Health", f"Failed: {describe_error(outcome)}")
            return

        status = outcome.body.get("status") if isinstance(outcome.body, dict) else None
        if status == "ok":
            yield passed("Health", "Server reports ok")
        else:
            yield failed("Health", f"Unexpected health status: {status!r}")

    def authenticate(self, client: ApiClient) -> Iterator[StepResult]:
        """Register a fresh user, then log in with the same credentials.

        The registration token is stored on the session; a successful login
        replaces it, a failed one leaves it in place.
        """
        user_name = f"user_{int(time.time() * 1000)}"
        payload = {
            "name": user_name,
            "password": self.config.password,
            "age": self.config.age,
            "weightKg": self.config.weight_kg,
            "heightM": self.config.height_m,
            "gender": self.config.gender,
        }

        token, error = read_token(client.call("/register", "POST", payload))
        if token is None:
            yield failed("Register", f"Failed to register: {error}")
            return

        client.session.token = token
        yield passed("Register", f"User registered: {user_name}")

        credentials = {"name": user_name, "password": self.config.password}
        token, error = read_token(client.call("/login", "POST", credentials))
        if token is None:
            yield failed("Login", f"Failed to login: {error}")
            return

        client.session.token = token
        yield passed("Login", "User logged in successfully")

    def check_profile(self, client: ApiClient) -> Iterator[StepResult]:
        yield self._profile_step(client)
        yield self._bmi_step(client)

    def _profile_step(self, client: ApiClient) -> StepResult:
        outcome = client.call("/user/profile", "GET")
        if not outcome.ok:
            return failed("Profile", f"Failed to fetch profile: {describe_error(outcome)}")

        try:
            extract_field(outcome.body, "name")
        except MalformedResponseError as e:
            return failed("Profile", f"Malformed response: {e}")

        client.session.user_id = outcome.body.get("id")
        return passed("Profile", f"Fetched profile for ID: {client.session.user_id}")

    def _bmi_step(self, client: ApiClient) -> StepResult:
        outcome = client.call("/user/bmi", "GET")
        if not outcome.ok:
            return failed("BMI", f"Failed to fetch BMI: {describe_error(outcome)}")

        try:
            bmi = extract_field(outcome.body, "bmi")
        except MalformedResponseError as e:
            return failed("BMI", f"Malformed response: {e}")

        if isinstance(bmi, bool) or not isinstance(bmi, (int, float)):
            return failed("BMI", f"Malformed response: 'bmi' is not a number ({bmi!r})")
        return passed("BMI", f"Calculated BMI: {bmi}")


def read_token(outcome: RequestOutcome) -> tuple[Optional[str], str]:
    """Pull the bearer token out of a register or login response.

    Returns:
        Tuple of (token or None, error description when None)
    """
    if not outcome.ok:
        return None, describe_error(outcome)

    try:
        token = extract_field(outcome.body, "token")
    except MalformedResponseError as e:
        return None, f"Malformed response: {e}"

    if not isinstance(token, str):
        return None, f"Malformed response: 'token' is not a string ({token!r})"
    return token, ""

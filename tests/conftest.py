"""Shared fixtures built around the in-memory FakeBackend."""

import httpx
import pytest

from tracker_harness.client import ApiClient
from tracker_harness.models import Session

from fake_backend import FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http_client(backend: FakeBackend):
    with httpx.Client(transport=httpx.MockTransport(backend)) as client:
        yield client


@pytest.fixture
def session(backend: FakeBackend) -> Session:
    """A session already holding a valid token."""
    backend.users["tester"] = {
        "name": "tester",
        "password": "pw",
        "age": 30,
        "weightKg": 75,
        "heightM": 1.8,
        "gender": "male",
    }
    return Session(token=backend.issue_token("tester"))


@pytest.fixture
def api_client(http_client: httpx.Client, session: Session) -> ApiClient:
    return ApiClient(http_client, "http://tracker.test", session)

"""Create -> list -> update -> delete verification of CRUD endpoints.

This module contains:
- ResourceVerifier: drives a flat resource (water, sleep, activity)
- CategoryVerifier: drives the category -> item nested resource

Both yield StepResults as each request completes. A failed create ends
the sequence early, since every later step needs the created identifier.
"""

from typing import Iterator, Optional
from urllib.parse import quote

from tracker_harness.client import NO_CONTENT, ApiClient
from tracker_harness.models import (
    CategorySpec,
    RequestOutcome,
    ResourceSpec,
    ResultStatus,
    StepResult,
)
from tracker_harness.responses import (
    Identifier,
    MalformedResponseError,
    contains_id,
    describe_error,
    extract_id,
    mismatched_keys,
    require_object,
)


def passed(name: str, message: str) -> StepResult:
    return StepResult(name=name, status=ResultStatus.PASS, message=message)


def failed(name: str, message: str) -> StepResult:
    return StepResult(name=name, status=ResultStatus.FAIL, message=message)


def warned(name: str, message: str) -> StepResult:
    return StepResult(name=name, status=ResultStatus.WARN, message=message)


def path_segment(identifier: Identifier) -> str:
    """Quote an identifier for use as a single path segment."""
    return quote(str(identifier), safe="")


class BaseVerifier:
    """Shared step checks for the flat and nested verifiers."""

    STEPS: tuple[str, ...] = ()

    def __init__(self, client: ApiClient):
        """Initialize the verifier.

        Args:
            client: Authenticated client used for every request
        """
        self.client = client

    def capture_id(
        self,
        name: str,
        outcome: RequestOutcome,
        success_message: str,
    ) -> tuple[StepResult, Optional[Identifier]]:
        """Check a create response and pull out the new identifier.

        Returns:
            Tuple of (step result, identifier or None on failure)
        """
        if not outcome.ok:
            return failed(name, f"Failed: {describe_error(outcome)}"), None

        try:
            identifier = extract_id(outcome.body)
        except MalformedResponseError as e:
            return failed(name, f"Malformed response: {e}"), None

        return passed(name, success_message.format(id=identifier)), identifier

    def check_membership(
        self,
        name: str,
        outcome: RequestOutcome,
        identifier: Identifier,
        label: str,
    ) -> StepResult:
        """Check that a list response contains the given identifier."""
        if not outcome.ok:
            return failed(name, f"Failed to fetch list: {describe_error(outcome)}")

        try:
            found = contains_id(outcome.body, identifier)
        except MalformedResponseError as e:
            return failed(name, f"Malformed response: {e}")

        if found:
            return passed(name, f"{label} found in list")
        return failed(name, f"{label} ID {identifier} not found in list")


class ResourceVerifier(BaseVerifier):
    """Verifies a flat CRUD resource addressed by a single base path."""

    STEPS = ("Create", "Read", "Update", "Delete")

    def verify(self, spec: ResourceSpec) -> Iterator[StepResult]:
        """Run create, read, update and delete against spec.base_path.

        Args:
            spec: Resource to verify

        Yields:
            One StepResult per step; only the create result when create fails
        """
        result, created_id = self.create(spec)
        yield result
        if created_id is None:
            return

        yield self.read(spec, created_id)
        yield self.update(spec, created_id)
        yield self.delete(spec, created_id)

    def item_path(self, spec: ResourceSpec, identifier: Identifier) -> str:
        return f"{spec.base_path}/{path_segment(identifier)}"

    def create(self, spec: ResourceSpec) -> tuple[StepResult, Optional[Identifier]]:
        outcome = self.client.call(spec.base_path, "POST", spec.create_payload)
        return self.capture_id(f"{spec.name} Create", outcome, "Created item ID: {id}")

    def read(self, spec: ResourceSpec, identifier: Identifier) -> StepResult:
        outcome = self.client.call(spec.base_path, "GET")
        return self.check_membership(f"{spec.name} Read", outcome, identifier, "Item")

    def update(self, spec: ResourceSpec, identifier: Identifier) -> StepResult:
        """PATCH the item and compare every updated key with the echo.

        An accepted request whose response does not reflect the update is a
        warning rather than a failure.
        """
        name = f"{spec.name} Update"
        outcome = self.client.call(self.item_path(spec, identifier), "PATCH", spec.update_payload)
        if not outcome.ok:
            return failed(name, f"Failed: {describe_error(outcome)}")

        try:
            mismatched = mismatched_keys(outcome.body, spec.update_payload)
        except MalformedResponseError as e:
            return warned(name, f"Response did not match payload: {e}")

        if mismatched:
            return warned(name, f"Response did not match payload (keys: {', '.join(mismatched)})")
        return passed(name, "Item updated successfully")

    def delete(self, spec: ResourceSpec, identifier: Identifier) -> StepResult:
        """DELETE the item; only an empty 204 acknowledgement passes."""
        name = f"{spec.name} Delete"
        outcome = self.client.call(self.item_path(spec, identifier), "DELETE", {})
        if not outcome.ok:
            return failed(name, f"Failed: {describe_error(outcome)}")
        if outcome.status != NO_CONTENT:
            return failed(name, f"Expected HTTP 204 No Content, got {outcome.status}")
        return passed(name, "Item deleted successfully")


class CategoryVerifier(BaseVerifier):
    """Verifies custom categories and the items nested under them."""

    STEPS = (
        "Create",
        "List",
        "Item Add",
        "Item List",
        "Item Update",
        "Item Delete",
    )

    def verify(self, spec: CategorySpec) -> Iterator[StepResult]:
        """Run the six category/item steps.

        Yields:
            One StepResult per step; stops after a failed category create or
            a failed item add
        """
        result, category_id = self.create_category(spec)
        yield result
        if category_id is None:
            return

        yield self.list_categories(category_id)

        result, item_id = self.add_item(spec, category_id)
        yield result
        if item_id is None:
            return

        yield self.list_items(category_id, item_id)
        yield self.update_item(spec, category_id, item_id)
        yield self.delete_item(category_id, item_id)

    def item_path(self, category_id: Identifier, item_id: Identifier) -> str:
        return f"/category/{path_segment(category_id)}/{path_segment(item_id)}"

    def create_category(self, spec: CategorySpec) -> tuple[StepResult, Optional[Identifier]]:
        outcome = self.client.call("/category/create", "POST", {"categoryName": spec.category_name})
        return self.capture_id(
            "Category Create",
            outcome,
            f"Created Category: {spec.category_name} ({{id}})",
        )

    def list_categories(self, category_id: Identifier) -> StepResult:
        outcome = self.client.call("/category/list", "GET")
        return self.check_membership("Category List", outcome, category_id, "Category")

    def add_item(
        self,
        spec: CategorySpec,
        category_id: Identifier,
    ) -> tuple[StepResult, Optional[Identifier]]:
        outcome = self.client.call(
            f"/category/{path_segment(category_id)}/add",
            "POST",
            spec.item_payload,
        )
        return self.capture_id("Category Item Add", outcome, "Added Item ID: {id}")

    def list_items(self, category_id: Identifier, item_id: Identifier) -> StepResult:
        outcome = self.client.call(f"/category/{path_segment(category_id)}/list", "GET")
        return self.check_membership("Category Item List", outcome, item_id, "Item")

    def update_item(
        self,
        spec: CategorySpec,
        category_id: Identifier,
        item_id: Identifier,
    ) -> StepResult:
        """PATCH the item note; the echoed note must match exactly."""
        name = "Category Item Update"
        outcome = self.client.call(
            self.item_path(category_id, item_id),
            "PATCH",
            {"note": spec.updated_note},
        )
        if not outcome.ok:
            return failed(name, f"Failed to update item: {describe_error(outcome)}")

        try:
            note = require_object(outcome.body).get("note")
        except MalformedResponseError as e:
            return failed(name, f"Malformed response: {e}")

        if note != spec.updated_note:
            return failed(name, f"Expected note {spec.updated_note!r}, got {note!r}")
        return passed(name, "Item updated successfully")

    def delete_item(self, category_id: Identifier, item_id: Identifier) -> StepResult:
        """DELETE the item; any 2xx passes, unlike ResourceVerifier.delete."""
        name = "Category Item Delete"
        outcome = self.client.call(self.item_path(category_id, item_id), "DELETE", {})
        if not outcome.ok:
            return failed(name, f"Failed to delete item: {describe_error(outcome)}")
        return passed(name, f"Item deleted successfully (HTTP {outcome.status})")

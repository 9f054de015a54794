"""Resource definitions exercised by the harness.

Payloads carry a timestamp, so the specs are built per run rather than
defined once at import time.
"""

from datetime import datetime, timezone
from typing import Optional

from tracker_harness.models import CategorySpec, ResourceSpec

CATEGORY_KEY = "category"

# Keys in run order
RESOURCE_KEYS = ["water", "sleep", "activity", CATEGORY_KEY]


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """Format a UTC timestamp as 2024-01-31T08:00:00.000Z."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def build_resource_specs(now: Optional[datetime] = None) -> list[ResourceSpec]:
    """Build the water, sleep and activity specs in run order."""
    stamp = iso_timestamp(now)
    return [
        ResourceSpec(
            key="water",
            name="Waters",
            base_path="/waters",
            create_payload={"datetime": stamp, "amountMl": 500},
            update_payload={"amountMl": 750},
        ),
        ResourceSpec(
            key="sleep",
            name="Sleeps",
            base_path="/sleeps",
            create_payload={"datetime": stamp, "hours": 6.5},
            update_payload={"hours": 8.0},
        ),
        ResourceSpec(
            key="activity",
            name="Activities",
            base_path="/activities",
            create_payload={"datetime": stamp, "minutes": 30, "intensity": "moderate"},
            update_payload={"minutes": 45, "intensity": "high"},
        ),
    ]


def build_category_spec(now: Optional[datetime] = None) -> CategorySpec:
    return CategorySpec(
        key=CATEGORY_KEY,
        name="Categories",
        category_name="Mindfulness",
        item_payload={"datetime": iso_timestamp(now), "note": "Morning Meditation"},
        updated_note="Evening Meditation",
    )

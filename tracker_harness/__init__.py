"""
Health Tracker API Verification Harness.

A tool that drives a health tracker backend through registration, profile
lookup and create/list/update/delete of its record endpoints, reporting
pass/fail/warn per step with request timing.
"""

__version__ = "1.0.0"

from tracker_harness.cli import main

__all__ = ["main", "__version__"]

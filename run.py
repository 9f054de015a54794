#!/usr/bin/env python3
"""
Health Tracker API Verification Harness

Run this script to exercise a health tracker backend end to end:
auth, profile, waters, sleeps, activities and custom categories.

Usage:
    python run.py                          # Use tracker.json / defaults
    python run.py -u http://host:8080      # Test a specific server
    python run.py -r water,category        # Verify selected resources only
    python run.py -q                       # Quiet mode (summary only)
    python run.py -j results.json          # Output JSON results
    python run.py --strict                 # Exit 1 when any step fails
"""

import sys
from tracker_harness.cli import main

if __name__ == "__main__":
    sys.exit(main())

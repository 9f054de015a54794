import sys

from tracker_harness.cli import main

sys.exit(main())

"""
Test suite for the RideBook client.

Run with:
    python -m unittest discover -s tests -t .

Qt-backed tests use the offscreen platform, so no display is needed.
"""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure repository root is on the import path so `ridebook.*` works when
# running the tests from a checkout.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

"""Pytest configuration for the test suite."""

import sys
from pathlib import Path

# Add the repository root to the path so absolute imports work
# (tests/ is inside the repository root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

"""Shared pytest fixtures for signalmice tests."""

import sys
from pathlib import Path

# Add project root to Python path for imports
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

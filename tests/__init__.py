import sys
from pathlib import Path

PARENT_DIR = Path(__file__).parent.parent
if str(PARENT_DIR) not in sys.path:
    sys.path.insert(0, str(PARENT_DIR))

__description__ = "Test suite for ms-align"

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("BIGOX_LOG_LEVEL", "DEBUG")
os.environ.setdefault("BIGOX_AUTHORIZATION_NO_RULES_BEHAVIOR", "error")

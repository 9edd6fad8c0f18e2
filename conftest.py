# Ensure the repository root is on sys.path so tests can import the `phishlens` package
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    # Insert at front so the local package shadows any installed copy
    sys.path.insert(0, str(ROOT))

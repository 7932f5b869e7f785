"""Root conftest: lets `grant_search.X` import from a plain checkout."""
import sys
from pathlib import Path

_here = Path(__file__).resolve().parent
_parent = _here.parent

# Add repo root so `grant_search.X` works
if str(_parent) not in sys.path:
    sys.path.insert(0, str(_parent))

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import slide_deck` works
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from slide_deck.theme_loader import get_theme  # noqa: E402


@pytest.fixture
def theme():
    return get_theme("default")

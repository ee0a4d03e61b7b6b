import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*` and `main`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


@pytest.fixture(scope="session")
def bundled_catalog():
    """The signature catalog shipped in rules/cdn_signatures.yaml."""
    from rules.rules_loader import load_rules
    return load_rules()

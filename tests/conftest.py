import os
import sys
from pathlib import Path


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'number_search.services.lookup'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Fake vendor credentials; every test fakes the network
    os.environ.setdefault("FORAGER_API_KEY", "test-forager-key")
    os.environ.setdefault("FORAGER_ACCOUNT_ID", "1234")
    os.environ.setdefault("AVIATO_API_KEY", "test-aviato-key")

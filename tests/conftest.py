import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("JAX_PLATFORMS", "cpu")

# Ensure local package is imported before any installed version
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from eltwise import Session, Stream  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config():
    # Index dtype, block size, jit flag and device are restored after each test
    with Session():
        yield


@pytest.fixture
def stream():
    return Stream(name="test-stream")

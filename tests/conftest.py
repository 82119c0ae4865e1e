from datetime import datetime

import pytest

from tms.security.auth import STAFF_ACCOUNTS
from tms.security.session import SessionContext
from tms.storage.mock_data import build_workspace

FIXED_NOW = datetime(2024, 12, 22, 12, 0)


def _session_for(role: str) -> SessionContext:
    account = next(a for a in STAFF_ACCOUNTS if a["role"] == role)
    return SessionContext.from_user({k: v for k, v in account.items() if k != "password"})


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def workspace(clock):
    """Seeded stores with no session (role checks skipped)."""
    return build_workspace(clock=clock, seed=True)


@pytest.fixture
def session_for():
    return _session_for

import os

import pytest

# Service settings are read at import time.
os.environ.setdefault("COMPLIANCE_STORE", "memory")
os.environ.setdefault("COMPLIANCE_ADMIN_ID", "admin")
os.environ.setdefault("COMPLIANCE_SIGN_REPORTS", "true")
os.environ.setdefault("COMPLIANCE_LOG_JSON", "false")
os.environ.setdefault("COMPLIANCE_LOG_LEVEL", "WARNING")

from compliance_service.main import _startup


# Fresh engine before each test for isolation
@pytest.fixture(autouse=True)
def _reset_engine():
    _startup()
    yield

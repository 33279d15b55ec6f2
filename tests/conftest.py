import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from recordrecon.config import ReconciliationConfig
from recordrecon.normalization import to_bool, to_iso_datetime, to_string


class RecordingLogger:
    """Collects diff-logger calls so tests can inspect them."""

    def __init__(self) -> None:
        self.calls = []

    def log(self, message, data):
        self.calls.append((message, data))


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def user_config():
    """Mapping between a locally stored user and the API representation."""

    return ReconciliationConfig(
        field_mapping={
            "userName": "username",
            "registeredAt": "signup_date",
            "departmentId": "department_id",
            "userRole": "role",
            "phoneNumber": "phone",
        },
        type_converters={
            "registeredAt": to_iso_datetime,
            "departmentId": to_string,
            "active": to_bool,
        },
    )


@pytest.fixture(autouse=True)
def clear_debug_env(monkeypatch):
    monkeypatch.delenv("RECON_DEBUG", raising=False)

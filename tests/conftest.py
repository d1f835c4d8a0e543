import threading
from typing import Dict, Optional

import pytest
import structlog

import idempotence.service as service_module


class FakeRedis:
    """Dict-backed stand-in for the parts of ``redis.Redis`` the store uses."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self.closed = False
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[bytes]:
        with self._lock:
            return self.data.get(name)

    def set(self, name: str, value: str) -> bool:
        with self._lock:
            self.data[name] = value.encode("utf-8")
        return True

    def delete(self, *names: str) -> int:
        with self._lock:
            return sum(1 for name in names if self.data.pop(name, None) is not None)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def fresh_token_service(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start each test without a process-wide service and without IDEMPOTENCE_* env."""
    for name in (
        "IDEMPOTENCE_STORE_BACKEND",
        "IDEMPOTENCE_TOKEN_BUILDER",
        "IDEMPOTENCE_PG_DSN",
        "IDEMPOTENCE_REDIS_URL",
        "DATABASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(service_module, "_service", None)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging config bound to a per-test capture stream."""
    yield
    structlog.reset_defaults()

# tests/test_health.py
from typing import Any


def test_root_responds(client: Any) -> None:
    """The root endpoint describes the service."""
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["docs"] == "/docs"


def test_health_check(client: Any) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

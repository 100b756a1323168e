import io
import json
import random
from contextlib import redirect_stderr, redirect_stdout
from datetime import date

from fastapi.testclient import TestClient

from planner.logging import configure_logging, logger
from planner.main import create_app
from planner.srs import Flashcard, ReviewScheduler
from tests.fakes import ManualClock


def _json_lines(buffer_text: str, event: str) -> list[dict]:
    """Return parsed log lines for ``event`` from captured stderr/stdout text."""

    lines = [ln for ln in buffer_text.splitlines() if ln.strip()]
    return [json.loads(ln) for ln in lines if f'"event": "{event}"' in ln]


def _capture(action) -> str:
    buf_out = io.StringIO()
    buf_err = io.StringIO()
    try:
        with redirect_stdout(buf_out), redirect_stderr(buf_err):
            configure_logging()
            action()
    finally:
        # 後続テストのためにハンドラを本来の stderr に戻す
        configure_logging()
    return buf_err.getvalue() + buf_out.getvalue()


def test_structlog_outputs_pure_json_without_stdlib_prefix():
    raw = _capture(lambda: logger.info("card_graded", card_id="c:1", box=2, next="2024-01-08"))

    lines = [ln for ln in raw.splitlines() if ln.strip()]
    assert lines, "no log output captured"
    assert not lines[-1].startswith("INFO:"), lines[-1]

    data = json.loads(lines[-1])
    assert data["event"] == "card_graded"
    assert data["level"] == "info"
    assert data["card_id"] == "c:1"
    assert "timestamp" in data


def test_persist_failure_is_logged_as_warning(kv, clock):
    scheduler = ReviewScheduler(kv, clock)
    scheduler.add_card(
        Flashcard(id="c:w", subject="math", topic="Binomial", front="f", back="b", next=date(2024, 1, 1))
    )
    kv.fail_writes = True

    raw = _capture(lambda: scheduler.grade("c:w", False))

    warnings = _json_lines(raw, "cards_persist_failed")
    assert warnings, raw
    assert warnings[-1]["level"] == "warning"
    assert warnings[-1]["key"] == "jee_cards"


def test_request_complete_log_contains_request_id_and_status(kv, clock):
    app = create_app(kv=kv, clock=clock, rng=random.Random(0), timer_clock=ManualClock())

    def call() -> None:
        with TestClient(app) as client:
            assert client.get("/healthz").status_code == 200

    request_lines = _json_lines(_capture(call), "request_complete")

    assert request_lines, "request_complete log line not found"
    data = request_lines[-1]
    assert data["request_id"]
    assert data["status_code"] == 200
    assert data["path"] == "/healthz"
    assert data["is_error"] is False

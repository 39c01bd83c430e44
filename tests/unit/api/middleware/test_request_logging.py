"""
Tests for Request Logging Middleware

Covers:
- Sensitive header / query redaction
- Status colours
- Request counter, basic logger, performance guard
- Detailed logger (on-complete hook, access log file)
- Error logger (error log file, error count, re-raise)
"""

import json
import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from gatehouse.api.middleware.logging import (
    GREEN,
    MAGENTA,
    RED,
    RESET,
    YELLOW,
    BasicLoggerStage,
    DetailedLogger,
    ErrorLoggerStage,
    PerformanceStage,
    RequestCounterStage,
    redact_query,
    redact_sensitive_headers,
    status_color,
)
from gatehouse.observability.metrics import RequestStats
from gatehouse.observability.sinks import DailyLogSink
from gatehouse.pipeline.chain import ErrorResponder, Pipeline, PipelineMiddleware
from gatehouse.pipeline.context import RequestContext


MIDDLEWARE_LOGGER = "gatehouse.api.middleware.logging"


def _read_lines(sink: DailyLogSink) -> list[dict]:
    path = sink.current_path()
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def _build_client(stages) -> TestClient:
    app = FastAPI()
    app.add_middleware(PipelineMiddleware, pipeline=Pipeline(stages))

    @app.get("/api/items/{item_id}")
    async def item(item_id: int, request: Request):
        return {"item": item_id, "number": RequestContext.of(request).request_number}

    @app.get("/api/missing")
    async def missing():
        from fastapi.responses import JSONResponse

        return JSONResponse(status_code=404, content={"success": False})

    @app.get("/api/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return TestClient(app)


# =============================================================================
# Redaction
# =============================================================================


class TestRedaction:
    """Credentials never reach the logs."""

    def test_authorization_header_redacted(self):
        headers = {"Authorization": "Bearer secret", "Accept": "application/json"}

        redacted = redact_sensitive_headers(headers)

        assert redacted["Authorization"] == "[REDACTED]"
        assert redacted["Accept"] == "application/json"

    @pytest.mark.parametrize("name", ["Cookie", "X-API-Key", "x-auth-token"])
    def test_other_sensitive_headers(self, name):
        assert redact_sensitive_headers({name: "v"})[name] == "[REDACTED]"

    def test_token_and_password_query_params_redacted(self):
        redacted = redact_query({"token": "abc", "Password": "pw", "page": "2"})

        assert redacted == {"token": "[REDACTED]", "Password": "[REDACTED]", "page": "2"}


# =============================================================================
# Status Colours
# =============================================================================


class TestStatusColor:
    """2xx green, 3xx yellow, 4xx red, 5xx magenta."""

    @pytest.mark.parametrize(
        "code,colour",
        [(200, GREEN), (204, GREEN), (302, YELLOW), (404, RED), (429, RED), (500, MAGENTA), (503, MAGENTA)],
    )
    def test_colour_by_class(self, code, colour):
        assert status_color(code) == colour

    def test_informational_uses_reset(self):
        assert status_color(101) == RESET


# =============================================================================
# Counter / Basic Logger / Performance Guard
# =============================================================================


class TestRequestCounterStage:
    """Request ordinals and aggregate counts."""

    def test_assigns_increasing_request_numbers(self):
        stats = RequestStats()
        client = _build_client([RequestCounterStage(stats)])

        first = client.get("/api/items/1").json()["number"]
        second = client.get("/api/items/2").json()["number"]

        assert (first, second) == (1, 2)
        assert stats.total == 2
        assert stats.by_method == {"GET": 2}
        assert stats.by_path == {"/api/items/{id}": 2}


class TestBasicLoggerStage:
    """One line per request at receipt."""

    def test_logs_method_path_and_client(self, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        client = _build_client([BasicLoggerStage()])

        client.get("/api/items/7?page=2")

        messages = [r.getMessage() for r in caplog.records if r.name == MIDDLEWARE_LOGGER]
        assert any("GET /api/items/7?page=2 - testclient" in m for m in messages)


class TestPerformanceStage:
    """Slow-request warning."""

    def test_warns_when_over_threshold(self, caplog):
        caplog.set_level(logging.WARNING, logger=MIDDLEWARE_LOGGER)
        client = _build_client([PerformanceStage(threshold_ms=0.0)])

        response = client.get("/api/items/1")

        assert response.status_code == 200
        assert any("SLOW REQUEST: GET /api/items/1" in r.getMessage() for r in caplog.records)

    def test_silent_under_threshold(self, caplog):
        caplog.set_level(logging.WARNING, logger=MIDDLEWARE_LOGGER)
        client = _build_client([PerformanceStage(threshold_ms=60_000)])

        client.get("/api/items/1")

        assert not any("SLOW REQUEST" in r.getMessage() for r in caplog.records)


# =============================================================================
# Detailed Logger
# =============================================================================


class TestDetailedLogger:
    """Access records written once the response is final."""

    def test_writes_access_record(self, tmp_path):
        sink = DailyLogSink(tmp_path, "access")
        client = _build_client([DetailedLogger(sink, colors=False)])

        client.get(
            "/api/items/3?token=abc&page=1",
            headers={"Authorization": "Bearer secret", "User-Agent": "pytest"},
        )

        (record,) = _read_lines(sink)
        assert record["method"] == "GET"
        assert record["url"] == "/api/items/3?token=abc&page=1"
        assert record["ip"] == "testclient"
        assert record["userAgent"] == "pytest"
        assert record["statusCode"] == 200
        assert record["durationMs"] >= 0
        assert record["params"] == {"item_id": "3"}
        assert record["headers"]["authorization"] == "[REDACTED]"
        assert record["query"] == {"token": "[REDACTED]", "page": "1"}
        assert "body" not in record

    def test_records_final_status_of_error_response(self, tmp_path):
        sink = DailyLogSink(tmp_path, "access")
        client = _build_client([ErrorResponder(), DetailedLogger(sink, colors=False)])

        client.get("/api/boom")

        (record,) = _read_lines(sink)
        assert record["statusCode"] == 500

    def test_console_line_colour_coded(self, tmp_path):
        logger = DetailedLogger(DailyLogSink(tmp_path, "access"), colors=True)
        record = {"method": "GET", "url": "/x", "statusCode": 404, "durationMs": 1.5, "ip": "1.1.1.1"}

        line = logger.format_line(record)

        assert f"{RED}404{RESET}" in line
        assert line.startswith("GET /x ")

    def test_console_line_plain_when_colours_disabled(self, tmp_path):
        logger = DetailedLogger(DailyLogSink(tmp_path, "access"), colors=False)
        record = {"method": "GET", "url": "/x", "statusCode": 200, "durationMs": 1.5, "ip": "1.1.1.1"}

        assert logger.format_line(record) == "GET /x 200 1.5ms - 1.1.1.1"


# =============================================================================
# Error Logger
# =============================================================================


class TestErrorLoggerStage:
    """Unhandled errors are recorded then re-raised."""

    def test_records_error_and_reraises_to_responder(self, tmp_path):
        stats = RequestStats()
        sink = DailyLogSink(tmp_path, "error")
        client = _build_client([ErrorResponder(), RequestCounterStage(stats), ErrorLoggerStage(sink, stats)])

        response = client.get("/api/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert body["requestId"] == 1
        assert "kaboom" not in response.text
        assert stats.error_count == 1

        (record,) = _read_lines(sink)
        assert record["error"]["name"] == "RuntimeError"
        assert record["error"]["message"] == "kaboom"
        assert "Traceback" in record["error"]["stack"]
        assert record["user"] is None
        assert record["url"] == "/api/boom"

    def test_successful_requests_not_recorded(self, tmp_path):
        stats = RequestStats()
        sink = DailyLogSink(tmp_path, "error")
        client = _build_client([ErrorResponder(), ErrorLoggerStage(sink, stats)])

        client.get("/api/items/1")

        assert stats.error_count == 0
        assert _read_lines(sink) == []

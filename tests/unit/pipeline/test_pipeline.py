"""
Tests for the middleware pipeline: ordering, short-circuiting, context and
on-complete hooks, terminal error responder.
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.responses import JSONResponse, Response

from gatehouse.core.exceptions import ForbiddenError
from gatehouse.pipeline.chain import ErrorResponder, Pipeline, PipelineMiddleware
from gatehouse.pipeline.context import RequestContext, client_identity


class Recorder:
    """Stage that appends its name before and after delegating."""

    def __init__(self, name: str, trail: list[str]):
        self.name = name
        self.trail = trail

    async def __call__(self, request, call_next):
        self.trail.append(f"{self.name}:in")
        response = await call_next(request)
        self.trail.append(f"{self.name}:out")
        return response


class ShortCircuit:
    """Stage that answers without delegating."""

    async def __call__(self, request, call_next):
        return JSONResponse(status_code=418, content={"success": False, "message": "teapot"})


def _client(stages, trail=None) -> TestClient:
    app = FastAPI()
    app.add_middleware(PipelineMiddleware, pipeline=Pipeline(stages))

    @app.get("/ok")
    async def ok(request: Request):
        if trail is not None:
            trail.append("route")
        return {"client": RequestContext.of(request).client}

    @app.get("/fail")
    async def fail():
        raise ValueError("secret detail")

    return TestClient(app)


# =============================================================================
# Ordering
# =============================================================================


class TestPipelineOrdering:
    """Stages run in declaration order around the endpoint."""

    def test_declaration_order(self):
        trail: list[str] = []
        client = _client([Recorder("a", trail), Recorder("b", trail)], trail)

        client.get("/ok")

        assert trail == ["a:in", "b:in", "route", "b:out", "a:out"]

    def test_short_circuit_skips_later_stages(self):
        trail: list[str] = []
        client = _client([Recorder("a", trail), ShortCircuit(), Recorder("c", trail)], trail)

        response = client.get("/ok")

        assert response.status_code == 418
        assert trail == ["a:in", "a:out"]

    def test_stages_property_is_a_copy(self):
        pipeline = Pipeline([ShortCircuit()])
        pipeline.stages.clear()

        assert len(pipeline.stages) == 1


# =============================================================================
# Context and Hooks
# =============================================================================


class TestRequestContext:
    """Context creation, client identity and completion hooks."""

    def test_context_visible_to_route(self):
        client = _client([])

        assert client.get("/ok").json() == {"client": "testclient"}

    @pytest.mark.asyncio
    async def test_hooks_fire_in_order_once(self):
        context = RequestContext()
        fired: list[int] = []

        async def first(ctx, response):
            fired.append(1)

        async def second(ctx, response):
            fired.append(response.status_code)

        context.on_complete(first)
        context.on_complete(second)
        await context.complete(Response(status_code=204))
        await context.complete(Response(status_code=500))

        assert fired == [1, 204]

    def test_hook_sees_final_response(self):
        seen: list[int] = []

        class Hooking:
            async def __call__(self, request, call_next):
                async def hook(ctx, response):
                    seen.append(response.status_code)

                RequestContext.of(request).on_complete(hook)
                return await call_next(request)

        client = _client([ErrorResponder(), Hooking()])

        client.get("/fail")

        assert seen == [500]

    def _request(self, headers):
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": b"",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
            "client": ("10.0.0.1", 1234),
        }
        return Request(scope)

    def test_forwarded_for_ignored_unless_trusted(self):
        request = self._request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

        assert client_identity(request) == "10.0.0.1"
        assert client_identity(request, trust_forwarded_for=True) == "203.0.113.9"

    def test_elapsed_ms_non_negative(self):
        assert RequestContext().elapsed_ms() >= 0


# =============================================================================
# ErrorResponder
# =============================================================================


class TestErrorResponder:
    """Escaped exceptions become envelopes."""

    def test_unhandled_error_sanitized(self):
        client = _client([ErrorResponder()])

        response = client.get("/fail")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert "timestamp" in body
        assert "secret detail" not in response.text

    def test_gatehouse_exception_keeps_status(self):
        class Forbid:
            async def __call__(self, request, call_next):
                raise ForbiddenError(["admin"], "guest")

        client = _client([ErrorResponder(), Forbid()])

        response = client.get("/ok")

        assert response.status_code == 403
        assert response.json()["yourRole"] == "guest"

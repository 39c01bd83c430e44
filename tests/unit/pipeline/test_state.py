"""
Tests for GatehouseState: injected collaborators and pipeline assembly.
"""

from datetime import timedelta

import pytest

from gatehouse.api.middleware.logging import DetailedLogger
from gatehouse.api.middleware.rate_limit import FixedWindowRateLimiter
from gatehouse.auth.directory import UserDirectory
from gatehouse.auth.store import SessionStore
from gatehouse.pipeline.chain import ErrorResponder
from gatehouse.pipeline.state import GatehouseState


class TestFromSettings:
    """Injected collaborators are used as given, even when empty."""

    def test_empty_session_store_is_kept(self, test_settings, utc_clock):
        sessions = SessionStore(ttl=timedelta(minutes=5), clock=utc_clock)
        assert len(sessions) == 0

        state = GatehouseState.from_settings(test_settings, sessions=sessions)

        assert state.sessions is sessions
        assert state.guard.store is sessions

    def test_empty_directory_is_kept(self, test_settings):
        directory = UserDirectory([])

        state = GatehouseState.from_settings(test_settings, directory=directory)

        assert state.directory is directory
        assert len(state.directory) == 0

    def test_rate_limiter_is_kept(self, test_settings, ms_clock):
        limiter = FixedWindowRateLimiter(window_ms=1_000, max_requests=1, clock=ms_clock)

        state = GatehouseState.from_settings(test_settings, rate_limiter=limiter)

        assert state.rate_limiter is limiter

    def test_defaults_follow_settings(self, test_settings):
        state = GatehouseState.from_settings(test_settings)

        assert state.sessions.ttl == timedelta(seconds=test_settings.session_ttl_seconds)
        assert state.rate_limiter.max_requests == test_settings.rate_limit_max_requests
        assert [p.username for p in state.directory] == ["admin", "user", "guest"]


class TestBuildPipeline:
    """Global stage order."""

    def test_error_responder_outermost(self, test_settings):
        stages = GatehouseState.from_settings(test_settings).build_pipeline().stages

        assert isinstance(stages[0], ErrorResponder)
        assert not any(isinstance(stage, DetailedLogger) for stage in stages)

    def test_detailed_logger_when_enabled(self, test_settings):
        settings = test_settings.model_copy(update={"detailed_logging": True})

        stages = GatehouseState.from_settings(settings).build_pipeline().stages

        assert any(isinstance(stage, DetailedLogger) for stage in stages)

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, test_settings):
        state = GatehouseState.from_settings(test_settings)

        await state.stop_sweeper()

        assert state._sweeper is None

"""
Gatehouse State - process-scoped owner of shared maps.

One GatehouseState is built per application by ``create_app`` and stored on
``app.state.gatehouse``. It owns the rate-limit records, sessions, request
statistics, principals and log sinks, and assembles the global pipeline
from them. Nothing here is a module-level singleton, so every app (and every
test) starts from a clean slate.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

from gatehouse.api.middleware.logging import (
    BasicLoggerStage,
    DetailedLogger,
    ErrorLoggerStage,
    PerformanceStage,
    RequestCounterStage,
)
from gatehouse.api.middleware.rate_limit import FixedWindowRateLimiter, RateLimitStage
from gatehouse.auth.directory import UserDirectory
from gatehouse.auth.guard import AuthGuard
from gatehouse.auth.store import SessionStore
from gatehouse.core.config import Settings
from gatehouse.observability.logging import get_logger
from gatehouse.observability.metrics import RequestStats
from gatehouse.observability.sinks import DailyLogSink
from gatehouse.pipeline.chain import ErrorResponder, Pipeline, Stage


logger = get_logger(__name__)


@dataclass
class GatehouseState:
    """Everything a running Gatehouse app shares across requests."""

    settings: Settings
    stats: RequestStats
    rate_limiter: FixedWindowRateLimiter
    sessions: SessionStore
    directory: UserDirectory
    guard: AuthGuard
    access_sink: DailyLogSink
    error_sink: DailyLogSink
    detailed_logger: DetailedLogger
    _sweeper: Optional[asyncio.Task] = field(default=None, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        directory: Optional[UserDirectory] = None,
        sessions: Optional[SessionStore] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
    ) -> "GatehouseState":
        """
        Build state from settings.

        Args:
            settings: Application settings
            directory: Principals (defaults to the seeded users)
            sessions: Session store (tests inject one with a fake clock)
            rate_limiter: Rate limiter (tests inject one with a fake clock)
        """
        # None checks: an empty store is falsy
        if directory is None:
            directory = UserDirectory.with_defaults(rounds=settings.password_hash_rounds)
        if sessions is None:
            sessions = SessionStore(ttl=timedelta(seconds=settings.session_ttl_seconds))
        if rate_limiter is None:
            rate_limiter = FixedWindowRateLimiter(
                window_ms=settings.rate_limit_window_ms,
                max_requests=settings.rate_limit_max_requests,
                message=settings.rate_limit_message,
            )
        log_dir = Path(settings.log_dir)
        access_sink = DailyLogSink(log_dir, "access")
        return cls(
            settings=settings,
            stats=RequestStats(namespace=settings.service_name.replace("-", "_")),
            rate_limiter=rate_limiter,
            sessions=sessions,
            directory=directory,
            guard=AuthGuard(directory, sessions, hash_rounds=settings.password_hash_rounds),
            access_sink=access_sink,
            error_sink=DailyLogSink(log_dir, "error"),
            detailed_logger=DetailedLogger(access_sink, colors=settings.log_colors),
        )

    # -------------------------------------------------------------------------
    # Pipeline Assembly
    # -------------------------------------------------------------------------

    def build_pipeline(self) -> Pipeline:
        """
        Global stages in execution order.

        error responder → request counter → basic logger → performance
        guard → [detailed logger] → rate limiter → error logger → router
        """
        stages: list[Stage] = [
            ErrorResponder(),
            RequestCounterStage(self.stats),
            BasicLoggerStage(),
            PerformanceStage(self.settings.slow_request_threshold_ms),
        ]
        if self.settings.detailed_logging:
            stages.append(self.detailed_logger)
        stages.append(RateLimitStage(self.rate_limiter, self.settings.rate_limit_path_prefix))
        stages.append(ErrorLoggerStage(self.error_sink, self.stats))
        return Pipeline(stages, trust_forwarded_for=self.settings.trust_forwarded_for)

    # -------------------------------------------------------------------------
    # Housekeeping
    # -------------------------------------------------------------------------

    async def sweep(self) -> dict[str, int]:
        """Purge expired sessions and ended rate-limit windows."""
        removed = {
            "sessions": await self.sessions.purge_expired(),
            "rate_records": self.rate_limiter.purge_expired(),
        }
        if any(removed.values()):
            logger.debug("state.swept", **removed)
        return removed

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.sweep()

    def start_sweeper(self) -> None:
        interval = self.settings.sweep_interval_seconds
        if interval > 0 and self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_forever(interval))

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

"""Unit tests for FailoverController: probing, cooldown and events."""
from __future__ import annotations

import asyncio
import unittest

from social_copilot.core.exceptions import (
    AllProvidersFailedError,
    BackendError,
    CooldownError,
    ErrorKind,
    error_kind,
)
from social_copilot.orchestrator.events import OrchestratorEvents
from social_copilot.orchestrator.failover import FailoverController, ProviderState
from social_copilot.tests.fakes import FakeBackend, FakeClock, make_input


def _run(coro):
    return asyncio.run(coro)


class _Recorder:
    def __init__(self) -> None:
        self.fallbacks = []
        self.recoveries = []
        self.all_failed = []

    def events(self) -> OrchestratorEvents:
        return OrchestratorEvents(
            on_fallback=lambda a, b, e: self.fallbacks.append((a, b, e)),
            on_recovery=self.recoveries.append,
            on_all_failed=self.all_failed.append,
        )


def _fail(name: str = "alpha") -> BackendError:
    return BackendError(f"{name} down", provider=name)


class TestFailoverController(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock(100.0)
        self.rec = _Recorder()

    def _controller(self, primary, fallback=None, cooldown=15.0) -> FailoverController:
        return FailoverController(
            primary, fallback, events=self.rec.events(), cooldown_seconds=cooldown, clock=self.clock,
        )

    def test_healthy_primary_success(self) -> None:
        primary, fallback = FakeBackend("alpha"), FakeBackend("beta")
        ctl = self._controller(primary, fallback)
        out = _run(ctl.execute(make_input()))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(fallback.calls), 0)
        self.assertEqual(ctl.state, ProviderState.HEALTHY)
        self.assertEqual(self.rec.recoveries, [])
        self.assertEqual(self.rec.fallbacks, [])

    def test_primary_failure_uses_fallback_and_emits(self) -> None:
        err = _fail()
        primary, fallback = FakeBackend("alpha", [err]), FakeBackend("beta")
        ctl = self._controller(primary, fallback)
        out = _run(ctl.execute(make_input()))

        self.assertEqual(out.model, "beta")
        self.assertEqual(len(fallback.calls), 1)
        self.assertEqual(self.rec.fallbacks, [("alpha", "beta", err)])
        self.assertTrue(ctl.primary_failed)
        self.assertEqual(ctl.primary_failure_count, 1)
        self.assertEqual(ctl.primary_failed_at, 100.0)
        self.assertEqual(ctl.active_provider(), "beta")

    def test_first_failure_does_not_start_cooldown(self) -> None:
        primary = FakeBackend("alpha", [_fail()])
        fallback = FakeBackend("beta")
        ctl = self._controller(primary, fallback)
        _run(ctl.execute(make_input()))
        # Same instant: a single failure still lets the next call retry the primary
        self.assertEqual(ctl.state, ProviderState.DEGRADED)
        out = _run(ctl.execute(make_input()))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(primary.calls), 2)
        self.assertEqual(self.rec.recoveries, ["alpha"])
        self.assertEqual(ctl.state, ProviderState.HEALTHY)
        self.assertEqual(ctl.primary_failure_count, 0)

    def test_repeated_failure_enters_cooldown(self) -> None:
        primary = FakeBackend("alpha", default=_fail())
        fallback = FakeBackend("beta")
        ctl = self._controller(primary, fallback)

        _run(ctl.execute(make_input()))
        _run(ctl.execute(make_input()))  # failed recovery attempt
        self.assertEqual(ctl.primary_failure_count, 2)
        self.assertEqual(ctl.state, ProviderState.COOLDOWN)

        self.clock.advance(10)
        out = _run(ctl.execute(make_input()))
        self.assertEqual(out.model, "beta")
        self.assertEqual(len(primary.calls), 2)  # skipped
        self.assertEqual(len(self.rec.fallbacks), 3)
        cooldown_err = self.rec.fallbacks[-1][2]
        self.assertIsInstance(cooldown_err, CooldownError)
        self.assertIs(error_kind(cooldown_err), ErrorKind.COOLDOWN)
        self.assertEqual(ctl.primary_failure_count, 2)

    def test_cooldown_elapses_then_retries_primary(self) -> None:
        primary = FakeBackend("alpha", [_fail(), _fail()])
        fallback = FakeBackend("beta")
        ctl = self._controller(primary, fallback)
        _run(ctl.execute(make_input()))
        _run(ctl.execute(make_input()))

        self.clock.advance(15)
        self.assertEqual(ctl.state, ProviderState.DEGRADED)
        out = _run(ctl.execute(make_input()))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(primary.calls), 3)
        self.assertEqual(self.rec.recoveries, ["alpha"])

    def test_failed_recovery_attempt_refreshes_failure_time(self) -> None:
        primary = FakeBackend("alpha", default=_fail())
        ctl = self._controller(primary, FakeBackend("beta"))
        _run(ctl.execute(make_input()))
        self.clock.advance(20)
        _run(ctl.execute(make_input()))
        self.assertEqual(ctl.primary_failed_at, 120.0)
        self.assertEqual(ctl.primary_failure_count, 2)

    def test_all_failed_aggregate(self) -> None:
        primary = FakeBackend("alpha", [_fail("alpha")])
        fallback = FakeBackend("beta", [_fail("beta")])
        ctl = self._controller(primary, fallback)
        with self.assertRaises(AllProvidersFailedError) as ctx:
            _run(ctl.execute(make_input()))
        err = ctx.exception
        self.assertEqual(
            str(err), "All LLM providers failed: alpha: alpha down; beta: beta down",
        )
        self.assertEqual([name for name, _ in err.attempts], ["alpha", "beta"])
        self.assertEqual(len(self.rec.all_failed), 1)
        self.assertEqual(len(self.rec.all_failed[0]), 2)
        self.assertIs(error_kind(err), ErrorKind.ALL_FAILED)

    def test_no_fallback_surfaces_aggregate(self) -> None:
        primary = FakeBackend("alpha", [_fail()])
        ctl = self._controller(primary)
        with self.assertRaises(AllProvidersFailedError) as ctx:
            _run(ctl.execute(make_input()))
        self.assertEqual(ctx.exception.details["providers"], ["alpha"])
        self.assertEqual(self.rec.fallbacks, [])
        self.assertEqual(ctl.active_provider(), "alpha")

    def test_cooldown_without_fallback_never_calls_primary(self) -> None:
        primary = FakeBackend("alpha", default=_fail())
        ctl = self._controller(primary)
        for _ in range(2):
            with self.assertRaises(AllProvidersFailedError):
                _run(ctl.execute(make_input()))
        with self.assertRaises(AllProvidersFailedError) as ctx:
            _run(ctl.execute(make_input()))
        self.assertIn("cooldown", str(ctx.exception))
        self.assertEqual(len(primary.calls), 2)

    def test_listener_errors_are_swallowed(self) -> None:
        def boom(*args):
            raise RuntimeError("listener broke")

        ctl = FailoverController(
            FakeBackend("alpha", [_fail()]),
            FakeBackend("beta"),
            events=OrchestratorEvents(on_fallback=boom, on_all_failed=boom, on_recovery=boom),
            clock=self.clock,
        )
        with self.assertLogs("social_copilot.orchestrator.events", level="WARNING"):
            out = _run(ctl.execute(make_input()))
        self.assertEqual(out.model, "beta")

    def test_reset(self) -> None:
        ctl = self._controller(FakeBackend("alpha", [_fail()]), FakeBackend("beta"))
        _run(ctl.execute(make_input()))
        ctl.reset()
        self.assertEqual(ctl.state, ProviderState.HEALTHY)
        self.assertEqual(ctl.primary_failure_count, 0)
        self.assertEqual(ctl.primary_failed_at, 0.0)
        self.assertEqual(ctl.active_provider(), "alpha")
        self.assertTrue(ctl.has_fallback())


if __name__ == "__main__":
    unittest.main()

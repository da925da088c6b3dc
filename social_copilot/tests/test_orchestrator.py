"""Unit tests for Orchestrator: cache, deduplication, failover and reconfiguration."""
from __future__ import annotations

import asyncio
import unittest

from social_copilot.config import CacheSettings
from social_copilot.core.exceptions import (
    AllProvidersFailedError,
    BackendError,
    OutputParseError,
)
from social_copilot.orchestrator import (
    STRICT_JSON_INSTRUCTION,
    CacheKeyEncoder,
    Orchestrator,
    OrchestratorEvents,
)
from social_copilot.replies.types import ReplyStyle
from social_copilot.tests.fakes import (
    FakeBackend,
    FakeClock,
    factory_for,
    make_input,
    make_settings,
)


def _run(coro):
    return asyncio.run(coro)


class _OrchestratorCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.primary = FakeBackend("alpha")
        self.fallback = FakeBackend("beta")
        self.fallbacks = []
        self.recoveries = []
        self.all_failed = []
        self.events = OrchestratorEvents(
            on_fallback=lambda a, b, e: self.fallbacks.append((a, b, e)),
            on_recovery=self.recoveries.append,
            on_all_failed=self.all_failed.append,
        )

    def _orch(self, settings=None) -> Orchestrator:
        return Orchestrator(
            settings or make_settings(),
            events=self.events,
            backend_factory=factory_for({"alpha": self.primary, "beta": self.fallback}),
            clock=self.clock,
        )


class TestDeduplication(_OrchestratorCase):
    def test_concurrent_identical_calls_share_one_backend_call(self) -> None:
        orch = self._orch()
        inp = make_input("same")

        async def scenario():
            return await asyncio.gather(*(orch.generate_reply(inp) for _ in range(5)))

        results = _run(scenario())
        self.assertEqual(len(self.primary.calls), 1)
        for r in results:
            self.assertIs(r, results[0])
        stats = orch.get_cache_stats()
        # Waiting on an in-flight request is neither a hit nor a miss
        self.assertEqual((stats.hits, stats.misses), (0, 1))

    def test_dedup_without_cache(self) -> None:
        orch = self._orch(make_settings(cache=CacheSettings(enabled=False)))
        inp = make_input("same")

        async def scenario():
            return await asyncio.gather(orch.generate_reply(inp), orch.generate_reply(inp))

        _run(scenario())
        self.assertEqual(len(self.primary.calls), 1)

    def test_shared_failure_reaches_all_callers_and_is_not_cached(self) -> None:
        self.primary = FakeBackend("alpha", [BackendError("down")])
        orch = self._orch(make_settings(fallback=None))
        inp = make_input()

        async def scenario():
            return await asyncio.gather(
                orch.generate_reply(inp), orch.generate_reply(inp), return_exceptions=True,
            )

        results = _run(scenario())
        self.assertEqual(len(self.primary.calls), 1)
        for r in results:
            self.assertIsInstance(r, AllProvidersFailedError)
        self.assertEqual(len(orch.cache), 0)

    def test_cancelled_caller_does_not_cancel_others(self) -> None:
        orch = self._orch()
        inp = make_input()

        async def scenario():
            self.primary.gate = asyncio.Event()
            first = asyncio.ensure_future(orch.generate_reply(inp))
            second = asyncio.ensure_future(orch.generate_reply(inp))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            first.cancel()
            self.primary.gate.set()
            out = await second
            with self.assertRaises(asyncio.CancelledError):
                await first
            return out

        out = _run(scenario())
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(self.primary.calls), 1)
        # The shared task still stored its result
        self.assertIs(orch.cache.get(CacheKeyEncoder().encode(inp)), out)


class TestCaching(_OrchestratorCase):
    def test_miss_then_hit(self) -> None:
        orch = self._orch()
        inp = make_input()
        first = _run(orch.generate_reply(inp))
        second = _run(orch.generate_reply(make_input()))
        self.assertIs(first, second)
        self.assertEqual(len(self.primary.calls), 1)
        stats = orch.get_cache_stats()
        self.assertEqual((stats.hits, stats.misses), (1, 1))
        self.assertEqual(stats.hit_rate, 0.5)

    def test_ttl_expiry(self) -> None:
        orch = self._orch(make_settings(cache=CacheSettings(ttl_seconds=5.0)))
        inp = make_input()
        _run(orch.generate_reply(inp))
        self.clock.advance(3.0)
        _run(orch.generate_reply(inp))
        self.assertEqual(orch.get_cache_stats().hits, 1)
        self.clock.now = 6.001
        _run(orch.generate_reply(inp))
        stats = orch.get_cache_stats()
        self.assertEqual((stats.hits, stats.misses), (1, 2))
        self.assertEqual(len(self.primary.calls), 2)

    def test_lru_eviction(self) -> None:
        orch = self._orch(make_settings(cache=CacheSettings(size=3)))
        keys = CacheKeyEncoder()
        a, b, c, d = (make_input(t) for t in "ABCD")
        for inp in (a, b, c):
            _run(orch.generate_reply(inp))
        _run(orch.generate_reply(a))  # touch A
        _run(orch.generate_reply(d))

        self.assertNotIn(keys.encode(b), orch.cache)
        for inp in (a, c, d):
            self.assertIn(keys.encode(inp), orch.cache)
        self.assertEqual(len(self.primary.calls), 4)

    def test_errors_are_not_cached(self) -> None:
        self.primary = FakeBackend("alpha", [BackendError("down")])
        orch = self._orch(make_settings(fallback=None))
        inp = make_input()
        with self.assertRaises(AllProvidersFailedError):
            _run(orch.generate_reply(inp))
        out = _run(orch.generate_reply(inp))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(self.primary.calls), 2)
        self.assertEqual(orch.get_cache_stats().misses, 2)

    def test_disabled_cache_records_nothing(self) -> None:
        orch = self._orch(make_settings(cache=CacheSettings(enabled=False)))
        self.assertIsNone(orch.cache)
        _run(orch.generate_reply(make_input()))
        _run(orch.generate_reply(make_input()))
        stats = orch.get_cache_stats()
        self.assertEqual((stats.hits, stats.misses, stats.hit_rate), (0, 0, 0.0))
        self.assertEqual(len(self.primary.calls), 2)

    def test_clear_cache_resets_stats(self) -> None:
        orch = self._orch()
        _run(orch.generate_reply(make_input()))
        _run(orch.generate_reply(make_input()))
        orch.clear_cache()
        self.assertEqual(orch.get_cache_stats().hits, 0)
        self.assertEqual(orch.get_cache_stats().misses, 0)
        _run(orch.generate_reply(make_input()))
        self.assertEqual(len(self.primary.calls), 2)

    def test_styles_are_part_of_the_key(self) -> None:
        orch = self._orch()
        _run(orch.generate_reply(make_input(styles=[ReplyStyle.CASUAL])))
        _run(orch.generate_reply(make_input(styles=[ReplyStyle.FORMAL])))
        self.assertEqual(len(self.primary.calls), 2)


class TestFailoverThroughOrchestrator(_OrchestratorCase):
    def test_fallback_on_primary_failure(self) -> None:
        err = BackendError("alpha 503", provider="alpha")
        self.primary = FakeBackend("alpha", [err])
        orch = self._orch()
        out = _run(orch.generate_reply(make_input()))
        self.assertEqual(out.model, "beta")
        self.assertEqual(len(self.fallback.calls), 1)
        self.assertEqual(self.fallbacks, [("alpha", "beta", err)])
        self.assertEqual(orch.get_active_provider(), "beta")

    def test_recovery(self) -> None:
        self.primary = FakeBackend("alpha", [BackendError("down")])
        orch = self._orch()
        _run(orch.generate_reply(make_input("first")))
        out = _run(orch.generate_reply(make_input("second")))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(self.primary.calls), 2)
        self.assertEqual(self.recoveries, ["alpha"])
        self.assertEqual(orch.get_active_provider(), "alpha")

    def test_aggregate_failure_names_both_providers(self) -> None:
        self.primary = FakeBackend("alpha", [BackendError("timeout")])
        self.fallback = FakeBackend("beta", [BackendError("401 unauthorized")])
        orch = self._orch()
        with self.assertRaises(AllProvidersFailedError) as ctx:
            _run(orch.generate_reply(make_input()))
        message = str(ctx.exception)
        self.assertIn("alpha: timeout", message)
        self.assertIn("beta: 401 unauthorized", message)
        self.assertLess(message.index("alpha"), message.index("beta"))
        self.assertEqual(len(self.all_failed), 1)

    def test_parse_error_retry(self) -> None:
        self.primary = FakeBackend("alpha", [OutputParseError("No JSON array found")])
        orch = self._orch()
        inp = make_input(hint="mention the weekend")
        out = _run(orch.generate_reply(inp))
        self.assertEqual(out.model, "alpha")
        self.assertEqual(len(self.primary.calls), 2)
        hint = self.primary.calls[1].thought_hint
        self.assertIn("mention the weekend", hint)
        self.assertIn(STRICT_JSON_INSTRUCTION, hint)
        self.assertEqual(self.fallbacks, [])
        # Cached under the caller's original input
        _run(orch.generate_reply(inp))
        self.assertEqual(orch.get_cache_stats().hits, 1)

    def test_double_parse_error_fails_over(self) -> None:
        self.primary = FakeBackend("alpha", default=OutputParseError("bad"))
        orch = self._orch()
        out = _run(orch.generate_reply(make_input()))
        self.assertEqual(out.model, "beta")
        self.assertEqual(len(self.primary.calls), 2)
        self.assertIsInstance(self.fallbacks[0][2], OutputParseError)

    def test_reset_primary_state(self) -> None:
        self.primary = FakeBackend("alpha", [BackendError("down")])
        orch = self._orch()
        _run(orch.generate_reply(make_input()))
        self.assertEqual(orch.get_active_provider(), "beta")
        orch.reset_primary_state()
        self.assertEqual(orch.get_active_provider(), "alpha")


class TestUpdateConfig(_OrchestratorCase):
    def test_update_replaces_backends_and_resets_state(self) -> None:
        gamma = FakeBackend("gamma")
        backends = {
            "alpha": FakeBackend("alpha", default=BackendError("down")),
            "beta": self.fallback,
            "gamma": gamma,
        }
        orch = Orchestrator(
            make_settings(), events=self.events, backend_factory=factory_for(backends), clock=self.clock,
        )
        _run(orch.generate_reply(make_input("x")))
        _run(orch.generate_reply(make_input("y")))
        self.assertEqual(orch.get_active_provider(), "beta")
        self.assertTrue(orch.has_fallback())

        orch.update_config(make_settings(primary="gamma", fallback=None))

        self.assertFalse(orch.has_fallback())
        self.assertEqual(orch.get_active_provider(), "gamma")
        stats = orch.get_cache_stats()
        self.assertEqual((stats.hits, stats.misses), (0, 0))
        self.assertEqual(len(orch.cache), 0)
        out = _run(orch.generate_reply(make_input("x")))
        self.assertEqual(out.model, "gamma")

    def test_update_can_disable_and_enable_cache(self) -> None:
        orch = self._orch()
        _run(orch.generate_reply(make_input()))
        orch.update_config(make_settings(cache=CacheSettings(enabled=False)))
        self.assertIsNone(orch.cache)
        orch.update_config(make_settings(cache=CacheSettings(size=5, ttl_seconds=10)))
        self.assertIsNotNone(orch.cache)
        self.assertEqual(orch.cache.capacity, 5)
        self.assertEqual(orch.cache.ttl_seconds, 10)

    def test_update_does_not_join_work_of_previous_backends(self) -> None:
        gamma = FakeBackend("gamma")
        backends = {"alpha": self.primary, "beta": self.fallback, "gamma": gamma}
        orch = Orchestrator(
            make_settings(), events=self.events, backend_factory=factory_for(backends), clock=self.clock,
        )
        inp = make_input("same")

        async def scenario():
            self.primary.gate = asyncio.Event()
            old = asyncio.ensure_future(orch.generate_reply(inp))
            await asyncio.sleep(0)
            orch.update_config(make_settings(primary="gamma", fallback=None))
            new = await orch.generate_reply(inp)
            self.primary.gate.set()
            return await old, new

        old, new = _run(scenario())
        self.assertEqual(old.model, "alpha")
        self.assertEqual(new.model, "gamma")
        self.assertEqual(len(gamma.calls), 1)
        self.assertIs(orch.cache.get(CacheKeyEncoder().encode(inp)), new)


if __name__ == "__main__":
    unittest.main()

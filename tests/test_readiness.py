"""
Unit tests for the readiness state machine and its schedulers.

The state machine is driven by a ManualScheduler on a fake clock, so every
test controls exactly when stage boundaries become due.
"""

import asyncio
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from command_center.core.errors import ConfigurationError
from command_center.models import Loading, Ready, Failed
from command_center.pipeline import (
    AsyncioScheduler, ManualScheduler, ReadinessConfig, ReadinessStateMachine,
)
from tests.fixtures.sample_data import (
    FailingProvider, FixedProvider, FlakyProvider, create_manual_scheduler,
    create_sample_dashboard_data,
)

LABELS = ("Analyzing Trends", "Calculating Risk", "Generating Forecast")


def make_config(**overrides):
    values = dict(stage_labels=LABELS, stage_offsets_s=(1.5, 3.0, 4.5), provider_attempts=1)
    values.update(overrides)
    return ReadinessConfig(**values)


class _InertHandle:
    """Handle whose cancel() has no effect, like a timer that already fired."""

    def __init__(self, handle):
        self.handle = handle

    def cancel(self):
        pass


class NonCancellingScheduler(ManualScheduler):
    """ManualScheduler whose handles ignore cancellation."""

    def call_later(self, delay, callback):
        return _InertHandle(super().call_later(delay, callback))


class TestReadinessConfig(unittest.TestCase):
    """Test suite for readiness configuration validation."""

    def test_defaults_are_valid(self):
        config = make_config()
        self.assertEqual(config.stage_count, 3)
        self.assertEqual(config.stage_offsets_s, (1.5, 3.0, 4.5))

    def test_lists_are_normalised(self):
        config = make_config(stage_labels=["A", "B"], stage_offsets_s=[1, 2])
        self.assertEqual(config.stage_labels, ("A", "B"))
        self.assertEqual(config.stage_offsets_s, (1.0, 2.0))

    def test_no_stages(self):
        with self.assertRaises(ConfigurationError):
            make_config(stage_labels=(), stage_offsets_s=())

    def test_offset_count_mismatch(self):
        with self.assertRaises(ConfigurationError) as context:
            make_config(stage_offsets_s=(1.0, 2.0))
        self.assertIn("Expected 3 stage offsets", str(context.exception))

    def test_offsets_must_increase(self):
        with self.assertRaises(ConfigurationError):
            make_config(stage_offsets_s=(1.0, 1.0, 2.0))
        with self.assertRaises(ConfigurationError):
            make_config(stage_offsets_s=(3.0, 2.0, 4.0))

    def test_negative_offset(self):
        with self.assertRaises(ConfigurationError):
            make_config(stage_offsets_s=(-1.0, 2.0, 3.0))

    def test_provider_attempts(self):
        with self.assertRaises(ConfigurationError):
            make_config(provider_attempts=0)

    def test_progress_transition(self):
        with self.assertRaises(ConfigurationError):
            make_config(progress_transition_s=-0.1)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            make_config(provider_attempts=0)


class TestStageSequence(unittest.TestCase):
    """Test suite for the ordered loading stages."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler()
        self.provider = FixedProvider()
        self.machine = ReadinessStateMachine(self.provider, self.scheduler, make_config())

    def test_initial_state(self):
        self.assertEqual(self.machine.state, Loading(0))
        self.assertAlmostEqual(self.machine.progress, 1 / 3)
        self.assertFalse(self.machine.started)
        self.assertEqual(self.machine.history, [Loading(0)])

    def test_no_transition_before_start(self):
        self.clock.advance(60)
        self.assertEqual(self.scheduler.run_pending(), 0)
        self.assertEqual(self.machine.state, Loading(0))

    def test_start_schedules_every_boundary(self):
        self.machine.start()
        self.assertTrue(self.machine.started)
        self.assertEqual(self.scheduler.pending, 3)
        self.assertEqual(self.scheduler.next_deadline(), 101.5)

    def test_stages_advance_at_offsets(self):
        self.machine.start()

        self.clock.advance(1.0)
        self.assertEqual(self.scheduler.run_pending(), 0)
        self.assertEqual(self.machine.state, Loading(0))

        self.clock.advance(0.5)
        self.scheduler.run_pending()
        self.assertEqual(self.machine.state, Loading(1))
        self.assertAlmostEqual(self.machine.progress, 2 / 3)

        self.clock.advance(1.5)
        self.scheduler.run_pending()
        self.assertEqual(self.machine.state, Loading(2))
        self.assertAlmostEqual(self.machine.progress, 1.0)
        self.assertEqual(self.provider.calls, 0)

        self.clock.advance(1.5)
        self.scheduler.run_pending()
        self.assertEqual(self.machine.state, Ready(create_sample_dashboard_data()))
        self.assertEqual(self.machine.progress, 1.0)
        self.assertEqual(self.provider.calls, 1)

    def test_full_history(self):
        self.machine.start()
        for _ in range(3):
            self.clock.advance(1.5)
            self.scheduler.run_pending()
        self.assertEqual(
            self.machine.history,
            [Loading(0), Loading(1), Loading(2), Ready(self.provider.data)],
        )

    def test_late_loop_keeps_order(self):
        self.machine.start()
        self.clock.advance(30)
        self.assertEqual(self.scheduler.run_pending(), 3)
        self.assertEqual(
            self.machine.history,
            [Loading(0), Loading(1), Loading(2), Ready(self.provider.data)],
        )
        self.assertEqual(self.provider.calls, 1)

    def test_progress_is_monotonic(self):
        seen = [self.machine.progress]
        self.machine.subscribe(lambda state: seen.append(self.machine.progress))
        self.machine.start()
        for _ in range(3):
            self.clock.advance(1.5)
            self.scheduler.run_pending()
        self.assertEqual(seen, sorted(seen))
        self.assertEqual(seen[-1], 1.0)

    def test_offsets_are_measured_from_mount(self):
        # Mount at t=100 with boundaries at +1, +5, +6
        machine = ReadinessStateMachine(
            self.provider, self.scheduler, make_config(stage_offsets_s=(1.0, 5.0, 6.0))
        )
        machine.start()
        self.clock.advance(4.5)
        self.scheduler.run_pending()
        self.assertEqual(machine.state, Loading(1))
        self.clock.advance(0.5)
        self.scheduler.run_pending()
        self.assertEqual(machine.state, Loading(2))

    def test_start_twice_raises(self):
        self.machine.start()
        with self.assertRaises(RuntimeError):
            self.machine.start()

    def test_single_stage(self):
        config = make_config(stage_labels=("Only",), stage_offsets_s=(0.5,))
        machine = ReadinessStateMachine(self.provider, self.scheduler, config)
        self.assertEqual(machine.progress, 1.0)
        machine.start()
        self.clock.advance(0.5)
        self.scheduler.run_pending()
        self.assertIsInstance(machine.state, Ready)
        self.assertEqual(machine.history, [Loading(0), Ready(self.provider.data)])


class TestTerminalGuards(unittest.TestCase):
    """Test suite for the single-terminal-transition guarantees."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler()
        self.provider = FixedProvider()
        self.machine = ReadinessStateMachine(self.provider, self.scheduler, make_config())

    def test_boundary_after_ready_is_dropped(self):
        self.machine.start()
        self.clock.advance(5)
        self.scheduler.run_pending()
        history = list(self.machine.history)

        self.machine._on_boundary(2)

        self.assertEqual(self.machine.history, history)
        self.assertEqual(self.provider.calls, 1)

    def test_out_of_order_boundary_is_dropped(self):
        self.machine.start()
        self.machine._on_boundary(1)
        self.assertEqual(self.machine.state, Loading(0))
        self.machine._on_boundary(2)
        self.assertEqual(self.machine.state, Loading(0))
        self.assertEqual(self.provider.calls, 0)

    def test_exactly_one_terminal_state(self):
        self.machine.start()
        self.clock.advance(100)
        self.scheduler.run_pending()
        terminal = [s for s in self.machine.history if s.is_terminal]
        self.assertEqual(len(terminal), 1)


class TestTeardown(unittest.TestCase):
    """Test suite for session teardown."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler()
        self.provider = FixedProvider()
        self.published = []

    def _machine(self, scheduler=None):
        machine = ReadinessStateMachine(self.provider, scheduler or self.scheduler, make_config())
        machine.subscribe(self.published.append)
        return machine

    def test_teardown_cancels_pending_boundaries(self):
        machine = self._machine()
        machine.start()
        self.clock.advance(1.5)
        self.scheduler.run_pending()

        machine.teardown()
        self.clock.advance(100)

        self.assertEqual(self.scheduler.run_pending(), 0)
        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(machine.state, Loading(1))
        self.assertEqual(self.published, [Loading(1)])
        self.assertEqual(self.provider.calls, 0)
        self.assertTrue(machine.torn_down)

    def test_callbacks_firing_after_teardown_are_ignored(self):
        scheduler = NonCancellingScheduler(self.clock)
        machine = self._machine(scheduler)
        machine.start()

        machine.teardown()
        self.clock.advance(100)

        self.assertEqual(scheduler.run_pending(), 3)
        self.assertEqual(machine.state, Loading(0))
        self.assertEqual(machine.history, [Loading(0)])
        self.assertEqual(self.published, [])
        self.assertEqual(self.provider.calls, 0)

    def test_teardown_during_provider_call(self):
        machine = ReadinessStateMachine(None, self.scheduler, make_config())

        class TearingProvider:
            def fetch_dashboard_data(inner):
                machine.teardown()
                return create_sample_dashboard_data()

        machine.provider = TearingProvider()
        machine.start()
        self.clock.advance(5)
        self.scheduler.run_pending()

        self.assertEqual(machine.state, Loading(2))
        self.assertFalse(any(s.is_terminal for s in machine.history))

    def test_teardown_is_idempotent(self):
        machine = self._machine()
        machine.start()
        machine.teardown()
        machine.teardown()
        self.assertTrue(machine.torn_down)

    def test_start_after_teardown_raises(self):
        machine = self._machine()
        machine.teardown()
        with self.assertRaises(RuntimeError):
            machine.start()


class TestProviderFailures(unittest.TestCase):
    """Test suite for provider failure and retry handling."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler()

    def _run(self, provider, **config):
        machine = ReadinessStateMachine(provider, self.scheduler, make_config(**config))
        machine.start()
        self.clock.advance(100)
        self.scheduler.run_pending()
        return machine

    def test_provider_failure_gives_failed(self):
        provider = FailingProvider()
        with self.assertLogs('command_center.pipeline.readiness', level='WARNING'):
            machine = self._run(provider)
        self.assertEqual(machine.state, Failed("forecast table unavailable"))
        self.assertEqual(machine.history[-2:], [Loading(2), Failed("forecast table unavailable")])
        self.assertEqual(provider.calls, 1)

    def test_unexpected_exception_gives_failed(self):
        provider = FailingProvider(RuntimeError("db down"))
        with self.assertLogs('command_center.pipeline.readiness', level='ERROR'):
            machine = self._run(provider)
        self.assertEqual(machine.state, Failed("RuntimeError: db down"))

    def test_wrong_return_type_gives_failed(self):
        machine = self._run(FixedProvider(data={'riskScore': 22}))
        self.assertIsInstance(machine.state, Failed)
        self.assertIn("dict instead of DashboardData", machine.state.reason)

    def test_failed_keeps_loading_progress(self):
        config = dict(stage_labels=("A", "B"), stage_offsets_s=(1.0, 2.0))
        machine = ReadinessStateMachine(FailingProvider(), self.scheduler, make_config(**config))
        machine.start()
        self.clock.advance(1.0)
        self.scheduler.run_pending()
        progress = machine.progress
        self.clock.advance(1.0)
        self.scheduler.run_pending()
        self.assertIsInstance(machine.state, Failed)
        self.assertEqual(machine.progress, progress)

    def test_retry_until_success(self):
        provider = FlakyProvider(failures=2)
        machine = self._run(provider, provider_attempts=3)
        self.assertIsInstance(machine.state, Ready)
        self.assertEqual(provider.calls, 3)
        self.assertEqual(len([s for s in machine.history if s.is_terminal]), 1)

    def test_retries_exhausted(self):
        provider = FlakyProvider(failures=5)
        machine = self._run(provider, provider_attempts=2)
        self.assertEqual(machine.state, Failed("attempt 2 timed out"))
        self.assertEqual(provider.calls, 2)

    def test_single_attempt_by_default(self):
        provider = FlakyProvider(failures=1)
        machine = self._run(provider)
        self.assertIsInstance(machine.state, Failed)
        self.assertEqual(provider.calls, 1)


class TestListeners(unittest.TestCase):
    """Test suite for state subscriptions."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler()
        self.machine = ReadinessStateMachine(FixedProvider(), self.scheduler, make_config())

    def test_listener_sees_published_states(self):
        seen = []
        self.machine.subscribe(seen.append)
        self.machine.start()
        self.clock.advance(10)
        self.scheduler.run_pending()
        self.assertEqual([type(s) for s in seen], [Loading, Loading, Ready])

    def test_unsubscribe(self):
        seen = []
        unsubscribe = self.machine.subscribe(seen.append)
        self.machine.start()
        self.clock.advance(1.5)
        self.scheduler.run_pending()
        unsubscribe()
        unsubscribe()
        self.clock.advance(10)
        self.scheduler.run_pending()
        self.assertEqual(seen, [Loading(1)])


class TestManualScheduler(unittest.TestCase):
    """Test suite for the manually pumped scheduler."""

    def setUp(self):
        self.clock, self.scheduler = create_manual_scheduler(start=0.0)

    def test_deadline_order(self):
        fired = []
        self.scheduler.call_later(2, lambda: fired.append('b'))
        self.scheduler.call_later(1, lambda: fired.append('a'))
        self.scheduler.call_later(2, lambda: fired.append('c'))
        self.clock.advance(2)
        self.assertEqual(self.scheduler.run_pending(), 3)
        self.assertEqual(fired, ['a', 'b', 'c'])

    def test_negative_delay_is_due_now(self):
        fired = []
        self.scheduler.call_later(-3, lambda: fired.append(1))
        self.assertEqual(self.scheduler.run_pending(), 1)

    def test_cancelled_handles_skipped(self):
        fired = []
        first = self.scheduler.call_later(1, lambda: fired.append('first'))
        self.scheduler.call_later(3, lambda: fired.append('second'))
        first.cancel()
        self.assertEqual(self.scheduler.pending, 1)
        self.assertEqual(self.scheduler.next_deadline(), 3)
        self.clock.advance(5)
        self.assertEqual(self.scheduler.run_pending(), 1)
        self.assertEqual(fired, ['second'])

    def test_idle(self):
        self.assertIsNone(self.scheduler.next_deadline())
        self.assertEqual(self.scheduler.run_pending(), 0)


class TestAsyncioScheduler(unittest.TestCase):
    """Test suite for running a session on an asyncio loop."""

    def test_session_reaches_ready(self):
        provider = FixedProvider()
        config = make_config(stage_offsets_s=(0.01, 0.02, 0.03))

        async def session():
            loop = asyncio.get_running_loop()
            machine = ReadinessStateMachine(provider, AsyncioScheduler(loop), config)
            done = loop.create_future()
            machine.subscribe(lambda s: s.is_terminal and not done.done() and done.set_result(s))
            machine.start()
            try:
                await asyncio.wait_for(done, timeout=5)
            finally:
                machine.teardown()
            return machine

        machine = asyncio.run(session())
        self.assertEqual(
            machine.history,
            [Loading(0), Loading(1), Loading(2), Ready(provider.data)],
        )

    def test_teardown_cancels_loop_timers(self):
        provider = FixedProvider()
        config = make_config(stage_offsets_s=(0.01, 0.02, 0.03))

        async def session():
            machine = ReadinessStateMachine(provider, AsyncioScheduler(), config)
            machine.start()
            machine.teardown()
            await asyncio.sleep(0.1)
            return machine

        machine = asyncio.run(session())
        self.assertEqual(machine.history, [Loading(0)])
        self.assertEqual(provider.calls, 0)


if __name__ == '__main__':
    unittest.main()

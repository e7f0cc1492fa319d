"""Unit tests for the periodic refresh scheduler."""

import threading
import time
from unittest.mock import Mock, patch

import pytest

from ratekeeper.parser_service.scheduler import RatesScheduler


def _make_updater(config, result: bool = True) -> Mock:
    updater = Mock()
    updater.config = config
    updater.run_update = Mock(return_value=result)
    return updater


class TestInit:
    def test_interval_defaults_to_config(self, config):
        scheduler = RatesScheduler(_make_updater(config))
        assert scheduler.interval_ms == config.update_interval_ms

    def test_explicit_interval(self, config):
        assert RatesScheduler(_make_updater(config), interval_ms=250).interval_ms == 250

    def test_negative_interval_rejected(self, config):
        with pytest.raises(ValueError):
            RatesScheduler(_make_updater(config), interval_ms=-1)

    def test_non_integer_interval_rejected(self, config):
        with pytest.raises(TypeError):
            RatesScheduler(_make_updater(config), interval_ms=1.5)


class TestRun:
    def test_runs_requested_number_of_cycles(self, config):
        updater = _make_updater(config)
        scheduler = RatesScheduler(updater, interval_ms=0)

        scheduler.run(max_cycles=3)

        assert updater.run_update.call_count == 3
        assert scheduler.cycles == 3

    def test_failed_cycles_do_not_stop_the_loop(self, config):
        updater = _make_updater(config, result=False)
        scheduler = RatesScheduler(updater, interval_ms=0)

        scheduler.run(max_cycles=4)

        assert updater.run_update.call_count == 4

    def test_cycle_error_does_not_stop_the_loop(self, config):
        updater = _make_updater(config)
        updater.run_update.side_effect = [RuntimeError("reporter broke"), True, True]
        scheduler = RatesScheduler(updater, interval_ms=0)

        scheduler.run(max_cycles=3)

        assert updater.run_update.call_count == 3
        assert scheduler.cycles == 3

    def test_sleeps_configured_interval_between_cycles(self, config):
        scheduler = RatesScheduler(_make_updater(config), interval_ms=1500)

        with patch.object(scheduler._stop_event, "wait") as mock_wait:
            scheduler.run(max_cycles=3)

        # No pause after the final cycle.
        assert mock_wait.call_count == 2
        mock_wait.assert_called_with(1.5)

    def test_cycle_finishes_before_next_starts(self, config):
        in_flight = []
        overlaps = []

        def _update():
            if in_flight:
                overlaps.append(True)
            in_flight.append(1)
            time.sleep(0.01)
            in_flight.pop()
            return True

        updater = _make_updater(config)
        updater.run_update.side_effect = _update

        RatesScheduler(updater, interval_ms=0).run(max_cycles=3)

        assert overlaps == []


class TestBackground:
    def test_start_and_stop(self, config):
        started = threading.Event()
        updater = _make_updater(config)
        updater.run_update.side_effect = lambda: started.set() or True
        scheduler = RatesScheduler(updater, interval_ms=60_000)

        thread = scheduler.start_in_background()
        assert started.wait(timeout=5)
        assert scheduler.is_running
        assert thread.daemon

        scheduler.stop(timeout=5)

        assert not thread.is_alive()
        assert not scheduler.is_running
        assert scheduler.cycles == 1

    def test_double_start_rejected(self, config):
        scheduler = RatesScheduler(_make_updater(config), interval_ms=60_000)
        scheduler.start_in_background()
        try:
            with pytest.raises(RuntimeError):
                scheduler.start_in_background()
        finally:
            scheduler.stop(timeout=5)

    def test_stop_before_run_skips_cycles(self, config):
        updater = _make_updater(config)
        scheduler = RatesScheduler(updater, interval_ms=0)

        scheduler.stop()
        scheduler.run()

        updater.run_update.assert_not_called()

    def test_stop_timeout_keeps_running_loop_tracked(self, config):
        entered = threading.Event()
        release = threading.Event()
        updater = _make_updater(config)
        updater.run_update.side_effect = lambda: entered.set() or release.wait(5)
        scheduler = RatesScheduler(updater, interval_ms=0)

        thread = scheduler.start_in_background()
        assert entered.wait(timeout=5)
        try:
            scheduler.stop(timeout=0.01)

            assert thread.is_alive()
            assert scheduler.is_running
            with pytest.raises(RuntimeError):
                scheduler.start_in_background()
        finally:
            release.set()
            scheduler.stop(timeout=5)

        assert not scheduler.is_running
        assert updater.run_update.call_count == 1

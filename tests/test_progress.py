"""Tests for the display value and progress coordinator."""
import asyncio

import pytest

from benchrun.jobs.progress import (
    SOURCE_ENGINE,
    SOURCE_TIMER,
    SOURCE_WORKER,
    DisplayValue,
    ProgressCoordinator,
    estimate_percent,
    format_elapsed,
)


@pytest.mark.parametrize(
    "seconds,text",
    [(0, "00:00:00"), (9.9, "00:00:09"), (61, "00:01:01"), (3725, "01:02:05"), (-3, "00:00:00")],
)
def test_format_elapsed(seconds, text):
    assert format_elapsed(seconds) == text


def test_estimate_percent():
    assert estimate_percent(0, 10) == 0
    assert estimate_percent(5, 10) == 50
    assert estimate_percent(7, 30) == 23
    assert estimate_percent(45, 30) == 100
    assert estimate_percent(1, 0) == 100


def test_display_value_last_writer_wins():
    display = DisplayValue()
    seen = []
    display.add_listener(lambda value, source: seen.append((value, source)))
    display.write(40, SOURCE_WORKER)
    display.write(35, SOURCE_TIMER)
    assert display.value == 35
    assert display.source == SOURCE_TIMER
    display.write(150, SOURCE_ENGINE)
    assert display.value == 100
    assert seen == [(40, "worker"), (35, "timer"), (100, "engine")]


@pytest.mark.asyncio
async def test_tick_uses_elapsed_time(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=3600)
    ticks = []
    coord.begin(20, on_tick=ticks.append)
    fake_clock.advance(5)
    snap = coord.tick()
    coord.stop()

    assert snap.estimated_percent == 25
    assert snap.display_percent == 25
    assert snap.elapsed_text == "00:00:05"
    assert ticks == [snap]


@pytest.mark.asyncio
async def test_timer_and_worker_share_display(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=3600)
    coord.begin(10)
    coord.record_report(30)
    assert coord.display.source == SOURCE_WORKER
    fake_clock.advance(2)
    coord.tick()
    snap = coord.snapshot
    coord.stop()

    assert snap.reported_percent == 30
    assert snap.estimated_percent == 20
    assert snap.display_percent == 20


@pytest.mark.asyncio
async def test_estimate_capped_when_run_overshoots(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=3600)
    coord.begin(10)
    fake_clock.advance(14)
    snap = coord.tick()
    coord.stop()
    assert snap.estimated_percent == 100


@pytest.mark.asyncio
async def test_stop_freezes_elapsed_and_silences_ticks(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=3600)
    ticks = []
    coord.begin(10, on_tick=ticks.append)
    fake_clock.advance(3)
    coord.stop()
    fake_clock.advance(100)

    assert coord.tick() is None
    assert ticks == []
    assert coord.ticking is False
    assert coord.snapshot.elapsed_seconds == 3.0


@pytest.mark.asyncio
async def test_begin_resets_previous_run(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=3600)
    coord.begin(10)
    coord.record_report(70)
    fake_clock.advance(7)
    coord.tick()
    coord.begin(20)
    snap = coord.snapshot
    coord.stop()

    assert snap.reported_percent == 0
    assert snap.estimated_percent == 0
    assert snap.display_percent == 0
    assert snap.elapsed_seconds == 0.0


@pytest.mark.asyncio
async def test_ticker_fires_on_interval():
    coord = ProgressCoordinator(interval_seconds=0.01)
    ticks = []
    coord.begin(10, on_tick=ticks.append)
    for _ in range(100):
        if ticks:
            break
        await asyncio.sleep(0.01)
    coord.stop()
    assert ticks


@pytest.mark.asyncio
async def test_ticker_survives_listener_error(fake_clock):
    coord = ProgressCoordinator(clock=fake_clock, interval_seconds=0.01)
    calls = []

    def flaky(snapshot):
        calls.append(snapshot)
        if len(calls) == 1:
            raise RuntimeError("observer went away")

    coord.begin(10, on_tick=flaky)
    for _ in range(200):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.01)
    coord.stop()
    assert len(calls) >= 2

import itertools
from unittest import mock

from labkit.clock import CompensatedCounter, CycleCounter, mhz, mhz_full, overhead


def _sequence(values):
    return iter(values).__next__


def test_cycle_counter_measures_difference():
    counter = CycleCounter(clock=_sequence([0, 10, 250]))
    counter.start()
    assert counter.elapsed() == 240.0


def test_cycle_counter_is_monotonic_with_real_clock():
    counter = CycleCounter()
    counter.start()
    first = counter.elapsed()
    second = counter.elapsed()
    assert 0 <= first <= second


def test_compensated_counter_subtracts_ticks():
    counter = CycleCounter(clock=_sequence([0, 0, 1000]))
    comp = CompensatedCounter(counter=counter, ticks=_sequence([5, 7]), cycles_per_tick=100.0)
    comp.start()
    assert comp.elapsed() == 800.0


def test_compensated_counter_without_ticks_matches_raw():
    counter = CycleCounter(clock=_sequence([0, 0, 500]))
    comp = CompensatedCounter(counter=counter, ticks=_sequence([3, 3]), cycles_per_tick=42.0)
    comp.start()
    assert comp.elapsed() == 500.0


def test_calibration_records_cost_per_tick():
    clock = itertools.count(0, 4000).__next__
    ticks = itertools.count(1).__next__
    comp = CompensatedCounter(counter=CycleCounter(clock=clock), ticks=ticks, nevent=3)
    comp.start()
    assert comp.cycles_per_tick == 4000


def test_calibration_ignores_small_ratios():
    clock = itertools.count(0, 2000).__next__
    ticks = itertools.count(1).__next__
    comp = CompensatedCounter(counter=CycleCounter(clock=clock), ticks=ticks, nevent=3)
    comp.start()
    assert comp.cycles_per_tick == 0.0


def test_overhead_is_non_negative():
    assert overhead() >= 0.0


def test_mhz_full_reports_rate(capsys):
    rate = mhz_full(True, 0.01)
    out = capsys.readouterr().out
    assert rate > 0
    assert out.startswith("Processor clock rate ~= ")
    assert out.rstrip().endswith("MHz")


def test_mhz_quiet_uses_default_sleep():
    with mock.patch("labkit.clock.time.sleep") as sleep:
        rate = mhz(False)
    sleep.assert_called_once_with(2)
    assert rate >= 0
import numpy as np
import pytest

from qca_bistable.circuit import Clock


def test_waveform_values():
    clock = Clock(0, cycles=2, granularity=8, clock_low=1.0, clock_high=3.0, amplitude_factor=2.0)
    assert clock.trace.data.tolist() == pytest.approx([3, 2, 1, 2, 3, 2, 1, 2])


def test_phases_lag_by_a_quarter_period():
    clock = Clock(1, cycles=2, granularity=8, clock_low=1.0, clock_high=3.0, amplitude_factor=2.0)
    assert clock.trace.data.tolist() == pytest.approx([2, 3, 2, 1, 2, 3, 2, 1])


@pytest.mark.parametrize("number", range(4))
def test_values_stay_within_levels(number):
    clock = Clock(number, cycles=3, granularity=500, clock_low=3.8e-23, clock_high=9.8e-22,
                  amplitude_factor=2.0, clock_shift=1e-22)
    data = clock.trace.data
    assert np.all(data >= 3.8e-23)
    assert np.all(data <= 9.8e-22)


def test_tick_wraps_and_peek_does_not_advance():
    clock = Clock(0, cycles=1, granularity=4, clock_low=1.0, clock_high=3.0, amplitude_factor=1.0)
    values = [clock.tick() for _ in range(4)]
    assert clock.peek() == values[-1]
    assert clock.check() == values[-1]
    assert clock.tick() == values[0]


def test_iter_values_leaves_cursor():
    clock = Clock(0, cycles=1, granularity=4, clock_low=1.0, clock_high=3.0, amplitude_factor=1.0)
    clock.tick()
    assert len(list(clock.iter_values(6))) == 6
    assert clock.trace.index == 1


@pytest.mark.parametrize("kwargs", [
    dict(number=4, cycles=1, granularity=4),
    dict(number=-1, cycles=1, granularity=4),
    dict(number=0, cycles=0, granularity=4),
    dict(number=0, cycles=1, granularity=0),
])
def test_invalid_construction(kwargs):
    with pytest.raises(ValueError):
        Clock(clock_low=1.0, clock_high=3.0, amplitude_factor=2.0, **kwargs)

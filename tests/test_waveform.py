import pytest

from qca_bistable.circuit import Clock, Logic, OutputCell, encode_waveform


def test_even_split():
    assert encode_waveform([True, False], 4).tolist() == [1.0, 1.0, -0.1, -0.1]


def test_leftover_ticks_go_to_spread_values():
    assert encode_waveform([True, False, True], 10).tolist() == [1.0] * 4 + [-0.1] * 3 + [1.0] * 3
    assert encode_waveform([True, False, True, False], 6).tolist() == [1.0, 1.0, -0.1, 1.0, 1.0, -0.1]


@pytest.mark.parametrize("value_count, granularity", [(1, 1), (3, 3), (3, 7), (4, 15), (5, 12), (16, 12500)])
def test_length_matches_granularity(value_count, granularity):
    values = [i % 2 == 0 for i in range(value_count)]
    assert len(encode_waveform(values, granularity)) == granularity


def test_every_value_is_held():
    values = [True, False, False, True, False]
    waveform = encode_waveform(values, 13).tolist()
    levels = [1.0 if v else -0.1 for v in values]
    # Run-length collapse of the waveform gives back the values.
    runs = [level for i, level in enumerate(waveform) if i == 0 or level != waveform[i - 1]]
    collapsed = [level for i, level in enumerate(levels) if i == 0 or level != levels[i - 1]]
    assert runs == collapsed


def test_invalid_arguments():
    with pytest.raises(ValueError):
        encode_waveform([], 10)
    with pytest.raises(ValueError):
        encode_waveform([True, False, True], 2)


def test_encoded_levels_through_output_sampling():
    # Three cycles of three samples: 3 1 1 | 3 1 1 | 3 1 1
    clock = Clock(0, cycles=3, granularity=9, clock_low=1.0, clock_high=3.0, amplitude_factor=2.0)
    cell = OutputCell.from_center(0, 0, name="out")
    cell.set_trace_size(9)
    for level in encode_waveform([True, False, True], 9):
        cell.set_polarization(level)
        cell.plot_polarization()

    # The false level (-0.1) is inside the unsettled band; only a driven
    # circuit pushes it past -0.9.
    assert cell.get_values(clock) == [Logic.ONE, Logic.INVALID, Logic.ONE]

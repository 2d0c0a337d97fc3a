import numpy as np
import pytest

from qca_bistable.circuit import DataTrace


def test_add_and_read_back():
    trace = DataTrace("t", 3)
    for value in (0.5, -0.25, 1.0):
        trace.add_next(value)

    assert not trace.has_next()
    assert trace.filled.tolist() == [0.5, -0.25, 1.0]
    trace.reset_index()
    assert trace.get_next() == 0.5
    assert trace.get(2) == 1.0


def test_overflow_raises():
    trace = DataTrace("t", 1)
    trace.add_next(0.0)
    with pytest.raises(RuntimeError):
        trace.add_next(0.0)
    with pytest.raises(RuntimeError):
        trace.get_next()


def test_bounded_trace_rejects_out_of_range():
    trace = DataTrace("t", 2)
    with pytest.raises(ValueError):
        trace.add_next(1.5)
    with pytest.raises(ValueError):
        trace.fill([0.0, -2.0])


def test_unbounded_trace_accepts_any_value():
    trace = DataTrace("clock", 2, bounded=False)
    trace.fill([9.8e-22, 5.0])
    assert trace.get(1) == 5.0


@pytest.mark.parametrize("index", [-1, 3])
def test_invalid_index(index):
    trace = DataTrace("t", 3)
    with pytest.raises(IndexError):
        trace.get(index)
    with pytest.raises(IndexError):
        trace.set(index, 0.0)


def test_negative_size():
    with pytest.raises(ValueError):
        DataTrace("t", -1)
    with pytest.raises(ValueError):
        DataTrace("t").set_size(-5)


def test_set_size_clears():
    trace = DataTrace("t", 2)
    trace.add_next(0.3)
    trace.set_size(4)
    assert trace.size == 4
    assert trace.index == 0
    assert np.all(trace.data == 0.0)


def test_data_view_is_read_only():
    trace = DataTrace("t", 2)
    with pytest.raises(ValueError):
        trace.data[0] = 1.0


def test_write_table(tmp_path):
    trace = DataTrace("t", 3)
    trace.add_next(0.5)
    trace.add_next(-1.0)
    path = tmp_path / "t.csv"

    trace.write_table(path, filled_only=True)
    assert path.read_text().splitlines() == ["1,0.5", "2,-1.0"]

    trace.write_table(path)
    assert path.read_text().splitlines()[-1] == "3,0.0"

from __future__ import annotations

import pytest

from nicotine_lab.engine import ParameterSet, resting_state
from nicotine_lab.simulation import TracePoint, TraceBuffer


def _point(t: float, value: float = 0.5, puff: bool = False) -> TracePoint:
    return TracePoint(t=t, da=value, gaba=value, nic=0.1, desens_total=0.2, puff_occurred=puff)


def test_append_keeps_a_rolling_sixty_minute_window() -> None:
    buffer = TraceBuffer()
    for step in range(0, 201):
        buffer.append(_point(step * 0.5))

    latest = buffer.latest
    assert latest is not None and latest.t == 100.0
    assert all(point.t >= latest.t - 60.0 for point in buffer)
    assert buffer.points()[0].t == 40.0
    assert len(buffer) == 121


def test_extend_truncates_to_hard_cap_regardless_of_age() -> None:
    buffer = TraceBuffer()
    buffer.extend(_point(float(t)) for t in range(1, 1001))

    assert len(buffer) == 900
    assert buffer.points()[0].t == 101.0
    assert buffer.points()[-1].t == 1000.0


def test_points_must_arrive_in_time_order() -> None:
    buffer = TraceBuffer()
    buffer.append(_point(5.0))

    with pytest.raises(ValueError):
        buffer.append(_point(4.0))


def test_clear_empties_the_buffer() -> None:
    buffer = TraceBuffer()
    buffer.extend([_point(1.0), _point(2.0)])

    buffer.clear()

    assert len(buffer) == 0
    assert buffer.latest is None


def test_from_state_derives_combined_desensitization() -> None:
    state = resting_state(ParameterSet())

    point = TracePoint.from_state(3.0, state, True)

    assert point.t == 3.0
    assert point.da == state.da
    assert point.nic == state.nicotine
    assert point.desens_total == 0.0
    assert point.puff_occurred is True


def test_value_range_defaults_and_minimum_span() -> None:
    buffer = TraceBuffer()
    assert buffer.value_range() == (0.0, 1.0)

    buffer.extend([_point(1.0, 0.5), _point(2.0, 0.5)])
    low, high = buffer.value_range()

    assert low == pytest.approx(0.5 - 0.075 - 0.015)
    assert high == pytest.approx(0.5 + 0.075 + 0.015)


def test_value_range_is_clipped_to_unit_interval() -> None:
    buffer = TraceBuffer()
    buffer.extend([_point(1.0, 0.0), _point(2.0, 1.0)])

    assert buffer.value_range() == (0.0, 1.0)


def test_bands_sample_first_and_last_points() -> None:
    buffer = TraceBuffer()
    buffer.extend(_point(float(t)) for t in range(0, 121))

    bands = buffer.bands(60)

    assert len(bands) == 60
    assert bands[0].t == 0.0
    assert bands[-1].t == 120.0
    assert [band.index for band in bands] == list(range(60))
    assert TraceBuffer().bands() == []


def test_puff_times_and_arrays() -> None:
    buffer = TraceBuffer()
    buffer.extend([_point(1.0, puff=True), _point(2.0), _point(90.0, puff=True)])

    assert buffer.puff_times() == [90.0]
    assert buffer.puff_times(window_min=100.0) == [1.0, 90.0]

    arrays = buffer.as_arrays()
    assert arrays["t"].tolist() == [1.0, 2.0, 90.0]
    assert arrays["puff_occurred"].tolist() == [True, False, True]

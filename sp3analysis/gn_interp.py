"""Lagrange interpolation of SP3 positions and clocks to arbitrary epochs.

A degree N polynomial (N odd) is fitted through the (N+1)/2 samples either side of the query epoch. Queries closer
than (N+1)/2 sampling intervals to either end of a satellite's data give no result rather than a lopsided window,
so values are never extrapolated. Order 11 keeps the nominal mm precision of 15 minute SP3 orbits, order 17 gives
more margin at higher cost.
"""

import logging
from typing import Optional, Sequence

import numpy as _np
import pandas as _pd

from . import gn_const as _gn_const
from . import gn_datetime as _gn_datetime
from .gn_sp3_model import SP3, build_sp3_frame, sort_sp3_frame, SP3_VALUE_COLUMNS, SP3_FLAG_COLUMNS
from .sp3_errors import UnsupportedInterpolationOrder

logger = logging.getLogger(__name__)

# Clocks are far less smooth than orbits. Interpolating them further than this from a sample is discouraged.
CLOCK_INTERPOLATION_MAX_GAP_SEC = 30


def check_order(order: int) -> None:
    """:raises UnsupportedInterpolationOrder: if order is not a positive odd integer"""
    if order < 1 or order % 2 == 0:
        raise UnsupportedInterpolationOrder(order)


def lagrange_interpolate(x_samples: _np.ndarray, y_samples: _np.ndarray, x: float) -> _np.ndarray:
    """Evaluates the Lagrange polynomial through (x_samples, y_samples) at x.

    :param _np.ndarray x_samples: distinct sample abscissae, shape (n,)
    :param _np.ndarray y_samples: sample values, shape (n,) or (n, k) to interpolate k series at once
    :param float x: evaluation point
    :return _np.ndarray: interpolated value(s), shape () or (k,). Exactly the sample value when x is a sample point.
    """
    n = len(x_samples)
    numerators = _np.tile(x - x_samples, (n, 1))
    denominators = x_samples[:, None] - x_samples[None, :]
    _np.fill_diagonal(numerators, 1.0)
    _np.fill_diagonal(denominators, 1.0)
    basis = _np.prod(numerators / denominators, axis=1)
    return basis @ y_samples


def select_window(times: _np.ndarray, epoch: int, order: int, interval: int) -> Optional[slice]:
    """Picks the samples for an interpolation kernel: (order + 1) / 2 samples before the query epoch and as many
    from the query epoch on.

    :param _np.ndarray times: sorted int64 nanosecond sample epochs of one satellite
    :param int epoch: query epoch, nanoseconds
    :param int order: odd interpolation order
    :param int interval: nominal sampling interval, nanoseconds
    :return Optional[slice]: window into times, or None if the query is outside the feasible range
        [t0 + (order+1)/2 * interval, t_last - (order+1)/2 * interval] or not enough samples surround it
    """
    half = (order + 1) // 2
    if len(times) < order + 1:
        return None
    if epoch < times[0] + half * interval or epoch > times[-1] - half * interval:
        return None
    if interval > 0 and _np.all(_np.diff(times) == interval):
        # Uniform sampling: the first sample at or after the query follows from the interval
        first_after = int(-(-(epoch - int(times[0])) // interval))
    else:
        first_after = int(_np.searchsorted(times, epoch, side="left"))
    start = first_after - half
    stop = start + order + 1
    if start < 0 or stop > len(times):
        return None
    return slice(start, stop)


def sampling_interval_ns(sp3: SP3) -> int:
    """Header sampling interval in nanoseconds, or the median epoch spacing where the header leaves it at zero"""
    interval = int(sp3.header.sampling_interval.value)
    if interval > 0:
        return interval
    diffs = _np.diff(_gn_datetime.datetime2ns(sp3.epochs()))
    if len(diffs) == 0:
        return 0
    logger.warning("Header sampling interval is zero, using the median epoch spacing instead")
    return int(_np.median(diffs))


def _interpolate(sp3: SP3, sv: str, epoch, order: int, columns: Sequence[str], skip_maneuvers: bool):
    check_order(order)
    times, values = sp3.sv_series(sv, columns, skip_maneuvers=skip_maneuvers)
    query = _gn_datetime.datetime2ns(epoch)
    window = select_window(times, query, order, sampling_interval_ns(sp3))
    if window is None:
        logger.debug(f"{sv} at {epoch} is outside the range order {order} interpolation can cover")
        return None, times
    offsets = (times[window] - query) / _gn_const.NS_IN_SEC
    return lagrange_interpolate(offsets, values[window], 0.0), times


def interpolate_position(
    sp3: SP3, sv: str, epoch, order: int = 11, skip_maneuvers: bool = True
) -> Optional[_np.ndarray]:
    """Lagrange interpolated position of a satellite

    :param SP3 sp3: source data
    :param str sv: satellite ID, E.g. 'G01'
    :param epoch: query epoch (anything pandas.Timestamp accepts), in the file's timescale
    :param int order: odd polynomial order, defaults to 11
    :param bool skip_maneuvers: leave samples flagged as manoeuvring out of the kernel, defaults to True
    :return Optional[_np.ndarray]: [x, y, z] in km, or None if the epoch is outside the interpolable range
    :raises UnsupportedInterpolationOrder: for an even (or non-positive) order
    """
    position, _ = _interpolate(sp3, sv, epoch, order, ["X", "Y", "Z"], skip_maneuvers)
    return position


def interpolate_position_9(sp3: SP3, sv: str, epoch) -> Optional[_np.ndarray]:
    return interpolate_position(sp3, sv, epoch, order=9)


def interpolate_position_11(sp3: SP3, sv: str, epoch) -> Optional[_np.ndarray]:
    return interpolate_position(sp3, sv, epoch, order=11)


def interpolate_position_17(sp3: SP3, sv: str, epoch) -> Optional[_np.ndarray]:
    return interpolate_position(sp3, sv, epoch, order=17)


def interpolate_clock(sp3: SP3, sv: str, epoch, order: int = 11, skip_maneuvers: bool = True) -> Optional[float]:
    """Lagrange interpolated clock offset of a satellite, in microseconds as recorded in SP3.

    Only use this close to recorded samples (within CLOCK_INTERPOLATION_MAX_GAP_SEC). A warning is logged otherwise.

    :param SP3 sp3: source data
    :param str sv: satellite ID
    :param epoch: query epoch
    :param int order: odd polynomial order, defaults to 11
    :param bool skip_maneuvers: leave samples flagged as manoeuvring out of the kernel, defaults to True
    :return Optional[float]: clock offset in microseconds, or None if outside the interpolable range
    :raises UnsupportedInterpolationOrder: for an even (or non-positive) order
    """
    clock, times = _interpolate(sp3, sv, epoch, order, ["CLK"], skip_maneuvers)
    if clock is None:
        return None
    gap = _np.min(_np.abs(times - _gn_datetime.datetime2ns(epoch))) / _gn_const.NS_IN_SEC
    if gap > CLOCK_INTERPOLATION_MAX_GAP_SEC:
        logger.warning(
            f"Interpolating {sv} clock {gap:.0f}s from the nearest sample. Clock interpolation is only reliable "
            f"within {CLOCK_INTERPOLATION_MAX_GAP_SEC}s"
        )
    return float(clock[0])


def interpolate_sp3(
    sp3: SP3, epochs: Sequence, order: int = 11, skip_maneuvers: bool = True, clocks: bool = True
) -> SP3:
    """Interpolates every satellite of an SP3 object to new epochs, E.g. to resample 15 minute orbits at 30s.

    Epoch / satellite combinations outside the interpolable range are left out, so nothing is extrapolated. The
    result has no standard deviations and no flags. Its header sampling interval is the spacing of the new epochs
    when that is uniform.

    :param SP3 sp3: source data
    :param Sequence epochs: query epochs, strictly increasing
    :param int order: odd polynomial order, defaults to 11
    :param bool skip_maneuvers: leave manoeuvring samples out of the kernels, defaults to True
    :param bool clocks: interpolate clocks as well as positions
    :return SP3: new SP3 object holding the interpolated records
    :raises UnsupportedInterpolationOrder: for an even (or non-positive) order
    """
    check_order(order)
    query_times = _pd.DatetimeIndex([_gn_datetime.to_timestamp(epoch) for epoch in epochs])
    query_ns = _gn_datetime.datetime2ns(query_times)
    interval = sampling_interval_ns(sp3)

    rows_epochs, rows_svs, rows_values = [], [], []
    for sv in sp3.satellites():
        pos_times, positions = sp3.sv_series(sv, ["X", "Y", "Z"], skip_maneuvers=skip_maneuvers)
        clk_times, clk_values = sp3.sv_series(sv, ["CLK"], skip_maneuvers=skip_maneuvers)
        for epoch, query in zip(query_times, query_ns):
            window = select_window(pos_times, query, order, interval)
            if window is None:
                continue
            values = _np.full(len(SP3_VALUE_COLUMNS), _np.nan)
            values[:3] = lagrange_interpolate(
                (pos_times[window] - query) / _gn_const.NS_IN_SEC, positions[window], 0.0
            )
            clk_window = select_window(clk_times, query, order, interval) if clocks else None
            if clk_window is not None:
                values[3] = lagrange_interpolate(
                    (clk_times[clk_window] - query) / _gn_const.NS_IN_SEC, clk_values[clk_window], 0.0
                )[0]
            rows_epochs.append(epoch)
            rows_svs.append(sv)
            rows_values.append(values)

    index = _pd.MultiIndex.from_arrays(
        [_pd.DatetimeIndex(rows_epochs, dtype="datetime64[ns]"), _pd.Index(rows_svs, dtype=object)],
        names=["EPOCH", "PRN"],
    )
    data = build_sp3_frame(
        index,
        _np.asarray(rows_values, dtype=float).reshape(len(rows_svs), len(SP3_VALUE_COLUMNS)),
        _np.zeros((len(rows_svs), len(SP3_FLAG_COLUMNS)), dtype=bool),
    )
    # Records are gathered per satellite, reorder to epoch-major
    data = sort_sp3_frame(data, sp3.header.satellites)

    header = sp3.header.copy(data_type="P")
    spacing = _np.unique(_np.diff(query_ns))
    if len(spacing) == 1:
        header = header.copy(sampling_interval=_pd.Timedelta(int(spacing[0]), unit="ns"))
    header = header.copy(comments=header.comments + (f"/* Lagrange interpolated, order {order}",))
    return sp3.derive(data, header)

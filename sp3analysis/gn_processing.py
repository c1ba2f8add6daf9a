"""Operations over whole SP3 models: differencing, splitting, repairs, velocity derivation and epoch shifts.

Every function returns a new model (or DataFrame) and leaves its inputs unchanged.
"""

import logging
from typing import Tuple

import numpy as _np
import pandas as _pd
from scipy import interpolate as _interpolate

from . import gn_const as _gn_const
from . import gn_datetime as _gn_datetime
from .gn_merge import check_compatibility
from .gn_sp3_model import SP3, SP3_POSITION_COLUMNS, SP3_VELOCITY_COLUMNS

logger = logging.getLogger(__name__)

# Fewest samples a cubic spline is fitted through
_MIN_SPLINE_SAMPLES = 4
# km/s -> dm/s, and microseconds/s -> 1e-4 microseconds/s
_VELOCITY_SCALE = 1e4
_CLOCK_RATE_SCALE = 1e4


def shift_epochs(sp3: SP3, offsets) -> SP3:
    """Adds a per epoch offset to the time axis of an SP3 model

    :param SP3 sp3: model to shift
    :param offsets: int64 nanoseconds, one per epoch of sp3.epochs() (or a single value applied to all)
    :return SP3: shifted model, header epoch fields re-derived from the new first epoch
    :raises ValueError: if the number of offsets doesn't match the epochs, or the shifted epochs aren't strictly
        increasing
    """
    data = sp3.data
    epochs = _gn_datetime.datetime2ns(sp3.epochs())
    offsets = _np.broadcast_to(_np.asarray(offsets, dtype="int64"), epochs.shape)
    new_epochs = epochs + offsets
    if _np.any(_np.diff(new_epochs) <= 0):
        raise ValueError("Shifted epochs are not strictly increasing")

    row_epochs = _gn_datetime.datetime2ns(data.index.get_level_values("EPOCH"))
    row_new_epochs = new_epochs[_np.searchsorted(epochs, row_epochs)]
    data.index = _pd.MultiIndex.from_arrays(
        [_pd.to_datetime(row_new_epochs, unit="ns"), data.index.get_level_values("PRN")], names=["EPOCH", "PRN"]
    )
    return sp3.derive(data)


def timeshift_epochs(sp3: SP3, offset) -> SP3:
    """Shifts all epochs of an SP3 model by a fixed duration

    :param SP3 sp3: model to shift
    :param offset: anything pandas.Timedelta accepts, E.g. datetime.timedelta(seconds=18)
    :return SP3: shifted model
    """
    offset_ns = _pd.Timedelta(offset).value
    logger.debug(f"Shifting epochs by {offset_ns / _gn_const.NS_IN_SEC}s")
    return shift_epochs(sp3, offset_ns)


def substract(a: SP3, b: SP3) -> _pd.DataFrame:
    """Residuals a - b of positions, clocks, velocities and clock rates, at the epochs and satellites common to both.

    :param SP3 a: model to difference
    :param SP3 b: model to difference against
    :return _pd.DataFrame: (EPOCH, PRN) indexed residuals, columns X, Y, Z, CLK, VX, VY, VZ, VCLOCK in file units.
        Values absent from either input are NaN.
    :raises SP3MergeError: if the headers are incompatible, see gn_merge.check_compatibility()
    """
    check_compatibility(a.header, b.header)
    left, right = a.data, b.data
    common = left.index.intersection(right.index)
    if len(common) == 0:
        logger.warning("No common epochs and satellites to difference")
    columns = SP3_POSITION_COLUMNS + SP3_VELOCITY_COLUMNS
    diff = left.loc[common, columns] - right.loc[common, columns]
    diff.columns = diff.columns.droplevel(0)
    return diff.sort_index()


def split(sp3: SP3, epoch) -> Tuple[SP3, SP3]:
    """Splits an SP3 model in two at an epoch: [first, epoch) and [epoch, last]

    :param SP3 sp3: model to split
    :param epoch: split epoch, must satisfy first < epoch <= last so neither part is empty
    :return Tuple[SP3, SP3]: the part before the epoch and the part from it on, each with a recomputed header
    :raises ValueError: if the epoch is outside (first, last]
    """
    epoch = _gn_datetime.to_timestamp(epoch)
    if sp3.total_epochs == 0 or not (sp3.first_epoch < epoch <= sp3.last_epoch):
        raise ValueError(f"Split epoch {epoch} must be after {sp3.first_epoch} and no later than {sp3.last_epoch}")
    data = sp3.data
    before = data.index.get_level_values("EPOCH") < epoch
    return sp3.derive(data[before]), sp3.derive(data[~before])


def zero_repair(sp3: SP3) -> SP3:
    """Replaces exact zero clocks, positions and velocities, which are nodata markers rather than physical values,
    with NaN. Useful for data assembled outside the parser, which already reads them as absent.
    """
    data = sp3.data
    clock = data[("EST", "CLK")] == 0
    data.loc[clock, ("EST", "CLK")] = _np.nan
    for columns in (SP3_POSITION_COLUMNS[:3], SP3_VELOCITY_COLUMNS[:3]):
        zero = (data[columns] == 0).all(axis=1)
        data.loc[zero, columns] = _np.nan
    repaired = int(clock.sum())
    if repaired:
        logger.info(f"Replaced {repaired} zero clock values with NaN")
    return sp3.derive(data, recompute=False)


def _spline_derivative(times: _np.ndarray, values: _np.ndarray) -> _np.ndarray:
    seconds = (times - times[0]) / _gn_const.NS_IN_SEC
    spline = _interpolate.CubicSpline(seconds, values)
    return spline.derivative(1)(seconds)


def resolve_velocities(sp3: SP3) -> SP3:
    """Fills in absent velocities and clock rates from the derivative of a cubic spline through the positions and
    clocks, E.g. for files without V records. Recorded velocities are kept. The data type becomes 'V'.

    Satellites with fewer than 4 positions (or clocks) are left without velocities (or clock rates).

    :param SP3 sp3: model to derive velocities for
    :return SP3: model with velocities
    """
    data = sp3.data
    for sv in sp3.satellites():
        for source, target, scale in (
            (["X", "Y", "Z"], SP3_VELOCITY_COLUMNS[:3], _VELOCITY_SCALE),
            (["CLK"], SP3_VELOCITY_COLUMNS[3:], _CLOCK_RATE_SCALE),
        ):
            times, values = sp3.sv_series(sv, source)
            if len(times) < _MIN_SPLINE_SAMPLES:
                logger.debug(f"Too few samples to derive {' '.join(source)} rates of {sv}")
                continue
            rows = _pd.MultiIndex.from_arrays(
                [_pd.to_datetime(times, unit="ns"), [sv] * len(times)], names=["EPOCH", "PRN"]
            )
            existing = data.loc[rows, target].to_numpy(dtype=float)
            derived = _spline_derivative(times, values) * scale
            data.loc[rows, target] = _np.where(_np.isnan(existing), derived, existing)
    return sp3.derive(data, sp3.header.copy(data_type="V"), recompute=False)

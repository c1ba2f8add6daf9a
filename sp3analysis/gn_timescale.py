"""Rewriting the time axis of SP3 data from one GNSS timescale into another.

Two correction strategies are provided:
 - CoarseCorrection (default): the nominal constant offsets between system times, plus the built in leap second
   table for UTC and GLONASS time. Whole seconds only.
 - CorrectionTable: externally supplied, time varying bias samples for one source -> target pair, linearly
   interpolated at each epoch.

Coarse transposition through UTC or GLONASS time is not exactly reversible across a leap second: the leap second
count is looked up at the epoch being converted, so an epoch within a second of a leap can land one second off
after an A -> B -> A round trip. The epoch count and satellite set are always preserved.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as _np
import pandas as _pd

from . import gn_const as _gn_const
from . import gn_datetime as _gn_datetime
from .gn_processing import shift_epochs
from .gn_sp3_model import SP3
from .sp3_errors import CorrectionTableCoverage

logger = logging.getLogger(__name__)

TIMESCALES = ("GPS", "GLO", "GAL", "TAI", "UTC", "BDT", "QZS", "IRN")


def _check_timescale(timescale: str) -> str:
    timescale = timescale.strip().upper()
    if timescale not in TIMESCALES:
        raise ValueError(f"Unknown timescale '{timescale}'. Options are: {', '.join(TIMESCALES)}")
    return timescale


def leap_seconds(epochs: _np.ndarray) -> _np.ndarray:
    """TAI - UTC in whole seconds at each epoch (int64 ns since the unix epoch). Zero before 1980."""
    leap_dates = _gn_const.TAI_UTC_LEAP_DATES.astype("int64")
    idx = _np.searchsorted(leap_dates, epochs, side="right") - 1
    return _np.where(idx >= 0, _gn_const.TAI_UTC_LEAP_SECONDS[_np.clip(idx, 0, None)], 0)


def tai_offset_seconds(timescale: str, epochs: _np.ndarray) -> _np.ndarray:
    """Offset of a timescale from TAI (timescale minus TAI) in whole seconds, at each epoch

    :param str timescale: one of TIMESCALES
    :param _np.ndarray epochs: int64 nanosecond epochs, used for the leap second lookup
    :return _np.ndarray: int64 offsets in seconds, one per epoch
    """
    timescale = _check_timescale(timescale)
    epochs = _np.asarray(epochs, dtype="int64")
    if timescale in _gn_const.TIMESCALE_TAI_OFFSET_SEC:
        return _np.full(len(epochs), _gn_const.TIMESCALE_TAI_OFFSET_SEC[timescale], dtype="int64")
    utc = -leap_seconds(epochs).astype("int64")
    if timescale == "GLO":
        return utc + _gn_const.GLONASS_UTC_OFFSET_SEC
    return utc


class CoarseCorrection:
    """Nominal whole second offsets between timescales, with leap seconds for UTC and GLONASS time"""

    def offsets(self, epochs: _np.ndarray, source: str, target: str) -> _np.ndarray:
        """Nanoseconds to add to each source timescale epoch to express it in the target timescale

        :param _np.ndarray epochs: int64 nanosecond epochs, in the source timescale
        :param str source: source timescale
        :param str target: target timescale
        :return _np.ndarray: int64 nanosecond offsets
        """
        epochs = _np.asarray(epochs, dtype="int64")
        # Leap seconds are looked up at the source epoch, the source of the (bounded) round trip drift
        seconds = tai_offset_seconds(target, epochs) - tai_offset_seconds(source, epochs)
        return seconds * _gn_const.NS_IN_SEC


class CorrectionTable:
    """Time varying correction between two timescales, from externally supplied bias samples.

    :param str source: timescale the table converts from
    :param str target: timescale the table converts to
    :param epochs: sample epochs (source timescale), strictly increasing
    :param bias_seconds: target minus source, in seconds, at each sample epoch
    :raises ValueError: on mismatched lengths, an empty table, or epochs not strictly increasing
    """

    def __init__(self, source: str, target: str, epochs, bias_seconds):
        self.source = _check_timescale(source)
        self.target = _check_timescale(target)
        self.epochs = _gn_datetime.datetime2ns(_pd.DatetimeIndex(epochs))
        self.bias_seconds = _np.asarray(bias_seconds, dtype=float)
        if len(self.epochs) != len(self.bias_seconds):
            raise ValueError("Correction table epochs and biases differ in length")
        if len(self.epochs) == 0:
            raise ValueError("Correction table is empty")
        if _np.any(_np.diff(self.epochs) <= 0):
            raise ValueError("Correction table epochs must be strictly increasing")

    def __repr__(self) -> str:
        return f"CorrectionTable({self.source}->{self.target}, {len(self.epochs)} samples)"

    @classmethod
    def from_series(cls, series: _pd.Series, source: str, target: str) -> "CorrectionTable":
        """Table from a Series of bias seconds indexed by epoch"""
        series = series.sort_index()
        return cls(source, target, series.index, series.to_numpy())

    @classmethod
    def from_csv(cls, path: Union[str, Path], source: str, target: str) -> "CorrectionTable":
        """Table from a CSV file with 'epoch' and 'bias_seconds' columns"""
        table = _pd.read_csv(path, parse_dates=["epoch"])
        logger.debug(f"Read {len(table)} correction samples from {path}")
        return cls.from_series(table.set_index("epoch")["bias_seconds"], source, target)

    def offsets(self, epochs: _np.ndarray, source: str, target: str) -> _np.ndarray:
        """Interpolated corrections in nanoseconds for each epoch. The table can also be applied in reverse
        (target -> source), in which case the biases are negated.

        :raises ValueError: if the table doesn't convert between source and target
        :raises CorrectionTableCoverage: if the table doesn't span all the epochs
        """
        source, target = _check_timescale(source), _check_timescale(target)
        if (source, target) == (self.source, self.target):
            sign = 1.0
        elif (source, target) == (self.target, self.source):
            sign = -1.0
        else:
            raise ValueError(f"{self} can't convert {source} to {target}")
        epochs = _np.asarray(epochs, dtype="int64")
        if len(epochs) == 0:
            return epochs.copy()
        if epochs.min() < self.epochs[0] or epochs.max() > self.epochs[-1]:
            raise CorrectionTableCoverage(
                _pd.Timestamp(epochs.min()),
                _pd.Timestamp(epochs.max()),
                _pd.Timestamp(self.epochs[0]),
                _pd.Timestamp(self.epochs[-1]),
            )
        # Interpolate relative to the first sample to keep float precision
        base = self.epochs[0]
        bias = _np.interp((epochs - base).astype(float), (self.epochs - base).astype(float), self.bias_seconds)
        return _np.rint(sign * bias * _gn_const.NS_IN_SEC).astype("int64")


def transpose(sp3: SP3, target: str, correction=None) -> SP3:
    """Rewrites every epoch of an SP3 model into another timescale.

    The header timescale is updated and its first epoch, GPS week / seconds and MJD are re-derived from the new
    first epoch. Nothing else changes.

    :param SP3 sp3: model to transpose
    :param str target: target timescale, one of TIMESCALES
    :param correction: correction strategy with an offsets(epochs, source, target) method, defaults to
        CoarseCorrection()
    :return SP3: new model in the target timescale
    :raises CorrectionTableCoverage: if a correction table doesn't span every epoch
    :raises ValueError: for an unknown timescale, or if the corrections would reorder epochs
    """
    source = _check_timescale(sp3.header.timescale)
    target = _check_timescale(target)
    if correction is None:
        correction = CoarseCorrection()
    if source == target:
        logger.info(f"Already in {target}, nothing to transpose")
        return sp3.derive(sp3.data, recompute=False)

    epochs = _gn_datetime.datetime2ns(sp3.epochs())
    offsets = correction.offsets(epochs, source, target)
    logger.info(f"Transposing {len(epochs)} epochs from {source} to {target}")
    shifted = shift_epochs(sp3, offsets)
    return shifted.derive(shifted.data, shifted.header.copy(timescale=target))

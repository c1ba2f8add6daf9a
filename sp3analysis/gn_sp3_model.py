"""In-memory model of an SP3 file: the header, and a time-series store of satellite records.

The store is a pandas DataFrame indexed by (EPOCH, PRN), with two-level columns:
 - EST: X, Y, Z (km), CLK (microseconds), VX, VY, VZ (dm/s), VCLOCK (1e-4 microseconds/s), as written in the file
 - STD: standard deviations of the above, decoded from the exponents in the file (mm, ps, 1e-4 mm/s, 1e-4 ps/s)
 - FLAGS: Clock_Event, Clock_Pred, Maneuver, Orbit_Pred (bool)
Absent values are NaN, never zero.
"""

import dataclasses
import logging
from collections import namedtuple
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as _np
import pandas as _pd

from . import gn_const as _gn_const
from . import gn_datetime as _gn_datetime
from .sp3_revisions import SP3Revision

logger = logging.getLogger(__name__)

SP3_POSITION_COLUMNS = [("EST", "X"), ("EST", "Y"), ("EST", "Z"), ("EST", "CLK")]
SP3_VELOCITY_COLUMNS = [("EST", "VX"), ("EST", "VY"), ("EST", "VZ"), ("EST", "VCLOCK")]
SP3_POSITION_STD_COLUMNS = [("STD", "X"), ("STD", "Y"), ("STD", "Z"), ("STD", "CLK")]
SP3_VELOCITY_STD_COLUMNS = [("STD", "VX"), ("STD", "VY"), ("STD", "VZ"), ("STD", "VCLOCK")]
SP3_FLAG_COLUMNS = [("FLAGS", "Clock_Event"), ("FLAGS", "Clock_Pred"), ("FLAGS", "Maneuver"), ("FLAGS", "Orbit_Pred")]
SP3_VALUE_COLUMNS = SP3_POSITION_COLUMNS + SP3_VELOCITY_COLUMNS + SP3_POSITION_STD_COLUMNS + SP3_VELOCITY_STD_COLUMNS
SP3_COLUMNS = SP3_VALUE_COLUMNS + SP3_FLAG_COLUMNS

SP3Flags = namedtuple("SP3Flags", ["clock_event", "clock_pred", "maneuver", "orbit_pred"])


@dataclasses.dataclass(frozen=True)
class SP3Header:
    """Parsed SP3 header. Instances are immutable, use dataclasses.replace() (or copy()) to derive new ones."""

    revision: type[SP3Revision]
    data_type: str  # 'P' (positions) or 'V' (positions and velocities)
    first_epoch: _pd.Timestamp
    num_epochs: int
    data_used: str
    coord_system: str
    orbit_type: str
    agency: str
    gps_week: int
    seconds_of_week: float
    sampling_interval: _pd.Timedelta
    mjd: int
    mjd_fraction: float
    file_type: str
    timescale: str
    # Ordered mapping of satellite ID to accuracy exponent (accuracy is 2**exponent mm, 0 meaning unknown)
    sv_accuracy: dict = dataclasses.field(default_factory=dict)
    pos_vel_base: float = _gn_const.SP3_POS_STD_BASE
    clk_rate_base: float = _gn_const.SP3_CLK_STD_BASE
    # Verbatim '/*' comment lines
    comments: tuple = ()

    @property
    def satellites(self) -> List[str]:
        return list(self.sv_accuracy.keys())

    @property
    def constellation(self) -> str:
        """Constellation letter shared by every declared satellite, or 'M' (mixed)"""
        letters = {sv[0] for sv in self.sv_accuracy}
        if len(letters) == 1:
            return letters.pop()
        return _gn_const.MIXED_CONSTELLATION

    def copy(self, **changes) -> "SP3Header":
        return dataclasses.replace(self, **changes)

    def rebased(self, first_epoch: _pd.Timestamp) -> "SP3Header":
        """Copy of the header starting at a new first epoch, with GPS week / seconds and MJD re-derived from it"""
        first_epoch = _gn_datetime.to_timestamp(first_epoch)
        gps_week, seconds_of_week = _gn_datetime.datetime2gpsweeksec(first_epoch)
        mjd, mjd_fraction = _gn_datetime.datetime2mjd(first_epoch)
        return self.copy(
            first_epoch=first_epoch,
            gps_week=gps_week,
            seconds_of_week=seconds_of_week,
            mjd=mjd,
            mjd_fraction=mjd_fraction,
        )


def build_sp3_frame(index: _pd.MultiIndex, values: _np.ndarray, flags: _np.ndarray) -> _pd.DataFrame:
    """Assembles the store DataFrame from an (EPOCH, PRN) index, a float array of the SP3_VALUE_COLUMNS and a bool
    array of the SP3_FLAG_COLUMNS"""
    columns = {}
    for i, column in enumerate(SP3_VALUE_COLUMNS):
        columns[column] = values[:, i].astype(float)
    for i, column in enumerate(SP3_FLAG_COLUMNS):
        columns[column] = flags[:, i].astype(bool)
    frame = _pd.DataFrame(columns, index=index)
    frame.columns = _pd.MultiIndex.from_tuples(SP3_COLUMNS)
    return frame


def sort_sp3_frame(frame: _pd.DataFrame, sv_order: Sequence[str]) -> _pd.DataFrame:
    """Orders records by epoch, then by position of the satellite in sv_order (unlisted satellites last, by name)"""
    rank = {sv: i for i, sv in enumerate(sv_order)}
    svs = frame.index.get_level_values("PRN")
    sv_rank = _np.asarray([rank.get(sv, len(rank)) for sv in svs])
    epochs = _gn_datetime.datetime2ns(frame.index.get_level_values("EPOCH"))
    order = _np.lexsort((_np.asarray(svs, dtype=str), sv_rank, epochs))
    return frame.iloc[order]


class RecordView:
    """Read-only, re-iterable view over records of an SP3 store. Each iteration starts again from the first epoch."""

    def __init__(self, factory: Callable[[], Iterator[tuple]]):
        self._factory = factory

    def __iter__(self) -> Iterator[tuple]:
        return self._factory()

    def __len__(self) -> int:
        return sum(1 for _ in self._factory())

    def to_list(self) -> list:
        return list(self._factory())


class SP3:
    """An SP3 file in memory: header, time-series store of records, and optional production attributes.

    Operations elsewhere in the package (interpolation, merging, transposition, processing) treat an SP3 as
    immutable and return new instances.

    :param SP3Header header: parsed or derived header
    :param _pd.DataFrame data: store DataFrame, see module docstring for its layout
    :param production: ProductionAttributes derived from the file name, if any
    :param Sequence[str] parse_warnings: anomalies found while parsing
    """

    def __init__(
        self,
        header: SP3Header,
        data: _pd.DataFrame,
        production=None,
        parse_warnings: Sequence[str] = (),
    ):
        self._header = header
        self._data = data
        self.production = production
        self.parse_warnings = tuple(parse_warnings)

    def __repr__(self) -> str:
        return (
            f"SP3(revision={self._header.revision.letter}, agency={self._header.agency.strip()}, "
            f"timescale={self._header.timescale}, epochs={self.total_epochs}, satellites={len(self.satellites())})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, SP3):
            return NotImplemented
        return self._header == other._header and self._data.equals(other._data)

    __hash__ = None

    @property
    def header(self) -> SP3Header:
        return self._header

    @property
    def data(self) -> _pd.DataFrame:
        """A copy of the store DataFrame. Changes to it don't affect this SP3 object."""
        return self._data.copy()

    def derive(self, data: _pd.DataFrame, header: Optional[SP3Header] = None, recompute: bool = True) -> "SP3":
        """New SP3 object from replacement data (and optionally header). By default the header's first epoch, epoch
        count, GPS week / seconds and MJD are recomputed from the data rather than carried over."""
        header = header if header is not None else self._header
        if recompute:
            header = recompute_header(header, data)
        return SP3(header, data, production=None)

    # Epoch axis

    def epochs(self) -> _pd.DatetimeIndex:
        return self._data.index.get_level_values("EPOCH").unique()

    @property
    def first_epoch(self) -> Optional[_pd.Timestamp]:
        epochs = self.epochs()
        return epochs[0] if len(epochs) else None

    @property
    def last_epoch(self) -> Optional[_pd.Timestamp]:
        epochs = self.epochs()
        return epochs[-1] if len(epochs) else None

    @property
    def total_epochs(self) -> int:
        return len(self.epochs())

    def satellites(self) -> List[str]:
        """Satellites with at least one record, in order of first appearance"""
        return list(self._data.index.get_level_values("PRN").unique())

    def constellations(self) -> List[str]:
        return sorted({sv[0] for sv in self.satellites()})

    # Lookup

    def entry(self, epoch, sv: str) -> Optional[_pd.Series]:
        """Full record of a satellite at an epoch (exact match only), or None when there is none"""
        try:
            return self._data.loc[(_gn_datetime.to_timestamp(epoch), sv)].copy()
        except KeyError:
            return None

    def sv_series(
        self, sv: str, columns: Sequence[str], skip_maneuvers: bool = False
    ) -> Tuple[_np.ndarray, _np.ndarray]:
        """Epochs (int64 ns) and values of EST columns for one satellite, dropping records where any is absent.

        :param str sv: satellite ID, E.g. 'G01'
        :param Sequence[str] columns: EST column names, E.g. ['X', 'Y', 'Z']
        :param bool skip_maneuvers: also drop records flagged as manoeuvring
        :return Tuple[_np.ndarray, _np.ndarray]: int64 nanosecond epochs of shape (n,), and values of shape
            (n, len(columns))
        """
        if sv not in self._data.index.get_level_values("PRN"):
            return _np.empty(0, dtype="int64"), _np.empty((0, len(columns)))
        sv_frame = self._data.xs(sv, level="PRN")
        if skip_maneuvers:
            sv_frame = sv_frame[~sv_frame[("FLAGS", "Maneuver")]]
        values = sv_frame["EST"][list(columns)].to_numpy(dtype=float)
        valid = ~_np.isnan(values).any(axis=1)
        return _gn_datetime.datetime2ns(sv_frame.index[valid]), values[valid]

    # Iteration views

    def _records(self, columns: Sequence[Tuple[str, str]], row_filter=None, scale: float = 1.0) -> Iterator[tuple]:
        frame = self._data
        if row_filter is not None:
            frame = frame[row_filter(frame)]
        values = frame[list(columns)].to_numpy(dtype=float) * scale
        flags = frame["FLAGS"].to_numpy(dtype=bool)
        for (epoch, sv), row, row_flags in zip(frame.index, values, flags):
            if _np.isnan(row).any():
                continue
            value = float(row[0]) if len(row) == 1 else tuple(float(v) for v in row)
            yield epoch, sv, SP3Flags(*(bool(f) for f in row_flags)), value

    def positions(self) -> RecordView:
        """(epoch, sv, flags, (x, y, z) km) for every record with a position"""
        return RecordView(lambda: self._records(SP3_POSITION_COLUMNS[:3]))

    def stable_positions(self) -> RecordView:
        """Positions of satellites which are not manoeuvring"""
        return RecordView(lambda: self._records(SP3_POSITION_COLUMNS[:3], lambda f: ~f[("FLAGS", "Maneuver")]))

    def fitted_positions(self) -> RecordView:
        """Positions fitted to observations (not predicted)"""
        return RecordView(lambda: self._records(SP3_POSITION_COLUMNS[:3], lambda f: ~f[("FLAGS", "Orbit_Pred")]))

    def predicted_positions(self) -> RecordView:
        return RecordView(lambda: self._records(SP3_POSITION_COLUMNS[:3], lambda f: f[("FLAGS", "Orbit_Pred")]))

    def clocks(self) -> RecordView:
        """(epoch, sv, flags, clock offset in seconds) for every record with a clock"""
        return RecordView(lambda: self._records(SP3_POSITION_COLUMNS[3:], scale=1e-6))

    def velocities(self) -> RecordView:
        """(epoch, sv, flags, (vx, vy, vz) km/s) for every record with a velocity"""
        return RecordView(lambda: self._records(SP3_VELOCITY_COLUMNS[:3], scale=1e-4))

    def clock_drifts(self) -> RecordView:
        """(epoch, sv, flags, clock drift in s/s) for every record with a clock rate"""
        return RecordView(lambda: self._records(SP3_VELOCITY_COLUMNS[3:], scale=1e-10))

    def _flagged(self, flag: str) -> Iterator[Tuple[_pd.Timestamp, str]]:
        mask = self._data[("FLAGS", flag)].to_numpy(dtype=bool)
        for epoch, sv in self._data.index[mask]:
            yield epoch, sv

    def maneuvers(self) -> RecordView:
        """(epoch, sv) of every record flagged as manoeuvring"""
        return RecordView(lambda: self._flagged("Maneuver"))

    def clock_events(self) -> RecordView:
        """(epoch, sv) of every record flagged with a clock event"""
        return RecordView(lambda: self._flagged("Clock_Event"))

    # Predicates

    def _any_present(self, columns) -> bool:
        return bool(self._data[list(columns)].notna().any().any())

    @property
    def has_clock(self) -> bool:
        return self._any_present(SP3_POSITION_COLUMNS[3:])

    @property
    def has_velocities(self) -> bool:
        return self._any_present(SP3_VELOCITY_COLUMNS[:3])

    @property
    def has_clock_drift(self) -> bool:
        return self._any_present(SP3_VELOCITY_COLUMNS[3:])

    @property
    def has_maneuvers(self) -> bool:
        return bool(self._data[("FLAGS", "Maneuver")].any())

    @property
    def has_predicted_positions(self) -> bool:
        return bool(self._data[("FLAGS", "Orbit_Pred")].any())

    @property
    def has_steady_sampling(self) -> bool:
        """True if every pair of consecutive epochs is exactly one header sampling interval apart"""
        diffs = _np.diff(_gn_datetime.datetime2ns(self.epochs()))
        return bool(_np.all(diffs == self._header.sampling_interval.value))

    def standardized_filename(self) -> str:
        """IGS long product filename describing this file, using production attributes where they are known"""
        from .filenames import standardized_sp3_filename

        return standardized_sp3_filename(self)


def recompute_header(header: SP3Header, data: _pd.DataFrame) -> SP3Header:
    """Header with first epoch, epoch count, GPS week / seconds and MJD recomputed from the data"""
    epochs = data.index.get_level_values("EPOCH").unique()
    if len(epochs) == 0:
        return header.copy(num_epochs=0)
    return header.rebased(epochs.min()).copy(num_epochs=len(epochs))

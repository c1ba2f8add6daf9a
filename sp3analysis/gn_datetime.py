"""Base time conversion functions

Epochs are handled as nanosecond resolution pandas Timestamps / numpy datetime64[ns] so that the 8 decimal places
of an SP3 epoch survive parsing and re-formatting exactly.
"""

from datetime import datetime as _datetime
from typing import Tuple, Union

import numpy as _np
import pandas as _pd

from . import gn_const as _gn_const

DatetimeLike = Union[_pd.Timestamp, _datetime, _np.datetime64, str]


def seconds_str_to_ns(seconds: str) -> int:
    """Convert a decimal seconds string (E.g. ' 4.12345678', '900.00000000') to integer nanoseconds, without going
    through a float, so no precision is lost.

    :param str seconds: decimal seconds, optionally signed, with up to 9 significant decimal places
    :return int: the same duration in nanoseconds
    :raises ValueError: if the string is not a plain decimal number
    """
    text = seconds.strip()
    negative = text.startswith("-")
    whole, _, frac = text.lstrip("+-").partition(".")
    if not (whole.isdigit() or (whole == "" and frac.isdigit())) or (frac and not frac.isdigit()):
        raise ValueError(f"'{seconds}' is not a decimal number of seconds")
    ns = int(whole or "0") * _gn_const.NS_IN_SEC + int((frac + "000000000")[:9])
    return -ns if negative else ns


def rnxdt_to_datetime(rnxdt: str) -> _pd.Timestamp:
    """
    Transform str in RNX / SP3 format to a nanosecond resolution Timestamp

    :param str rnxdt: String of the datetime in RNX / SP3 format: "YYYY MM DD HH mm ss.ssssssss". Fields are
        whitespace separated, so the varying column padding of different writers is tolerated.
    :return _pd.Timestamp: equivalent of input rnxdt string
    :raises ValueError: if there are not six fields, or any doesn't parse
    """
    fields = rnxdt.split()
    if len(fields) != 6:
        raise ValueError(f"Expected 'YYYY MM DD HH mm ss.ssssssss', got '{rnxdt.strip()}'")
    year, month, day, hour, minute = (int(field) for field in fields[:5])
    return _pd.Timestamp(year=year, month=month, day=day, hour=hour, minute=minute) + _pd.Timedelta(
        seconds_str_to_ns(fields[5]), unit="ns"
    )


def datetime_to_rnxdt(dt: DatetimeLike) -> str:
    """
    Transform a datetime to str of RNX / SP3 format

    :param DatetimeLike dt: epoch to be transformed
    :return str: "YYYY MM DD HH mm ss.ssssssss" with the fixed column widths of the SP3 epoch line. The seconds are
        written from the integer nanoseconds, so this is the exact inverse of rnxdt_to_datetime() for epochs with
        at most 8 decimal places.
    """
    ts = to_timestamp(dt)
    frac_10ns = (ts.microsecond * 1000 + ts.nanosecond) // 10
    return f"{ts.year:4} {ts.month:2} {ts.day:2} {ts.hour:2} {ts.minute:2} {ts.second:2}.{frac_10ns:08}"


def to_timestamp(dt: DatetimeLike) -> _pd.Timestamp:
    """Normalise any datetime-like value to a nanosecond resolution pandas Timestamp"""
    ts = _pd.Timestamp(dt)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts.as_unit("ns")


def datetime2ns(dt: Union[DatetimeLike, _pd.DatetimeIndex, _np.ndarray]) -> Union[int, _np.ndarray]:
    """Nanoseconds since the unix epoch, as int for a scalar or int64 ndarray for an index / array"""
    if isinstance(dt, (_pd.DatetimeIndex, _pd.Series, _np.ndarray)):
        return _np.asarray(dt, dtype="datetime64[ns]").astype("int64")
    return int(to_timestamp(dt).to_datetime64().astype("datetime64[ns]").astype("int64"))


def timedelta_to_seconds_str(delta: _pd.Timedelta, width: int, decimals: int = 8) -> str:
    """Format a duration as right aligned decimal seconds, E.g. Timedelta(minutes=15) -> '   900.00000000'"""
    return f"{_pd.Timedelta(delta).value / _gn_const.NS_IN_SEC:{width}.{decimals}f}"


def datetime2gpsweeksec(dt: DatetimeLike) -> Tuple[int, float]:
    """datetime to GPS week and seconds of week

    :param DatetimeLike dt: epoch, in GPS time
    :return Tuple[int, float]: GPS week, and seconds into that week
    """
    gps_ns = datetime2ns(dt) - int(_gn_const.GPS_ORIGIN.astype("int64"))
    ns_in_week = _gn_const.SEC_IN_WEEK * _gn_const.NS_IN_SEC
    week = gps_ns // ns_in_week
    return int(week), (gps_ns - week * ns_in_week) / _gn_const.NS_IN_SEC


def datetime2mjd(dt: DatetimeLike) -> Tuple[int, float]:
    """datetime to Modified Julian Day and fraction of day

    :param DatetimeLike dt: epoch
    :return Tuple[int, float]: integer MJD, and fraction of that day in [0, 1)
    """
    mjd_ns = datetime2ns(dt) - int(_gn_const.MJD_ORIGIN.astype("int64"))
    ns_in_day = _gn_const.SEC_IN_DAY * _gn_const.NS_IN_SEC
    return int(mjd_ns // ns_in_day), (mjd_ns % ns_in_day) / ns_in_day


def datetime2j2000(dt: DatetimeLike) -> float:
    """datetime conversion to seconds after J2000 (2000-01-01 12:00:00)"""
    return (datetime2ns(dt) - int(_gn_const.J2000_ORIGIN.astype("int64"))) / _gn_const.NS_IN_SEC


def datetime2yydoy(dt: DatetimeLike) -> Tuple[int, int]:
    """datetime to (year, day of year)"""
    ts = to_timestamp(dt)
    return ts.year, ts.dayofyear


def yydoy2datetime(year: int, day_of_year: int, hour: int = 0, minute: int = 0) -> _pd.Timestamp:
    """(year, day of year, hour, minute) to Timestamp. Day of year is 1-based."""
    return _pd.Timestamp(year=year, month=1, day=1, hour=hour, minute=minute) + _pd.Timedelta(days=day_of_year - 1)

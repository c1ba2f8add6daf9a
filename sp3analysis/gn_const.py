"""Constants to be declared here"""

import numpy as _np

MJD_ORIGIN = _np.datetime64("1858-11-17 00:00:00", "ns")
GPS_ORIGIN = _np.datetime64("1980-01-06 00:00:00", "ns")
J2000_ORIGIN = _np.datetime64("2000-01-01 12:00:00", "ns")

SEC_IN_MINUTE = 60
SEC_IN_HOUR = 60 * SEC_IN_MINUTE
SEC_IN_DAY = 24 * SEC_IN_HOUR
SEC_IN_WEEK = 7 * SEC_IN_DAY

NS_IN_SEC = 1_000_000_000

MIXED_CONSTELLATION = "M"

ORBIT_TYPES = ("FIT", "EXT", "BCT", "BHN", "HLM")

# Timescale offsets from TAI (timescale minus TAI), in seconds, for the systems steered to a constant offset.
# UTC and GLONASS time additionally depend on the leap second count, see TAI_UTC_LEAP_SECONDS.
TIMESCALE_TAI_OFFSET_SEC = {
    "TAI": 0,
    "GPS": -19,
    "GAL": -19,
    "QZS": -19,
    "IRN": -19,
    "BDT": -33,
}
GLONASS_UTC_OFFSET_SEC = 3 * SEC_IN_HOUR

# TAI - UTC (seconds), effective from the given UTC date
TAI_UTC_LEAP_DATES = _np.asarray(
    [
        "1980-01-01",
        "1981-07-01",
        "1982-07-01",
        "1983-07-01",
        "1985-07-01",
        "1988-01-01",
        "1990-01-01",
        "1991-01-01",
        "1992-07-01",
        "1993-07-01",
        "1994-07-01",
        "1996-01-01",
        "1997-07-01",
        "1999-01-01",
        "2006-01-01",
        "2009-01-01",
        "2012-07-01",
        "2015-07-01",
        "2017-01-01",
    ],
    dtype="datetime64[ns]",
)
TAI_UTC_LEAP_SECONDS = _np.arange(19, 38)

# SP3 standard deviation exponent bases, used when the header's '%f' line leaves them at zero
SP3_POS_STD_BASE = 1.25
SP3_CLK_STD_BASE = 1.025

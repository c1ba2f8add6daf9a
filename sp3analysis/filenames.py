"""Production attributes of SP3 products, from and to IGS long product filenames.

E.g. 'ESA0OPSRAP_20231190000_01D_15M_ORB.SP3.gz':
 - ESA: agency, 0: batch / version, OPS: campaign, RAP: availability class
 - 2023 119 0000: release year, day of year, hour and minute
 - 01D: release period, 15M: sampling period, ORB: content type, .gz: compressed
"""

import dataclasses
import datetime
import logging
import re
import warnings
from typing import Any, Literal, Optional

from . import gn_const, gn_datetime
from .gn_utils import StrictMode, StrictModes
from .solution_types import SolutionType, SolutionTypes

logger = logging.getLogger(__name__)

# May be unnecessary, but for safety explicitly enable it
logging.captureWarnings(True)

# Implements the IGS long filename convention v2.1, restricted to SP3 orbit products.
# https://files.igs.org/pub/resource/guidelines/Guidelines_for_Long_Product_Filenames_in_the_IGS_v2.1.pdf
_RE_SP3_LONG_FILENAME = re.compile(
    r"""\A # Assert beginning of string
        (?P<agency>[A-Z0-9]{3})
        (?P<batch>[A-Z0-9])
        (?P<campaign>DEM|MGX|OPS|R\d{2}|TGA|TST) # Campaign / project
        (?P<availability>FIN|RAP|ULT|PRD) # Availability class (solution type)
        _
        (?P<year>\d{4})(?P<day_of_year>\d{3})(?P<hour>\d{2})(?P<minute>\d{2})
        _
        (?P<period>\d{2}[HDWLY]) # Release period E.g. 01D, 12H, 01W
        _
        (?P<sampling>\d{2}[SMHDWLY]) # Temporal sampling resolution E.g. 05M, 30S
        _
        (?P<content_type>\w{3})\. # Content type E.g. ORB
        SP3
        (?P<compression_ext>\.gz|) # (Optionally) .gz extension indicating compression
        \Z""",  # Assert end of string
    re.VERBOSE | re.IGNORECASE,
)


@dataclasses.dataclass(frozen=True)
class ProductionAttributes:
    """Metadata about an SP3 product, as carried in its IGS long filename"""

    agency: str
    batch_id: str
    campaign: str
    availability: type[SolutionType]
    release_year: int
    release_doy: int
    release_hour: int = 0
    release_minute: int = 0
    release_period: str = "01D"
    sampling_period: str = "15M"
    content_type: str = "ORB"
    gzip_compressed: bool = False

    @property
    def release_date(self) -> datetime.datetime:
        return gn_datetime.yydoy2datetime(
            self.release_year, self.release_doy, self.release_hour, self.release_minute
        ).to_pydatetime()

    @property
    def release_timedelta(self) -> datetime.timedelta:
        return convert_nominal_span(self.release_period)

    @property
    def sampling_timedelta(self) -> datetime.timedelta:
        return convert_nominal_span(self.sampling_period)

    def to_filename(self) -> str:
        return (
            f"{self.agency}{self.batch_id}{self.campaign}{self.availability.name}_"
            f"{self.release_year:04}{self.release_doy:03}{self.release_hour:02}{self.release_minute:02}_"
            f"{self.release_period}_{self.sampling_period}_{self.content_type}.SP3"
            f"{'.gz' if self.gzip_compressed else ''}"
        )


def determine_properties_from_filename(
    filename: str,
    strict_mode: type[StrictMode] = StrictModes.STRICT_WARN,
    non_timed_span_output_mode: Literal["none", "timedelta"] = "timedelta",
) -> dict[str, Any]:
    """Determine IGS filename properties of an SP3 product based purely on a filename

    :param str filename: filename to examine for naming properties
    :param type[StrictMode] strict_mode: indicates whether to raise or warn (default), if filename is clearly
        not valid / a format we support.
    :param Literal["none", "timedelta"] non_timed_span_output_mode: how a '00U' span is returned, see
        convert_nominal_span()
    :return dict[str, Any]: dictionary containing the extracted name properties. Will be empty on errors, when
        strict_mode is not set to RAISE.
    :raises ValueError: if strict_mode is RAISE and the filename doesn't follow the long filename convention
    """
    match = _RE_SP3_LONG_FILENAME.fullmatch(filename)
    if match is None:
        message = f"Filename '{filename}' doesn't follow the IGS long product filename convention for SP3"
        if strict_mode == StrictModes.STRICT_RAISE:
            raise ValueError(message)
        if strict_mode == StrictModes.STRICT_WARN:
            warnings.warn(message)
        return {}

    day_of_year = int(match["day_of_year"])
    hour, minute = int(match["hour"]), int(match["minute"])
    if not (1 <= day_of_year <= 366 and hour < 24 and minute < 60):
        message = f"Filename '{filename}' has an invalid release date"
        if strict_mode == StrictModes.STRICT_RAISE:
            raise ValueError(message)
        if strict_mode == StrictModes.STRICT_WARN:
            warnings.warn(message)
        return {}

    return {
        "analysis_center": match["agency"].upper(),
        "version": match["batch"].upper(),
        "project": match["campaign"].upper(),
        "solution_type": SolutionTypes.from_name(match["availability"]),
        "start_epoch": gn_datetime.yydoy2datetime(int(match["year"]), day_of_year, hour, minute).to_pydatetime(),
        "timespan": convert_nominal_span(match["period"].upper(), non_timed_span_output_mode),
        "sampling_rate": match["sampling"].upper(),
        "sampling_rate_seconds": convert_nominal_span(match["sampling"].upper()).total_seconds(),
        "content_type": match["content_type"].upper(),
        "format_type": "SP3",
        "compressed": match["compression_ext"] != "",
    }


def production_attributes_from_filename(filename: str) -> Optional[ProductionAttributes]:
    """Production attributes from an SP3 product filename. Never raises: names not following the IGS long filename
    convention give None.

    :param str filename: file name (not a path)
    :return Optional[ProductionAttributes]: attributes, or None for a non-conforming name
    """
    match = _RE_SP3_LONG_FILENAME.fullmatch(filename)
    props = determine_properties_from_filename(filename, strict_mode=StrictModes.STRICT_OFF)
    if not props:
        logger.debug(f"No production attributes in filename '{filename}'")
        return None
    return ProductionAttributes(
        agency=props["analysis_center"],
        batch_id=props["version"],
        campaign=props["project"],
        availability=props["solution_type"],
        release_year=int(match["year"]),
        release_doy=int(match["day_of_year"]),
        release_hour=int(match["hour"]),
        release_minute=int(match["minute"]),
        release_period=match["period"].upper(),
        sampling_period=props["sampling_rate"],
        content_type=props["content_type"],
        gzip_compressed=props["compressed"],
    )


def nominal_span_string(span_seconds: float) -> str:
    """Generate the 3 character LEN or SMP string for IGS filenames based on total span seconds

    The longest unit is used for which the span deviates from a whole count by less than the next unit down. E.g.
    2 days, 3 hours and 30 minutes is reported as 51H. Months are not used. Spans needing more than 99 units give
    the '00U' (not timed) code.

    :param float span_seconds: Number of seconds in span of interest
    :return str: 3 character span string as per IGS standard
    """
    # For our purposes a year is 365 days, as we use it as a lower bound
    sec_in_year = 365 * gn_const.SEC_IN_DAY
    # (unit, seconds in unit, tolerance below which the remainder is ignored)
    units = [
        ("Y", sec_in_year, gn_const.SEC_IN_WEEK),
        ("W", gn_const.SEC_IN_WEEK, gn_const.SEC_IN_DAY),
        ("D", gn_const.SEC_IN_DAY, gn_const.SEC_IN_HOUR),
        ("H", gn_const.SEC_IN_HOUR, gn_const.SEC_IN_MINUTE),
        ("M", gn_const.SEC_IN_MINUTE, 1.0),
        ("S", 1, 1.0),
    ]
    unit, count = "S", int(span_seconds)
    for i, (candidate, seconds, tolerance) in enumerate(units):
        if span_seconds < seconds:
            continue
        if span_seconds % seconds < tolerance:
            unit, count = candidate, int(span_seconds // seconds)
        else:
            # Fall back one level in the unit hierarchy
            unit, smaller = units[i + 1][0], units[i + 1][1]
            count = int(span_seconds // smaller)
        break
    # IGS uses 07D rather than 01W for a week
    if unit == "W" and count == 1:
        unit, count = "D", int(span_seconds // gn_const.SEC_IN_DAY)

    if count > 99:
        return "00U"
    return f"{count:02}{unit}"


def convert_nominal_span(
    nominal_span: str,
    non_timed_span_output: Literal["none", "timedelta"] = "timedelta",
) -> Optional[datetime.timedelta]:
    """Effectively invert nominal_span_string(), turn a span string into a timedelta

    :param str nominal_span: Three-character span string in IGS format (e.g. 01D, 15M, 01L)
    :param Literal["none", "timedelta"] non_timed_span_output: when a non-timed span e.g. '00U' is encountered,
        return a zero-length timedelta (default), or return None.
    :returns datetime.timedelta | None: Time delta of same duration as span string
    :raises ValueError: when input format is invalid, i.e. was not 3 chars where first 2 parse as an int, or time unit
        is not valid.
    """
    if nominal_span is None or not isinstance(nominal_span, str) or len(nominal_span) != 3:
        raise ValueError(f"Provided nominal span was not a 3 char string: '{str(nominal_span)}'")
    try:
        span = int(nominal_span[0:2])
    except ValueError:  # Except and re-raise with more context
        raise ValueError(f"First two chars of nominal span '{nominal_span}' did not parse as an int")
    unit = nominal_span[2].upper()

    if unit == "U":
        if non_timed_span_output == "none":
            return None
        elif non_timed_span_output == "timedelta":
            return datetime.timedelta()
        else:
            raise ValueError(f"Invalid mode for non_timed_span_output: {str(non_timed_span_output)}")

    unit_to_timedelta_args = {
        "S": {"seconds": 1},
        "M": {"minutes": 1},
        "H": {"hours": 1},
        "D": {"days": 1},
        "W": {"weeks": 1},
        "L": {"days": 28},
        "Y": {"days": 365},
    }
    if unit not in unit_to_timedelta_args:
        raise ValueError(f"Unit of span '{nominal_span}' not understood / valid.")

    # E.g 02Y -> unit: days, value: 02 * 365
    return datetime.timedelta(**{k: v * span for k, v in unit_to_timedelta_args[unit].items()})


def standardized_sp3_filename(sp3) -> str:
    """IGS long filename for an SP3 object. Release date, period and sampling come from the content, the rest from the
    object's production attributes where known, else from its header (agency) or defaults (batch 0, campaign OPS,
    availability FIN).

    :param SP3 sp3: the SP3 object to name
    :return str: filename, E.g. 'GAA0OPSFIN_20240270000_01D_05M_ORB.SP3'
    """
    production = sp3.production
    first_epoch = sp3.first_epoch if sp3.first_epoch is not None else sp3.header.first_epoch
    interval = sp3.header.sampling_interval.total_seconds()
    span = (sp3.last_epoch - first_epoch).total_seconds() + interval if sp3.total_epochs else 0
    year, doy = gn_datetime.datetime2yydoy(first_epoch)
    return ProductionAttributes(
        agency=production.agency if production else (sp3.header.agency[:3].upper().ljust(3, "X")),
        batch_id=production.batch_id if production else "0",
        campaign=production.campaign if production else "OPS",
        availability=production.availability if production else SolutionTypes.FIN,
        release_year=year,
        release_doy=doy,
        release_hour=first_epoch.hour,
        release_minute=first_epoch.minute,
        release_period=nominal_span_string(span),
        sampling_period=nominal_span_string(interval),
        content_type=production.content_type if production else "ORB",
        gzip_compressed=production.gzip_compressed if production else False,
    ).to_filename()

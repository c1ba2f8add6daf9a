"""SP3 (revisions c and d) reading and writing.

Parsing is a single sequential scan driven by a small state machine: HEADER lines are collected until the first
epoch line, then each EPOCH_BLOCK gathers the P / V records of one epoch, until the EOF line moves the parser to
TERMINATED. Layout differences between revisions come from the column tables in sp3_revisions.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as _np
import pandas as _pd

from .. import filenames
from .. import gn_const as _gn_const
from .. import gn_datetime as _gn_datetime
from ..gn_sp3_model import (
    SP3,
    SP3_FLAG_COLUMNS,
    SP3_VALUE_COLUMNS,
    SP3Header,
    build_sp3_frame,
)
from ..gn_utils import StrictMode, StrictModes
from ..sp3_errors import (
    InvalidFlag,
    MissingTerminator,
    NonMonotonicEpoch,
    SP3ParsingError,
    TruncatedHeaderLine,
    UnknownSatellite,
)
from ..sp3_revisions import SP3Revision, SP3Revisions
from . import common as _common

logger = logging.getLogger(__name__)

# Parser states
_HEADER = "HEADER"
_EPOCH_BLOCK = "EPOCH_BLOCK"
_TERMINATED = "TERMINATED"

SP3_CLOCK_NODATA_STRING = " 999999.999999"
SP3_POS_NODATA_STRING = "      0.000000"
SP3_CLOCK_NODATA_NUMERIC = 999999
SP3_POS_NODATA_NUMERIC = 0
# A single absent component is left blank, the zero vector marks all three absent
SP3_COMPONENT_BLANK_STRING = " " * 14
SP3_POS_STD_NODATA_STRING = "  "
SP3_CLK_STD_NODATA_STRING = "   "

# Record line columns, shared by P and V lines
_SV_COLUMNS = slice(1, 4)
_VALUE_COLUMNS = (slice(4, 18), slice(18, 32), slice(32, 46), slice(46, 60))
_STD_COLUMNS = (slice(61, 63), slice(64, 66), slice(67, 69), slice(70, 73))
_MIN_RECORD_WIDTH = 46  # must reach the end of Z

# Flag name -> (column, the one non-blank character allowed there)
_FLAG_COLUMNS: Dict[str, Tuple[int, str]] = {
    "Clock_Event": (74, "E"),
    "Clock_Pred": (75, "P"),
    "Maneuver": (78, "M"),
    "Orbit_Pred": (79, "P"),
}

_SP3_FIXED_HEADER_LINES = (
    "%c cc cc ccc ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc",
    "%f  0.0000000  0.000000000  0.00000000000  0.000000000000000",
    "%i    0    0    0    0      0      0      0      0         0",
    "%i    0    0    0    0      0      0      0      0         0",
)


def _normalise_sv(sv_field: str) -> str:
    """'G 1' / 'G01' / '  1' -> 'G01'. Pre SP3-c GPS-only files may leave out the constellation letter."""
    letter = sv_field[0] if sv_field[0] != " " else "G"
    return letter + sv_field[1:].replace(" ", "0")


def _parse_number(field: str, what: str, line_number: int, cast: Callable = float):
    try:
        return cast(field)
    except ValueError:
        raise SP3ParsingError(f"Could not parse {what} from '{field}'", line_number)


def _std_from_exponent(field: str, base: float, default_base: float, line_number: int) -> float:
    if field.strip() == "":
        return _np.nan
    exponent = _parse_number(field, "standard deviation exponent", line_number, int)
    return (base if base > 0 else default_base) ** exponent


def _std_to_exponent(std: float, base: float, default_base: float) -> int:
    return int(_np.rint(_np.log(std) / _np.log(base if base > 0 else default_base)))


class _AnomalyLog:
    """Collects per-record anomalies which don't desynchronise parsing, applying the strictness mode"""

    def __init__(self, strict_mode: type[StrictMode]):
        self.strict_mode = strict_mode
        self.warnings: List[str] = []

    def report(self, message: str, line_number: Optional[int] = None, exception: Optional[type] = None) -> None:
        """Raise `exception` when in strict RAISE mode (and an exception type is given). Otherwise record a warning.

        :raises SP3ParsingError: subclass given as `exception`, in strict RAISE mode
        """
        if exception is not None and self.strict_mode == StrictModes.STRICT_RAISE:
            raise exception(message, line_number)
        text = f"Line {line_number}: {message}" if line_number is not None else message
        self.warnings.append(text)
        if self.strict_mode == StrictModes.STRICT_OFF:
            logger.debug(text)
        else:
            logger.warning(text)


def _require_width(line: str, kind: str, revision: type[SP3Revision], line_number: int) -> None:
    width = revision.min_line_widths[kind]
    if len(line) < width:
        raise TruncatedHeaderLine(
            f"'{kind}' header line is {len(line)} characters long, at least {width} are required", line_number
        )


def _parse_ids_line(line: str, width: int = 3) -> List[str]:
    """Splits the fixed 3-character columns (from column 9) of a '+' or '++' line"""
    body = line[9:60]
    return [body[i : i + width] for i in range(0, len(body), width)]


def parse_sp3_header(
    header: Union[str, bytes, List[Tuple[int, str]]],
    strict_mode: type[StrictMode] = StrictModes.STRICT_WARN,
    anomalies: Optional[_AnomalyLog] = None,
) -> SP3Header:
    """
    Parses the header block of an SP3 file (everything before the first epoch line)

    :param str | bytes | List[Tuple[int, str]] header: header text, or (line number, line) pairs
    :param type[StrictMode] strict_mode: how to handle non-structural anomalies, defaults to STRICT_WARN
    :param _AnomalyLog anomalies: used internally to collect anomalies into the parse result
    :return SP3Header: the parsed header
    :raises UnsupportedRevision: if the revision letter is not c or d
    :raises TruncatedHeaderLine: if a line is too short for its fields, or too few accuracy codes are given
    :raises SP3ParsingError: on other structural problems, E.g. a missing '##' line
    """
    if isinstance(header, bytes):
        header = header.decode("utf-8", errors="replace")
    if isinstance(header, str):
        header = list(enumerate(header.splitlines(), start=1))
    if anomalies is None:
        anomalies = _AnomalyLog(strict_mode)

    if len(header) == 0 or not header[0][1].startswith("#") or header[0][1].startswith("##"):
        raise SP3ParsingError("SP3 content must start with the '#' version line", header[0][0] if header else 1)

    # Line 1: version, data type, start epoch, epoch count, data used, coordinate system, orbit type, agency
    line_number, line = header[0]
    revision = SP3Revisions.from_letter(line[1:2], line_number)
    _require_width(line, "#", revision, line_number)
    data_type = line[2].upper()
    if data_type not in ("P", "V"):
        raise SP3ParsingError(f"Data type flag must be 'P' or 'V', got '{line[2]}'", line_number)
    try:
        first_epoch = _gn_datetime.rnxdt_to_datetime(line[3:31])
    except ValueError as e:
        raise SP3ParsingError(f"Could not parse start epoch: {e}", line_number)
    num_epochs = _parse_number(line[32:39], "number of epochs", line_number, int)
    descriptors = line[39:].split()
    if len(descriptors) < 3:
        raise TruncatedHeaderLine("Expected data used, coordinate system and orbit type after epoch count", line_number)
    data_used, coord_system, orbit_type = descriptors[:3]
    agency = " ".join(descriptors[3:])
    if orbit_type not in _gn_const.ORBIT_TYPES:
        anomalies.report(f"Orbit type '{orbit_type}' is not one of {', '.join(_gn_const.ORBIT_TYPES)}", line_number)

    fields = {}
    sv_lines: List[Tuple[int, str]] = []
    accuracy_codes: List[int] = []
    comments: List[str] = []
    for line_number, line in header[1:]:
        if line.startswith("##"):
            _require_width(line, "##", revision, line_number)
            fields["gps_week"] = _parse_number(line[2:7], "GPS week", line_number, int)
            fields["seconds_of_week"] = _parse_number(line[7:23], "seconds of week", line_number)
            interval_ns = _parse_number(line[23:38], "sampling interval", line_number, _gn_datetime.seconds_str_to_ns)
            fields["sampling_interval"] = _pd.Timedelta(interval_ns, unit="ns")
            fields["mjd"] = _parse_number(line[38:44], "MJD", line_number, int)
            fields["mjd_fraction"] = _parse_number(line[44:60], "fractional day", line_number)
        elif line.startswith("++"):
            _require_width(line, "++", revision, line_number)
            for code in _parse_ids_line(line):
                accuracy_codes.append(_parse_number(code, "accuracy code", line_number, int))
        elif line.startswith("+"):
            _require_width(line, "+", revision, line_number)
            sv_lines.append((line_number, line))
        elif line.startswith("%c"):
            if "timescale" not in fields:  # Only the first %c line carries information
                _require_width(line, "%c", revision, line_number)
                fields["file_type"] = line[3:5].strip()
                fields["timescale"] = line[9:12].strip()
                if fields["timescale"] not in revision.timescales:
                    anomalies.report(
                        f"Timescale '{fields['timescale']}' is not defined by SP3-{revision.letter}", line_number
                    )
        elif line.startswith("%f"):
            if "pos_vel_base" not in fields:
                _require_width(line, "%f", revision, line_number)
                fields["pos_vel_base"] = _parse_number(line[3:13], "position / velocity base", line_number)
                fields["clk_rate_base"] = _parse_number(line[14:26], "clock / rate base", line_number)
        elif line.startswith("%i"):
            pass  # Unused in SP3-c and d
        elif line.startswith("/*"):
            if len(line) > revision.max_comment_length:
                anomalies.report(
                    f"Comment line longer than the {revision.max_comment_length} characters SP3-{revision.letter} "
                    "allows",
                    line_number,
                )
            comments.append(line)
        elif line.strip() == "":
            continue
        else:
            raise SP3ParsingError(f"Unrecognised header line '{line.rstrip()}'", line_number)

    for required, description in (("gps_week", "'##'"), ("timescale", "'%c'")):
        if required not in fields:
            raise SP3ParsingError(f"Header has no {description} line", header[-1][0])
    if not sv_lines:
        raise SP3ParsingError("Header has no '+' satellite lines", header[-1][0])

    # Satellite list
    first_sv_line_number, first_sv_line = sv_lines[0]
    stated_sv_count = _parse_number(
        first_sv_line[revision.sv_count_columns], "number of satellites", first_sv_line_number, int
    )
    if revision.max_sv_lines is not None and len(sv_lines) > revision.max_sv_lines:
        anomalies.report(
            f"{len(sv_lines)} satellite lines found, SP3-{revision.letter} allows {revision.max_sv_lines}",
            first_sv_line_number,
        )
    svs = []
    for line_number, line in sv_lines:
        for sv_field in _parse_ids_line(line):
            if sv_field.strip() in ("", "0", "00", "000"):
                continue
            sv = _normalise_sv(sv_field)
            if sv in svs:
                anomalies.report(f"Satellite {sv} is listed twice", line_number)
                continue
            svs.append(sv)
    if len(svs) != stated_sv_count:
        anomalies.report(
            f"Header states {stated_sv_count} satellites, but lists {len(svs)}",
            first_sv_line_number,
        )
    if len(accuracy_codes) < len(svs):
        raise TruncatedHeaderLine(
            f"Header lists {len(svs)} satellites but only {len(accuracy_codes)} accuracy codes", first_sv_line_number
        )

    return SP3Header(
        revision=revision,
        data_type=data_type,
        first_epoch=first_epoch,
        num_epochs=num_epochs,
        data_used=data_used,
        coord_system=coord_system,
        orbit_type=orbit_type,
        agency=agency,
        sv_accuracy=dict(zip(svs, accuracy_codes)),
        comments=tuple(comments),
        **fields,
    )


class _SP3Parser:
    """Line by line SP3 parser. Feed lines in order with feed(), then call finish()."""

    def __init__(self, strict_mode: type[StrictMode]):
        self.state = _HEADER
        self.anomalies = _AnomalyLog(strict_mode)
        self.header_lines: List[Tuple[int, str]] = []
        self.header: Optional[SP3Header] = None
        self.known_svs: set = set()
        self.epoch: Optional[_pd.Timestamp] = None
        self.block: Dict[str, dict] = {}
        self.epochs: List[_np.datetime64] = []
        self.svs: List[str] = []
        self.values: List[_np.ndarray] = []
        self.flags: List[List[bool]] = []
        self.correlation_records = 0
        self.ignored_after_eof = 0
        self.velocities_in_position_file = False

    def feed(self, line_number: int, line: str) -> None:
        if self.state == _TERMINATED:
            if line.strip():
                self.ignored_after_eof += 1
            return
        if line.startswith("EOF"):
            self._close_header()
            self._close_block()
            self.state = _TERMINATED
            return
        if self.state == _HEADER:
            if line.startswith("*"):
                self._close_header()
                self.state = _EPOCH_BLOCK
                self._open_block(line_number, line)
            else:
                self.header_lines.append((line_number, line))
            return
        # _EPOCH_BLOCK
        if line.startswith("*"):
            self._close_block()
            self._open_block(line_number, line)
        elif line.startswith("EP") or line.startswith("EV"):
            self.correlation_records += 1
        elif line.startswith("P") or line.startswith("V"):
            self._parse_record(line_number, line)
        elif line.strip() == "":
            return
        else:
            raise SP3ParsingError(
                f"Unrecognised record type '{line[:2]}', expected '*', 'P', 'V', 'EP' or 'EV'", line_number
            )

    def _close_header(self) -> None:
        if self.header is None:
            self.header = parse_sp3_header(self.header_lines, anomalies=self.anomalies)
            self.known_svs = set(self.header.sv_accuracy)

    def _open_block(self, line_number: int, line: str) -> None:
        try:
            epoch = _gn_datetime.rnxdt_to_datetime(line[1:])
        except ValueError as e:
            raise SP3ParsingError(f"Could not parse epoch line: {e}", line_number)
        if self.epoch is not None and epoch <= self.epoch:
            raise NonMonotonicEpoch(f"Epoch {epoch} does not follow previous epoch {self.epoch}", line_number)
        self.epoch = epoch
        self.block = {}

    def _close_block(self) -> None:
        if self.epoch is None:
            return
        epoch = self.epoch.to_datetime64()
        for sv, record in self.block.items():
            self.epochs.append(epoch)
            self.svs.append(sv)
            self.values.append(record["values"])
            self.flags.append(record["flags"])
        self.block = {}

    def _parse_record(self, line_number: int, line: str) -> None:
        kind = line[0]
        if len(line) < _MIN_RECORD_WIDTH:
            raise SP3ParsingError(
                f"{kind} record is {len(line)} characters, at least {_MIN_RECORD_WIDTH} needed", line_number
            )
        sv = _normalise_sv(line[_SV_COLUMNS])
        if sv not in self.known_svs:
            self.anomalies.report(f"Satellite {sv} is not declared in the header", line_number, UnknownSatellite)
        record = self.block.setdefault(
            sv,
            {
                "values": _np.full(len(SP3_VALUE_COLUMNS), _np.nan),
                "flags": [False] * len(SP3_FLAG_COLUMNS),
                "seen": "",
            },
        )
        if kind in record["seen"]:
            raise SP3ParsingError(f"Second {kind} record for {sv} in epoch {self.epoch}", line_number)
        record["seen"] += kind

        padded = line.ljust(80)
        numbers = []
        for column in _VALUE_COLUMNS:
            field = padded[column]
            if field.strip() == "":
                numbers.append(_np.nan)
            else:
                numbers.append(_parse_number(field, f"{kind} record value", line_number))
        # An all-zero vector is the SP3 'no data' marker. Single zero components are valid and kept.
        if all(value == SP3_POS_NODATA_NUMERIC for value in numbers[:3]):
            numbers[:3] = [_np.nan] * 3
        if numbers[3] >= SP3_CLOCK_NODATA_NUMERIC:
            numbers[3] = _np.nan

        header = self.header
        stds = [
            _std_from_exponent(padded[column], header.pos_vel_base, _gn_const.SP3_POS_STD_BASE, line_number)
            for column in _STD_COLUMNS[:3]
        ]
        stds.append(
            _std_from_exponent(padded[_STD_COLUMNS[3]], header.clk_rate_base, _gn_const.SP3_CLK_STD_BASE, line_number)
        )

        # Column blocks in SP3_VALUE_COLUMNS order: EST pos, EST vel, STD pos, STD vel
        offset = 0 if kind == "P" else 4
        record["values"][offset : offset + 4] = numbers
        record["values"][8 + offset : 8 + offset + 4] = stds
        if kind == "P":
            record["flags"] = self._parse_flags(padded, line_number)
        elif header.data_type == "P":
            self.velocities_in_position_file = True

    @staticmethod
    def _parse_flags(padded: str, line_number: int) -> List[bool]:
        flags = []
        for name, (column, code) in _FLAG_COLUMNS.items():
            char = padded[column]
            if char not in (" ", code):
                raise InvalidFlag(
                    f"Invalid SP3 flag '{char}' in column {column + 1} ({name}). Valid values are '{code}' or ' '",
                    line_number,
                )
            flags.append(char == code)
        return flags

    def finish(self, production=None) -> SP3:
        last_line = self.header_lines[-1][0] if self.header_lines else None
        if self.state != _TERMINATED:
            if not self.header_lines and self.header is None:
                raise SP3ParsingError("No SP3 content found")
            self._close_header()
            self._close_block()
            self.anomalies.report("SP3 content does not end with an EOF line", None, MissingTerminator)
        if self.correlation_records:
            self.anomalies.report(f"Skipped {self.correlation_records} EP / EV correlation records")
        if self.ignored_after_eof:
            self.anomalies.report(f"Ignored {self.ignored_after_eof} lines after the EOF line")
        if self.velocities_in_position_file:
            self.anomalies.report("Velocity records found in a file declared as positions only ('P')", last_line)

        index = _pd.MultiIndex.from_arrays(
            [_pd.DatetimeIndex(_np.asarray(self.epochs, dtype="datetime64[ns]")), _pd.Index(self.svs, dtype=object)],
            names=["EPOCH", "PRN"],
        )
        values = _np.asarray(self.values, dtype=float).reshape(len(self.svs), len(SP3_VALUE_COLUMNS))
        flags = _np.asarray(self.flags, dtype=bool).reshape(len(self.svs), len(SP3_FLAG_COLUMNS))
        data = build_sp3_frame(index, values, flags)
        result = SP3(self.header, data, production=production, parse_warnings=self.anomalies.warnings)
        self._check_header_against_content(result)
        result.parse_warnings = tuple(self.anomalies.warnings)
        return result

    def _check_header_against_content(self, sp3: SP3) -> None:
        """Soft invariants: header epoch count and satellite list against content. Mismatches are reported only."""
        header = sp3.header
        if header.num_epochs != sp3.total_epochs:
            self.anomalies.report(f"Header states {header.num_epochs} epochs, content has {sp3.total_epochs}")
        if sp3.total_epochs and sp3.first_epoch != header.first_epoch:
            self.anomalies.report(f"Header start epoch {header.first_epoch} differs from first epoch {sp3.first_epoch}")
        present = set(sp3.satellites())
        missing = [sv for sv in header.satellites if sv not in present]
        if missing and sp3.total_epochs:
            self.anomalies.report(f"Satellites declared in header but absent from content: {' '.join(missing)}")


def parse_sp3(
    content: Union[str, bytes],
    strict_mode: type[StrictMode] = StrictModes.STRICT_WARN,
    production=None,
) -> SP3:
    """Parses (already decompressed) SP3 content

    :param str | bytes content: SP3 text
    :param type[StrictMode] strict_mode: how to handle anomalies which don't prevent parsing (satellites missing
        from the header, a missing EOF line). STRICT_RAISE raises, STRICT_WARN (default) logs a warning and records
        it in SP3.parse_warnings, STRICT_OFF only records it.
    :param production: ProductionAttributes to attach to the result, if known
    :return SP3: parsed model
    :raises SP3ParsingError: (or a subclass) on structural problems. No partial result is returned.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    parser = _SP3Parser(strict_mode)
    for line_number, line in enumerate(content.splitlines(), start=1):
        parser.feed(line_number, line)
    return parser.finish(production=production)


def read_sp3(
    sp3_path_or_bytes: Union[str, Path, bytes],
    strict_mode: type[StrictMode] = StrictModes.STRICT_WARN,
    decompress: Callable[[bytes], bytes] = _common.decompress_bytes,
) -> SP3:
    """Reads an SP3 file from a path (optionally .gz or .Z compressed) or from bytes

    :param str | Path | bytes sp3_path_or_bytes: SP3 file path, or SP3 content as bytes
    :param type[StrictMode] strict_mode: see parse_sp3(), defaults to STRICT_WARN
    :param Callable[[bytes], bytes] decompress: decompression applied to the raw bytes, defaults to one which
        recognises gzip and LZW content by magic number and passes anything else through
    :return SP3: parsed model, with production attributes attached when read from a conforming filename
    """
    content = decompress(_common.path2bytes(sp3_path_or_bytes))
    production = None
    if not isinstance(sp3_path_or_bytes, bytes):
        production = filenames.production_attributes_from_filename(Path(sp3_path_or_bytes).name)
    sp3 = parse_sp3(content, strict_mode=strict_mode, production=production)
    logger.debug(f"Read {sp3}")
    return sp3


def gen_sp3_header(sp3: SP3) -> str:
    """Generates the header block of an SP3 file, from an SP3 object

    :param SP3 sp3: model to write
    :return str: header lines, newline terminated
    """
    header = sp3.header
    svs = header.satellites
    revision = header.revision

    lines = [
        f"#{revision.letter}{header.data_type}{_gn_datetime.datetime_to_rnxdt(header.first_epoch)} "
        f"{header.num_epochs:7} {header.data_used:>5} {header.coord_system:>5} {header.orbit_type:>3} "
        f"{header.agency:>4}",
        f"##{header.gps_week:5}{header.seconds_of_week:16.8f}"
        f"{_gn_datetime.timedelta_to_seconds_str(header.sampling_interval, 15)}"
        f"{header.mjd:6}{header.mjd_fraction:16.13f}",
    ]

    per_line = revision.sv_per_line
    n_lines = max(revision.min_sv_lines, -(-len(svs) // per_line))
    sv_cells = [sv.rjust(3) for sv in svs] + ["  0"] * (n_lines * per_line - len(svs))
    acc_cells = [f"{code:3}" for code in header.sv_accuracy.values()] + ["  0"] * (n_lines * per_line - len(svs))
    for i in range(n_lines):
        prefix = f"+ {len(svs):4}   " if i == 0 else "+        "
        lines.append(prefix + "".join(sv_cells[i * per_line : (i + 1) * per_line]))
    for i in range(n_lines):
        lines.append("++       " + "".join(acc_cells[i * per_line : (i + 1) * per_line]))

    lines.append(
        f"%c {header.file_type:<2} cc {header.timescale:<3} ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc"
    )
    lines.append(_SP3_FIXED_HEADER_LINES[0])
    lines.append(f"%f {header.pos_vel_base:10.7f} {header.clk_rate_base:12.9f}  0.00000000000  0.000000000000000")
    lines.extend(_SP3_FIXED_HEADER_LINES[1:])

    comments = list(header.comments)
    # At least 4 comment lines are required by the format
    comments += ["/*"] * (revision.min_comment_lines - len(comments))
    lines.extend(comments)
    return "\n".join(lines) + "\n"


def _format_record(kind: str, sv: str, values: _np.ndarray, header: SP3Header) -> str:
    """Formats a P or V line from EST values [x, y, z, clock] and STD values [x, y, z, clock]"""
    est, std = values[:4], values[4:]
    if _np.isnan(est[:3]).all():
        vector = SP3_POS_NODATA_STRING * 3
    else:
        vector = "".join(SP3_COMPONENT_BLANK_STRING if _np.isnan(v) else f"{v:14.6f}" for v in est[:3])
    clock = SP3_CLOCK_NODATA_STRING if _np.isnan(est[3]) else f"{est[3]:14.6f}"
    std_fields = [
        SP3_POS_STD_NODATA_STRING
        if _np.isnan(v)
        else f"{_std_to_exponent(v, header.pos_vel_base, _gn_const.SP3_POS_STD_BASE):2}"
        for v in std[:3]
    ]
    std_fields.append(
        SP3_CLK_STD_NODATA_STRING
        if _np.isnan(std[3])
        else f"{_std_to_exponent(std[3], header.clk_rate_base, _gn_const.SP3_CLK_STD_BASE):3}"
    )
    return f"{kind}{sv}{vector}{clock} {' '.join(std_fields)}"


def gen_sp3_content(sp3: SP3) -> str:
    """Generates the body of an SP3 file (epoch blocks and the EOF line), from an SP3 object

    Velocity records are written when the header data type is 'V'. Trailing whitespace is trimmed from lines.

    :param SP3 sp3: model to write
    :return str: body lines, newline terminated
    """
    header = sp3.header
    frame = sp3.data
    write_velocities = header.data_type == "V"
    pos_columns = SP3_VALUE_COLUMNS[0:4] + SP3_VALUE_COLUMNS[8:12]
    vel_columns = SP3_VALUE_COLUMNS[4:8] + SP3_VALUE_COLUMNS[12:16]
    pos_values = frame[pos_columns].to_numpy(dtype=float)
    vel_values = frame[vel_columns].to_numpy(dtype=float)
    flags = frame[SP3_FLAG_COLUMNS].to_numpy(dtype=bool)

    lines = []
    previous_epoch = None
    for i, (epoch, sv) in enumerate(frame.index):
        if epoch != previous_epoch:
            lines.append(f"*  {_gn_datetime.datetime_to_rnxdt(epoch)}")
            previous_epoch = epoch
        clock_event, clock_pred, maneuver, orbit_pred = flags[i]
        flag_text = (
            f" {'E' if clock_event else ' '}{'P' if clock_pred else ' '}"
            f"  {'M' if maneuver else ' '}{'P' if orbit_pred else ' '}"
        )
        lines.append((_format_record("P", sv, pos_values[i], header) + flag_text).rstrip())
        if write_velocities:
            lines.append(_format_record("V", sv, vel_values[i], header).rstrip())
    lines.append("EOF")
    return "\n".join(lines) + "\n"


def write_sp3(sp3: SP3, path: Union[str, Path]) -> None:
    """Writes an SP3 object to a file, gzip compressed if the path ends in .gz

    :param SP3 sp3: model to write
    :param str | Path path: destination
    """
    content = gen_sp3_header(sp3) + gen_sp3_content(sp3)
    _common.bytes2path(content.encode("utf-8"), path)

import logging as _logging
import os as _os
from typing import Union

import click as _click

from .enum_meta_properties import EnumMetaProperties


class StrictMode(metaclass=EnumMetaProperties):
    """
    Base class for strictness modes: how to react to an anomaly which doesn't prevent further processing, such as a
    satellite which is missing from the SP3 header, or a missing EOF line.
    """

    def __init__(self):
        raise Exception("This is intended to act akin to an enum. Don't instantiate it.")

    name: str = ""


class STRICT_RAISE(StrictMode):
    """Raise an exception on the anomaly"""

    name = "raise"


class STRICT_WARN(StrictMode):
    """Log and record a warning, then carry on"""

    name = "warn"


class STRICT_OFF(StrictMode):
    """Carry on silently (the anomaly is still recorded and logged at debug level)"""

    name = "off"


class StrictModes(metaclass=EnumMetaProperties):
    def __init__(self):
        raise Exception("This is intended to act akin to an enum. Don't instantiate it.")

    STRICT_RAISE = STRICT_RAISE
    STRICT_WARN = STRICT_WARN
    STRICT_OFF = STRICT_OFF

    _all: list[type[StrictMode]] = [STRICT_RAISE, STRICT_WARN, STRICT_OFF]

    @staticmethod
    def from_name(name: str) -> type[StrictMode]:
        """Returns the StrictMode for a name: 'raise', 'warn' or 'off' (case insensitive)"""
        for mode in StrictModes._all:
            if name.lower() == mode.name:
                return mode
        raise ValueError(f"No strict mode named '{name}'. Options are: raise, warn, off")


def configure_logging(verbose: bool, output_logger: bool = False) -> Union[_logging.Logger, None]:
    """Configure the logger object with the level of verbosity requested and output if desired

    :param bool verbose: Verbosity of logger object to use for encoding logging strings, True: DEBUG, False: INFO
    :param bool output_logger: Flag to indicate whether to output the Logger object, defaults to False
    :return _logging.Logger | None: Return the logger object or None (based on output_logger)
    """
    if verbose:
        logging_level = _logging.DEBUG
    else:
        logging_level = _logging.INFO
    _logging.basicConfig(format="%(asctime)s [%(funcName)s] %(levelname)s: %(message)s")
    _logging.getLogger().setLevel(logging_level)
    if output_logger:
        return _logging.getLogger()
    else:
        return None


_STRICT_OPTION = _click.option(
    "--strict",
    type=_click.Choice(["raise", "warn", "off"], case_sensitive=False),
    default="warn",
    show_default=True,
    help="how to handle anomalies such as undeclared satellites or a missing EOF line",
)


@_click.command()
@_click.option("-s", "--sp3paths", required=True, multiple=True, type=_click.Path(exists=True))
@_click.option(
    "-o",
    "--output",
    type=_click.Path(),
    help="output path, gzip compressed if it ends in .gz",
    default=_os.curdir + "/merge.sp3",
)
@_STRICT_OPTION
@_click.option("--verbose", is_flag=True)
def sp3merge(sp3paths, output, strict, verbose):
    """
    sp3 files paths to merge. All files must share revision, coordinate system, timescale, orbit type and sampling
    interval, and must agree wherever they overlap.
    """
    from . import gn_merge
    from .gn_io import sp3

    configure_logging(verbose)
    _logging.info(msg=output)
    merged = gn_merge.merge_files(sp3paths, strict_mode=StrictModes.from_name(strict))
    sp3.write_sp3(merged, output)


@_click.command()
@_click.option("-i", "--input", "input_path", required=True, type=_click.Path(exists=True))
@_click.option(
    "-t",
    "--target",
    required=True,
    type=_click.Choice(["GPS", "GLO", "GAL", "TAI", "UTC", "BDT", "QZS", "IRN"], case_sensitive=False),
    help="timescale to rewrite the epochs into",
)
@_click.option(
    "-c",
    "--correction-table",
    type=_click.Path(exists=True),
    default=None,
    help="CSV of 'epoch,bias_seconds' rows (target minus source). When given, the precise correction is "
    "interpolated from it instead of using fixed offsets",
)
@_click.option("-o", "--output", type=_click.Path(), required=True, help="output path")
@_STRICT_OPTION
@_click.option("--verbose", is_flag=True)
def sp3transpose(input_path, target, correction_table, output, strict, verbose):
    """Rewrites the epochs of an sp3 file into another timescale."""
    from . import gn_timescale
    from .gn_io import sp3

    configure_logging(verbose)
    sp3_in = sp3.read_sp3(input_path, strict_mode=StrictModes.from_name(strict))
    correction = None
    if correction_table is not None:
        correction = gn_timescale.CorrectionTable.from_csv(
            correction_table, source=sp3_in.header.timescale, target=target.upper()
        )
    sp3.write_sp3(gn_timescale.transpose(sp3_in, target.upper(), correction=correction), output)


@_click.command()
@_click.option("-i", "--input", "input_path", required=True, type=_click.Path(exists=True))
@_click.option("--sv", required=True, multiple=True, help="satellite(s) to interpolate, E.g. G01")
@_click.option("-e", "--epoch", "epochs", required=True, multiple=True, help="epoch(s), E.g. 2024-01-27T00:07:30")
@_click.option("--order", type=int, default=11, show_default=True, help="odd Lagrange interpolation order")
@_click.option("--verbose", is_flag=True)
def sp3interp(input_path, sv, epochs, order, verbose):
    """Prints Lagrange interpolated positions (km) of satellites at arbitrary epochs."""
    from . import gn_interp
    from .gn_io import sp3

    configure_logging(verbose)
    sp3_in = sp3.read_sp3(input_path)
    for epoch in epochs:
        for sat in sv:
            position = gn_interp.interpolate_position(sp3_in, sat, epoch, order=order)
            if position is None:
                _click.echo(f"{epoch} {sat} outside interpolation range")
            else:
                _click.echo(f"{epoch} {sat} {position[0]:.6f} {position[1]:.6f} {position[2]:.6f}")


@_click.command()
@_click.option("-i", "--input", "input_path", required=True, type=_click.Path(exists=True))
@_click.option("--verbose", is_flag=True)
def sp3info(input_path, verbose):
    """Prints a summary of an sp3 file's header and content."""
    from .gn_io import sp3

    configure_logging(verbose)
    sp3_in = sp3.read_sp3(input_path)
    header = sp3_in.header
    _click.echo(f"revision      : {header.revision.letter}")
    _click.echo(f"agency        : {header.agency}")
    _click.echo(f"timescale     : {header.timescale}")
    _click.echo(f"constellation : {header.constellation}")
    _click.echo(f"epochs        : {sp3_in.total_epochs} ({sp3_in.first_epoch} to {sp3_in.last_epoch})")
    _click.echo(f"interval      : {header.sampling_interval}")
    _click.echo(f"satellites    : {' '.join(sp3_in.satellites())}")
    if sp3_in.production is not None:
        _click.echo(f"availability  : {sp3_in.production.availability.long_name}")
    for warning in sp3_in.parse_warnings:
        _click.echo(f"warning       : {warning}")

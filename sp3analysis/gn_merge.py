"""Merging of SP3 models, E.g. consecutive daily files into one multi-day file.

Merging is strict: the inputs must describe data in the same frame, timescale and sampling, and wherever both
record a satellite at the same epoch the records must agree. Anything else raises rather than picking a winner.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

import numpy as _np
import pandas as _pd

from .gn_io.sp3 import read_sp3
from .gn_sp3_model import (
    SP3,
    SP3_FLAG_COLUMNS,
    SP3_POSITION_COLUMNS,
    SP3_VELOCITY_COLUMNS,
    SP3_VELOCITY_STD_COLUMNS,
    SP3Header,
    recompute_header,
    sort_sp3_frame,
)
from .gn_utils import StrictMode, StrictModes
from .sp3_errors import ConflictingSamples, IncompatibleHeaders, IncompatibleSamplingInterval

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-6

# Header fields two inputs must share, compared in this order
_MUST_MATCH = ("revision", "coord_system", "timescale", "orbit_type")


def check_compatibility(a: SP3Header, b: SP3Header) -> None:
    """Checks two headers describe data which can be combined

    :param SP3Header a: first header
    :param SP3Header b: second header
    :raises IncompatibleHeaders: naming the first field of revision, coordinate system, timescale and orbit type
        which differs
    :raises IncompatibleSamplingInterval: if the sampling intervals differ
    """
    for field in _MUST_MATCH:
        left, right = getattr(a, field), getattr(b, field)
        if field == "revision":
            left, right = left.letter, right.letter
        if left != right:
            raise IncompatibleHeaders(field, left, right)
    if a.sampling_interval != b.sampling_interval:
        raise IncompatibleSamplingInterval(a.sampling_interval, b.sampling_interval)


def merge_headers(a: SP3Header, b: SP3Header) -> SP3Header:
    """Header describing the union of two compatible inputs (epoch fields are recomputed later from the data).

    Satellites are the union in first-seen order, each with the worst (largest) accuracy exponent of the two.
    Differing agencies are combined as 2 characters from each. The data used becomes 'M' (mixed) when the inputs
    differ. Comments are combined without duplicates.
    """
    sv_accuracy = dict(a.sv_accuracy)
    for sv, code in b.sv_accuracy.items():
        sv_accuracy[sv] = max(sv_accuracy.get(sv, code), code)

    agency = a.agency
    if a.agency.strip() != b.agency.strip():
        # Use all 4 chars available - combine 2 chars from each
        agency = "".join(ac.strip()[:2] for ac in sorted({a.agency, b.agency}))[:4]
    data_used = a.data_used if a.data_used == b.data_used else "M"
    # If P and V files are merged, specify the minimum - positions only
    data_type = "V" if a.data_type == b.data_type == "V" else "P"

    comments = list(a.comments)
    comments += [line for line in b.comments if line not in comments]
    return a.copy(
        sv_accuracy=sv_accuracy,
        agency=agency,
        data_used=data_used,
        data_type=data_type,
        comments=tuple(comments),
    )


def _check_overlap(left: _pd.DataFrame, right: _pd.DataFrame, columns: List[tuple], tolerance: float) -> None:
    """Raises ConflictingSamples for the first common (epoch, sv) whose values or flags disagree"""
    common = left.index.intersection(right.index)
    if len(common) == 0:
        return
    logger.debug(f"Checking {len(common)} overlapping records")
    left, right = left.loc[common], right.loc[common]

    left_values = left[columns].to_numpy(dtype=float)
    right_values = right[columns].to_numpy(dtype=float)
    both_absent = _np.isnan(left_values) & _np.isnan(right_values)
    with _np.errstate(invalid="ignore"):
        close = _np.abs(left_values - right_values) <= tolerance
    bad_values = ~(close | both_absent)
    bad_flags = left[SP3_FLAG_COLUMNS].to_numpy(dtype=bool) != right[SP3_FLAG_COLUMNS].to_numpy(dtype=bool)

    bad_rows = _np.flatnonzero(bad_values.any(axis=1) | bad_flags.any(axis=1))
    if len(bad_rows) == 0:
        return
    row = bad_rows[0]
    epoch, sv = common[row]
    if bad_values[row].any():
        field = columns[int(_np.argmax(bad_values[row]))][1]
    else:
        field = SP3_FLAG_COLUMNS[int(_np.argmax(bad_flags[row]))][1]
    raise ConflictingSamples(epoch, sv, field)


def merge(a: SP3, b: SP3, tolerance: float = DEFAULT_TOLERANCE) -> SP3:
    """Merges two SP3 models into one covering the union of their epochs and satellites.

    :param SP3 a: first model. Where records overlap its standard deviations are kept.
    :param SP3 b: second model
    :param float tolerance: largest difference, in file units (km, microseconds, dm/s, 1e-4 microseconds/s),
        between overlapping values still considered equal, defaults to 1e-6
    :return SP3: merged model with header epoch fields recomputed from the merged data
    :raises IncompatibleHeaders: if revision, coordinate system, timescale or orbit type differ
    :raises IncompatibleSamplingInterval: if the sampling intervals differ
    :raises ConflictingSamples: if both record a satellite at an epoch and the records differ beyond tolerance
        (absent matching absent counts as equal), or their flags differ
    """
    check_compatibility(a.header, b.header)
    header = merge_headers(a.header, b.header)

    left, right = a.data, b.data
    columns = list(SP3_POSITION_COLUMNS)
    if header.data_type == "V":
        columns += SP3_VELOCITY_COLUMNS
    _check_overlap(left, right, columns, tolerance)

    merged = _pd.concat([left, right[~right.index.isin(left.index)]])
    if header.data_type != "V":
        merged.loc[:, SP3_VELOCITY_COLUMNS + SP3_VELOCITY_STD_COLUMNS] = _np.nan
    merged = sort_sp3_frame(merged, header.satellites)

    header = recompute_header(header, merged)
    logger.info(
        f"Merged {a.total_epochs} and {b.total_epochs} epochs into {header.num_epochs}, "
        f"{len(header.satellites)} satellites"
    )
    return SP3(header, merged)


def merge_files(
    sp3paths: Sequence[Union[str, Path]],
    strict_mode: type[StrictMode] = StrictModes.STRICT_WARN,
    tolerance: float = DEFAULT_TOLERANCE,
) -> SP3:
    """Reads in a list of sp3 files and merges them (left to right) into a single SP3 model.

    :param Sequence[str | Path] sp3paths: The list of paths to the sp3 files
    :param type[StrictMode] strict_mode: passed on to read_sp3()
    :param float tolerance: see merge()
    :return SP3: The merged SP3 model
    :raises ValueError: if no paths are given
    """
    if len(sp3paths) == 0:
        raise ValueError("No sp3 files to merge")
    merged = None
    for path in sp3paths:
        logger.info(f"Reading file: {path}")
        sp3 = read_sp3(path, strict_mode=strict_mode)
        merged = sp3 if merged is None else merge(merged, sp3, tolerance=tolerance)
    return merged

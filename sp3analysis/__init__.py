from . import (
    filenames,
    gn_const,
    gn_datetime,
    gn_interp,
    gn_io,
    gn_merge,
    gn_processing,
    gn_sp3_model,
    gn_timescale,
    gn_utils,
    solution_types,
    sp3_errors,
    sp3_revisions,
)

__version__ = "0.1.0"

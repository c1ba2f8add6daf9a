# SP3 content shared by the tests. The sample files are written in the exact layout gen_sp3_header() and
# gen_sp3_content() produce, so they also serve as expected writer output.

import numpy as np
import pandas as pd

from sp3analysis.gn_sp3_model import (
    SP3,
    SP3_FLAG_COLUMNS,
    SP3_VALUE_COLUMNS,
    SP3Header,
    build_sp3_frame,
)
from sp3analysis.sp3_revisions import SP3Revisions

# SP3-c, positions only, GPS only, 3 epochs at 15 minutes. Epoch 2 flags G02 with a clock event, a clock prediction
# and a manoeuvre. At epoch 3 G01 has no clock (and a clock event) and G02 has no position.
sp3c_example = b"""#cP2024  1 27  0  0  0.00000000       3 ORBIT IGS14 HLM  IGS
## 2298 518400.00000000   900.00000000 60336 0.0000000000000
+    2   G01G02  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         7  8  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
%c G  cc GPS ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc
%c cc cc ccc ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc
%f  1.2500000  1.025000000  0.00000000000  0.000000000000000
%f  0.0000000  0.000000000  0.00000000000  0.000000000000000
%i    0    0    0    0      0      0      0      0         0
%i    0    0    0    0      0      0      0      0         0
/* IGS FINAL ORBIT COMBINATION
/* REFERENCE FRAME: IGS14
/* CLOCKS ALIGNED TO GPS TIME
/* TEST SAMPLE
*  2024  1 27  0  0  0.00000000
PG01 -13479.409874  22085.557185   5823.734118    -32.412345 10  9 11 123
PG02  15422.231234 -21337.879544  -1001.234566    421.123456  9  9  9 100
*  2024  1 27  0 15  0.00000000
PG01 -12969.283745  21588.163418   9009.672134    -32.412789 10  9 11 123
PG02  16208.470023 -20203.318271  -4455.761002    421.124021  9  9  9 100 EP  M
*  2024  1 27  0 30  0.00000000
PG01 -12228.501176  20690.446925  12033.540871 999999.999999 10  9 11 123 E
PG02      0.000000      0.000000      0.000000    421.124602
EOF
"""

# SP3-d, positions and velocities, mixed GPS / GLONASS, 2 epochs at 5 minutes. R01 has no clock or clock rate.
sp3d_example = b"""#dV2024  1 27  0  0  0.00000000       2   u+U IGS20 FIT  GAA
## 2298 518400.00000000   300.00000000 60336 0.0000000000000
+    2   G01R01  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
+          0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         5  6  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0
%c M  cc GPS ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc
%c cc cc ccc ccc cccc cccc cccc cccc ccccc ccccc ccccc ccccc
%f  1.2500000  1.025000000  0.00000000000  0.000000000000000
%f  0.0000000  0.000000000  0.00000000000  0.000000000000000
%i    0    0    0    0      0      0      0      0         0
%i    0    0    0    0      0      0      0      0         0
/* GA ANALYSIS CENTRE MULTI-GNSS RAPID ORBITS
/* SAMPLE SP3-D FILE WITH VELOCITIES
/* GLONASS CLOCKS NOT ESTIMATED
/* TEST SAMPLE
*  2024  1 27  0  0  0.00000000
PG01   3513.224153 -17294.836016  19695.447221    102.551234
VG01  24710.383211  11216.112345   5434.500011     -1.234500
PR01  -2147.225610  13598.125617  21866.711002 999999.999999
VR01 -30012.118765   3119.448761  -2110.778899 999999.999999
*  2024  1 27  0  5  0.00000000
PG01   4381.109554 -16255.117442  20458.713321    102.551990
VG01  23434.512229  12398.011223   3297.144998     -1.233120
PR01  -3040.145599  14062.007218  21231.210005 999999.999999
VR01 -29533.871123   2066.239871  -5086.010012 999999.999999
EOF
"""

# Header only part of sp3c_example, up to (not including) the first epoch line
sp3c_example_header = sp3c_example.split(b"*  2024", 1)[0]

# Crafted broken variants of sp3c_example
sp3_unsupported_revision = sp3c_example.replace(b"#cP", b"#aP", 1)
sp3_truncated_header_line = sp3c_example.replace(
    b"## 2298 518400.00000000   900.00000000 60336 0.0000000000000", b"## 2298 518400.00000000   900.00000000", 1
)
sp3_non_monotonic_epoch = sp3c_example.replace(b"*  2024  1 27  0 30", b"*  2024  1 27  0 10", 1)
sp3_duplicate_epoch = sp3c_example.replace(b"*  2024  1 27  0 30", b"*  2024  1 27  0 15", 1)
sp3_unknown_satellite = sp3c_example.replace(b"PG02  15422.231234", b"PG05  15422.231234", 1)
sp3_invalid_flag = sp3c_example.replace(b"123 E\n", b"123 X\n", 1)
sp3_missing_eof = sp3c_example.replace(b"EOF\n", b"", 1)
sp3_too_few_accuracy_codes = sp3c_example.replace(
    b"++         7  8  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0\n", b"", 1
).replace(b"++         0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0  0\n", b"")
sp3_with_correlation_records = sp3c_example.replace(
    b"PG02  15422.231234 -21337.879544  -1001.234566    421.123456  9  9  9 100\n",
    b"PG02  15422.231234 -21337.879544  -1001.234566    421.123456  9  9  9 100\n"
    b"EP     55     55     55     222 1234567 -1234567 5999999      -30      21 -1230000\n",
    1,
)
sp3_wrong_epoch_count = sp3c_example.replace(b"       3 ORBIT", b"       5 ORBIT", 1)
sp3_data_before_epoch = sp3c_example.replace(
    b"*  2024  1 27  0  0  0.00000000\n", b"PG01 -13479.409874  22085.557185   5823.734118    -32.412345\n", 1
)
# Single blank components, distinct from the all-zero no-data vector
sp3_partially_blank_position = sp3c_example.replace(b"PG01 -13479.409874", b"PG01" + b" " * 14, 1)
sp3_partially_blank_velocity = sp3d_example.replace(b"24710.383211  11216.112345", b"24710.383211" + b" " * 14, 1)


# Nominal GPS-like orbit: radius (km), period (s) and inclination (rad)
ORBIT_RADIUS_KM = 26560.0
ORBIT_PERIOD_SEC = 43082.0
ORBIT_INCLINATION = np.radians(55.0)


def circular_orbit_positions(seconds: np.ndarray, phase: float) -> np.ndarray:
    """Positions (km) along a circular orbit, at seconds since the first epoch"""
    angle = 2 * np.pi * seconds / ORBIT_PERIOD_SEC + phase
    return np.column_stack(
        [
            ORBIT_RADIUS_KM * np.cos(angle),
            ORBIT_RADIUS_KM * np.sin(angle) * np.cos(ORBIT_INCLINATION),
            ORBIT_RADIUS_KM * np.sin(angle) * np.sin(ORBIT_INCLINATION),
        ]
    )


def linear_clock(seconds: np.ndarray, offset: float) -> np.ndarray:
    """Clock offsets (microseconds) drifting at 1e-11 s/s"""
    return offset + 1e-5 * seconds


def uniform_sp3(
    num_epochs: int = 30,
    interval_sec: int = 900,
    svs=("G01", "G02"),
    start: str = "2024-01-27 00:00:00",
    coord_system: str = "IGS20",
    timescale: str = "GPS",
    agency: str = "GAA",
) -> SP3:
    """SP3 model of satellites on circular orbits with linear clocks, sampled uniformly. Values are rounded to the
    6 decimals an SP3 file carries."""
    first_epoch = pd.Timestamp(start)
    seconds = np.arange(num_epochs) * float(interval_sec)
    epochs = first_epoch + pd.to_timedelta(seconds, unit="s")

    per_sv = []
    for i, sv in enumerate(svs):
        values = np.full((num_epochs, len(SP3_VALUE_COLUMNS)), np.nan)
        values[:, 0:3] = np.round(circular_orbit_positions(seconds, phase=i * 0.7), 6)
        values[:, 3] = np.round(linear_clock(seconds, offset=10.0 * (i + 1)), 6)
        per_sv.append(values)

    index = pd.MultiIndex.from_arrays(
        [
            pd.DatetimeIndex(np.repeat(epochs.values, len(svs))).as_unit("ns"),
            pd.Index(list(svs) * num_epochs, dtype=object),
        ],
        names=["EPOCH", "PRN"],
    )
    values = np.stack(per_sv, axis=1).reshape(num_epochs * len(svs), len(SP3_VALUE_COLUMNS))
    data = build_sp3_frame(index, values, np.zeros((len(index), len(SP3_FLAG_COLUMNS)), dtype=bool))

    header = SP3Header(
        revision=SP3Revisions.D,
        data_type="P",
        first_epoch=first_epoch,
        num_epochs=num_epochs,
        data_used="ORBIT",
        coord_system=coord_system,
        orbit_type="FIT",
        agency=agency,
        gps_week=0,
        seconds_of_week=0.0,
        sampling_interval=pd.Timedelta(seconds=interval_sec),
        mjd=0,
        mjd_fraction=0.0,
        file_type="G",
        timescale=timescale,
        sv_accuracy={sv: 5 for sv in svs},
        comments=(
            "/* SYNTHETIC CIRCULAR ORBITS",
            "/* LINEAR CLOCKS",
            "/*",
            "/*",
        ),
    ).rebased(first_epoch)
    return SP3(header, data)

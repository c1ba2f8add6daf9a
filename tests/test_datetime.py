import unittest
from datetime import datetime as _datetime

import numpy as np
import pandas as pd

from sp3analysis import gn_datetime


class TestDateTime(unittest.TestCase):
    def test_rnxdt_round_trip(self):
        # Ensure formatting comes out as expected
        # E.g. '2021  5 22  0  0  0.00000000' -> 2021-05-22T00:00:00 -> '2021  5 22  0  0  0.00000000'
        for rnxdt in ("2021  5 22  0  0  0.00000000", "2024  1 27 23 59 42.12345678", "1999 12 31  0  0 59.99999999"):
            with self.subTest(rnxdt=rnxdt):
                self.assertEqual(gn_datetime.datetime_to_rnxdt(gn_datetime.rnxdt_to_datetime(rnxdt)), rnxdt)

    def test_rnxdt_parsing(self):
        self.assertEqual(
            gn_datetime.rnxdt_to_datetime("2024 1 27 0 15 4.5"), pd.Timestamp("2024-01-27 00:15:04.5")
        )
        self.assertEqual(
            gn_datetime.rnxdt_to_datetime("2024  1 27  0  0  0.00000001").nanosecond, 10
        )
        with self.assertRaises(ValueError):
            gn_datetime.rnxdt_to_datetime("2024  1 27  0  0")
        with self.assertRaises(ValueError):
            gn_datetime.rnxdt_to_datetime("2024  1 27  0  0 xx.000")

    def test_seconds_str_to_ns(self):
        self.assertEqual(gn_datetime.seconds_str_to_ns("900.00000000"), 900 * 10**9)
        self.assertEqual(gn_datetime.seconds_str_to_ns(" 4.12345678"), 4123456780)
        self.assertEqual(gn_datetime.seconds_str_to_ns("-0.5"), -500000000)
        self.assertEqual(gn_datetime.seconds_str_to_ns(".25"), 250000000)
        with self.assertRaises(ValueError):
            gn_datetime.seconds_str_to_ns("1e3")
        with self.assertRaises(ValueError):
            gn_datetime.seconds_str_to_ns("")

    def test_timedelta_to_seconds_str(self):
        self.assertEqual(gn_datetime.timedelta_to_seconds_str(pd.Timedelta(minutes=15), 14), "  900.00000000")

    def test_to_timestamp(self):
        ts = gn_datetime.to_timestamp(pd.Timestamp("2024-01-27 10:00", tz="Australia/Sydney"))
        self.assertIsNone(ts.tzinfo)
        self.assertEqual(ts, pd.Timestamp("2024-01-26 23:00"))
        self.assertEqual(gn_datetime.to_timestamp(_datetime(2024, 1, 27)), pd.Timestamp("2024-01-27"))

    def test_datetime2ns(self):
        self.assertEqual(gn_datetime.datetime2ns("1970-01-01 00:00:01"), 10**9)
        np.testing.assert_array_equal(
            gn_datetime.datetime2ns(pd.DatetimeIndex(["1970-01-01", "1970-01-02"])), [0, 86400 * 10**9]
        )


class TestGPSTime(unittest.TestCase):
    def test_gps_week_seconds(self):
        # Saturday 2024-01-27 is day 6 of GPS week 2298
        self.assertEqual(gn_datetime.datetime2gpsweeksec("2024-01-27"), (2298, 518400.0))
        self.assertEqual(gn_datetime.datetime2gpsweeksec("2024-01-28 00:00:01"), (2299, 1.0))
        self.assertEqual(gn_datetime.datetime2gpsweeksec("1980-01-06"), (0, 0.0))

    def test_mjd(self):
        self.assertEqual(gn_datetime.datetime2mjd("2024-01-27"), (60336, 0.0))
        self.assertEqual(gn_datetime.datetime2mjd("2024-01-27 18:00"), (60336, 0.75))

    def test_j2000(self):
        # 674913600 -> '2021-05-22T00:00:00'
        self.assertEqual(gn_datetime.datetime2j2000("2021-05-22"), 674913600.0)
        self.assertEqual(gn_datetime.datetime2j2000("2000-01-01"), -43200.0)

    def test_yydoy(self):
        self.assertEqual(gn_datetime.datetime2yydoy("2021-08-31"), (2021, 243))
        self.assertEqual(gn_datetime.yydoy2datetime(2024, 27), pd.Timestamp("2024-01-27"))
        self.assertEqual(gn_datetime.yydoy2datetime(2024, 366, 23, 45), pd.Timestamp("2024-12-31 23:45"))

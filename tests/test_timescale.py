import io
import unittest

import numpy as np
import pandas as pd

from sp3analysis import gn_datetime, gn_timescale
from sp3analysis.sp3_errors import CorrectionTableCoverage
from test_datasets.sp3_test_data import uniform_sp3

NS = 10**9


class TestOffsets(unittest.TestCase):
    def setUp(self):
        self.epochs = gn_datetime.datetime2ns(pd.DatetimeIndex(["2024-01-27", "2024-06-01"]))

    def test_tai_offsets(self):
        np.testing.assert_array_equal(gn_timescale.tai_offset_seconds("GPS", self.epochs), [-19, -19])
        np.testing.assert_array_equal(gn_timescale.tai_offset_seconds("GAL", self.epochs), [-19, -19])
        np.testing.assert_array_equal(gn_timescale.tai_offset_seconds("BDT", self.epochs), [-33, -33])
        np.testing.assert_array_equal(gn_timescale.tai_offset_seconds("UTC", self.epochs), [-37, -37])
        np.testing.assert_array_equal(gn_timescale.tai_offset_seconds("GLO", self.epochs), [10763, 10763])

    def test_leap_seconds(self):
        epochs = gn_datetime.datetime2ns(
            pd.DatetimeIndex(["1979-12-31", "1999-01-01", "2016-12-31 23:59:59", "2017-01-01"])
        )
        np.testing.assert_array_equal(gn_timescale.leap_seconds(epochs), [0, 32, 36, 37])

    def test_coarse_correction(self):
        coarse = gn_timescale.CoarseCorrection()
        np.testing.assert_array_equal(coarse.offsets(self.epochs, "GPS", "UTC"), [-18 * NS, -18 * NS])
        np.testing.assert_array_equal(coarse.offsets(self.epochs, "UTC", "GPS"), [18 * NS, 18 * NS])
        np.testing.assert_array_equal(coarse.offsets(self.epochs, "GPS", "BDT"), [-14 * NS, -14 * NS])

    def test_unknown_timescale(self):
        with self.assertRaises(ValueError):
            gn_timescale.tai_offset_seconds("XYZ", self.epochs)


class TestTranspose(unittest.TestCase):
    def setUp(self):
        self.sp3 = uniform_sp3(num_epochs=30)

    def test_gps_to_utc(self):
        utc = gn_timescale.transpose(self.sp3, "UTC")
        self.assertEqual(utc.header.timescale, "UTC")
        self.assertEqual(utc.first_epoch, pd.Timestamp("2024-01-26 23:59:42"))
        self.assertEqual(utc.header.first_epoch, utc.first_epoch)
        self.assertEqual(utc.header.gps_week, 2298)
        self.assertEqual(utc.header.seconds_of_week, 518382.0)
        self.assertEqual(utc.total_epochs, 30)
        self.assertEqual(utc.satellites(), self.sp3.satellites())
        # Only the time axis changes
        pd.testing.assert_frame_equal(utc.data.reset_index(drop=True), self.sp3.data.reset_index(drop=True))
        # Input unchanged
        self.assertEqual(self.sp3.header.timescale, "GPS")

    def test_round_trip(self):
        back = gn_timescale.transpose(gn_timescale.transpose(self.sp3, "UTC"), "GPS")
        self.assertEqual(back.header.timescale, "GPS")
        pd.testing.assert_index_equal(back.epochs(), self.sp3.epochs())
        self.assertEqual(back.header, self.sp3.header)

    def test_other_systems(self):
        bdt = gn_timescale.transpose(self.sp3, "BDT")
        self.assertEqual(bdt.first_epoch - self.sp3.first_epoch, pd.Timedelta(seconds=-14))
        glo = gn_timescale.transpose(self.sp3, "GLO")
        self.assertEqual(glo.first_epoch - self.sp3.first_epoch, pd.Timedelta(seconds=10782))
        gal = gn_timescale.transpose(self.sp3, "GAL")
        self.assertEqual(gal.first_epoch, self.sp3.first_epoch)

    def test_across_leap_second(self):
        sp3 = uniform_sp3(num_epochs=6, interval_sec=300, start="2016-12-31 23:45:00")
        utc = gn_timescale.transpose(sp3, "UTC")
        self.assertEqual(utc.epochs()[0], pd.Timestamp("2016-12-31 23:44:43"))
        self.assertEqual(utc.epochs()[3], pd.Timestamp("2016-12-31 23:59:42"))

        back = gn_timescale.transpose(utc, "GPS")
        self.assertEqual(back.total_epochs, sp3.total_epochs)
        self.assertEqual(back.satellites(), sp3.satellites())
        drift = np.abs(gn_datetime.datetime2ns(back.epochs()) - gn_datetime.datetime2ns(sp3.epochs()))
        self.assertLessEqual(drift.max(), NS)

    def test_same_timescale(self):
        same = gn_timescale.transpose(self.sp3, "gps")
        self.assertIsNot(same, self.sp3)
        self.assertEqual(same, self.sp3)

    def test_unknown_target(self):
        with self.assertRaises(ValueError):
            gn_timescale.transpose(self.sp3, "LOCAL")


class TestCorrectionTable(unittest.TestCase):
    def setUp(self):
        self.sp3 = uniform_sp3(num_epochs=30)
        self.t0 = self.sp3.first_epoch

    def test_constant_bias(self):
        table = gn_timescale.CorrectionTable(
            "GPS", "UTC", [self.t0, self.t0 + pd.Timedelta(days=1)], [-18.0, -18.0]
        )
        self.assertEqual(
            gn_timescale.transpose(self.sp3, "UTC", correction=table),
            gn_timescale.transpose(self.sp3, "UTC"),
        )

    def test_linear_bias(self):
        last = self.sp3.last_epoch
        table = gn_timescale.CorrectionTable("GPS", "GAL", [self.t0, last], [0.0, 29.0])
        gal = gn_timescale.transpose(self.sp3, "GAL", correction=table)
        expected = self.sp3.epochs() + pd.to_timedelta(np.arange(30), unit="s")
        pd.testing.assert_index_equal(gal.epochs(), expected, check_names=False)
        self.assertEqual(gal.header.timescale, "GAL")

    def test_reverse_use(self):
        table = gn_timescale.CorrectionTable("UTC", "GPS", [self.t0, self.t0 + pd.Timedelta(days=1)], [18.5, 18.5])
        utc = gn_timescale.transpose(self.sp3, "UTC", correction=table)
        self.assertEqual(utc.first_epoch, self.t0 - pd.Timedelta(seconds=18.5))

    def test_insufficient_coverage(self):
        table = gn_timescale.CorrectionTable(
            "GPS", "UTC", [self.t0, self.t0 + pd.Timedelta(hours=1)], [-18.0, -18.0]
        )
        with self.assertRaises(CorrectionTableCoverage):
            gn_timescale.transpose(self.sp3, "UTC", correction=table)

    def test_wrong_pair(self):
        table = gn_timescale.CorrectionTable("GPS", "GAL", [self.t0, self.t0 + pd.Timedelta(days=1)], [0.0, 0.0])
        with self.assertRaises(ValueError):
            gn_timescale.transpose(self.sp3, "UTC", correction=table)

    def test_invalid_tables(self):
        with self.assertRaises(ValueError):
            gn_timescale.CorrectionTable("GPS", "UTC", [], [])
        with self.assertRaises(ValueError):
            gn_timescale.CorrectionTable("GPS", "UTC", [self.t0], [1.0, 2.0])
        with self.assertRaises(ValueError):
            gn_timescale.CorrectionTable("GPS", "UTC", [self.t0, self.t0], [1.0, 2.0])

    def test_from_csv(self):
        csv = io.StringIO(
            "epoch,bias_seconds\n"
            "2024-01-28 00:00:00,-18.0\n"
            "2024-01-27 00:00:00,-18.0\n"
        )
        table = gn_timescale.CorrectionTable.from_csv(csv, "GPS", "UTC")
        self.assertEqual(repr(table), "CorrectionTable(GPS->UTC, 2 samples)")
        utc = gn_timescale.transpose(self.sp3, "UTC", correction=table)
        self.assertEqual(utc.first_epoch, pd.Timestamp("2024-01-26 23:59:42"))

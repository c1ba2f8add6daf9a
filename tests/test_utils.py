import logging
import os
import unittest

from click.testing import CliRunner

import sp3analysis.gn_utils as ga_utils
from sp3analysis.gn_io import sp3
from sp3analysis.gn_processing import split
from test_datasets.sp3_test_data import uniform_sp3


class TestUtils(unittest.TestCase):
    def test_configure_logging(self):

        # Set up verbose logger:
        logger_verbose = ga_utils.configure_logging(verbose=True, output_logger=True)

        # Verify
        self.assertEqual(type(logger_verbose), logging.RootLogger)
        self.assertEqual(logger_verbose.level, 10)

        # Set up not verbose logger:
        logger_not_verbose = ga_utils.configure_logging(verbose=False, output_logger=True)

        # Verify
        self.assertEqual(type(logger_not_verbose), logging.RootLogger)
        self.assertEqual(logger_not_verbose.level, 20)

        # Set up logger without output:
        logger_not_output = ga_utils.configure_logging(verbose=True, output_logger=False)

        # Verify
        self.assertEqual(logger_not_output, None)

    def test_strict_modes(self):
        self.assertEqual(ga_utils.StrictModes.from_name("raise"), ga_utils.STRICT_RAISE)
        self.assertEqual(ga_utils.StrictModes.from_name("WARN"), ga_utils.STRICT_WARN)
        self.assertEqual(ga_utils.StrictModes.from_name("off"), ga_utils.STRICT_OFF)
        self.assertRaises(ValueError, ga_utils.StrictModes.from_name, name="loud")

        def instantiate_strict_mode():
            ga_utils.STRICT_WARN()

        def update_strict_mode():
            ga_utils.StrictModes.STRICT_WARN = ga_utils.STRICT_OFF

        self.assertRaises(Exception, instantiate_strict_mode)
        self.assertRaises(AttributeError, update_strict_mode)


class TestCommandLine(unittest.TestCase):
    """Runs the console entry points against files written to a temporary directory"""

    def setUp(self):
        self.runner = CliRunner()
        self.sp3 = uniform_sp3(num_epochs=30)

    def test_sp3info(self):
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "orbits.sp3")
            result = self.runner.invoke(ga_utils.sp3info, ["-i", "orbits.sp3"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("revision      : d", result.output)
        self.assertIn("timescale     : GPS", result.output)
        self.assertIn("epochs        : 30", result.output)
        self.assertIn("satellites    : G01 G02", result.output)
        self.assertNotIn("warning", result.output)

    def test_sp3interp(self):
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "orbits.sp3")
            result = self.runner.invoke(
                ga_utils.sp3interp,
                ["-i", "orbits.sp3", "--sv", "G01", "-e", "2024-01-27T03:52:30", "-e", "2024-01-27T00:00:00"],
            )
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.output.strip().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(len(lines[0].split()), 5)
        self.assertEqual(lines[1], "2024-01-27T00:00:00 G01 outside interpolation range")

    def test_sp3interp_even_order(self):
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "orbits.sp3")
            result = self.runner.invoke(
                ga_utils.sp3interp, ["-i", "orbits.sp3", "--sv", "G01", "-e", "2024-01-27T03:52:30", "--order", "10"]
            )
        self.assertNotEqual(result.exit_code, 0)

    def test_sp3merge(self):
        before, after = split(self.sp3, self.sp3.first_epoch + self.sp3.header.sampling_interval * 12)
        with self.runner.isolated_filesystem():
            sp3.write_sp3(before, "first.sp3")
            sp3.write_sp3(after, "second.sp3")
            result = self.runner.invoke(
                ga_utils.sp3merge, ["-s", "first.sp3", "-s", "second.sp3", "-o", "merged.sp3.gz"]
            )
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(os.path.exists("merged.sp3.gz"))
            merged = sp3.read_sp3("merged.sp3.gz")
        self.assertEqual(merged.total_epochs, 30)
        self.assertEqual(merged.header.num_epochs, 30)

    def test_sp3merge_conflict(self):
        shifted = uniform_sp3(num_epochs=30, coord_system="IGb14")
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "first.sp3")
            sp3.write_sp3(shifted, "second.sp3")
            result = self.runner.invoke(
                ga_utils.sp3merge, ["-s", "first.sp3", "-s", "second.sp3", "-o", "merged.sp3"]
            )
            self.assertFalse(os.path.exists("merged.sp3"))
        self.assertNotEqual(result.exit_code, 0)

    def test_sp3transpose(self):
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "orbits.sp3")
            result = self.runner.invoke(ga_utils.sp3transpose, ["-i", "orbits.sp3", "-t", "utc", "-o", "utc.sp3"])
            self.assertEqual(result.exit_code, 0, result.output)
            transposed = sp3.read_sp3("utc.sp3")
        self.assertEqual(transposed.header.timescale, "UTC")
        self.assertEqual(transposed.total_epochs, 30)
        self.assertEqual(str(transposed.first_epoch), "2024-01-26 23:59:42")

    def test_sp3transpose_correction_table(self):
        with self.runner.isolated_filesystem():
            sp3.write_sp3(self.sp3, "orbits.sp3")
            with open("bias.csv", "w") as csv_file:
                csv_file.write("epoch,bias_seconds\n2024-01-27 00:00:00,-18.5\n2024-01-28 00:00:00,-18.5\n")
            result = self.runner.invoke(
                ga_utils.sp3transpose, ["-i", "orbits.sp3", "-t", "UTC", "-c", "bias.csv", "-o", "utc.sp3"]
            )
            self.assertEqual(result.exit_code, 0, result.output)
            transposed = sp3.read_sp3("utc.sp3")
        self.assertEqual(str(transposed.first_epoch), "2024-01-26 23:59:41.500000")

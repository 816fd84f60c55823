import math
import unittest

from folio.engine.buckets import format_number, validate_buckets
from folio.engine.models import AllocationBucket


def _b(name, percent, id_=None):
    return AllocationBucket(id=id_ or name.lower() or "x", name=name, percent=percent)


class ValidateBucketsTests(unittest.TestCase):
    def test_default_split_is_valid(self):
        result = validate_buckets([_b("Safe", 50), _b("Growth", 40), _b("Asymmetric", 10)])
        self.assertTrue(result.ok)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.sum, 100)

    def test_sum_short_of_100(self):
        result = validate_buckets([_b("Safe", 60), _b("Growth", 30)])
        self.assertFalse(result.ok)
        self.assertEqual(result.sum, 90)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("sum to 100 (currently 90)", result.errors[0])

    def test_empty_set(self):
        result = validate_buckets([])
        self.assertFalse(result.ok)
        self.assertIn("Add at least 1 allocation bucket.", result.errors)

    def test_errors_accumulate(self):
        result = validate_buckets([_b("", 110, id_="b1"), _b("Risky", -10)])
        self.assertFalse(result.ok)
        self.assertEqual(
            result.errors,
            [
                "Bucket name cannot be empty.",
                "Bucket percent cannot be negative (Risky).",
            ],
        )
        self.assertEqual(result.sum, 100)

    def test_non_numeric_percent_counts_as_zero(self):
        result = validate_buckets([_b("Safe", None), _b("Growth", 100)])
        self.assertFalse(result.ok)
        self.assertEqual(result.errors, ["Bucket percent must be a number (Safe)."])
        self.assertEqual(result.sum, 100)

    def test_sum_is_always_finite(self):
        result = validate_buckets([_b("A", float("nan")), _b("B", float("inf")), _b("C", float("-inf"))])
        self.assertTrue(math.isfinite(result.sum))
        self.assertIn("Bucket percent cannot be negative (C).", result.errors)
        self.assertIn("Bucket percents must sum to 100 (currently 0).", result.errors)

    def test_rounding_tolerates_float_drift(self):
        result = validate_buckets([_b("A", 33.33), _b("B", 33.33), _b("C", 33.34)])
        self.assertTrue(result.ok, result.errors)
        result = validate_buckets([_b("A", 0.1), _b("B", 0.2), _b("C", 99.7)])
        self.assertTrue(result.ok, result.errors)

    def test_off_by_more_than_rounding(self):
        result = validate_buckets([_b("A", 50), _b("B", 49.5)])
        self.assertFalse(result.ok)
        self.assertIn("currently 99.5", result.errors[-1])

    def test_label_falls_back_to_id(self):
        result = validate_buckets([AllocationBucket(id="b9", name="", percent=float("inf"))])
        self.assertIn("Bucket percent must be a number (b9).", result.errors)


class FormatNumberTests(unittest.TestCase):
    def test_integers_have_no_decimal(self):
        self.assertEqual(format_number(90.0), "90")
        self.assertEqual(format_number(12.5), "12.5")


if __name__ == "__main__":
    unittest.main()

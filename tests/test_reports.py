import unittest

from folio.engine.allocation import compute_allocation
from folio.engine.models import AllocationBucket, Asset, Holding, Strategy
from folio.engine.reports import build_weekly_report, summarize_drift

STRATEGY = Strategy(
    id="s1",
    name="Plan",
    buckets=(AllocationBucket("safe", "Safe", 50), AllocationBucket("growth", "Growth", 50)),
)


class SummarizeDriftTests(unittest.TestCase):
    def test_no_holdings(self):
        self.assertEqual(summarize_drift(compute_allocation(STRATEGY, [], [])), "No holdings yet.")

    def test_on_target(self):
        assets = [Asset("a", "s1", "A", "cash", "safe"), Asset("b", "s1", "B", "brokerage", "growth")]
        holdings = [Holding("1", "a", "2024-01-01", 100), Holding("2", "b", "2024-01-01", 100)]
        self.assertEqual(summarize_drift(compute_allocation(STRATEGY, assets, holdings)), "All buckets on target.")

    def test_notable_buckets_listed(self):
        assets = [Asset("a", "s1", "A", "cash", "safe"), Asset("b", "s1", "B", "brokerage", "growth")]
        holdings = [Holding("1", "a", "2024-01-01", 75), Holding("2", "b", "2024-01-01", 25)]
        self.assertEqual(
            summarize_drift(compute_allocation(STRATEGY, assets, holdings)),
            "Safe +25.0% overweight; Growth -25.0% underweight",
        )


class BuildWeeklyReportTests(unittest.TestCase):
    def test_payload(self):
        assets = [Asset("a", "s1", "House", "property", "safe")]
        holdings = [Holding("1", "a", "2024-01-01", 1000)]
        report = build_weekly_report(STRATEGY, assets, holdings, "2024-01-07", "2024-01-07", notes="hi")
        self.assertEqual(report["start_date"], "2024-01-07")
        self.assertEqual(report["end_date"], "2024-01-07")
        self.assertEqual(report["net_worth"], 1000.0)
        self.assertEqual(report["breakdown"]["property"], 1000.0)
        self.assertEqual(report["notes"], "hi")
        self.assertEqual(report["drift_summary"], "Safe +50.0% overweight; Growth -50.0% underweight")


if __name__ == "__main__":
    unittest.main()

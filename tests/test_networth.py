import unittest

from folio.engine.holdings import as_number, latest_holdings_by_asset
from folio.engine.models import CATEGORIES, Asset, Holding
from folio.engine.networth import net_worth_by_category


def _asset(id_, category, bucket_id=None):
    return Asset(id=id_, strategy_id="s1", name=id_.upper(), category=category, bucket_id=bucket_id)


class LatestHoldingTests(unittest.TestCase):
    def test_greatest_as_of_wins(self):
        holdings = [
            Holding("h1", "a", "2024-01-01", 10),
            Holding("h2", "a", "2024-03-01", 30),
            Holding("h3", "a", "2024-02-01", 20),
        ]
        self.assertEqual(latest_holdings_by_asset(holdings)["a"].id, "h2")

    def test_tie_keeps_first_seen(self):
        holdings = [Holding("first", "a", "2024-01-01", 1), Holding("second", "a", "2024-01-01", 2)]
        self.assertEqual(latest_holdings_by_asset(holdings)["a"].id, "first")
        self.assertEqual(latest_holdings_by_asset(list(reversed(holdings)))["a"].id, "second")


class AsNumberTests(unittest.TestCase):
    def test_coercion(self):
        self.assertEqual(as_number(None), 0.0)
        self.assertEqual(as_number("abc"), 0.0)
        self.assertEqual(as_number(float("nan")), 0.0)
        self.assertEqual(as_number(float("inf")), 0.0)
        self.assertEqual(as_number("12.5"), 12.5)
        self.assertEqual(as_number(7), 7.0)


class NetWorthTests(unittest.TestCase):
    def test_breakdown_and_total(self):
        assets = [_asset("house", "property"), _asset("bank", "cash"), _asset("btc", "crypto")]
        holdings = [
            Holding("1", "house", "2024-01-01", 500000),
            Holding("2", "bank", "2024-01-01", 15000),
            Holding("3", "bank", "2024-02-01", 20000),
            Holding("4", "btc", "2024-02-01", None),
        ]
        result = net_worth_by_category(assets, holdings)
        self.assertEqual(
            result.breakdown,
            {"property": 500000.0, "cash": 20000.0, "brokerage": 0.0, "crypto": 0.0, "other": 0.0},
        )
        self.assertEqual(result.total, 520000.0)

    def test_empty_inputs_fully_populated(self):
        result = net_worth_by_category([], [])
        self.assertEqual(set(result.breakdown), set(CATEGORIES))
        self.assertEqual(result.total, 0.0)

    def test_dangling_asset_counts_as_other(self):
        result = net_worth_by_category([], [Holding("1", "ghost", "2024-01-01", 42)])
        self.assertEqual(result.breakdown["other"], 42.0)
        self.assertEqual(result.total, 42.0)

    def test_total_matches_breakdown(self):
        assets = [_asset(f"a{i}", CATEGORIES[i % 5]) for i in range(12)]
        holdings = [Holding(f"h{i}", f"a{i}", "2024-01-01", i * 1.1) for i in range(12)]
        result = net_worth_by_category(assets, holdings)
        self.assertAlmostEqual(result.total, sum(result.breakdown.values()))
        self.assertTrue(all(v >= 0 for v in result.breakdown.values()))


if __name__ == "__main__":
    unittest.main()

import tempfile
import unittest

from fastapi.testclient import TestClient

from folio.main import create_app

from tests.helpers import make_settings

CSV = "name,category,value\nHouse,property,500000\nSavings,cash,20000\n"


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.app = create_app(make_settings(self.tmp.name))
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.auth = self._sign_in("owner@example.com")

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.tmp.cleanup()

    def _sign_in(self, email):
        r = self.client.post("/auth/signup", json={"email": email, "password": "password123"})
        self.assertEqual(r.status_code, 201, r.text)
        r = self.client.post("/auth/signin", json={"email": email, "password": "password123"})
        self.assertEqual(r.status_code, 200, r.text)
        return {"Authorization": f"Bearer {r.json()['token']}"}

    def _strategy(self, name="Core"):
        r = self.client.post("/strategies", json={"name": name}, headers=self.auth)
        self.assertEqual(r.status_code, 201, r.text)
        return r.json()

    def test_health(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"ok": True, "db": "ok", "strategies": 0})

    def test_error_log_is_not_served(self):
        self.assertEqual(self.client.get("/logs").status_code, 404)

    def test_requires_session(self):
        self.assertEqual(self.client.get("/strategies").status_code, 401)
        self.assertEqual(self.client.get("/strategies", headers={"Authorization": "Bearer nope"}).status_code, 401)

    def test_duplicate_signup(self):
        r = self.client.post("/auth/signup", json={"email": "owner@example.com", "password": "password123"})
        self.assertEqual(r.status_code, 409)

    def test_me_and_signout(self):
        r = self.client.get("/auth/me", headers=self.auth)
        self.assertEqual(r.json()["email"], "owner@example.com")
        self.assertEqual(self.client.post("/auth/signout", headers=self.auth).status_code, 200)
        self.assertEqual(self.client.get("/auth/me", headers=self.auth).status_code, 401)

    def test_validate_buckets_dry_run(self):
        r = self.client.post(
            "/strategies/validate-buckets",
            json={"buckets": [{"name": "Safe", "percent": 60}, {"name": "Growth", "percent": 30}]},
            headers=self.auth,
        )
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertFalse(body["ok"])
        self.assertEqual(body["sum"], 90)
        self.assertIn("sum to 100 (currently 90)", body["errors"][0])

    def test_null_percent_is_reported_not_fatal(self):
        buckets = [{"name": "Safe", "percent": None}, {"name": "Growth", "percent": 100}]
        r = self.client.post("/strategies/validate-buckets", json={"buckets": buckets}, headers=self.auth)
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {"ok": False, "errors": ["Bucket percent must be a number (Safe)."], "sum": 100})

        s = self._strategy()
        r = self.client.patch(f"/strategies/{s['id']}", json={"buckets": buckets}, headers=self.auth)
        self.assertEqual(r.status_code, 400, r.text)
        self.assertEqual(r.json()["detail"]["sum"], 100)
        self.assertEqual(r.json()["detail"]["errors"], ["Bucket percent must be a number (Safe)."])

    def test_invalid_buckets_rejected_on_save(self):
        s = self._strategy()
        r = self.client.patch(
            f"/strategies/{s['id']}",
            json={"buckets": [{"name": "", "percent": 100}]},
            headers=self.auth,
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"]["errors"], ["Bucket name cannot be empty."])

    def test_other_users_strategy_is_hidden(self):
        s = self._strategy()
        other = self._sign_in("other@example.com")
        self.assertEqual(self.client.get(f"/strategies/{s['id']}", headers=other).status_code, 404)
        self.assertEqual(self.client.get(f"/strategies/{s['id']}/dashboard", headers=other).status_code, 404)

    def test_import_and_dashboard(self):
        s = self._strategy()
        base = f"/strategies/{s['id']}"

        r = self.client.post(f"{base}/import/preview", json={"csv_text": CSV, "as_of": "2024-01-01"}, headers=self.auth)
        self.assertEqual(r.json()["row_count"], 2)
        self.assertEqual(r.json()["rows"][0], {"name": "House", "category": "property", "value": 500000.0, "as_of": "2024-01-01"})

        r = self.client.post(f"{base}/import", json={"csv_text": CSV, "as_of": "2024-01-01"}, headers=self.auth)
        self.assertEqual(r.status_code, 201, r.text)
        self.assertEqual(r.json()["assets_created"], 2)

        assets = {a["name"]: a for a in self.client.get(f"{base}/assets", headers=self.auth).json()}
        safe_id = s["buckets"][0]["id"]
        r = self.client.put(f"{base}/assets/{assets['Savings']['id']}/bucket", json={"bucket_id": safe_id}, headers=self.auth)
        self.assertEqual(r.status_code, 200, r.text)

        r = self.client.get(f"{base}/dashboard", headers=self.auth)
        body = r.json()
        self.assertEqual(body["net_worth"]["total"], 520000.0)
        self.assertEqual(body["net_worth"]["breakdown"]["property"], 500000.0)
        self.assertEqual(body["allocation"]["unassigned_value"], 500000.0)
        safe = body["allocation"]["rows"][0]
        self.assertEqual(safe["bucket_id"], safe_id)
        self.assertEqual(safe["status"], "underweight")
        self.assertTrue(body["buckets_valid"])

        runs = self.client.get(f"{base}/import-runs", headers=self.auth).json()
        self.assertEqual(len(runs), 1)

    def test_import_errors(self):
        s = self._strategy()
        base = f"/strategies/{s['id']}"
        r = self.client.post(f"{base}/import", json={"csv_text": "a,b\n1,2\n"}, headers=self.auth)
        self.assertEqual(r.status_code, 400)
        self.assertIn("CSV headers missing", r.json()["detail"])
        r = self.client.post(f"{base}/import", json={"csv_text": "name,category,value\n"}, headers=self.auth)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "No rows parsed. Check CSV format.")

    def test_upload(self):
        s = self._strategy()
        r = self.client.post(
            f"/strategies/{s['id']}/import/upload",
            files={"file": ("export.csv", ("\ufeff" + CSV).encode("utf-8"), "text/csv")},
            data={"as_of": "2024-05-05"},
            headers=self.auth,
        )
        self.assertEqual(r.status_code, 201, r.text)
        holdings = self.client.get(f"/strategies/{s['id']}/holdings", headers=self.auth).json()
        self.assertEqual({h["as_of"] for h in holdings}, {"2024-05-05"})

    def test_manual_asset_and_holding(self):
        s = self._strategy()
        base = f"/strategies/{s['id']}"
        asset = self.client.post(f"{base}/assets", json={"name": "Brokerage", "category": "BROKERAGE"}, headers=self.auth).json()
        self.assertEqual(asset["category"], "brokerage")
        r = self.client.post(f"{base}/holdings", json={"asset_id": asset["id"], "as_of": "2024-13-01", "value": 1}, headers=self.auth)
        self.assertEqual(r.status_code, 400)
        r = self.client.post(f"{base}/holdings", json={"asset_id": asset["id"], "as_of": "2024-06-01", "value": 1000}, headers=self.auth)
        self.assertEqual(r.status_code, 201)
        r = self.client.patch(f"{base}/assets/{asset['id']}", json={"name": "Taxable", "category": "brokerage"}, headers=self.auth)
        self.assertEqual(r.json()["name"], "Taxable")
        self.assertEqual(self.client.patch(f"{base}/assets/nope", json={"name": "x"}, headers=self.auth).status_code, 404)

    def test_reports(self):
        s = self._strategy()
        base = f"/strategies/{s['id']}"
        self.client.post(f"{base}/import", json={"csv_text": CSV}, headers=self.auth)
        r = self.client.post(f"{base}/reports", json={"start_date": "2024-01-01", "end_date": "2024-01-07"}, headers=self.auth)
        self.assertEqual(r.status_code, 201, r.text)
        self.assertEqual(r.json()["net_worth"], 520000.0)
        reports = self.client.get(f"{base}/reports", headers=self.auth).json()
        self.assertEqual(len(reports), 1)
        self.assertEqual(reports[0]["start_date"], "2024-01-01")

    def test_research(self):
        r = self.client.post("/research", json={"title": "Gold", "tags": ["macro"]}, headers=self.auth)
        self.assertEqual(r.status_code, 201)
        item_id = r.json()["id"]
        r = self.client.patch(f"/research/{item_id}", json={"notes": "hedge"}, headers=self.auth)
        self.assertEqual(r.json()["notes"], "hedge")
        self.assertEqual(len(self.client.get("/research", headers=self.auth).json()), 1)
        self.assertEqual(self.client.delete(f"/research/{item_id}", headers=self.auth).status_code, 200)
        self.assertEqual(self.client.delete(f"/research/{item_id}", headers=self.auth).status_code, 404)

    def test_delete_strategy(self):
        s = self._strategy()
        self.assertEqual(self.client.delete(f"/strategies/{s['id']}", headers=self.auth).json(), {"ok": True})
        self.assertEqual(self.client.get(f"/strategies/{s['id']}", headers=self.auth).status_code, 404)


if __name__ == "__main__":
    unittest.main()

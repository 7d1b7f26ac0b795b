"""HTTP tests for the v1 API (in-memory store, recording notifier)."""

import pytest
from fastapi.testclient import TestClient

from gstkit.config.settings import settings
from gstkit.infrastructure.repositories.history_repository import HISTORY_KEY
from gstkit.main import create_app


@pytest.fixture
def client(store, notifier):
    with TestClient(create_app(store=store, notifier=notifier)) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestGstEndpoints:
    def test_calculate_exclusive(self, client):
        resp = client.post("/api/v1/gst/calculate", json={"amount": "₹1,000", "gst_rate": 18})
        body = resp.json()
        assert resp.status_code == 200
        assert body["status"] == "ok"
        calc = body["data"]["calculation"]
        assert calc["gross_amount"] == 1180.0
        assert calc["cgst_amount"] == 90.0
        assert body["data"]["saved"] is True
        assert "CGST (9%)" in body["data"]["share_text"]

    def test_calculate_inclusive_uses_default_rate(self, client):
        resp = client.post("/api/v1/gst/calculate", json={"amount": 118, "is_inclusive": True})
        assert resp.json()["data"]["calculation"]["net_amount"] == 100.0

    def test_invalid_input_lists_every_field(self, client):
        resp = client.post("/api/v1/gst/calculate", json={"amount": "abc", "gst_rate": "-2"})
        body = resp.json()
        assert resp.status_code == 400
        assert body["status"] == "error"
        assert {e["field"] for e in body["errors"]} == {"amount", "gst_rate"}

    def test_history_write_failure_still_returns_result(self, client, store):
        store.fail_on.add(HISTORY_KEY)
        resp = client.post("/api/v1/gst/calculate", json={"amount": 100, "gst_rate": 5})
        assert resp.status_code == 200
        assert resp.json()["data"]["saved"] is False

    def test_currency_defaults_to_configured(self, client):
        default = client.post("/api/v1/gst/calculate", json={"amount": 100}).json()["data"]["calculation"]
        usd = client.post("/api/v1/gst/calculate", json={"amount": 100, "currency": "USD"}).json()["data"]["calculation"]
        assert default["currency"] == settings.DEFAULT_CURRENCY
        assert usd["currency"] == "USD"

    def test_rates(self, client):
        assert client.get("/api/v1/gst/rates").json()["data"]["rates"] == [5, 12, 18, 28, 40]


class TestHistoryEndpoints:
    def test_list_newest_first_and_clear(self, client):
        for amount in (100, 200, 300):
            client.post("/api/v1/gst/calculate", json={"amount": amount, "gst_rate": 18})
        page = client.get("/api/v1/history", params={"limit": 2}).json()["data"]
        assert page["total"] == 3
        assert page["has_more"] is True
        assert [i["amount"] for i in page["items"]] == [300.0, 200.0]

        assert client.delete("/api/v1/history").status_code == 200
        assert client.get("/api/v1/history").json()["data"]["total"] == 0

    def test_export_csv(self, client):
        client.post("/api/v1/gst/calculate", json={"amount": 100, "gst_rate": 18, "description": "Pen"})
        content = client.get("/api/v1/history/export", params={"format": "csv"}).json()["data"]["content"]
        assert content.splitlines()[0].startswith("Date,Description")
        assert ",Pen," in content

    def test_preferences_disable_history(self, client):
        resp = client.put("/api/v1/preferences", json={"save_history": False})
        assert resp.status_code == 200
        calc = client.post("/api/v1/gst/calculate", json={"amount": 100, "gst_rate": 18}).json()
        assert calc["data"]["saved"] is False

    def test_storage_outage_is_503(self, client, store):
        store.fail_on.add(HISTORY_KEY)
        resp = client.get("/api/v1/history")
        assert resp.status_code == 503
        assert resp.json()["status"] == "error"


class TestMarginEndpoints:
    def test_calculate(self, client):
        resp = client.post("/api/v1/margin/calculate", json={
            "cost_price": 100, "margin_percent": 20, "gst_rate": 18, "business_type": "B2B",
        })
        data = resp.json()["data"]
        assert data["calculation"]["final_selling_price"] == 147.5
        assert data["strategy"]["type"] == "cost_plus"
        assert data["saved"] is True
        history = client.get("/api/v1/history").json()["data"]["items"]
        assert history[0]["description"] == "Profit Margin (B2B)"

    def test_margin_of_100_rejected(self, client):
        resp = client.post("/api/v1/margin/calculate", json={"cost_price": 100, "margin_percent": 100})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "margin_percent"

    def test_actual_and_break_even(self, client):
        actual = client.post("/api/v1/margin/actual", json={
            "cost_price": 100, "selling_price": 147.5, "gst_rate": 18,
        }).json()["data"]
        assert actual["actual_margin_percent"] == 20.0
        be = client.post("/api/v1/margin/break-even", json={"cost_price": 100, "gst_rate": 18}).json()["data"]
        assert be["break_even_price_with_gst"] == 118.0

    def test_compare(self, client):
        data = client.post("/api/v1/margin/compare", json={
            "cost_price": 100, "margin_percentages": [10, 20, 30], "gst_rate": 18,
        }).json()["data"]
        assert len(data["scenarios"]) == 3
        assert data["best_scenario"]["desired_margin_percent"] == 30.0

    def test_compare_empty_rejected(self, client):
        resp = client.post("/api/v1/margin/compare", json={"cost_price": 100, "margin_percentages": []})
        assert resp.status_code == 400

    def test_volume(self, client):
        tiers = client.post("/api/v1/margin/volume", json={
            "cost_price": 100, "margin_percent": 20, "gst_rate": 18, "volumes": [1, 1000],
        }).json()["data"]
        assert [t["adjusted_margin"] for t in tiers] == [20.0, 16.0]

    def test_strategy_none(self, client):
        assert client.get("/api/v1/margin/strategy", params={"margin_percent": "5"}).json()["data"] is None

    def test_history_statistics_and_search(self, client):
        for cost, desc in ((100, "Steel"), (200, "Cotton")):
            client.post("/api/v1/margin/calculate", json={
                "cost_price": cost, "margin_percent": 20, "gst_rate": 18, "description": desc,
            })
        items = client.get("/api/v1/margin/history", params={"q": "steel"}).json()["data"]["items"]
        assert [i["description"] for i in items] == ["Steel"]
        stats = client.get("/api/v1/margin/statistics").json()["data"]
        assert stats["total_calculations"] == 2
        assert stats["average_cost_price"] == 150.0

    def test_history_single_date_bound(self, client):
        client.post("/api/v1/margin/calculate", json={"cost_price": 100, "margin_percent": 20, "gst_rate": 18})
        after = client.get("/api/v1/margin/history", params={"start": "2000-01-01T00:00:00"}).json()["data"]
        before = client.get("/api/v1/margin/history", params={"end": "2000-01-01T00:00:00"}).json()["data"]
        assert after["total"] == 1
        assert before["total"] == 0


class TestPresetEndpoints:
    def test_list_add_and_delete(self, client):
        presets = client.get("/api/v1/margin/presets").json()["data"]
        assert len(presets) == 5
        created = client.post("/api/v1/margin/presets", json={
            "name": "Festive", "margin_percent": "30%", "business_type": "B2C",
        }).json()["data"]
        assert created["margin_percent"] == 30.0
        assert client.delete(f"/api/v1/margin/presets/{created['id']}").status_code == 200

    def test_default_preset_protected(self, client):
        resp = client.delete("/api/v1/margin/presets/retail_standard")
        assert resp.status_code == 409

    def test_default_preset_name_cannot_be_reused(self, client):
        resp = client.post("/api/v1/margin/presets", json={
            "name": "Retail Standard", "margin_percent": 40, "business_type": "B2C",
        })
        assert resp.status_code == 409
        presets = client.get("/api/v1/margin/presets").json()["data"]
        assert "retail_standard" in [p["id"] for p in presets]

    def test_defaults_only(self, client):
        data = client.get("/api/v1/margin/presets", params={"defaults_only": True, "business_type": "B2C"}).json()["data"]
        assert [p["id"] for p in data] == ["retail_standard"]


class TestFilingAndReminders:
    def test_filing_dates(self, client):
        dates = client.get("/api/v1/filing/dates", params={"annual_turnover": 200_000_000}).json()["data"]
        assert dates
        assert not any(d["return_type"] == "gstr1_quarterly" for d in dates)
        assert all(d["has_reminder"] is False for d in dates)

    def test_enable_complete_and_history(self, client):
        filing = client.get("/api/v1/filing/dates").json()["data"][0]
        resp = client.post(f"/api/v1/reminders/{filing['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == filing["id"]

        dates = client.get("/api/v1/filing/dates").json()["data"]
        assert next(d for d in dates if d["id"] == filing["id"])["has_reminder"] is True

        done = client.post(f"/api/v1/reminders/{filing['id']}/complete").json()["data"]
        assert done["status"] == "filed"
        history = client.get("/api/v1/reminders/history").json()["data"]
        assert [h["return_type"] for h in history] == [filing["return_type"]]

    def test_disable(self, client, notifier):
        filing = client.get("/api/v1/filing/dates").json()["data"][0]
        client.post(f"/api/v1/reminders/{filing['id']}")
        assert client.delete(f"/api/v1/reminders/{filing['id']}").status_code == 200
        assert client.get("/api/v1/reminders").json()["data"] == []
        assert notifier.scheduled == {}

    def test_unknown_filing_is_404(self, client):
        assert client.post("/api/v1/reminders/gstr3b_1999-01-20").status_code == 404
        assert client.delete("/api/v1/reminders/missing").status_code == 404

    def test_settings_round_trip(self, client):
        resp = client.put("/api/v1/reminders/settings", json={
            "business_type": "composition", "annual_turnover": 0, "reminder_days": [5],
        })
        assert resp.status_code == 200
        dates = client.get("/api/v1/filing/dates").json()["data"]
        assert {d["return_type"] for d in dates} <= {"gstr4"}

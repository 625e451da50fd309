"""Tests for the Flask routes."""

import pytest

import config
from app import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "PDF_PATH", str(tmp_path / "report.pdf"))
    monkeypatch.setattr(config, "CSV_PATH", str(tmp_path / "summary.csv"))
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


FORM_B = {
    "baseline_revenue": "100000",
    "uplift_pct": "4",
    "bonus_cost": "20000",
    "churn_pct": "-1",
}


class TestIndex:
    def test_get_renders_defaults(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "Promo ROI Calculator" in html
        assert 'value="120000"' in html
        assert "-$7,800" in html
        assert "-52.0%" in html
        assert "2.08" in html
        assert "data:image/png;base64," not in html

    def test_post_builds_report(self, client, tmp_path):
        resp = client.post("/", data=FORM_B)
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "-$17,000" in html
        assert "-85.0%" in html
        assert "6.67" in html
        assert "data:image/png;base64," in html
        assert (tmp_path / "report.pdf").exists()
        assert (tmp_path / "summary.csv").exists()

    def test_post_overflowing_roi_builds_report(self, client, tmp_path):
        resp = client.post("/", data={
            "baseline_revenue": "1e308",
            "uplift_pct": "10",
            "bonus_cost": "1000",
            "churn_pct": "0",
        })
        assert resp.status_code == 200
        assert "inf%" in resp.get_data(as_text=True)
        assert (tmp_path / "report.pdf").exists()

    def test_post_garbage_counts_as_zero(self, client):
        resp = client.post("/", data={"baseline_revenue": "12o"})
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "N/A" in html
        assert "0.0%" in html


class TestApi:
    def test_query_string(self, client):
        resp = client.get("/api/roi", query_string=FORM_B)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["result"]["roi"] == pytest.approx(-85.0)
        assert data["result"]["net_impact"] == pytest.approx(-17_000)
        assert data["display"]["payback_str"] == "6.67"
        assert data["inputs"] == {
            "baseline_revenue": 100_000.0,
            "uplift_pct": 4.0,
            "bonus_cost": 20_000.0,
            "churn_pct": -1.0,
        }

    def test_overflowing_roi_is_valid_json(self, client):
        resp = client.get("/api/roi", query_string={
            "baseline_revenue": "120000",
            "uplift_pct": "8",
            "bonus_cost": "1e-320",
            "churn_pct": "-2",
        })
        assert resp.status_code == 200
        assert "Infinity" not in resp.get_data(as_text=True)
        data = resp.get_json()
        assert data["result"]["roi"] is None
        assert data["display"]["max_abs_roi"] is None
        assert [b["height"] for b in data["display"]["bars"]] == [6, 140, 140, 140, 140]
        assert data["display"]["bars"][0]["roi_str"] == "-100%"

    def test_boolean_json_field_is_zero(self, client):
        resp = client.post("/api/roi", json={"baseline_revenue": 1000, "bonus_cost": True})
        assert resp.get_json()["inputs"]["bonus_cost"] == 0.0

    def test_json_body(self, client):
        resp = client.post("/api/roi", json={
            "baseline_revenue": 120_000,
            "uplift_pct": 8,
            "bonus_cost": 0,
            "churn_pct": -2,
        })
        data = resp.get_json()
        assert data["result"]["roi"] == 0
        assert data["display"]["roi_str"] == "0.0%"
        assert [p["roi"] for p in data["display"]["sensitivity"]] == [0, 0, 0, 0, 0]

    def test_form_body(self, client):
        resp = client.post("/api/roi", data={"uplift_pct": "8", "bonus_cost": "Infinity"})
        data = resp.get_json()
        assert data["inputs"]["bonus_cost"] == 0.0
        labels = [p["label"] for p in data["display"]["sensitivity"]]
        assert labels == ["2%", "5%", "8%", "11%", "14%"]

    def test_empty_request(self, client):
        data = client.get("/api/roi").get_json()
        assert data["result"] == {
            "baseline_revenue": 0.0,
            "uplift_revenue": 0.0,
            "churn_impact": 0.0,
            "bonus_cost": 0.0,
            "net_impact": 0.0,
            "roi": 0.0,
            "payback": 0.0,
        }
        assert data["display"]["payback_str"] == "N/A"
        assert data["display"]["max_abs_roi"] == 10.0
        assert len(data["display"]["bars"]) == 5
        assert data["summary"]

    def test_non_object_json_falls_back_to_query(self, client):
        resp = client.post("/api/roi?uplift_pct=3", json=[1, 2, 3])
        assert resp.get_json()["inputs"]["uplift_pct"] == 3.0


class TestDownloads:
    def test_missing_files_404(self, client):
        assert client.get("/download-pdf").status_code == 404
        assert client.get("/download-csv").status_code == 404

    def test_after_report(self, client):
        client.post("/", data=FORM_B)

        pdf = client.get("/download-pdf")
        assert pdf.status_code == 200
        assert pdf.data.startswith(b"%PDF")
        pdf.close()

        csv_resp = client.get("/download-csv")
        assert csv_resp.status_code == 200
        assert csv_resp.get_data(as_text=True).startswith("metric,value")
        csv_resp.close()

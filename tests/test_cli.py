"""Tests for display-data computation, formatting, CSV export and the CLI."""

import builtins
import csv

import pytest

import cli
import config
from roi import RoiInputs


SCENARIO_A = RoiInputs(120_000, 8, 15_000, -2)


class TestFormatting:
    def test_fmt(self):
        assert cli.fmt(120_000) == "$120,000"
        assert cli.fmt(-7_800) == "-$7,800"
        assert cli.fmt(1_234.5, 2) == "$1,234.50"

    def test_fmt_no_negative_zero(self):
        assert cli.fmt(-0.4) == "$0"

    def test_pct(self):
        assert cli.pct(-52.0) == "-52.0%"
        assert cli.pct(12.3456, 2) == "12.35%"
        assert cli.pct(7.6, 0) == "8%"


class TestDisplayData:
    def test_scenario_a(self):
        d = cli.compute_display_data(SCENARIO_A)
        assert d["net_impact_str"] == "-$7,800"
        assert d["roi_str"] == "-52.0%"
        assert d["payback_str"] == "2.08"
        assert d["uplift_revenue_str"] == "$9,600"
        assert d["churn_impact_str"] == "-$2,400"
        assert d["baseline_revenue_str"] == "$120,000"
        assert d["verdict"] == "negative"
        assert d["uplift_pct"] == 8
        assert d["churn_pct"] == -2

    def test_scenario_b_payback(self):
        d = cli.compute_display_data(RoiInputs(100_000, 4, 20_000, -1))
        assert d["payback_str"] == "6.67"
        assert d["roi_str"] == "-85.0%"

    def test_zero_bonus_cost_shows_zero_roi(self):
        d = cli.compute_display_data(RoiInputs(120_000, 8, 0, -2))
        assert d["roi_str"] == "0.0%"
        assert d["has_roi"] is False
        assert d["verdict"] == "positive"

    def test_no_gross_impact_shows_na_payback(self):
        d = cli.compute_display_data(RoiInputs(100_000, 0, 5_000, -3))
        assert d["payback"] == 0
        assert d["payback_str"] == "N/A"

    def test_sensitivity_rows(self):
        d = cli.compute_display_data(SCENARIO_A)
        assert [p["label"] for p in d["sensitivity"]] == ["2%", "5%", "8%", "11%", "14%"]
        assert [p["roi_str"] for p in d["sensitivity"]] == ["-100%", "-76%", "-52%", "-28%", "-4%"]
        assert len(d["bars"]) == 5
        assert d["max_abs_roi"] == pytest.approx(100.0)

    def test_breakeven_verdict(self):
        d = cli.compute_display_data(RoiInputs(100_000, 10, 10_000, 0))
        assert d["verdict"] == "breakeven"
        assert d["roi_str"] == "0.0%"

    def test_overflowing_roi(self):
        d = cli.compute_display_data(RoiInputs(1e308, 10, 1_000, 0))
        assert d["roi_str"] == "inf%"
        assert [b["height"] for b in d["bars"]] == [140] * 5
        assert cli._text_bar(d["sensitivity"][0]["roi"], d["max_abs_roi"]).endswith("█" * cli.BAR_W)


class TestSummaryText:
    def test_negative(self):
        text = cli.generate_summary_text(cli.compute_display_data(SCENARIO_A))
        assert "loses $7,800" in text
        assert "2.08 months" in text

    def test_positive(self):
        text = cli.generate_summary_text(cli.compute_display_data(RoiInputs(100_000, 20, 5_000, 0)))
        assert "adds $15,000" in text
        assert "ROI 300.0%" in text
        assert "0.25 months" in text

    def test_never_pays_back(self):
        text = cli.generate_summary_text(cli.compute_display_data(RoiInputs(100_000, 0, 5_000, 0)))
        assert "never pays back" in text


class TestExportCsv:
    def test_writes_summary_and_sweep(self, tmp_path):
        path = tmp_path / "summary.csv"
        d = cli.compute_display_data(SCENARIO_A)
        assert cli.export_csv(d, str(path)) == str(path)

        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))

        assert rows[0] == ["metric", "value"]
        metrics = dict(r for r in rows[1:] if len(r) == 2 and r[0] != "uplift")
        assert float(metrics["net_impact"]) == pytest.approx(-7_800)
        assert float(metrics["roi_pct"]) == pytest.approx(-52.0)
        assert float(metrics["payback_months"]) == pytest.approx(15_000 / 7_200)

        header = rows.index(["uplift", "roi_pct"])
        sweep = rows[header + 1:]
        assert [r[0] for r in sweep] == ["2%", "5%", "8%", "11%", "14%"]

    def test_na_payback(self, tmp_path):
        path = tmp_path / "summary.csv"
        cli.export_csv(cli.compute_display_data(RoiInputs(0, 0, 0, 0)), str(path))
        assert "payback_months,N/A" in path.read_text(encoding="utf-8")


class TestCollectInputs:
    def test_defaults(self, monkeypatch):
        monkeypatch.setattr(builtins, "input", lambda prompt="": "")
        assert cli.collect_inputs() == RoiInputs(120_000, 8, 15_000, -2)

    def test_typos_become_zero(self, monkeypatch):
        answers = iter(["12o", "5", "", "abc"])
        monkeypatch.setattr(builtins, "input", lambda prompt="": next(answers))
        assert cli.collect_inputs() == RoiInputs(0, 5, 15_000, 0)


class TestRunCli:
    @pytest.fixture(autouse=True)
    def _outputs(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "PDF_PATH", str(tmp_path / "report.pdf"))
        monkeypatch.setattr(config, "CSV_PATH", str(tmp_path / "summary.csv"))

    def test_full_run(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setattr(builtins, "input", lambda prompt="": "")
        cli.run_cli()
        out = capsys.readouterr().out
        assert "ROI SNAPSHOT" in out
        assert "-52.0%" in out
        assert "2.08" in out
        assert "ROI SENSITIVITY" in out
        assert (tmp_path / "report.pdf").exists()
        assert (tmp_path / "summary.csv").exists()

    def test_cancel(self, monkeypatch, capsys, tmp_path):
        def _eof(prompt=""):
            raise EOFError

        monkeypatch.setattr(builtins, "input", _eof)
        cli.run_cli()
        assert "Cancelled." in capsys.readouterr().out
        assert not (tmp_path / "report.pdf").exists()

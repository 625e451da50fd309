"""
CLI interface and shared display-data computation for the
Promo ROI Calculator.
"""

from __future__ import annotations

import csv
import sys
from dataclasses import asdict
from typing import Any, Dict, List

import config as cfg
from roi import (
    FIELDS,
    RoiInputs,
    RoiResult,
    bar_fraction,
    compute_result,
    compute_sensitivity,
    max_abs_roi,
    parse_inputs,
    sensitivity_bars,
)
import report


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 0) -> str:
    """Format number as $X,XXX (negative as -$X,XXX)."""
    sign = "-" if round(val, decimals) < 0 else ""
    return f"{sign}{cfg.CURRENCY_SYMBOL}{abs(val):,.{decimals}f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


def fmt_roi(result: RoiResult) -> str:
    """ROI to one decimal; 0.0% when there is no positive bonus cost."""
    return pct(result.roi) if result.has_roi else "0.0%"


def fmt_payback(result: RoiResult) -> str:
    """Payback months to two decimals, N/A when uplift+churn <= 0."""
    return f"{result.payback:.2f}" if result.has_payback else "N/A"


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def _verdict(net_impact: float) -> str:
    if net_impact > 0:
        return "positive"
    if net_impact < 0:
        return "negative"
    return "breakeven"


def compute_display_data(inputs: RoiInputs) -> Dict[str, Any]:
    """Extract every figure and display string needed for the output sections.

    Values are plain str/float/int/bool/list/dict so the result can be
    passed straight to a template or ``jsonify``.
    """
    result = compute_result(inputs)
    points = compute_sensitivity(inputs)
    bars = sensitivity_bars(points)

    sensitivity = []
    for p in points:
        row = asdict(p)
        row["roi_str"] = pct(p.roi, 0)
        sensitivity.append(row)

    return {
        # Inputs echo
        "uplift_pct": inputs.uplift_pct,
        "churn_pct": inputs.churn_pct,
        # Result record
        **result.as_dict(),
        "gross_impact": result.gross_impact,
        "has_roi": result.has_roi,
        "has_payback": result.has_payback,
        # Display strings
        "baseline_revenue_str": fmt(result.baseline_revenue),
        "uplift_revenue_str": fmt(result.uplift_revenue),
        "churn_impact_str": fmt(result.churn_impact),
        "bonus_cost_str": fmt(result.bonus_cost),
        "net_impact_str": fmt(result.net_impact),
        "roi_str": fmt_roi(result),
        "payback_str": fmt_payback(result),
        "verdict": _verdict(result.net_impact),
        # Sensitivity sweep
        "sensitivity": sensitivity,
        "bars": [{**asdict(b), "roi_str": pct(b.roi, 0)} for b in bars],
        "max_abs_roi": max_abs_roi(points),
    }


def generate_summary_text(d: Dict[str, Any]) -> str:
    """Build a 1-2 sentence plain-English summary."""
    bonus = d["bonus_cost_str"]

    if d["verdict"] == "positive":
        text = (
            f"The promo adds {d['net_impact_str']} after its {bonus} bonus cost"
            f" (ROI {d['roi_str']})."
        )
    elif d["verdict"] == "negative":
        text = (
            f"The promo loses {fmt(-d['net_impact'])} once its {bonus} bonus"
            f" cost is counted (ROI {d['roi_str']})."
        )
    else:
        text = f"The promo exactly covers its {bonus} bonus cost."

    if d["has_payback"]:
        text += (
            f" Uplift and churn together bring in {fmt(d['gross_impact'])} a"
            f" month, paying the bonus back in {d['payback_str']} months."
        )
    else:
        text += (
            " Uplift and churn together don't add revenue, so the bonus"
            " never pays back."
        )
    return text


def export_csv(d: Dict[str, Any], path: str = cfg.CSV_PATH) -> str:
    """Write the summary and sensitivity table as CSV. Returns the path."""
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["metric", "value"])
        writer.writerow(["baseline_revenue", d["baseline_revenue"]])
        writer.writerow(["uplift_pct", d["uplift_pct"]])
        writer.writerow(["churn_pct", d["churn_pct"]])
        writer.writerow(["bonus_cost", d["bonus_cost"]])
        writer.writerow(["uplift_revenue", d["uplift_revenue"]])
        writer.writerow(["churn_impact", d["churn_impact"]])
        writer.writerow(["net_impact", d["net_impact"]])
        writer.writerow(["roi_pct", d["roi"]])
        writer.writerow(["payback_months", d["payback"] if d["has_payback"] else "N/A"])
        writer.writerow([])
        writer.writerow(["uplift", "roi_pct"])
        for p in d["sensitivity"]:
            writer.writerow([p["label"], p["roi"]])
    return path


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _prompt_raw(label: str, default: str) -> str:
    raw = input(f"  {label} [{default}]: ").strip()
    return raw if raw else default


def collect_inputs() -> RoiInputs:
    """Prompt for the four raw values; non-numbers count as 0."""
    print("\n  Enter your promo scenario (press Enter for defaults):\n")
    raw = {
        name: _prompt_raw(cfg.INPUT_LABELS[name], cfg.DEFAULT_INPUTS[name])
        for name in FIELDS
    }
    return parse_inputs(raw)


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)

_H = "═"
_V = "║"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{_H * inner}╗\n"
        f"{_V}  {title:<{inner - 2}}{_V}\n"
        f"╠{_H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"{_V}  {text:<{inner}}{_V}"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{_H * (W - 2)}╝"


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


def _wrap(text: str, line_len: int = W - 6) -> List[str]:
    """Word-wrap text into box lines."""
    rows = []
    line = ""
    for word in text.split():
        if len(line) + len(word) + 1 <= line_len:
            line = f"{line} {word}" if line else word
        else:
            rows.append(_box_line(line))
            line = word
    if line:
        rows.append(_box_line(line))
    return rows


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_inputs(d: Dict[str, Any]) -> None:
    rows = [
        _box_row(cfg.INPUT_LABELS["baseline_revenue"], d["baseline_revenue_str"]),
        _box_row(cfg.INPUT_LABELS["uplift_pct"], pct(d["uplift_pct"])),
        _box_row(cfg.INPUT_LABELS["bonus_cost"], d["bonus_cost_str"]),
        _box_row(cfg.INPUT_LABELS["churn_pct"], pct(d["churn_pct"])),
    ]
    _print_section("INPUTS", rows)


def _print_snapshot(d: Dict[str, Any], summary_text: str) -> None:
    rows = [
        _box_row("Net impact", d["net_impact_str"]),
        _box_row("ROI", d["roi_str"]),
        _box_row("Payback (months)", d["payback_str"]),
        _box_line(),
    ]
    rows.extend(_wrap(summary_text))
    _print_section("ROI SNAPSHOT", rows)


def _print_breakdown(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Baseline revenue", d["baseline_revenue_str"]),
        _box_row("Uplift revenue", d["uplift_revenue_str"]),
        _box_row("Churn impact", d["churn_impact_str"]),
        _box_row("Bonus cost", d["bonus_cost_str"]),
    ]
    _print_section("BREAKDOWN", rows)


BAR_W = 24  # characters per side of the sensitivity chart


def _text_bar(roi_val: float, scale: float) -> str:
    """Diverging text bar: negative ROI grows left, positive grows right."""
    n = int(bar_fraction(roi_val, scale) * BAR_W + 0.5)
    if roi_val < 0:
        return " " * (BAR_W - n) + "█" * n + "│" + " " * BAR_W
    return " " * BAR_W + "│" + "█" * n + " " * (BAR_W - n)


def _print_sensitivity(d: Dict[str, Any]) -> None:
    scale = d["max_abs_roi"]
    rows = []
    for p in d["sensitivity"]:
        marker = " <<" if p["delta"] == 0 else ""
        rows.append(_box_line(
            f"{p['label']:>6} {_text_bar(p['roi'], scale)} {p['roi_str']:>6}{marker}"
        ))
    rows.append(_box_line())
    rows.append(_box_line("How ROI changes when uplift assumptions shift."))
    _print_section("ROI SENSITIVITY (UPLIFT ± 6%)", rows)


def _print_assumptions() -> None:
    rows = [_box_line(f"- {a}") for a in cfg.ASSUMPTIONS]
    _print_section("ASSUMPTIONS", rows)


def _print_files(pdf_path: str, csv_path: str) -> None:
    rows = [
        _box_line(f"PDF report saved to: {pdf_path}"),
        _box_line(f"CSV summary saved to: {csv_path}"),
        _box_line(),
        _box_line("Interactive version:"),
        _box_line(f"  python main.py  (opens {cfg.WEB_HOST}:{cfg.WEB_PORT})"),
    ]
    _print_section("FILES", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli() -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print("  Promo ROI Calculator")
    print("=" * W)

    try:
        inputs = collect_inputs()
    except (KeyboardInterrupt, EOFError):
        print("\n  Cancelled.")
        return

    d = compute_display_data(inputs)
    summary_text = generate_summary_text(d)

    print()
    _print_inputs(d)
    _print_snapshot(d, summary_text)
    _print_breakdown(d)
    _print_sensitivity(d)
    _print_assumptions()

    print("  Generating PDF report...")
    pdf_path = report.generate_pdf(inputs, d, summary_text, cfg.PDF_PATH)
    csv_path = export_csv(d, cfg.CSV_PATH)
    print("  Done.\n")

    _print_files(pdf_path, csv_path)


if __name__ == "__main__":
    run_cli()

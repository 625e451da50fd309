"""
PDF report generation and reusable chart rendering for the
Promo ROI Calculator.

Provides:
  - Two-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
"""

from __future__ import annotations

import base64
import io
from typing import Any, Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
from roi import RoiInputs

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0f172a"
CARD = "#1e293b"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
EMERALD = "#10b981"
ROSE = "#fb7185"
AMBER = "#fbbf24"
SLATE = "#94a3b8"
BORDER = "#334155"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _money_fmt(x, _):
    sign = "-" if x < 0 else ""
    x = abs(x)
    if x >= 1e6:
        return f"{sign}{cfg.CURRENCY_SYMBOL}{x / 1e6:.1f}M"
    if x >= 1e3:
        return f"{sign}{cfg.CURRENCY_SYMBOL}{x / 1e3:.0f}k"
    return f"{sign}{cfg.CURRENCY_SYMBOL}{x:.0f}"


def _pct_fmt(x, _):
    return f"{x:.0f}%"


MONEY_FMT = FuncFormatter(_money_fmt)
PCT_FMT = FuncFormatter(_pct_fmt)


def _finite(values, floor=0.0):
    """Clip values for plotting. Returns (clipped, cap).

    NaN plots as 0 and ±inf as ±cap, where cap is the largest finite
    magnitude (never below ``floor``).
    """
    finite = np.isfinite(values)
    cap = max([floor] + np.abs(values[finite]).tolist())
    clipped = np.clip(np.nan_to_num(values, nan=0.0, posinf=cap, neginf=-cap),
                      -cap, cap)
    return clipped, cap


def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, axis="y", alpha=0.15, color=SLATE)


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def _chart_sensitivity(d: Dict[str, Any], ax=None,
                       figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """ROI at each uplift offset; the current assumption is outlined."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    else:
        fig = ax.figure
    _style(fig, ax)

    points = d["sensitivity"]
    rois, cap = _finite(np.array([p["roi"] for p in points], dtype=float),
                        floor=cfg.MIN_ROI_SCALE)
    x = np.arange(len(points))
    colors = np.where(rois < 0, ROSE, EMERALD).tolist()

    bars = ax.bar(x, rois, 0.55, color=colors, zorder=3)
    for i, p in enumerate(points):
        if p["delta"] == 0:
            bars[i].set_edgecolor(AMBER)
            bars[i].set_linewidth(2)
        offset = 6 if rois[i] >= 0 else -12
        ax.annotate(p["roi_str"], xy=(x[i], rois[i]), xytext=(0, offset),
                    textcoords="offset points", ha="center",
                    fontsize=9, color=TEXT, fontweight="bold")

    limit = min(cap * 1.15, np.finfo(float).max)
    ax.set_ylim(-limit, limit)
    ax.axhline(0, color=SLATE, linewidth=1, linestyle="--", zorder=2)
    ax.set_xticks(x)
    ax.set_xticklabels([p["label"] for p in points])
    ax.yaxis.set_major_formatter(PCT_FMT)
    ax.set_xlabel("Uplift assumption")
    ax.set_ylabel("ROI")
    ax.set_title("ROI Sensitivity (Uplift ± 6%)", fontsize=13, pad=12)
    return fig


def _chart_breakdown(d: Dict[str, Any], ax=None,
                     figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    """Horizontal bars: what adds to and takes from the net impact."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    else:
        fig = ax.figure
    _style(fig, ax)
    ax.grid(False)
    ax.grid(True, axis="x", alpha=0.15, color=SLATE)

    labels = ["Uplift revenue", "Churn impact", "Bonus cost", "Net impact"]
    values = np.array([
        d["uplift_revenue"],
        d["churn_impact"],
        -d["bonus_cost"],
        d["net_impact"],
    ], dtype=float)
    values, _ = _finite(values)
    colors = np.where(values < 0, ROSE, EMERALD).tolist()
    y = np.arange(len(labels))[::-1]

    ax.barh(y, values, 0.55, color=colors, zorder=3)
    ax.axvline(0, color=SLATE, linewidth=1, zorder=2)
    ax.set_yticks(y)
    ax.set_yticklabels(labels)
    ax.xaxis.set_major_formatter(MONEY_FMT)
    ax.set_title("Monthly Impact Breakdown", fontsize=13, pad=12)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Page 1: Summary (text only, dark background)
# ═══════════════════════════════════════════════════════════════════

def _page1_summary(inputs: RoiInputs, d: Dict[str, Any],
                   summary_text: str) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "Promo ROI Calculator",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    fig.text(0.50, 0.91, "Promotion impact summary",
             ha="center", fontsize=11, color=TEXT2)

    y = 0.86
    fig.text(0.08, y, "Inputs", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    params = [
        f"Baseline revenue: {d['baseline_revenue_str']}  |  "
        f"Uplift: {inputs.uplift_pct:.1f}%  |  "
        f"Churn: {inputs.churn_pct:.1f}%",
        f"Bonus cost: {d['bonus_cost_str']}",
    ]
    for p in params:
        fig.text(0.10, y, p, fontsize=9.5, color=TEXT2)
        y -= 0.024

    y -= 0.025
    verdict_color = {"positive": EMERALD, "negative": ROSE}.get(d["verdict"], AMBER)
    fig.text(0.08, y, "ROI Snapshot", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.032
    fig.text(0.10, y, f"Net impact: {d['net_impact_str']}",
             fontsize=12, color=verdict_color, fontweight="bold")
    y -= 0.026
    fig.text(0.10, y,
             f"ROI: {d['roi_str']}  |  Payback (months): {d['payback_str']}",
             fontsize=10, color=TEXT2)
    y -= 0.03

    words = summary_text.split()
    line = ""
    for word in words:
        if len(line) + len(word) + 1 <= 85:
            line = f"{line} {word}" if line else word
        else:
            fig.text(0.10, y, line, fontsize=9, color=TEXT2)
            y -= 0.022
            line = word
    if line:
        fig.text(0.10, y, line, fontsize=9, color=TEXT2)
        y -= 0.022

    y -= 0.025
    fig.text(0.08, y, "Breakdown", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    rows = [
        ("Baseline revenue", d["baseline_revenue_str"]),
        ("Uplift revenue", d["uplift_revenue_str"]),
        ("Churn impact", d["churn_impact_str"]),
        ("Bonus cost", d["bonus_cost_str"]),
    ]
    for label, value in rows:
        fig.text(0.10, y, label, fontsize=9.5, color=TEXT2)
        fig.text(0.55, y, value, fontsize=9.5, color=TEXT, ha="right")
        y -= 0.024

    y -= 0.025
    fig.text(0.08, y, "Sensitivity", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    for p in d["sensitivity"]:
        marker = "  (current)" if p["delta"] == 0 else ""
        fig.text(0.10, y, f"Uplift {p['label']}", fontsize=9.5, color=TEXT2)
        fig.text(0.55, y, f"{p['roi_str']}{marker}", fontsize=9.5,
                 color=ROSE if p["roi"] < 0 else EMERALD, ha="right")
        y -= 0.024

    y -= 0.025
    fig.text(0.08, y, "Assumptions", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    for a in cfg.ASSUMPTIONS:
        fig.text(0.10, y, f"• {a}", fontsize=9, color=TEXT2)
        y -= 0.022

    fig.text(0.50, 0.03,
             "Estimates only. Uplift and churn figures are assumptions, "
             "not measurements.",
             ha="center", fontsize=8, color=SLATE, style="italic")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Page 2: Charts
# ═══════════════════════════════════════════════════════════════════

def _page2_charts(d: Dict[str, Any]) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H), constrained_layout=True)
    gs = fig.add_gridspec(2, 1, height_ratios=[1.2, 1])
    _chart_sensitivity(d, ax=fig.add_subplot(gs[0]))
    _chart_breakdown(d, ax=fig.add_subplot(gs[1]))
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    inputs: RoiInputs,
    d: Dict[str, Any],
    summary_text: str,
    path: str = cfg.PDF_PATH,
) -> str:
    """Generate the PDF report. Returns the file path."""
    pages = [
        _page1_summary(inputs, d, summary_text),
        _page2_charts(d),
    ]
    try:
        with PdfPages(path) as pdf:
            for fig in pages:
                pdf.savefig(fig, facecolor=fig.get_facecolor())
    finally:
        for fig in pages:
            plt.close(fig)
    return path


def get_web_charts(d: Dict[str, Any]) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 2 charts:
      [0] ROI Sensitivity  (bar per uplift offset)
      [1] Impact Breakdown  (horizontal bars)
    """
    chart_figs = [
        _chart_sensitivity(d),
        _chart_breakdown(d),
    ]
    try:
        images = [figure_to_base64(f) for f in chart_figs]
    finally:
        for f in chart_figs:
            plt.close(f)
    return images

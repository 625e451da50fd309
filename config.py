"""
Constants for the Promo ROI Calculator.

Monetary values are in the user's own currency (displayed with a plain
dollar sign). Percentages are whole numbers, e.g. 8 means 8%.
"""

# ── Default scenario (raw text, as typed into the form) ─────────────
DEFAULT_INPUTS = {
    "baseline_revenue": "120000",   # stable monthly run-rate
    "uplift_pct": "8",              # expected uplift from the promo
    "bonus_cost": "15000",          # total direct cost of the bonus
    "churn_pct": "-2",              # signed churn effect on revenue
}

INPUT_LABELS = {
    "baseline_revenue": "Baseline monthly revenue",
    "uplift_pct": "Expected uplift (%)",
    "bonus_cost": "Bonus cost (total)",
    "churn_pct": "Churn impact (%)",
}

# ── Sensitivity sweep ───────────────────────────────────────────────
# Offsets (percentage points) applied to uplift_pct, ascending.
SENSITIVITY_DELTAS = (-6, -3, 0, 3, 6)

# Floor for the sensitivity scale so near-zero ROIs don't blow up bars.
MIN_ROI_SCALE = 10.0

# Bar geometry for the page's sensitivity chart (pixels).
BAR_MAX_HEIGHT = 140
BAR_MIN_HEIGHT = 6

# ── Display ─────────────────────────────────────────────────────────
CURRENCY_SYMBOL = "$"

ASSUMPTIONS = [
    "Baseline revenue represents a stable monthly run-rate.",
    "Uplift is attributable to the promo alone.",
    "Churn impact can be negative or positive.",
    "Bonus cost is fully accounted for in the month.",
]

# ── Web app / output files ──────────────────────────────────────────
WEB_HOST = "127.0.0.1"
WEB_PORT = 5000

PDF_PATH = "promo_roi_report.pdf"
CSV_PATH = "promo_roi_summary.csv"

"""
ROI derivation engine for the Promo ROI Calculator.

Maps four numeric inputs (baseline revenue, uplift %, bonus cost,
churn %) to a result record and a five-point sensitivity sweep around
the uplift assumption.

Every function here is pure: no I/O, no logging, no shared state.
Invalid text is normalised to 0.0 at the coercion boundary and every
ratio with a non-positive denominator is normalised to 0.0, so nothing
in this module raises.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Dict, Iterable, List, Mapping

import config as cfg


FIELDS = ("baseline_revenue", "uplift_pct", "bonus_cost", "churn_pct")


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class RoiInputs:
    """Coerced user inputs. Any finite number is accepted, signs included."""

    baseline_revenue: float   # monthly run-rate revenue
    uplift_pct: float         # expected uplift, % of baseline
    bonus_cost: float         # total direct cost of the promo
    churn_pct: float          # signed churn effect, % of baseline


@dataclass(frozen=True)
class RoiResult:
    """Derived figures for one set of inputs."""

    baseline_revenue: float
    uplift_revenue: float
    churn_impact: float
    bonus_cost: float
    net_impact: float
    roi: float        # 0 when bonus_cost <= 0
    payback: float    # 0 when gross_impact <= 0 (display as N/A)

    @property
    def gross_impact(self) -> float:
        return self.uplift_revenue + self.churn_impact

    @property
    def has_roi(self) -> bool:
        return self.bonus_cost > 0

    @property
    def has_payback(self) -> bool:
        return self.gross_impact > 0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class SensitivityPoint:
    """ROI at one offset of the uplift assumption."""

    label: str          # adjusted uplift, e.g. "14%"
    roi: float
    delta: float        # offset applied to uplift_pct
    uplift_pct: float   # uplift_pct + delta


@dataclass(frozen=True)
class SensitivityBar:
    """Bar geometry for one sensitivity point (pixels)."""

    label: str
    roi: float
    height: int
    negative: bool


# ─── Coercion ────────────────────────────────────────────────────────

def coerce(raw: Any) -> float:
    """Convert user text to a finite float, 0.0 for anything else.

    Empty text, ``None``, non-numeric text ("12o"), and values that parse
    to infinity or NaN ("Infinity", "nan", "1e999") all give 0.0.
    Only ASCII decimal text is read, so booleans ("True") and full-width
    digits also give 0.0. Surrounding whitespace is ignored. Never raises.
    """
    if raw is None:
        return 0.0
    try:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            value = float(raw)
        else:
            text = str(raw).strip()
            # float() also accepts "1_000" and non-ASCII digits ("５");
            # a decimal field should not
            if not text or "_" in text or not text.isascii():
                return 0.0
            value = float(text)
    except (ValueError, OverflowError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_inputs(form: Mapping[str, Any]) -> RoiInputs:
    """Coerce the four raw fields of a form/JSON mapping into RoiInputs.

    Missing keys count as empty text.
    """
    return RoiInputs(**{name: coerce(form.get(name, "")) for name in FIELDS})


# ─── Core Formulas ───────────────────────────────────────────────────

def _roi(net_impact: float, bonus_cost: float) -> float:
    """ROI in percent; 0 unless bonus_cost is strictly positive."""
    return (net_impact / bonus_cost) * 100 if bonus_cost > 0 else 0.0


def compute_result(inputs: RoiInputs) -> RoiResult:
    """Derive net impact, ROI and payback from the inputs."""
    uplift_revenue = inputs.baseline_revenue * inputs.uplift_pct / 100
    churn_impact = inputs.baseline_revenue * inputs.churn_pct / 100
    gross = uplift_revenue + churn_impact
    net_impact = gross - inputs.bonus_cost

    return RoiResult(
        baseline_revenue=inputs.baseline_revenue,
        uplift_revenue=uplift_revenue,
        churn_impact=churn_impact,
        bonus_cost=inputs.bonus_cost,
        net_impact=net_impact,
        roi=_roi(net_impact, inputs.bonus_cost),
        payback=inputs.bonus_cost / gross if gross > 0 else 0.0,
    )


# ─── Sensitivity Sweep ───────────────────────────────────────────────

# Wide enough to quantize any finite double exactly.
_LABEL_CONTEXT = Context(prec=400)


def uplift_label(uplift_pct: float) -> str:
    """Whole-percent label, halves rounded away from zero ("2.5" -> "3%")."""
    rounded = Decimal(uplift_pct).quantize(
        Decimal(1), rounding=ROUND_HALF_UP, context=_LABEL_CONTEXT,
    )
    if rounded == 0:
        rounded = Decimal(0)   # no "-0%"
    return f"{rounded}%"


def compute_sensitivity(inputs: RoiInputs) -> List[SensitivityPoint]:
    """ROI at each uplift offset in ``SENSITIVITY_DELTAS``, ascending.

    Only ``uplift_pct`` moves; revenue, cost and churn stay fixed.
    """
    points: List[SensitivityPoint] = []
    for delta in cfg.SENSITIVITY_DELTAS:
        shifted = replace(inputs, uplift_pct=inputs.uplift_pct + delta)
        points.append(SensitivityPoint(
            label=uplift_label(shifted.uplift_pct),
            roi=compute_result(shifted).roi,
            delta=float(delta),
            uplift_pct=shifted.uplift_pct,
        ))
    return points


def max_abs_roi(points: Iterable[SensitivityPoint]) -> float:
    """Scale for the sensitivity chart: largest |roi|, never below 10."""
    return max([cfg.MIN_ROI_SCALE] + [abs(p.roi) for p in points])


def bar_fraction(roi: float, scale: float) -> float:
    """|roi| as a share of ``scale``, clamped to [0, 1].

    Finite inputs can still overflow ROI (a bonus cost of 1e-320): an
    infinite ROI fills the bar and NaN draws nothing.
    """
    if math.isnan(roi):
        return 0.0
    if math.isinf(roi):
        return 1.0
    return min(1.0, abs(roi) / scale)


def sensitivity_bars(
    points: List[SensitivityPoint],
    max_height: int = cfg.BAR_MAX_HEIGHT,
    min_height: int = cfg.BAR_MIN_HEIGHT,
) -> List[SensitivityBar]:
    """Bar heights proportional to |roi|, floored at ``min_height``."""
    scale = max_abs_roi(points)
    bars = []
    for p in points:
        height = math.floor(bar_fraction(p.roi, scale) * max_height + 0.5)
        bars.append(SensitivityBar(
            label=p.label,
            roi=p.roi,
            height=max(min_height, height),
            negative=p.roi < 0,
        ))
    return bars


# ─── Smoke Test ──────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 60)
    print("ROI Engine: Smoke Test")
    print("=" * 60)

    checks_passed = 0
    checks_total = 0

    def verify(name: str, condition: bool) -> None:
        global checks_passed, checks_total
        checks_total += 1
        status = "PASS" if condition else "FAIL"
        if condition:
            checks_passed += 1
        print(f"  [{status}] {name}")

    a = compute_result(RoiInputs(120_000, 8, 15_000, -2))
    print(f"\nScenario A: {a}")
    verify("A: uplift revenue 9,600", math.isclose(a.uplift_revenue, 9_600))
    verify("A: churn impact -2,400", math.isclose(a.churn_impact, -2_400))
    verify("A: net impact -7,800", math.isclose(a.net_impact, -7_800))
    verify("A: ROI -52%", math.isclose(a.roi, -52.0))
    verify("A: payback 15000/7200", math.isclose(a.payback, 15_000 / 7_200))

    b = compute_result(RoiInputs(100_000, 4, 20_000, -1))
    print(f"\nScenario B: {b}")
    verify("B: net impact -17,000", math.isclose(b.net_impact, -17_000))
    verify("B: ROI -85%", math.isclose(b.roi, -85.0))
    verify("B: payback 20000/3000", math.isclose(b.payback, 20_000 / 3_000))

    c = compute_result(RoiInputs(120_000, 50, 0, 0))
    verify("C: zero bonus cost -> ROI 0", c.roi == 0)

    pts = compute_sensitivity(RoiInputs(120_000, 8, 15_000, -2))
    print("\nSensitivity:")
    for p in pts:
        print(f"  {p.label:>5}  {p.roi:>8.1f}%")
    verify("D: five points", len(pts) == 5)
    verify("D: +6 label is 14%", pts[-1].label == "14%")
    verify("D: -6 label is 2%", pts[0].label == "2%")
    verify("Scale never below 10", max_abs_roi(pts) >= 10)
    verify("Coerce 'abc' -> 0", coerce("abc") == 0.0)
    verify("Coerce 'Infinity' -> 0", coerce("Infinity") == 0.0)

    print(f"\n  Engine checks: {checks_passed}/{checks_total} passed")

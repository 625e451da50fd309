"""
Flask web application for the Promo ROI Calculator.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server on localhost:5000.

The page recomputes on every keystroke through ``/api/roi``; a normal
form POST re-renders the page with charts and refreshes the PDF and CSV
downloads.
"""

from __future__ import annotations

import math
import os
from typing import Any, Mapping

from flask import Flask, jsonify, render_template_string, request, send_file

import config as cfg
from roi import FIELDS, RoiInputs, compute_result, parse_inputs
from cli import (
    compute_display_data,
    export_csv,
    generate_summary_text,
)
import report

app = Flask(__name__)


# ═══════════════════════════════════════════════════════════════════
# Form parsing
# ═══════════════════════════════════════════════════════════════════

def _log_zeroed_fields(form: Mapping[str, Any], inputs: RoiInputs) -> None:
    """Debug-log fields that were filled in but count as zero."""
    for name in FIELDS:
        raw = str(form.get(name, "") or "").strip()
        if raw and getattr(inputs, name) == 0.0:
            app.logger.debug("%s=%r treated as 0", name, raw)


def parse_form(form: Mapping[str, Any]) -> RoiInputs:
    """Parse the HTML form (or JSON body) into RoiInputs."""
    inputs = parse_inputs(form)
    _log_zeroed_fields(form, inputs)
    return inputs


def _json_safe(obj: Any) -> Any:
    """Swap NaN and ±inf floats for None; JSON has no spelling for them."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_json_safe(v) for v in obj]
    return obj


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Promo ROI Calculator</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg:#f8fafc;
    --surface:#ffffff;
    --ink:#0f172a;
    --ink-2:#334155;
    --muted:#64748b;
    --border:#e2e8f0;
    --dark:#0f172a;
    --dark-card:rgba(30,41,59,.7);
    --emerald:#10b981;
    --rose:#fb7185;
    --radius-lg:16px;
    --radius-md:12px;
  }
  body{
    background:var(--bg);color:var(--ink);
    font-family:system-ui,-apple-system,'Segoe UI',sans-serif;
    line-height:1.55;min-height:100vh;
  }
  .container{max-width:1024px;margin:0 auto;padding:3.5rem 1.5rem;display:flex;flex-direction:column;gap:2.5rem}

  /* ── header ── */
  .eyebrow{font-size:.72rem;font-weight:600;letter-spacing:.25em;text-transform:uppercase;color:var(--muted)}
  h1{font-size:clamp(1.8rem,4vw,2.3rem);font-weight:600;line-height:1.2;margin:.8rem 0}
  .lede{max-width:42rem;color:var(--ink-2)}

  /* ── layout ── */
  .grid-2{display:grid;gap:1.5rem;grid-template-columns:1.1fr .9fr}
  .grid-even{display:grid;gap:1rem;grid-template-columns:1fr 1fr}
  @media(max-width:860px){.grid-2,.grid-even{grid-template-columns:1fr}}

  .card{background:var(--surface);border:1px solid var(--border);border-radius:var(--radius-lg);padding:1.5rem}
  .card.dark{background:var(--dark);color:#fff;border-color:var(--dark)}
  h2{font-size:1.1rem;font-weight:600}
  h3{font-size:.8rem;font-weight:600;letter-spacing:.2em;text-transform:uppercase;color:var(--muted)}
  .hint{font-size:.86rem;color:var(--muted);margin-top:.25rem}
  .card.dark .hint{color:#cbd5e1}

  /* ── form ── */
  .form-grid{display:grid;grid-template-columns:1fr 1fr;gap:1rem;margin-top:1.5rem}
  .form-group{display:flex;flex-direction:column;gap:.4rem;font-size:.86rem;color:var(--ink-2)}
  .form-group input{
    border:1px solid var(--border);border-radius:var(--radius-md);
    padding:.55rem .75rem;font-size:.9rem;color:var(--ink);font-family:inherit;
  }
  .form-group input:focus{outline:none;border-color:#94a3b8}
  .actions{display:flex;gap:.75rem;flex-wrap:wrap;margin-top:1.5rem}
  .btn{
    display:inline-flex;align-items:center;padding:.6rem 1.3rem;border-radius:var(--radius-md);
    font-size:.88rem;font-weight:600;cursor:pointer;border:1px solid var(--ink);
    text-decoration:none;font-family:inherit;
  }
  .btn-primary{background:var(--ink);color:#fff}
  .btn-ghost{background:transparent;color:var(--ink)}

  /* ── snapshot ── */
  .tile{background:var(--dark-card);border-radius:var(--radius-lg);padding:1rem;margin-top:1rem}
  .tile-label{font-size:.7rem;letter-spacing:.2em;text-transform:uppercase;color:#94a3b8}
  .tile-value{font-size:1.3rem;font-weight:600;margin-top:.4rem;font-variant-numeric:tabular-nums}
  .tile-value.big{font-size:1.6rem}
  .summary{font-size:.86rem;color:#cbd5e1;margin-top:1rem}

  /* ── breakdown ── */
  .stat-row{display:flex;justify-content:space-between;padding:.45rem 0;font-size:.9rem;color:var(--ink-2)}
  .stat-value{font-weight:600;color:var(--ink);font-variant-numeric:tabular-nums}

  /* ── sensitivity bars ── */
  .bars{display:flex;align-items:flex-end;gap:1rem;margin-top:1.25rem}
  .bar-col{flex:1;display:flex;flex-direction:column;align-items:center;gap:.5rem}
  .bar-roi{font-size:.75rem;font-weight:500;color:var(--ink-2)}
  .bar-track{position:relative;height:160px;width:100%;display:flex;align-items:flex-end}
  .bar-mid{position:absolute;left:0;right:0;top:50%;border-top:1px dashed var(--border)}
  .bar{width:2rem;margin:0 auto;border-radius:8px;background:var(--emerald)}
  .bar.neg{background:var(--rose)}
  .bar-label{font-size:.75rem;color:var(--muted)}

  ul.bullets{margin-top:1rem;padding-left:1.2rem;font-size:.86rem;color:var(--ink-2)}
  ul.bullets li{margin-bottom:.4rem}
  .chart-img{width:100%;border-radius:var(--radius-md);margin-top:1rem}
</style>
</head>
<body>
<main class="container">

<header>
  <p class="eyebrow">Promotion planning</p>
  <h1>Promo ROI Calculator</h1>
  <p class="lede">
    Estimate the impact of a marketing promotion by modeling uplift,
    churn effects, and direct bonus cost.
  </p>
</header>

<section class="grid-2">
  <div class="card">
    <h2>Inputs</h2>
    <p class="hint">Adjust the assumptions to reflect your promo scenario.</p>
    <form id="roi-form" method="post" action="/">
      <div class="form-grid">
        {% for name in fields %}
        <label class="form-group">
          {{ labels[name] }}
          <input type="number" step="any" inputmode="decimal" name="{{ name }}" value="{{ form.get(name, '') }}">
        </label>
        {% endfor %}
      </div>
      <div class="actions">
        <button class="btn btn-primary" type="submit">Build report</button>
        {% if charts|length > 0 %}
        <a class="btn btn-ghost" href="/download-pdf">Download PDF</a>
        <a class="btn btn-ghost" href="/download-csv">Export CSV</a>
        {% endif %}
      </div>
    </form>
  </div>

  <div class="card dark">
    <h2>ROI Snapshot</h2>
    <p class="hint">High-level impact based on your inputs.</p>
    <div class="tile">
      <div class="tile-label">Net Impact</div>
      <div class="tile-value big" data-field="net_impact_str">{{ d.net_impact_str }}</div>
    </div>
    <div class="grid-even">
      <div class="tile">
        <div class="tile-label">ROI</div>
        <div class="tile-value" data-field="roi_str">{{ d.roi_str }}</div>
      </div>
      <div class="tile">
        <div class="tile-label">Payback (months)</div>
        <div class="tile-value" data-field="payback_str">{{ d.payback_str }}</div>
      </div>
    </div>
    <p class="summary" id="summary">{{ summary_text }}</p>
  </div>
</section>

<section class="grid-2">
  <div class="card">
    <h3>Breakdown</h3>
    <div style="margin-top:1rem">
      <div class="stat-row"><span>Baseline revenue</span><span class="stat-value" data-field="baseline_revenue_str">{{ d.baseline_revenue_str }}</span></div>
      <div class="stat-row"><span>Uplift revenue</span><span class="stat-value" data-field="uplift_revenue_str">{{ d.uplift_revenue_str }}</span></div>
      <div class="stat-row"><span>Churn impact</span><span class="stat-value" data-field="churn_impact_str">{{ d.churn_impact_str }}</span></div>
      <div class="stat-row"><span>Bonus cost</span><span class="stat-value" data-field="bonus_cost_str">{{ d.bonus_cost_str }}</span></div>
    </div>
  </div>

  <div class="card">
    <h3>ROI Sensitivity (Uplift &plusmn; 6%)</h3>
    <p class="hint">How ROI changes when uplift assumptions shift.</p>
    <div class="bars" id="bars">
      {% for b in d.bars %}
      <div class="bar-col">
        <div class="bar-roi">{{ b.roi_str }}</div>
        <div class="bar-track">
          <div class="bar-mid"></div>
          <div class="bar {{ 'neg' if b.negative }}" style="height:{{ b.height }}px"></div>
        </div>
        <div class="bar-label">{{ b.label }}</div>
      </div>
      {% endfor %}
    </div>
  </div>
</section>

{% if charts|length > 0 %}
<section class="card">
  <h3>Charts</h3>
  <img class="chart-img" src="data:image/png;base64,{{ charts[0] }}" alt="ROI Sensitivity">
  <img class="chart-img" src="data:image/png;base64,{{ charts[1] }}" alt="Impact Breakdown">
</section>
{% endif %}

<section class="grid-even">
  <div class="card">
    <h3>Assumptions</h3>
    <ul class="bullets">
      {% for a in assumptions %}<li>{{ a }}</li>{% endfor %}
    </ul>
  </div>
  <div class="card">
    <h3>Reading the numbers</h3>
    <ul class="bullets">
      <li>ROI shows 0.0% whenever the bonus cost is zero or negative.</li>
      <li>Payback is N/A when uplift plus churn adds no revenue.</li>
      <li>Fields that aren't numbers count as 0.</li>
    </ul>
  </div>
</section>

</main>
<script>
(function(){
  var form=document.getElementById('roi-form');
  var pending=null;

  function esc(s){
    return String(s).replace(/[&<>"']/g,function(c){
      return {'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c];
    });
  }

  function render(data){
    var d=data.display;
    document.querySelectorAll('[data-field]').forEach(function(el){
      el.textContent=d[el.getAttribute('data-field')];
    });
    document.getElementById('summary').textContent=data.summary;
    document.getElementById('bars').innerHTML=d.bars.map(function(b){
      return '<div class="bar-col">'
        +'<div class="bar-roi">'+esc(b.roi_str)+'</div>'
        +'<div class="bar-track"><div class="bar-mid"></div>'
        +'<div class="bar'+(b.negative?' neg':'')+'" style="height:'+b.height+'px"></div></div>'
        +'<div class="bar-label">'+esc(b.label)+'</div></div>';
    }).join('');
  }

  function recompute(){
    if(pending){pending.abort();}
    pending=new AbortController();
    fetch('/api/roi',{method:'POST',body:new FormData(form),signal:pending.signal})
      .then(function(r){return r.json();})
      .then(render)
      .catch(function(err){if(err.name!=='AbortError'){console.error(err);}});
  }

  form.querySelectorAll('input').forEach(function(el){
    el.addEventListener('input',recompute);
  });
})();
</script>
</body>
</html>
"""


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        form = dict(cfg.DEFAULT_INPUTS)
    else:
        form = request.form.to_dict()

    inputs = parse_form(form)
    d = compute_display_data(inputs)
    summary_text = generate_summary_text(d)

    chart_images = []
    if request.method == "POST":
        # Full report: charts, PDF and CSV
        chart_images = report.get_web_charts(d)
        report.generate_pdf(inputs, d, summary_text, cfg.PDF_PATH)
        export_csv(d, cfg.CSV_PATH)
        app.logger.info("Report written to %s and %s", cfg.PDF_PATH, cfg.CSV_PATH)

    return render_template_string(
        HTML_TEMPLATE,
        form=form,
        fields=FIELDS,
        labels=cfg.INPUT_LABELS,
        assumptions=cfg.ASSUMPTIONS,
        d=d,
        summary_text=summary_text,
        charts=chart_images,
    )


@app.route("/api/roi", methods=["GET", "POST"])
def api_roi():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = request.values
    inputs = parse_form(payload)
    d = compute_display_data(inputs)
    return jsonify(_json_safe({
        "inputs": {name: getattr(inputs, name) for name in FIELDS},
        "result": compute_result(inputs).as_dict(),
        "display": d,
        "summary": generate_summary_text(d),
    }))


@app.route("/download-pdf")
def download_pdf():
    if os.path.exists(cfg.PDF_PATH):
        return send_file(os.path.abspath(cfg.PDF_PATH), as_attachment=True,
                         download_name="promo_roi_report.pdf")
    return "No report generated yet. Build a report first.", 404


@app.route("/download-csv")
def download_csv():
    if os.path.exists(cfg.CSV_PATH):
        return send_file(os.path.abspath(cfg.CSV_PATH), as_attachment=True,
                         download_name="promo_roi_summary.csv",
                         mimetype="text/csv")
    return "No summary generated yet. Build a report first.", 404


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{cfg.WEB_HOST}:{cfg.WEB_PORT}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=cfg.WEB_PORT, debug=debug)


if __name__ == "__main__":
    run_web()

"""Self-contained HTML page for the browser dashboard.

The page loads ``/data`` once, then follows ``/sse`` for pushed updates and
polls ``/data`` on the configured refresh rate as a fallback. Chart geometry
is drawn client-side on a canvas from the already-compressed series.
"""


def get_dashboard_html() -> str:
    """Return the full self-contained HTML page for the dashboard."""
    return _DASHBOARD_HTML


_DASHBOARD_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>tgraph - Resource Monitor</title>
<style>
  body { background: #0f1724; color: #dbeafe; font-family: monospace; margin: 1.5rem; }
  h1 { font-size: 1.2rem; }
  .controls { display: flex; gap: 1rem; align-items: center; margin-bottom: 1rem; flex-wrap: wrap; }
  .stats { display: flex; gap: 2rem; margin: .75rem 0; }
  .stats span b { color: #60a5fa; }
  canvas { background: #0b1220; border: 1px solid #1f2937; width: 100%; height: 360px; }
  .error { color: #fb923c; min-height: 1.2em; }
</style>
</head>
<body>
<h1 id="title">Resource Monitor</h1>
<div class="controls">
  <label>Metric <select id="metric"></select></label>
  <label>Style
    <select id="style"><option>line</option><option>area</option><option>bars</option></select>
  </label>
  <label>Resolution <input id="resolution" type="range" min="50" max="1000" step="10">
    <span id="resolution-value"></span></label>
  <button id="reload">Reload</button>
</div>
<div class="error" id="error"></div>
<div class="stats">
  <span>Current: <b id="s-current">-</b></span>
  <span>Average: <b id="s-average">-</b></span>
  <span>Min: <b id="s-min">-</b></span>
  <span>Max: <b id="s-max">-</b></span>
  <span>Points: <b id="s-points">-</b></span>
</div>
<canvas id="chart" width="1200" height="360"></canvas>
<script>
let state = null;
let selected = null;
const $ = (id) => document.getElementById(id);

function draw() {
  if (!state) return;
  const metric = selected || state.metric;
  const points = state.allMetricsData[metric] || state.dataPoints;
  const stats = state.allStats[metric] || state.stats;
  $("s-current").textContent = stats.current;
  $("s-average").textContent = stats.average;
  $("s-min").textContent = stats.min;
  $("s-max").textContent = stats.max;
  $("s-points").textContent = points.length + " / " + state.totalPoints;

  const canvas = $("chart");
  const ctx = canvas.getContext("2d");
  const w = canvas.width, h = canvas.height, pad = 40;
  ctx.clearRect(0, 0, w, h);
  if (!points.length) {
    ctx.fillStyle = "#dbeafe";
    ctx.fillText("No data yet", w / 2 - 30, h / 2);
    return;
  }
  const values = points.map(p => p.value);
  const min = Math.min(...values);
  const max = Math.max(...values);
  const range = (max - min) || 1;
  const x = (i) => pad + (i / Math.max(points.length - 1, 1)) * (w - 2 * pad);
  const y = (v) => h - pad - ((v - min) / range) * (h - 2 * pad);
  const style = $("style").value;

  ctx.strokeStyle = "#10b981";
  ctx.fillStyle = "rgba(16, 185, 129, 0.25)";
  if (style === "bars") {
    const bw = Math.max(1, (w - 2 * pad) / points.length - 1);
    points.forEach((p, i) => ctx.fillRect(x(i) - bw / 2, y(p.value), bw, h - pad - y(p.value)));
  } else {
    ctx.beginPath();
    points.forEach((p, i) => i ? ctx.lineTo(x(i), y(p.value)) : ctx.moveTo(x(i), y(p.value)));
    ctx.stroke();
    if (style === "area") {
      ctx.lineTo(x(points.length - 1), h - pad);
      ctx.lineTo(x(0), h - pad);
      ctx.closePath();
      ctx.fill();
    }
  }
  ctx.fillStyle = "#dbeafe";
  ctx.fillText(max.toFixed(2), 2, pad);
  ctx.fillText(min.toFixed(2), 2, h - pad);
  ctx.fillText(points[0].time, pad, h - 10);
  ctx.fillText(points[points.length - 1].time, w - pad - 50, h - 10);
}

function apply(payload) {
  state = payload;
  const select = $("metric");
  if (!select.options.length) {
    Object.keys(payload.allMetricsData).forEach(m => select.add(new Option(m, m)));
    select.value = payload.metric;
    $("style").value = payload.style;
  }
  $("title").textContent = "Resource Monitor - " + payload.metricLabel;
  $("resolution").value = payload.resolution;
  $("resolution-value").textContent = payload.resolution;
  draw();
}

async function fetchData() {
  const res = await fetch("/data");
  apply(await res.json());
}

$("metric").addEventListener("change", (e) => { selected = e.target.value; draw(); });
$("style").addEventListener("change", draw);
$("resolution").addEventListener("input", (e) => { $("resolution-value").textContent = e.target.value; });
$("resolution").addEventListener("change", async (e) => {
  const res = await fetch("/resolution", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({resolution: Number(e.target.value)}),
  });
  const body = await res.json();
  $("error").textContent = res.ok ? "" : (body.detail && body.detail.error) || "Resolution rejected";
  await fetchData();
});
$("reload").addEventListener("click", async () => { await fetch("/reload", {method: "POST"}); await fetchData(); });

fetchData();
fetch("/config").then(r => r.json()).then(cfg => {
  setInterval(fetchData, Math.max(cfg.refreshRate, 1000));
});
const source = new EventSource("/sse");
source.onmessage = (e) => apply(JSON.parse(e.data));
</script>
</body>
</html>
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from .. import __version__
from ..config import TimerSettings, default_db_path, load_settings
from ..db import SessionHistory
from .routes.health import router as health_router
from .routes.meta import router as meta_router
from .routes.stats import router as stats_router
from .routes.timer import router as timer_router
from .timer_service import TimerService


def create_app(
    db_path: Path | None = None,
    settings: TimerSettings | None = None,
    service: TimerService | None = None,
) -> FastAPI:
    resolved_db = Path(db_path or default_db_path())
    resolved_settings = settings or load_settings()

    app = FastAPI(title="PhaseTimer API", version=__version__)
    app.state.db_path = str(resolved_db)
    app.state.timer_service = service or TimerService(
        settings=resolved_settings,
        history=SessionHistory(resolved_db),
    )

    app.include_router(health_router)
    app.include_router(meta_router)
    app.include_router(stats_router)
    app.include_router(timer_router)
    app.add_api_route("/", lambda: HTMLResponse(_index_html()), methods=["GET"], include_in_schema=False)

    return app


def _index_html() -> str:
    return """
<!doctype html>
<html lang="zh-CN">
  <head>
    <meta charset="utf-8" />
    <title>番茄钟</title>
    <style>
      body { font-family: "Microsoft YaHei", sans-serif; margin: 0; padding: 2rem; background: #f6f8fb; color: #111827; }
      .card { max-width: 420px; margin: 2rem auto; background: white; border: 1px solid #e5e7eb; border-radius: 0.75rem; padding: 1.5rem; text-align: center; }
      .card.break { border-color: #10b981; }
      #time { font-size: 4rem; font-variant-numeric: tabular-nums; }
      .bar { height: 0.5rem; background: #e5e7eb; border-radius: 0.25rem; overflow: hidden; margin: 1rem 0; }
      #progress { height: 100%; width: 0; background: #ef4444; }
      .break #progress { background: #10b981; }
      button { font-size: 1rem; padding: 0.4rem 1rem; margin: 0 0.25rem; }
    </style>
  </head>
  <body>
    <div class="card" id="card">
      <div id="mode">工作时间</div>
      <div id="time">25:00</div>
      <div class="bar"><div id="progress"></div></div>
      <div>第 <span id="sessions">1</span> 轮</div>
      <p>
        <button id="start">开始</button>
        <button id="pause" disabled>暂停</button>
        <button id="reset">重置</button>
      </p>
      <small>空格：开始/暂停　R：重置</small>
    </div>
    <script>
      const api = (path, method) => fetch(`/api/v1/timer/${path}`, { method }).then(r => r.json()).then(render);
      const labels = { work: "工作时间", break: "休息时间" };
      let running = false;

      function render(s) {
        running = s.running;
        document.getElementById("time").textContent = s.display;
        document.getElementById("mode").textContent = labels[s.phase];
        document.getElementById("sessions").textContent = s.completed_work_sessions;
        document.getElementById("progress").style.width = `${s.elapsed_fraction * 100}%`;
        document.getElementById("card").classList.toggle("break", s.phase === "break");
        document.getElementById("start").disabled = s.running;
        document.getElementById("pause").disabled = !s.running;
        document.title = s.title;
      }

      function playTones(tones) {
        try {
          const ctx = new (window.AudioContext || window.webkitAudioContext)();
          const now = ctx.currentTime;
          for (const t of tones) {
            const osc = ctx.createOscillator();
            const gain = ctx.createGain();
            osc.connect(gain); gain.connect(ctx.destination);
            osc.type = "sine";
            osc.frequency.setValueAtTime(t.frequency, now + t.offset);
            gain.gain.setValueAtTime(0, now + t.offset);
            gain.gain.linearRampToValueAtTime(0.3, now + t.offset + 0.1);
            gain.gain.linearRampToValueAtTime(0, now + t.offset + t.duration);
            osc.start(now + t.offset); osc.stop(now + t.offset + t.duration);
          }
        } catch (err) { console.log("audio failed", err); }
      }

      function announce(e) {
        if (e.sound) playTones(e.tones);
        if ("Notification" in window && Notification.permission === "granted") {
          const n = new Notification(e.title, { body: e.message });
          setTimeout(() => n.close(), 5000);
        }
        setTimeout(() => { if (!running && confirm(`${e.title} 继续吗？`)) api("start", "POST"); }, 1000);
      }

      const source = new EventSource("/api/v1/timer/stream");
      source.onmessage = (msg) => {
        const e = JSON.parse(msg.data);
        if (e.event === "phase_complete") announce(e);
        else fetch("/api/v1/timer/state").then(r => r.json()).then(render);
      };

      document.getElementById("start").onclick = () => api("start", "POST");
      document.getElementById("pause").onclick = () => api("pause", "POST");
      document.getElementById("reset").onclick = () => api("reset", "POST");
      document.addEventListener("keydown", (e) => {
        if (e.target.matches("button")) return;
        if (e.code === "Space") { e.preventDefault(); api(running ? "pause" : "start", "POST"); }
        else if (e.code === "KeyR") { e.preventDefault(); api("reset", "POST"); }
      });
      if ("Notification" in window && Notification.permission === "default") Notification.requestPermission();
      fetch("/api/v1/timer/state").then(r => r.json()).then(render);
    </script>
  </body>
</html>
"""

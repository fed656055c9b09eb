from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from .chime import Chime
from .clock import RealClock
from .config import default_db_path, load_settings, minutes_to_seconds
from .console import ConsoleRunner
from .db import SessionHistory
from .notifier import Notifier
from .timer import PhaseTimer

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phasetimer",
        description="PhaseTimer：工作/休息交替的番茄钟",
    )
    parser.add_argument(
        "--db",
        default=str(default_db_path()),
        help="SQLite 数据库路径（默认 phasetimer/data/phasetimer.sqlite，可用 PHASETIMER_DB 覆盖）",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 INFO 级别日志")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="在终端中运行番茄钟")
    run_parser.add_argument("--work", type=float, default=None, help="工作时长（分钟，默认 25）")
    run_parser.add_argument(
        "--break",
        dest="break_minutes",
        type=float,
        default=None,
        help="休息时长（分钟，默认 5）",
    )
    run_parser.add_argument(
        "--tick-seconds",
        type=float,
        default=None,
        help="每次 tick 的间隔（秒，>=0，默认 1）",
    )
    run_parser.add_argument("--phases", type=int, default=None, help="完成 N 个阶段后退出")
    run_parser.add_argument("--auto", action="store_true", help="阶段结束后自动继续，不再确认")
    run_parser.add_argument("--no-sound", action="store_true", help="禁用提示音")
    run_parser.add_argument("--notify", action="store_true", help="启用桌面通知")

    stats_parser = subparsers.add_parser("stats", help="查看每日完成的工作阶段")
    stats_parser.add_argument("--days", type=int, default=7, help="显示最近 N 天")

    serve_parser = subparsers.add_parser("serve", help="启动本地 HTTP 服务与网页界面")
    serve_parser.add_argument("--host", default="127.0.0.1", help="监听地址")
    serve_parser.add_argument("--port", type=int, default=8765, help="监听端口")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    if args.command == "run":
        return _handle_run(args, parser)
    if args.command == "stats":
        return _handle_stats(args, parser)
    if args.command == "serve":
        return _handle_serve(args, parser)

    parser.print_help()
    return 2


def _handle_run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.work is not None and args.work <= 0:
        parser.error("--work 必须大于 0")
    if args.break_minutes is not None and args.break_minutes <= 0:
        parser.error("--break 必须大于 0")
    if args.tick_seconds is not None and args.tick_seconds < 0:
        parser.error("--tick-seconds 不能为负数")
    if args.phases is not None and args.phases < 1:
        parser.error("--phases 必须大于等于 1")

    try:
        settings = load_settings(
            work_seconds=minutes_to_seconds(args.work) if args.work is not None else None,
            break_seconds=(
                minutes_to_seconds(args.break_minutes) if args.break_minutes is not None else None
            ),
            tick_seconds=args.tick_seconds,
            sound=False if args.no_sound else None,
            notify=True if args.notify else None,
            auto_continue=True if args.auto else None,
        )
    except ValueError as exc:
        parser.error(str(exc))

    timer = PhaseTimer(work_duration=settings.work_seconds, break_duration=settings.break_seconds)
    runner = ConsoleRunner(
        timer=timer,
        clock=RealClock(),
        notifier=Notifier(stream=sys.stdout),
        chime=Chime(stream=sys.stdout),
        settings=settings,
        history=SessionHistory(Path(args.db)),
        stream=sys.stdout,
    )
    result = runner.run(max_phases=args.phases)
    return 130 if result.interrupted else 0


def _handle_stats(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.days < 1:
        parser.error("--days 必须大于等于 1")

    history = SessionHistory(Path(args.db))
    items = history.recent_days(args.days)
    for item in items:
        print(f"{item.day.isoformat()} | {item.count} 个工作阶段")
    print(f"合计（最近 {len(items)} 天）：{sum(item.count for item in items)}")
    print(f"历史总计：{history.total()}")
    return 0


def _handle_serve(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    try:
        import uvicorn

        from .api.app import create_app
    except ImportError as exc:
        print(f"服务启动失败：缺少依赖（fastapi/uvicorn）。{exc}")
        print("请先安装依赖：pip install fastapi uvicorn")
        return 2

    try:
        settings = load_settings()
    except ValueError as exc:
        parser.error(str(exc))

    app = create_app(db_path=Path(args.db), settings=settings)
    print(f"PhaseTimer 已启动：http://{args.host}:{args.port}")
    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    finally:
        app.state.timer_service.shutdown()
    return 0

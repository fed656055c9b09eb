"""PhaseTimer：工作/休息交替的番茄钟状态机、终端与网页界面。"""

from .timer import Phase, PhaseTimer, TimerSnapshot

__version__ = "0.1.0"

__all__ = ["Phase", "PhaseTimer", "TimerSnapshot", "main", "__version__"]


def main(argv: list[str] | None = None) -> int:
    from .cli import main as cli_main

    return cli_main(argv)

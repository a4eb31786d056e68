import argparse
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .engine import CfailEngine, Status
from .errors import CfailError
from .utils.config import ConfigManager
from .utils.state import SuiteState
from .utils.watcher import FileWatcher

logger = logging.getLogger("cfail")

_STATUS_STYLE = {
    "ok": "bold green",
    "ignored": "yellow",
    "FAILED": "bold red",
    "ERROR": "bold red",
}


NO_ARGS = "expected at least one argument, got none"


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cfail",
        description="Check that rustc reports the diagnostics annotated in each file",
    )
    parser.add_argument("files", nargs="*", help="source files annotated with //~ markers")
    parser.add_argument("-j", "--jobs", type=int, help="number of files checked in parallel")
    parser.add_argument("--compiler", help="compiler binary (default: rustc)")
    parser.add_argument("--watch", action="store_true", help="re-check a file whenever it is saved")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def setup_logging(level: str, console: Optional[Console] = None):
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[handler], force=True)


def check_one(engine: CfailEngine, path: str):
    """Run one file; returns (status word, payload to print under it)."""
    try:
        outcome = engine.check(path)
    except CfailError as e:
        return "ERROR", str(e)
    except Exception as e:
        logger.exception("unexpected failure while checking %s", path)
        return "ERROR", f"internal error: {e}"

    if outcome.status is Status.PASSED:
        return "ok", ""
    if outcome.status is Status.IGNORED:
        return "ignored", ""
    return "FAILED", outcome.report


def report(console: Console, path: str, status: str, payload: str):
    console.print(Text.assemble(path, " ... ", (status, _STATUS_STYLE[status])), highlight=False, soft_wrap=True)
    if payload:
        console.print(payload.rstrip("\n"), markup=False, highlight=False, emoji=False, soft_wrap=True)


def run_suite(paths: Sequence[str], engine: CfailEngine, workers: int,
              console: Console) -> SuiteState:
    """
    Check every path on a pool of `workers` threads. Results are printed as
    they complete, so their order across files is not fixed.
    """
    state = SuiteState()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(check_one, engine, path): path for path in paths}
        for future in as_completed(futures):
            path = futures[future]
            status, payload = future.result()
            state.record(path, status)
            report(console, path, status, payload)

    console.print(state.summary(), highlight=False)
    return state


def watch(paths: Sequence[str], engine: CfailEngine, console: Console):
    """Re-check each file whenever it is saved, until interrupted."""
    def on_saved(path: str):
        status, payload = check_one(engine, path)
        report(console, path, status, payload)

    watcher = FileWatcher()
    watcher.start_watching(paths, on_saved)
    console.print("watching for changes, press Ctrl+C to stop", style="dim")
    try:
        while True:
            time.sleep(1)
    finally:
        watcher.stop_watching()


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = _build_parser().parse_args(argv)
    console = console or Console()

    config = ConfigManager()
    if args.jobs is not None:
        config.config["jobs"] = args.jobs
    if args.compiler:
        config.config["compiler"] = args.compiler

    setup_logging("DEBUG" if args.verbose else config.get("log_level", "WARNING"))

    if not args.files:
        console.print(f"error: {NO_ARGS}", markup=False, highlight=False, emoji=False)
        return 1

    engine = CfailEngine(config)
    state = run_suite(args.files, engine, config.worker_count(), console)

    if args.watch:
        try:
            watch(args.files, engine, console)
        except KeyboardInterrupt:
            pass

    return 1 if state.has_failures else 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()

from __future__ import annotations

import argparse
import uuid
from datetime import timedelta
from pathlib import Path

from rich.console import Console

from pkg_repair import __version__
from pkg_repair.core import (
    DEFAULT_TIMEOUT,
    DatabaseLayout,
    RepairConfig,
    bind,
    configure_logging,
    get_logger,
    load_settings,
    parse_duration,
)
from pkg_repair.execution import CommandRunner, PkgCommands
from pkg_repair.network import RepoProber
from pkg_repair.pipeline import EventBus, EventReporter, Sequencer
from pkg_repair.stages import StageDeps, build_stages
from pkg_repair.ui import ConsoleRenderer, default_theme


def _timeout_arg(text: str) -> timedelta:
    try:
        value = parse_duration(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    if value <= timedelta(0):
        raise argparse.ArgumentTypeError(f"timeout must be positive, got {text!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ppr",
        description=(
            "Repair the local package catalog and database. "
            "Needs root; only one run per database directory at a time."
        ),
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Show intended actions without making changes",
    )
    p.add_argument(
        "--compact",
        action="store_true",
        help="Compact view mode (minimal output)",
    )
    p.add_argument(
        "--report-json",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write a JSON event report to this file",
    )
    p.add_argument(
        "--timeout",
        type=_timeout_arg,
        default=DEFAULT_TIMEOUT,
        metavar="DURATION",
        help=(
            "Time limit for each stage, e.g. 20m, 1h30m, 90s (default: 20m). "
            "Stages are bounded one at a time, so a full run can take longer."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _config(args: argparse.Namespace) -> RepairConfig:
    return RepairConfig(
        dry_run=bool(args.dry_run),
        compact=bool(args.compact),
        report_path=args.report_json,
        timeout=args.timeout,
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cfg = _config(args)

    settings = load_settings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)
    bind(run_id=uuid.uuid4().hex)
    log = get_logger("pkg_repair.cli")

    executor = CommandRunner()
    pkg = PkgCommands(bin=settings.pkg_bin)
    layout = DatabaseLayout.from_settings(settings)
    deps = StageDeps(
        executor=executor,
        pkg=pkg,
        layout=layout,
        prober=RepoProber(executor=executor, pkg=pkg),
    )

    bus = EventBus()
    bus.subscribe(EventReporter(cfg.report_path))
    bus.subscribe(
        ConsoleRenderer(theme=default_theme(), console=Console(), compact=cfg.compact)
    )

    log.debug(
        "cli.start",
        pkg_bin=settings.pkg_bin,
        db_dir=str(layout.root),
        **cfg.to_dict(),
    )
    sequencer = Sequencer(handlers=build_stages(deps), config=cfg, bus=bus)
    outcome = sequencer.run()
    return outcome.exit_code


if __name__ == "__main__":
    raise SystemExit(main())

"""CLI entrypoint for the rural listings dashboard pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rural_explorer.common.config_loader import load_config, resolve_snapshot
from rural_explorer.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from rural_explorer.common.errors import PipelineError
from rural_explorer.common.fs import dump_json, write_json
from rural_explorer.common.ids import generate_run_id
from rural_explorer.common.logging import build_logger, log_event
from rural_explorer.pipeline.aggregate import AreaPolicy
from rural_explorer.service import Dashboard


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--snapshot", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default=".")
    parser.add_argument("--base-url", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--area-policy", default=None, choices=[policy.value for policy in AreaPolicy])
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def _emit(payload, output: str | None) -> None:
    if output:
        write_json(Path(output), payload)
    else:
        sys.stdout.write(dump_json(payload) + "\n")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    logger = build_logger(
        run_id,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=args.log_level,
    )
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    try:
        config = load_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
    except PipelineError as exc:
        log_event(
            logger,
            f"config failed: {exc}",
            level=logging.ERROR,
            run_id=run_id,
            stage="config",
            event="CONFIG_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    if args.command == "snapshots":
        _emit({"default": config.source["default_snapshot"], "snapshots": list(config.source["snapshots"])}, args.output)
        return EXIT_SUCCESS

    dashboard = Dashboard(
        config,
        logger,
        data_dir=Path(args.data_dir),
        base_url=args.base_url,
        area_policy=AreaPolicy(args.area_policy) if args.area_policy else None,
    )
    try:
        snapshot = dashboard.load(resolve_snapshot(config, args.snapshot))
    except PipelineError as exc:
        log_event(
            logger,
            f"run failed: {exc}",
            level=logging.ERROR,
            run_id=run_id,
            stage="load",
            event="RUN_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    finally:
        dashboard.close()

    if args.command == "summary":
        _emit(snapshot.summary.to_dict(), args.output)
    else:
        _emit(dashboard.view_model(), args.output)

    if snapshot.summary.is_empty:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())

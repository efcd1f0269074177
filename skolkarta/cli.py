"""CLI entrypoint for the skolkarta school snapshot pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from skolkarta.common.config_loader import PipelineConfig, load_pipeline_config
from skolkarta.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, STAGES
from skolkarta.common.errors import PipelineError
from skolkarta.common.logging import build_logger, log_event
from skolkarta.common.time_utils import generate_run_id
from skolkarta.harvest.runner import run_fetch
from skolkarta.pipeline.process import run_process


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def execute_stage(stage: str, config: PipelineConfig, data_dir: Path, run_id: str, logger: logging.Logger) -> None:
    if stage == "fetch":
        run_fetch(config, data_dir, run_id, logger=logger)
    elif stage == "process":
        run_process(config, data_dir, run_id, logger=logger)
    else:
        raise ValueError(f"Unknown stage: {stage}")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        config = load_pipeline_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
    except PipelineError as exc:
        log_event(
            logger,
            f"invalid configuration: {exc}",
            level=logging.ERROR,
            run_id=run_id,
            stage="config",
            event="STAGE_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    stages = STAGES if args.command == "all" else (args.command,)

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        try:
            execute_stage(stage, config, data_dir, run_id, logger)
        except PipelineError as exc:
            log_event(
                logger,
                f"stage {stage} failed: {exc}",
                level=logging.ERROR,
                run_id=run_id,
                stage=stage,
                event="STAGE_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            return EXIT_HARD_FAIL
        except Exception as exc:
            logger.exception(
                f"unexpected failure in stage {stage}: {exc}",
                extra={"run_id": run_id, "stage": stage, "event": "STAGE_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
            )
            return EXIT_HARD_FAIL
        log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())

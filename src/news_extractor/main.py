from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from news_extractor.config_models import PipelineSettings, load_and_validate_config
from news_extractor.core.errors import PipelineError
from news_extractor.core.factory import ComponentFactory
from news_extractor.core.models import RunReport
from news_extractor.utils.logging import get_logger, setup_logging

log = get_logger("news_extractor.main")


def run_one(settings: PipelineSettings) -> RunReport:
    """Run a single extraction pass. Fatal errors propagate."""
    built = ComponentFactory().build(settings)
    report = built.pipeline.run(built.reader, built.sink)
    log.info("File created: %s", settings.sink.path)
    return report


def run_schedule(settings: PipelineSettings) -> None:
    """Run the extraction on a fixed interval until interrupted."""
    scheduler = BlockingScheduler()

    interval_hours = settings.schedule.interval_hours
    scheduler.add_job(
        _scheduled_run,
        trigger=IntervalTrigger(hours=interval_hours),
        args=[settings],
        id="news_extract",
        name="Scheduled extraction",
        max_instances=1,
        next_run_time=datetime.now(),
    )

    log.info("Starting scheduled extraction (every %s hours)", interval_hours)
    try:
        scheduler.start()
    except KeyboardInterrupt:
        log.info("Scheduler stopped by user")


def _scheduled_run(settings: PipelineSettings) -> None:
    try:
        run_one(settings)
    except PipelineError as e:
        # A failed pass should not stop later passes.
        log.error("Scheduled run failed: %s", e)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point: ``news-extract [config.yaml]``."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1:
        print("Usage: news-extract [configs/pipeline.yaml]")
        raise SystemExit(2)

    config_path = args[0] if args else None
    try:
        settings = load_and_validate_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    setup_logging(settings.logging.config_path, settings.logging.level)

    if settings.schedule.enabled:
        run_schedule(settings)
        return

    try:
        run_one(settings)
    except PipelineError as e:
        log.critical("Failed to process file: %s", e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()

"""
Command-line entry point, meant to be run by a scheduler (cron, CI workflow).

Settings come from the environment / .env; CLI options override them.
Exit code 0 means the run completed (duplicates and non-fatal warnings
included); 1 means it failed, in which case a traceback is written to the
configured error file.
"""
from __future__ import annotations

import logging
import os
import traceback
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .config import Settings
from .core import PopeWatcher
from .dedup import FileDedupStore
from .exceptions import ConfigError
from .fetcher import HttpFeedFetcher, SyntheticFeedFetcher
from .logging_utils import setup_logging
from .models import RunMode, RunResult, RunStatus
from .notifier import PushoverNotifier


app = typer.Typer(add_completion=False)


def build_watcher(settings: Settings, logger: Optional[logging.Logger] = None) -> PopeWatcher:
    """Wire collaborators for the configured run mode."""
    if settings.test_mode:
        fetcher = SyntheticFeedFetcher()
        mode = RunMode.TEST
    else:
        fetcher = HttpFeedFetcher(
            settings.rss_url,
            timeout_sec=settings.http_timeout,
            dump_path=settings.dump_file,
        )
        mode = RunMode.REAL

    notifier = PushoverNotifier(
        user_key=settings.pushover_user_key,
        app_token=settings.pushover_app_token,
        priority=settings.pushover_priority,
        retry=settings.pushover_retry,
        expire=settings.pushover_expire,
        timeout_sec=settings.http_timeout,
    )
    return PopeWatcher(
        fetcher=fetcher,
        store=FileDedupStore(settings.memory_file),
        notifier=notifier,
        mode=mode,
        rules=settings.classifier_rules(),
        logger=logger,
    )


def write_diagnostic(path: str, exc: BaseException, logger: logging.Logger) -> None:
    try:
        Path(path).write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), encoding="utf-8")
    except OSError as e:
        logger.error("Could not write diagnostic file %s: %s", path, e)


def write_step_outputs(result: RunResult) -> None:
    """Expose the outcome to later GitHub Actions steps when running there."""
    target = os.environ.get("GITHUB_OUTPUT")
    if not target:
        return
    lines = [f"status={result.status.value}"]
    if result.classification is not None:
        lines.append(f"classification={result.classification.value}")
    with open(target, "a", encoding="utf-8") as fh:
        fh.write("\n".join(lines) + "\n")


def run_once(settings: Settings, logger: Optional[logging.Logger] = None) -> RunResult:
    """
    Execute one pipeline run and never raise.

    Any exception is logged, dumped to `settings.error_file` and reported as a
    FAILED result.
    """
    logger = logger or logging.getLogger("pope_alert")
    try:
        result = build_watcher(settings, logger).run()
    except Exception as e:  # noqa: BLE001 - single top-level backstop
        logger.error("Script error: %s", e)
        write_diagnostic(settings.error_file, e, logger)
        result = RunResult(status=RunStatus.FAILED, error=str(e))

    try:
        write_step_outputs(result)
    except OSError as e:
        logger.warning("Could not write step outputs: %s", e)
    return result


def fail(exc: BaseException, error_file: str, logger: logging.Logger) -> NoReturn:
    """Report a failure that happened before the pipeline could start, then exit 1."""
    logger.error("Script error: %s", exc)
    write_diagnostic(error_file, exc, logger)
    raise typer.Exit(code=1)


@app.command()
def run(
    test_mode: Optional[bool] = typer.Option(
        None, "--test-mode/--live", help="Use a synthetic article and never persist state (env TEST_MODE)."
    ),
    rss_url: Optional[str] = typer.Option(None, "--rss-url", help="Feed URL (env RSS_URL)."),
    memory_file: Optional[Path] = typer.Option(None, "--memory-file", help="Last-seen id file (env MEMORY_FILE)."),
    rules: Optional[Path] = typer.Option(
        None, "--rules", exists=True, readable=True, help="JSON classifier rules (env CLASSIFIER_RULES)."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (env LOG_LEVEL)."),
):
    """Check the feed once and alert if the newest entry announces a new pope."""
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        # from_env has already loaded .env, so ERROR_FILE is visible here
        error_file = os.environ.get("ERROR_FILE", "").strip() or Settings().error_file
        fail(e, error_file, setup_logging())

    if test_mode is not None:
        settings.test_mode = test_mode
    if rss_url:
        settings.rss_url = rss_url
    if memory_file is not None:
        settings.memory_file = str(memory_file)
    if rules is not None:
        settings.rules_file = str(rules)
    if log_level:
        settings.log_level = log_level.upper()

    try:
        logger = setup_logging(settings.log_level, settings.log_file)
    except OSError as e:
        fail(e, settings.error_file, setup_logging(settings.log_level))

    result = run_once(settings, logger)
    if result.status is RunStatus.FAILED:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

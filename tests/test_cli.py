"""Tests for the command-line entry point and its failure backstop."""

from typer.testing import CliRunner

from pope_alert import cli
from pope_alert.config import Settings
from pope_alert.exceptions import FetchError
from pope_alert.models import RunStatus


runner = CliRunner()


def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "TEST_MODE",
        "RSS_URL",
        "MEMORY_FILE",
        "ERROR_FILE",
        "DUMP_FILE",
        "PUSHOVER_USER_KEY",
        "PUSHOVER_APP_TOKEN",
        "PUSHOVER_PRIORITY",
        "PUSHOVER_RETRY",
        "PUSHOVER_EXPIRE",
        "HTTP_TIMEOUT",
        "CLASSIFIER_RULES",
        "CLASSIFIER_PROFILE",
        "LOG_LEVEL",
        "LOG_FILE",
        "GITHUB_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)


class BrokenFetcher:
    def __init__(self, url, **kwargs):
        self.url = url

    def fetch(self):
        raise FetchError(f"Failed to fetch feed: {self.url} (HTTP 503)")


def test_test_mode_run_succeeds_without_touching_state(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    result = runner.invoke(cli.app, ["--test-mode", "--memory-file", str(tmp_path / "last.txt")])

    assert result.exit_code == 0
    assert not (tmp_path / "last.txt").exists()
    assert not (tmp_path / "rss_error.txt").exists()


def test_test_mode_from_environment(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("TEST_MODE", "true")
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0
    assert not (tmp_path / "last_guid.txt").exists()


def test_fetch_failure_exits_nonzero_and_writes_diagnostic(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("ERROR_FILE", str(tmp_path / "err.txt"))
    monkeypatch.setattr(cli, "HttpFeedFetcher", BrokenFetcher)

    result = runner.invoke(cli.app, ["--live", "--rss-url", "https://example.com/rss"])

    assert result.exit_code == 1
    dump = (tmp_path / "err.txt").read_text(encoding="utf-8")
    assert "FetchError" in dump
    assert "https://example.com/rss" in dump
    assert not (tmp_path / "last_guid.txt").exists()


def test_bad_configuration_exits_nonzero(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("PUSHOVER_RETRY", "often")
    result = runner.invoke(cli.app, ["--test-mode"])
    assert result.exit_code == 1
    assert "PUSHOVER_RETRY" in (tmp_path / "rss_error.txt").read_text(encoding="utf-8")


def test_run_once_writes_step_outputs(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    result = cli.run_once(Settings(test_mode=True, memory_file=str(tmp_path / "last.txt")))

    assert result.status is RunStatus.NOTIFIED
    # no credentials configured: reported, not fatal
    assert result.warnings == ["Pushover credentials not set."]
    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines == ["status=notified", "classification=announcement"]


def test_run_once_reports_failure(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setattr(cli, "HttpFeedFetcher", BrokenFetcher)

    result = cli.run_once(Settings(error_file=str(tmp_path / "err.txt")))

    assert result.status is RunStatus.FAILED
    assert "HTTP 503" in result.error
    assert (tmp_path / "err.txt").exists()


def test_bad_configuration_honours_error_file(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("ERROR_FILE", str(tmp_path / "custom_err.txt"))
    monkeypatch.setenv("HTTP_TIMEOUT", "never")
    result = runner.invoke(cli.app, ["--test-mode"])
    assert result.exit_code == 1
    assert "HTTP_TIMEOUT" in (tmp_path / "custom_err.txt").read_text(encoding="utf-8")
    assert not (tmp_path / "rss_error.txt").exists()


def test_unwritable_log_file_is_reported_and_dumped(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setenv("LOG_FILE", str(blocker / "sub" / "log.txt"))

    result = runner.invoke(cli.app, ["--test-mode"])

    assert result.exit_code == 1
    dump = (tmp_path / "rss_error.txt").read_text(encoding="utf-8")
    assert "Error" in dump
    assert "not_a_dir" in dump

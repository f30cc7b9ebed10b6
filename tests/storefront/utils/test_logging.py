"""Tests for log handler setup."""

import logging

import pytest
from storefront.utils.logging import log_directory, setup_stdlib_logging


@pytest.fixture()
def root_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


class TestLogDirectory:
    def test_no_files_in_test_environment(self, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "test")
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LOG_DIR", raising=False)

        assert log_directory() is None

    def test_log_dir_env_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PROTEAN_ENV", "test")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))

        assert log_directory() == tmp_path

    def test_defaults_to_logs_outside_tests(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("LOG_DIR", raising=False)

        assert str(log_directory()) == "logs"


class TestSetupStdlibLogging:
    def test_console_only_under_tests(self, monkeypatch, tmp_path, root_handlers):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PROTEAN_ENV", "test")
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LOG_DIR", raising=False)

        setup_stdlib_logging()

        assert not (tmp_path / "logs").exists()
        assert len(root_handlers.handlers) == 1

    def test_rotating_files_under_given_dir(self, tmp_path, root_handlers):
        setup_stdlib_logging(tmp_path / "out")

        assert (tmp_path / "out" / "storefront.log").exists()
        assert len(root_handlers.handlers) == 3

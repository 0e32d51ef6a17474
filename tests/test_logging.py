"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging

import pytest
from klaw_dbase_sql._logging import configure_logging, get_logger


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='DEBUG', json_output=True)
        get_logger('test').info('Test message', extra_field='extra_value')

        captured = capsys.readouterr()
        assert captured.out == ''
        entry = json.loads(captured.err.strip().splitlines()[-1])
        assert entry['event'] == 'Test message'
        assert entry['extra_field'] == 'extra_value'
        assert entry['level'] == 'info'

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='WARNING', json_output=True)
        logger = get_logger('test')
        logger.info('hidden')
        logger.warning('shown')

        err = capsys.readouterr().err
        assert 'hidden' not in err
        assert 'shown' in err

    def test_stdlib_logs_share_the_pipeline(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='INFO', json_output=True)
        logging.getLogger('third.party').info('from stdlib')

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry['event'] == 'from stdlib'
        assert entry['logger'] == 'third.party'

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='INFO', json_output=False)
        get_logger('test').info('console message')
        assert 'console message' in capsys.readouterr().err

    def test_unknown_level_defaults_to_warning(self) -> None:
        configure_logging(level='chatty')
        assert logging.getLogger().level == logging.WARNING

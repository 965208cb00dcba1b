"""
==================================================
Comprehensive pytest suite for core/logger.py
==================================================

Sections:
---------
1. Unit tests - Logger helpers and formatter
2. Integration tests - setup_logging handlers and file output

Available markers:
------------------
unit, integration

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_logger.py -v
With coverage:      pytest tests/tests_core/test_logger.py --cov=core.logger
"""

import logging
from contextlib import contextmanager

import pytest

from core.logger import CONSOLE_FORMAT, ColoredFormatter, get_logger, get_module_logger, setup_logging


@contextmanager
def isolated_root_logger():
    """Restore root handlers and level after setup_logging() replaced them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


def make_record(level=logging.INFO, msg="hello"):
    return logging.LogRecord('sql.select', level, __file__, 1, msg, None, None)


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_get_logger_returns_named_logger():
    assert get_logger('sql.select') is logging.getLogger('sql.select')
    assert get_module_logger('sql.dml') is logging.getLogger('sql.dml')


@pytest.mark.unit
def test_get_logger_level_override():
    logger = get_logger('tests.level_override', level='debug')

    assert logger.level == logging.DEBUG


@pytest.mark.unit
def test_colored_formatter_adds_marker_and_color():
    formatter = ColoredFormatter(CONSOLE_FORMAT)
    output = formatter.format(make_record(logging.WARNING, "careful"))

    assert output.startswith('[!!]')
    assert '\033[33mWARNING\033[0m' in output
    assert output.endswith('careful')


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    """Other handlers still see the plain level name."""
    record = make_record(logging.ERROR)
    ColoredFormatter(CONSOLE_FORMAT).format(record)

    assert record.levelname == 'ERROR'
    assert not hasattr(record, 'marker')


@pytest.mark.unit
def test_library_import_does_not_configure_logging():
    """Importing the builders adds no handlers to their loggers."""
    import sql.select  # noqa: F401

    assert logging.getLogger('sql.select').handlers == []


# =====================
# 2. INTEGRATION TESTS
# =====================

@pytest.mark.integration
def test_setup_logging_console_only():
    with isolated_root_logger() as root:
        setup_logging(log_level='warning', console_output=True, use_colors=False)

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, ColoredFormatter)


@pytest.mark.integration
def test_setup_logging_colored_console():
    with isolated_root_logger() as root:
        setup_logging(log_level='INFO', use_colors=True)

        assert isinstance(root.handlers[0].formatter, ColoredFormatter)


@pytest.mark.integration
def test_setup_logging_writes_file(tmp_path):
    with isolated_root_logger() as root:
        setup_logging(log_level='DEBUG', log_file='queries.log', log_dir=str(tmp_path), console_output=False)

        logging.getLogger('sql.executor').debug("SQL: SELECT 1")
        for handler in root.handlers:
            handler.flush()

    content = (tmp_path / 'queries.log').read_text(encoding='utf-8')
    assert 'sql.executor - DEBUG - SQL: SELECT 1' in content


@pytest.mark.integration
def test_setup_logging_twice_does_not_duplicate():
    with isolated_root_logger() as root:
        setup_logging(log_level='INFO', use_colors=False)
        setup_logging(log_level='INFO', use_colors=False)

        assert len(root.handlers) == 1

"""Test suite for logging helpers"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from statsplot.utils.logging import (
    StatsPlotLogger, ContextualLogger, get_logger, configure_logging, log_function_call
)
from statsplot.utils.logging.logger import AnalysisJSONFormatter, AnalysisLogFilter


def test_get_logger_is_cached():
    first = get_logger('statsplot_tests.cached', enable_console_logging=False)
    second = get_logger('statsplot_tests.cached')
    assert first is second


def test_configure_logging_replaces_instance(tmp_path):
    config = {
        'name': 'statsplot_tests.files',
        'log_level': 'DEBUG',
        'log_dir': str(tmp_path),
        'enable_file_logging': True,
        'enable_console_logging': False,
    }
    configured = configure_logging(config)

    assert get_logger('statsplot_tests.files') is configured
    assert (tmp_path / 'statsplot_tests.files.log').exists()
    assert len(configured.get_logger().handlers) == 2

    for handler in configured.get_logger().handlers:
        handler.close()


def test_contextual_logger_records_failure(caplog):
    caplog.set_level(logging.INFO)
    logger = StatsPlotLogger(name='statsplot_tests.context', enable_console_logging=False)

    with pytest.raises(ValueError):
        with ContextualLogger(logger, 'demo', chart='pie'):
            raise ValueError("boom")

    events = [record.analysis_data for record in caplog.records
              if hasattr(record, 'analysis_data')]
    assert [event['event_type'] for event in events] == ['analysis_start', 'analysis_end']
    assert events[0]['chart'] == 'pie'
    assert events[1]['success'] is False
    assert events[1]['error_type'] == 'ValueError'
    assert events[1]['chart'] == 'pie'


def test_json_formatter():
    record = logging.LogRecord('statsplot', logging.INFO, __file__, 1,
                               "ANALYSIS_EVENT", None, None)
    record.analysis_data = {'event_type': 'analysis_start', 'n': 3}

    assert AnalysisLogFilter().filter(record)
    assert json.loads(AnalysisJSONFormatter().format(record)) == {
        'event_type': 'analysis_start', 'n': 3
    }


def test_log_function_call_reraises(caplog):
    @log_function_call
    def failing():
        raise RuntimeError("bad input")

    with pytest.raises(RuntimeError):
        failing()
    assert "Error in failing: bad input" in caplog.text


def test_chart_events_logged(titanic_counts, caplog):
    from statsplot import ggpiestats

    caplog.set_level(logging.INFO)
    ggpiestats(titanic_counts, 'survived', counts='n', messages=False)

    events = [record.analysis_data for record in caplog.records
              if hasattr(record, 'analysis_data')]
    assert events[-1]['analysis_type'] == 'ggpiestats'
    assert events[-1]['success'] is True


def test_lazy_logger_keeps_attached_handlers():
    handler = logging.NullHandler()
    logging.getLogger('statsplot_tests.lazy').addHandler(handler)

    lazy = get_logger('statsplot_tests.lazy', enable_console_logging=False)

    assert handler in lazy.get_logger().handlers
    lazy.get_logger().removeHandler(handler)


class _EventCollector(logging.Handler):
    def __init__(self):
        super().__init__()
        self.events = []

    def emit(self, record):
        if hasattr(record, 'analysis_data'):
            self.events.append(record.analysis_data)


def test_concurrent_chart_events_keep_their_context(titanic_counts, label_scores):
    from statsplot import ggpiestats, ggdotplotstats

    collector = _EventCollector()
    events_logger = logging.getLogger('statsplot.events')
    events_logger.addHandler(collector)

    def pies():
        for _ in range(15):
            ggpiestats(titanic_counts, 'survived', counts='n', messages=False)

    def dots():
        for _ in range(15):
            ggdotplotstats(label_scores, 'score', 'country', messages=False)

    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(pies), pool.submit(dots)]
            for future in futures:
                future.result()
    finally:
        events_logger.removeHandler(collector)

    assert len(collector.events) == 60
    for event in collector.events:
        if event['analysis_type'] == 'ggpiestats':
            assert event['main'] == 'survived'
            assert 'x' not in event and 'y' not in event
        else:
            assert event['analysis_type'] == 'ggdotplotstats'
            assert (event['x'], event['y']) == ('score', 'country')
            assert 'main' not in event and 'n_rows' not in event

"""Tests for structured logging and metrics aggregation."""

import json
import logging
from unittest.mock import patch

from src.shared.structured_logging import (
    LogEvent,
    EventType,
    Phase,
    StructuredLogger,
    MetricsAggregator,
    create_logger,
)


def parse(record):
    return json.loads(record.message)


class TestLogEvent:
    """Tests for LogEvent dataclass."""

    def test_log_event_to_json(self):
        """LogEvent.to_json() should serialize to valid JSON."""
        event = LogEvent(
            timestamp='2026-02-04T12:00:00Z',
            trace_id='abc123',
            suite='favorites',
            phase='verification',
            event='convergence',
            state='converged',
            attempts=3,
            elapsed_ms=812.5,
        )

        parsed = json.loads(event.to_json())

        assert parsed['trace_id'] == 'abc123'
        assert parsed['suite'] == 'favorites'
        assert parsed['attempts'] == 3
        assert parsed['elapsed_ms'] == 812.5

    def test_log_event_to_json_filters_none_values(self):
        """LogEvent.to_json() should omit None values."""
        event = LogEvent(
            timestamp='2026-02-04T12:00:00Z',
            trace_id='abc123',
            suite='settings',
            phase='cleanup',
            event='cleanup',
            count=0,
        )

        parsed = json.loads(event.to_json())

        assert parsed['count'] == 0
        assert 'error' not in parsed
        assert 'attempts' not in parsed
        assert 'metadata' not in parsed

    def test_log_event_keeps_cyrillic_readable(self):
        event = LogEvent(
            timestamp='t', trace_id='x', suite='ui', phase='action', event='error',
            error='Невірний логін або пароль',
        )

        assert 'Невірний' in event.to_json()

    def test_log_event_to_dict(self):
        event = LogEvent(timestamp='t', trace_id='x', suite='ui', phase='setup', event='phase_end', count=3)

        data = event.to_dict()

        assert data['count'] == 3
        assert 'elapsed_ms' not in data


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def test_logger_initialization(self):
        logger = StructuredLogger(suite='favorites')

        assert logger.suite == 'favorites'
        assert len(logger.trace_id) == 8
        assert logger.logger is not None

    def test_logger_custom_trace_id(self):
        assert StructuredLogger(suite='ui', trace_id='custom-id').trace_id == 'custom-id'

    def test_log_auth_success(self, caplog):
        logger = StructuredLogger(suite='favorites')

        with caplog.at_level(logging.INFO):
            logger.log_auth(state='authenticated', method='session_restore')

        assert len(caplog.records) == 1
        data = parse(caplog.records[0])
        assert data['event'] == EventType.AUTH.value
        assert data['phase'] == Phase.AUTHENTICATION.value
        assert data['state'] == 'authenticated'
        assert data['metadata'] == {'method': 'session_restore'}
        assert data['timestamp'].endswith('Z')

    def test_log_auth_failure_logs_error(self, caplog):
        logger = StructuredLogger(suite='favorites')

        with caplog.at_level(logging.INFO):
            logger.log_auth(state='failed', method='login', error='no login outcome within 10s')

        assert caplog.records[0].levelname == 'ERROR'
        assert parse(caplog.records[0])['error'] == 'no login outcome within 10s'

    def test_log_session_saved(self, caplog):
        logger = StructuredLogger(suite='login')

        with caplog.at_level(logging.INFO):
            logger.log_session_saved(cookie_count=2, path='playwright/.auth/session.json')

        data = parse(caplog.records[0])
        assert data['event'] == 'session_saved'
        assert data['count'] == 2

    def test_log_cleanup_converged(self, caplog):
        logger = StructuredLogger(suite='favorites')

        with caplog.at_level(logging.INFO):
            logger.log_cleanup(found=3, issued=3, remaining=0, converged=True, elapsed_ms=412.345)

        record = caplog.records[0]
        assert record.levelname == 'INFO'
        data = parse(record)
        assert data['state'] == 'converged'
        assert data['count'] == 0
        assert data['elapsed_ms'] == 412.35
        assert data['metadata'] == {'found': 3, 'issued': 3}

    def test_log_cleanup_incomplete_is_warning_not_error(self, caplog):
        logger = StructuredLogger(suite='favorites')

        with caplog.at_level(logging.INFO):
            logger.log_cleanup(found=3, issued=3, remaining=1, converged=False)

        assert caplog.records[0].levelname == 'WARNING'
        assert parse(caplog.records[0])['state'] == 'incomplete'

    def test_log_convergence_success_is_debug(self, caplog):
        logger = StructuredLogger(suite='ui')

        with caplog.at_level(logging.DEBUG):
            logger.log_convergence('favorites count == 3', converged=True, attempts=2, elapsed_ms=510.0)

        record = caplog.records[0]
        assert record.levelname == 'DEBUG'
        data = parse(record)
        assert data['state'] == 'converged'
        assert data['metadata']['description'] == 'favorites count == 3'
        assert 'error' not in data

    def test_log_convergence_timeout(self, caplog):
        logger = StructuredLogger(suite='ui')

        with caplog.at_level(logging.DEBUG):
            logger.log_convergence(
                'event 1 favorited', converged=False, attempts=10,
                reason='check returned False', phase=Phase.ACTION.value,
            )

        record = caplog.records[0]
        assert record.levelname == 'WARNING'
        data = parse(record)
        assert data['state'] == 'timeout'
        assert data['phase'] == 'action'
        assert data['error'] == 'check returned False'

    def test_log_error(self, caplog):
        logger = StructuredLogger(suite='youtube')

        with caplog.at_level(logging.ERROR):
            logger.log_error('popup did not open', phase='action', metadata={'url': 'https://favbet.ua/uk/'})

        data = parse(caplog.records[0])
        assert data['event'] == 'error'
        assert data['metadata']['url'] == 'https://favbet.ua/uk/'

    def test_phase_timing(self, caplog):
        logger = StructuredLogger(suite='settings')

        with patch('src.shared.structured_logging.time.time', side_effect=[100.0, 101.5]), \
             caplog.at_level(logging.INFO):
            logger.log_phase_start('setup')
            logger.log_phase_end('setup', count=1)

        start, end = (parse(r) for r in caplog.records)
        assert start['event'] == 'phase_start'
        assert end['event'] == 'phase_end'
        assert end['elapsed_ms'] == 1500.0

    def test_phase_end_without_start_has_no_duration(self, caplog):
        logger = StructuredLogger(suite='settings')

        with caplog.at_level(logging.INFO):
            logger.log_phase_end('teardown')

        assert 'elapsed_ms' not in parse(caplog.records[0])

    def test_events_share_trace_id(self, caplog):
        logger = create_logger('favorites', trace_id='run-1')

        with caplog.at_level(logging.INFO):
            logger.log_auth(state='authenticated', method='already')
            logger.log_cleanup(found=0, issued=0, remaining=0, converged=True)

        assert {parse(r)['trace_id'] for r in caplog.records} == {'run-1'}


class TestMetricsAggregator:
    """Tests for MetricsAggregator."""

    def test_empty_summary(self):
        summary = MetricsAggregator().get_summary()

        assert summary['polls'] == 0
        assert summary['convergence_rate_pct'] == 0.0
        assert summary['logins'] == 0

    def test_summary_rates_and_waits(self):
        metrics = MetricsAggregator()
        metrics.add_poll(converged=True, elapsed_ms=100.0, attempts=1)
        metrics.add_poll(converged=True, elapsed_ms=300.0, attempts=3)
        metrics.add_poll(converged=False, elapsed_ms=5000.0, attempts=10)
        metrics.add_poll(converged=True, elapsed_ms=200.0, attempts=2)

        summary = metrics.get_summary()

        assert summary['polls'] == 4
        assert summary['convergence_rate_pct'] == 75.0
        assert summary['timeouts'] == 1
        assert summary['avg_wait_ms'] == 1400.0
        assert summary['p95_wait_ms'] == 5000.0
        assert summary['avg_attempts'] == 4.0

    def test_auth_and_cleanup_counters(self):
        metrics = MetricsAggregator()
        metrics.logins += 1
        metrics.session_restores += 2
        metrics.incomplete_cleanups += 1

        summary = metrics.get_summary()

        assert summary['logins'] == 1
        assert summary['session_restores'] == 2
        assert summary['incomplete_cleanups'] == 1

    def test_reset(self):
        metrics = MetricsAggregator()
        metrics.add_poll(converged=False, elapsed_ms=1.0)
        metrics.logins = 3

        metrics.reset()

        assert metrics.polls == 0
        assert metrics.wait_times == []
        assert metrics.logins == 0

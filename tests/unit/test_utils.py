"""
Unit tests for logging, resilience, metrics and response utilities.
"""
import json
import logging
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from image_resolver.data_access import RetryableError
from image_resolver.utils.graceful_degradation import with_fallback
from image_resolver.utils.metrics_emitter import MetricsEmitter
from image_resolver.utils.response_builder import (
    error_response,
    options_response,
    success_response,
)
from image_resolver.utils.retry import retry_operation
from image_resolver.utils.structured_logger import LoggingContext, get_structured_logger


class TestStructuredLogger:
    """Test suite for StructuredLogger."""

    def test_json_format(self, caplog):
        logger = get_structured_logger('TestComponent', request_id='req-1', client_id='203.0.113.7')

        with caplog.at_level(logging.INFO, logger='TestComponent'):
            logger.info('Resolved', operation='resolve', cache_hits=3)

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry['component'] == 'TestComponent'
        assert entry['requestId'] == 'req-1'
        assert entry['clientId'] == '203.0.113.7'
        assert entry['operation'] == 'resolve'
        assert entry['context'] == {'cache_hits': 3}

    def test_error_includes_exception(self, caplog):
        logger = get_structured_logger('TestComponent')

        with caplog.at_level(logging.ERROR, logger='TestComponent'):
            logger.error('Failed', error=ValueError('bad'))

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry['context']['error_type'] == 'ValueError'
        assert entry['context']['error_message'] == 'bad'

    def test_correlation_id_alias(self):
        assert get_structured_logger('C', correlation_id='abc').request_id == 'abc'

    def test_logging_context_logs_failure(self, caplog):
        logger = get_structured_logger('TestComponent')

        with caplog.at_level(logging.ERROR, logger='TestComponent'):
            with pytest.raises(RuntimeError):
                with LoggingContext(logger, 'scrape', number=5):
                    raise RuntimeError('boom')

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry['message'] == 'Operation failed: scrape'
        assert entry['context']['number'] == 5


class TestWithFallback:
    """Test suite for with_fallback."""

    def test_returns_value_on_success(self):
        @with_fallback(fallback_value=0)
        def total():
            return 7

        assert total() == 7

    def test_returns_fallback_on_failure(self):
        @with_fallback(fallback_value=0)
        def total():
            raise RuntimeError('store unavailable')

        assert total() == 0

    def test_fallback_function(self):
        @with_fallback(fallback_function=lambda e: str(e))
        def total():
            raise RuntimeError('store unavailable')

        assert total() == 'store unavailable'


class TestRetryOperation:
    """Test suite for retry_operation."""

    def test_retries_retryable_errors(self):
        operation = Mock(side_effect=[RetryableError('throttled'), 'ok'])
        sleep = Mock()

        assert retry_operation(operation, max_retries=2, jitter=False, sleep=sleep) == 'ok'
        sleep.assert_called_once_with(1.0)

    def test_gives_up_after_max_retries(self):
        operation = Mock(side_effect=RetryableError('throttled'))
        sleep = Mock()

        with pytest.raises(RetryableError):
            retry_operation(operation, max_retries=2, jitter=False, sleep=sleep)

        assert operation.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_other_errors_not_retried(self):
        operation = Mock(side_effect=ValueError('bad'))

        with pytest.raises(ValueError):
            retry_operation(operation, sleep=Mock())

        assert operation.call_count == 1


class TestMetricsEmitter:
    """Test suite for MetricsEmitter."""

    def test_resolution_summary(self):
        cloudwatch = Mock()
        emitter = MetricsEmitter(cloudwatch_client=cloudwatch)

        emitter.emit_resolution_summary(
            cache_hits=5, remote_lookups=3, images_found=2, lookups_skipped=1, delay_ms=0
        )
        emitter.flush()

        kwargs = cloudwatch.put_metric_data.call_args.kwargs
        assert kwargs['Namespace'] == 'CharacterImageResolver'
        names = [m['MetricName'] for m in kwargs['MetricData']]
        assert names == ['CacheHits', 'RemoteLookups', 'ImagesFound', 'LookupsSkipped', 'AdmissionDelayMs']

    def test_generation_failure_dimension(self):
        cloudwatch = Mock()
        emitter = MetricsEmitter(cloudwatch_client=cloudwatch)

        emitter.emit_generation_result(False, rate_limited=True)
        emitter.flush()

        metric = cloudwatch.put_metric_data.call_args.kwargs['MetricData'][0]
        assert metric['MetricName'] == 'GenerationFailures'
        assert metric['Dimensions'] == [{'Name': 'Reason', 'Value': 'RateLimited'}]

    def test_flush_failure_is_swallowed(self):
        cloudwatch = Mock()
        cloudwatch.put_metric_data.side_effect = ClientError(
            {'Error': {'Code': 'Throttling'}}, 'PutMetricData'
        )
        emitter = MetricsEmitter(cloudwatch_client=cloudwatch)

        emitter.emit_generation_result(True)
        emitter.flush()
        emitter.flush()

        cloudwatch.put_metric_data.assert_called_once()

    def test_auto_flush_when_buffer_full(self):
        cloudwatch = Mock()
        emitter = MetricsEmitter(cloudwatch_client=cloudwatch, buffer_size=2)

        emitter.emit_generation_result(True)
        emitter.emit_generation_result(True)

        cloudwatch.put_metric_data.assert_called_once()


class TestResponseBuilder:
    """Test suite for response builders."""

    def test_success_response(self):
        response = success_response({'data': []})

        assert response['statusCode'] == 200
        assert json.loads(response['body']) == {'success': True, 'data': []}
        assert response['headers']['Access-Control-Allow-Origin'] == '*'

    def test_error_response(self):
        response = error_response(400, 'Invalid', details={'field': 'endNumber'})

        assert response['statusCode'] == 400
        assert json.loads(response['body']) == {
            'success': False,
            'error': 'Invalid',
            'details': {'field': 'endNumber'},
        }

    def test_options_response_echoes_origin(self):
        response = options_response('http://localhost:5173')

        assert response['body'] == ''
        assert response['headers']['Access-Control-Allow-Origin'] == 'http://localhost:5173'

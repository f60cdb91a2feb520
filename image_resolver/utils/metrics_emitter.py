"""
CloudWatch metrics emitter for image resolution.

This module provides utilities for emitting CloudWatch metrics for
cache effectiveness, remote lookups, admission delays and image generation.
"""

import logging
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = 'CharacterImageResolver'


class MetricsEmitter:
    """
    Emits CloudWatch metrics for image resolution operations.

    Metrics are buffered and sent in batches; emission failures are logged
    and never propagate to the caller.
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        cloudwatch_client=None,
        buffer_size: int = 20
    ):
        """
        Initialize metrics emitter.

        Args:
            namespace: CloudWatch namespace for metrics
            cloudwatch_client: Optional boto3 CloudWatch client for testing
            buffer_size: Number of metrics buffered before an automatic flush
        """
        self.namespace = namespace
        self.cloudwatch = cloudwatch_client or boto3.client('cloudwatch')
        self._metric_buffer: List[Dict] = []
        self._buffer_size = buffer_size

    def emit_resolution_summary(
        self,
        cache_hits: int,
        remote_lookups: int,
        images_found: int,
        lookups_skipped: int,
        delay_ms: int
    ) -> None:
        """
        Emit the counters of one range resolution.

        Args:
            cache_hits: Numbers served from the cache
            remote_lookups: Numbers sent to the scrape service
            images_found: Numbers resolved to a freshly stored image
            lookups_skipped: Numbers the classifier ruled out
            delay_ms: Admission delay applied before remote lookups
        """
        self._add_metric('CacheHits', cache_hits, 'Count')
        self._add_metric('RemoteLookups', remote_lookups, 'Count')
        self._add_metric('ImagesFound', images_found, 'Count')
        self._add_metric('LookupsSkipped', lookups_skipped, 'Count')
        self._add_metric('AdmissionDelayMs', delay_ms, 'Milliseconds')

    def emit_generation_result(self, success: bool, rate_limited: bool = False) -> None:
        """
        Emit metric for one image generation attempt.

        Args:
            success: Whether an image was generated and stored
            rate_limited: Whether the generation service rate-limited the call
        """
        if success:
            self._add_metric('ImagesGenerated', 1, 'Count')
            return

        self._add_metric(
            'GenerationFailures',
            1,
            'Count',
            dimensions=[
                {'Name': 'Reason', 'Value': 'RateLimited' if rate_limited else 'Error'}
            ]
        )

    def _add_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: Optional[List[Dict]] = None
    ) -> None:
        """
        Add metric to buffer and flush if needed.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit
            dimensions: Optional metric dimensions
        """
        metric = {
            'MetricName': metric_name,
            'Value': value,
            'Unit': unit
        }
        if dimensions:
            metric['Dimensions'] = dimensions

        self._metric_buffer.append(metric)

        if len(self._metric_buffer) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        """Flush buffered metrics to CloudWatch."""
        if not self._metric_buffer:
            return

        try:
            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=self._metric_buffer
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Failed to emit metrics: {e}")
        finally:
            self._metric_buffer = []

"""
Repository for RateLimitLog table operations.
"""
import logging
from typing import Dict, List, Optional, Any

from boto3.dynamodb.conditions import Key

from image_resolver.config.table_names import RATE_LIMIT_LOG_GLOBAL_INDEX
from image_resolver.models import (
    RateLimitEvent,
    GLOBAL_LOG_SCOPE,
    event_key_floor,
)

from .dynamodb_client import DynamoDBClient

logger = logging.getLogger(__name__)


class RateLimitLogRepository:
    """
    Repository for the append-only log of remote scrape calls.

    Table layout:
        clientIdentity (HASH) + eventKey (RANGE), where eventKey starts with
        the zero-padded millisecond timestamp. The global index
        logScope (HASH) + eventKey (RANGE) serves cross-client sums.
    """

    def __init__(self, table_name: str, dynamodb_client: Optional[DynamoDBClient] = None):
        """
        Initialize RateLimitLog repository.

        Args:
            table_name: Name of the RateLimitLog table
            dynamodb_client: Optional DynamoDB client instance
        """
        self.table_name = table_name
        self.client = dynamodb_client or DynamoDBClient()

    def append(self, event: RateLimitEvent) -> None:
        """
        Append an event to the log.

        Args:
            event: Rate limit event

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self.client.put_item(
            table_name=self.table_name,
            item=event.to_item()
        )
        logger.debug(
            f"Logged {event.call_count} remote calls for {event.client_identity}"
        )

    def sum_calls_for_client(self, client_identity: str, since_ms: int) -> int:
        """
        Sum callCount for one client since a timestamp.

        Args:
            client_identity: Client identifier
            since_ms: Window start in milliseconds

        Returns:
            Total remote calls

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        items = self.client.query(
            table_name=self.table_name,
            key_condition_expression=(
                Key('clientIdentity').eq(client_identity)
                & Key('eventKey').gte(event_key_floor(since_ms))
            ),
            projection_expression='callCount'
        )
        return self._sum_call_counts(items)

    def sum_calls_global(self, since_ms: int) -> int:
        """
        Sum callCount over all clients since a timestamp.

        Args:
            since_ms: Window start in milliseconds

        Returns:
            Total remote calls

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        items = self.client.query(
            table_name=self.table_name,
            key_condition_expression=(
                Key('logScope').eq(GLOBAL_LOG_SCOPE)
                & Key('eventKey').gte(event_key_floor(since_ms))
            ),
            index_name=RATE_LIMIT_LOG_GLOBAL_INDEX,
            projection_expression='callCount'
        )
        return self._sum_call_counts(items)

    @staticmethod
    def _sum_call_counts(items: List[Dict[str, Any]]) -> int:
        return sum(int(item.get('callCount', 0)) for item in items)

"""
Rate limit log event data model.
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

# Rows older than this are removed by DynamoDB TTL
RETENTION_SECONDS = 3600

# Partition value of the global index; every event belongs to it
GLOBAL_LOG_SCOPE = 'global'


def event_key_floor(timestamp_ms: int) -> str:
    """
    Lowest possible event key at or after a timestamp.

    Event keys start with the zero-padded timestamp, so string comparison
    on keys orders events by time.
    """
    return f'{timestamp_ms:013d}'


@dataclass
class RateLimitEvent:
    """
    One batch of remote scrape calls made on behalf of a client.

    Attributes:
        client_identity: Client identifier (forwarded network address)
        call_count: Number of remote calls in the batch (>= 1)
        occurred_at: Unix timestamp in milliseconds
        endpoint: Endpoint that made the calls
    """

    client_identity: str
    call_count: int
    occurred_at: int = field(default_factory=lambda: int(time.time() * 1000))
    endpoint: str = 'resolve-images'

    def __post_init__(self):
        if not self.client_identity:
            raise ValueError("client_identity cannot be empty")
        if self.call_count < 1:
            raise ValueError(f"call_count must be at least 1, got {self.call_count}")

    def to_item(self) -> Dict[str, Any]:
        """Convert to a DynamoDB item with sort key, index key and TTL."""
        return {
            'clientIdentity': self.client_identity,
            'eventKey': f'{event_key_floor(self.occurred_at)}#{uuid.uuid4().hex[:8]}',
            'logScope': GLOBAL_LOG_SCOPE,
            'callCount': self.call_count,
            'endpoint': self.endpoint,
            'occurredAt': self.occurred_at,
            'expiresAt': self.occurred_at // 1000 + RETENTION_SECONDS,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'RateLimitEvent':
        return cls(
            client_identity=item['clientIdentity'],
            call_count=int(item['callCount']),
            occurred_at=int(item['occurredAt']),
            endpoint=item.get('endpoint', 'resolve-images'),
        )

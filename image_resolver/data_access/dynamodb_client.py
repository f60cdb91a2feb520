"""
DynamoDB client with pagination and error handling.
"""
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import DynamoDBError, RetryableError

logger = logging.getLogger(__name__)

# DynamoDB refuses BatchGetItem requests with more keys than this
MAX_BATCH_GET_KEYS = 100

RETRYABLE_ERROR_CODES = {
    'ProvisionedThroughputExceededException',
    'ThrottlingException',
    'RequestLimitExceeded',
    'InternalServerError',
    'ServiceUnavailable',
}


def _raise_for_error(e: Exception, action: str, table_name: str) -> None:
    logger.error(f"Error during {action} on {table_name}: {e}")
    if isinstance(e, ClientError):
        code = e.response.get('Error', {}).get('Code', '')
        if code in RETRYABLE_ERROR_CODES:
            raise RetryableError(f"Failed to {action}: {e}")
    raise DynamoDBError(f"Failed to {action}: {e}")


class DynamoDBClient:
    """
    DynamoDB client with pagination, batch reads and error handling.

    Service errors and transport errors (unreachable endpoint, missing
    credentials, read timeouts) are both raised as DynamoDBError.
    """

    def __init__(self, region: str = 'us-east-1', dynamodb_resource=None):
        """
        Initialize DynamoDB client.

        Args:
            region: AWS region for DynamoDB
            dynamodb_resource: Optional boto3 DynamoDB resource for testing
        """
        self.dynamodb = dynamodb_resource or boto3.resource('dynamodb', region_name=region)

    def get_table(self, table_name: str):
        """
        Get DynamoDB table resource.

        Args:
            table_name: Name of the table

        Returns:
            DynamoDB table resource
        """
        return self.dynamodb.Table(table_name)

    def put_item(self, table_name: str, item: Dict[str, Any]) -> None:
        """
        Put item into DynamoDB table, overwriting any item with the same key.

        Args:
            table_name: Name of the table
            item: Item to put

        Raises:
            DynamoDBError: On DynamoDB or transport errors
        """
        try:
            self.get_table(table_name).put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            _raise_for_error(e, 'put item', table_name)

    def query(
        self,
        table_name: str,
        key_condition_expression,
        index_name: Optional[str] = None,
        projection_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Query DynamoDB table, following pagination to the last page.

        Args:
            table_name: Name of the table
            key_condition_expression: boto3 Key condition
            index_name: Optional GSI name
            projection_expression: Optional projection expression
            expression_attribute_names: Optional expression attribute names

        Returns:
            List of items

        Raises:
            DynamoDBError: On DynamoDB or transport errors
        """
        try:
            table = self.get_table(table_name)
            kwargs = {'KeyConditionExpression': key_condition_expression}

            if index_name:
                kwargs['IndexName'] = index_name
            if projection_expression:
                kwargs['ProjectionExpression'] = projection_expression
            if expression_attribute_names:
                kwargs['ExpressionAttributeNames'] = expression_attribute_names

            items: List[Dict[str, Any]] = []
            while True:
                response = table.query(**kwargs)
                items.extend(response.get('Items', []))
                last_key = response.get('LastEvaluatedKey')
                if not last_key:
                    return items
                kwargs['ExclusiveStartKey'] = last_key
        except (ClientError, BotoCoreError) as e:
            _raise_for_error(e, 'query table', table_name)

    def scan(
        self,
        table_name: str,
        filter_expression=None
    ) -> List[Dict[str, Any]]:
        """
        Scan DynamoDB table, following pagination to the last page.

        Args:
            table_name: Name of the table
            filter_expression: Optional boto3 Attr condition

        Returns:
            List of items

        Raises:
            DynamoDBError: On DynamoDB or transport errors
        """
        try:
            table = self.get_table(table_name)
            kwargs = {}
            if filter_expression is not None:
                kwargs['FilterExpression'] = filter_expression

            items: List[Dict[str, Any]] = []
            while True:
                response = table.scan(**kwargs)
                items.extend(response.get('Items', []))
                last_key = response.get('LastEvaluatedKey')
                if not last_key:
                    return items
                kwargs['ExclusiveStartKey'] = last_key
        except (ClientError, BotoCoreError) as e:
            _raise_for_error(e, 'scan table', table_name)

    def batch_get_items(
        self,
        table_name: str,
        keys: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Batch get items, chunking keys and retrying unprocessed keys once.

        Args:
            table_name: Name of the table
            keys: Primary keys to fetch

        Returns:
            List of items that exist

        Raises:
            DynamoDBError: On DynamoDB or transport errors
        """
        items: List[Dict[str, Any]] = []
        try:
            for start in range(0, len(keys), MAX_BATCH_GET_KEYS):
                request = {table_name: {'Keys': keys[start:start + MAX_BATCH_GET_KEYS]}}
                for _ in range(2):
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                    items.extend(response.get('Responses', {}).get(table_name, []))
                    request = response.get('UnprocessedKeys') or {}
                    if not request:
                        break
                if request:
                    logger.warning(
                        f"Batch get on {table_name} left "
                        f"{len(request[table_name]['Keys'])} keys unprocessed"
                    )
            return items
        except (ClientError, BotoCoreError) as e:
            _raise_for_error(e, 'batch get items', table_name)

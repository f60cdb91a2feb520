"""
Custom exceptions for data access layer.
"""


class DynamoDBError(Exception):
    """Base exception for DynamoDB operations."""
    pass


class RetryableError(DynamoDBError):
    """Exception raised for transient errors that can be retried."""
    pass


class StorageError(Exception):
    """Exception raised when an object storage operation fails."""
    pass

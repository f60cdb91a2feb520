"""
Pytest configuration and fixtures.
"""
import importlib.util
import json
import os
from unittest.mock import Mock

import pytest

# Handlers read their settings at import time
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')
os.environ.setdefault('AWS_ACCESS_KEY_ID', 'testing')
os.environ.setdefault('AWS_SECRET_ACCESS_KEY', 'testing')
os.environ['IMAGE_CACHE_TABLE_NAME'] = 'ImageCache-test'
os.environ['RATE_LIMIT_LOG_TABLE_NAME'] = 'RateLimitLog-test'
os.environ['IMAGES_BUCKET_NAME'] = 'numberblocks-images-test'
os.environ['REGION'] = 'us-east-1'
os.environ['FIRECRAWL_API_KEY'] = 'test-firecrawl-key'
os.environ['OPENAI_API_KEY'] = 'test-openai-key'
os.environ['INTER_BATCH_PAUSE_SECONDS'] = '0'

from image_resolver.data_access import ImageStorage  # noqa: E402

REPO_ROOT = os.path.join(os.path.dirname(__file__), '..')


def load_handler(handler_dir: str, module_name: str):
    """Load a Lambda handler module by path ('lambda' is a Python keyword)."""
    handler_path = os.path.join(REPO_ROOT, 'lambda', handler_dir, 'handler.py')
    spec = importlib.util.spec_from_file_location(module_name, handler_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope='function')
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'


@pytest.fixture
def storage():
    """ImageStorage backed by a mock S3 client."""
    return ImageStorage(
        bucket_name='numberblocks-images-test',
        public_base_url='https://cdn.example.com/images',
        s3_client=Mock()
    )


@pytest.fixture
def http_event():
    """Factory for API Gateway proxy events."""
    def _make(body=None, method='POST', headers=None):
        return {
            'httpMethod': method,
            'headers': headers or {},
            'body': json.dumps(body) if body is not None else None,
        }
    return _make


@pytest.fixture
def lambda_context():
    """Minimal Lambda context."""
    context = Mock()
    context.aws_request_id = 'test-request-123'
    return context


@pytest.fixture(scope='session')
def handler_loader():
    """Expose load_handler to test modules."""
    return load_handler

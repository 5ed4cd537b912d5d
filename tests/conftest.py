"""Shared fixtures: mocked AWS resources and synthetic captures."""

import io
import os
import sys

import boto3
import numpy as np
import pytest
from moto import mock_aws
from PIL import Image

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from otm.schema import reports_table_definition, pending_table_definition, create_table, create_bucket

REPORTS_TABLE = 'test-otm-reports'
PENDING_TABLE = 'test-otm-pending'
LOCAL_BUCKET = 'test-otm-local'
DOCUMENTS_BUCKET = 'test-otm-documents'


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.setenv('USE_LOCALSTACK', 'false')
    monkeypatch.setenv('OTM_REPORTS_TABLE', REPORTS_TABLE)
    monkeypatch.setenv('OTM_PENDING_TABLE', PENDING_TABLE)
    monkeypatch.setenv('OTM_LOCAL_BUCKET', LOCAL_BUCKET)
    monkeypatch.setenv('OTM_DOCUMENTS_BUCKET', DOCUMENTS_BUCKET)


@pytest.fixture
def aws_resources(aws_credentials):
    """Create the mocked tables and buckets."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        s3 = boto3.client('s3', region_name='us-east-1')

        create_table(dynamodb, reports_table_definition(REPORTS_TABLE))
        create_table(dynamodb, pending_table_definition(PENDING_TABLE))
        create_bucket(s3, LOCAL_BUCKET)
        create_bucket(s3, DOCUMENTS_BUCKET)

        yield {'dynamodb': dynamodb, 's3': s3}


@pytest.fixture
def make_page():
    """Uniform gray page array with a dark rectangle in the central third."""
    def _make(width: int, height: int, background: int = 240, ink: int = 40) -> np.ndarray:
        pixels = np.full((height, width, 3), background, dtype=np.uint8)
        pixels[height // 3: 2 * height // 3, width // 3: 2 * width // 3] = ink
        return pixels
    return _make


@pytest.fixture
def make_capture(make_page):
    """Encoded capture of a synthetic page."""
    def _make(width: int = 300, height: int = 200, fmt: str = 'PNG', **kwargs) -> bytes:
        buffer = io.BytesIO()
        Image.fromarray(make_page(width, height, **kwargs)).save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


@pytest.fixture
def sample_capture(make_capture):
    """Small encoded capture (PNG) of a page with a dark block."""
    return make_capture()


@pytest.fixture
def sample_pdf():
    """Minimal document bytes used as an upload payload."""
    return b'%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n'

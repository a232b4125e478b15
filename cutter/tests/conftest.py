"""
Pytest fixtures for cutter tests.
"""

import io
import os

import pytest


def write_image(path, size=(100, 100), color='red', mode='RGB', fmt='JPEG'):
    """Write a solid-color test image and return its path."""
    from PIL import Image

    img = Image.new(mode, size, color=color)
    img.save(path, format=fmt)
    return str(path)


@pytest.fixture
def make_image():
    """Fixture providing the write_image helper."""
    return write_image


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from cutter.s3_config import S3Config

    return S3Config(
        endpoint='https://test-endpoint.example.com:9000',
        region='us-east-1',
        access_key='test-access-key',
        secret_key='test-secret-key',
    )


@pytest.fixture
def mock_s3_client(s3_config):
    """Fixture providing an S3Client with mocked boto3."""
    from unittest.mock import MagicMock, patch
    from cutter.s3_client import S3Client

    mock_boto = MagicMock()

    with patch('cutter.s3_client.boto3.client', return_value=mock_boto):
        client = S3Client(s3_config)
        client._test_mock = mock_boto
        yield client


@pytest.fixture
def fake_store():
    """
    Fixture providing an in-memory object store with the S3Client interface.

    Objects live in ``fake_store.objects`` as {(bucket, key): bytes}.
    """
    from unittest.mock import MagicMock
    from cutter.errors import RemoteError

    objects = {}
    store = MagicMock()
    store.objects = objects

    def list_keys(bucket, prefix=''):
        return [k for (b, k) in objects if b == bucket and k.startswith(prefix)]

    def download_object(bucket, key):
        if (bucket, key) not in objects:
            raise RemoteError(f"NoSuchKey: {key}")
        return objects[(bucket, key)]

    def upload_object(bucket, key, data, content_type='application/octet-stream'):
        objects[(bucket, key)] = data

    store.list_keys.side_effect = list_keys
    store.download_object.side_effect = download_object
    store.upload_object.side_effect = upload_object
    return store


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (100, 100), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def source_dir(tmp_path):
    """Fixture providing a directory with a.jpg, b.jpg and c.jpg."""
    directory = tmp_path / 'gallery'
    directory.mkdir()
    write_image(directory / 'a.jpg', size=(300, 200), color='red')
    write_image(directory / 'b.jpg', size=(200, 300), color='green')
    write_image(directory / 'c.jpg', size=(640, 480), color='blue')
    return str(directory)


@pytest.fixture
def output_dir(tmp_path):
    """Fixture providing an empty output directory."""
    directory = tmp_path / 'out'
    directory.mkdir()
    return str(directory)


@pytest.fixture
def sorted_basenames():
    """Fixture providing a helper that sorts path basenames."""
    def _basenames(paths):
        return sorted(os.path.basename(p) for p in paths)
    return _basenames


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')

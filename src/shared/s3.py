"""S3 bucket wrapper used for report images, pending payloads and stored documents."""

import boto3
from typing import Optional, Dict, Any, List
from botocore.exceptions import ClientError
import logging

from .config import get_aws_endpoint
from .exceptions import StorageError, NotFoundError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = ('NoSuchKey', '404', 'NotFound')


def _is_missing(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') in _MISSING_KEY_CODES


class S3Client:
    """Blob access on one bucket; boto errors surface as StorageError / NotFoundError."""

    def __init__(self, bucket_name: str, endpoint_url: Optional[str] = None):
        """
        Initialize S3 client.

        Args:
            bucket_name: Name of the S3 bucket
            endpoint_url: Optional endpoint override (LocalStack, MinIO)
        """
        self.bucket_name = bucket_name
        self.s3 = boto3.client('s3', endpoint_url=endpoint_url or get_aws_endpoint())

    def _call(self, operation: str, key: Optional[str] = None, **params) -> Dict[str, Any]:
        if key is not None:
            params['Key'] = key
        try:
            return getattr(self.s3, operation)(Bucket=self.bucket_name, **params)
        except ClientError as e:
            if key is not None and _is_missing(e):
                raise NotFoundError(f"File not found: {key}")
            logger.error(f"S3 {operation} failed on s3://{self.bucket_name}/{key or ''}: {e}")
            raise StorageError(f"Storage operation {operation} failed: {str(e)}")

    def upload_file(
        self,
        file_content: bytes,
        key: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Store bytes under a key, encrypted at rest.

        Raises:
            StorageError: If the upload fails
        """
        extra = {}
        if content_type:
            extra['ContentType'] = content_type
        if metadata:
            extra['Metadata'] = metadata

        self._call('put_object', key, Body=file_content, ServerSideEncryption='AES256', **extra)
        logger.info(f"Stored s3://{self.bucket_name}/{key} ({len(file_content)} bytes)")
        return key

    def download_file(self, key: str) -> bytes:
        """
        Read the bytes stored under a key.

        Raises:
            NotFoundError: If the object does not exist
            StorageError: If the download fails
        """
        return self._call('get_object', key)['Body'].read()

    def delete_file(self, key: str) -> None:
        self._call('delete_object', key)
        logger.info(f"Deleted s3://{self.bucket_name}/{key}")

    def get_presigned_url(self, key: str, expiration: int = 3600) -> str:
        """Time-limited GET link for an object."""
        try:
            return self.s3.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': key},
                ExpiresIn=expiration
            )
        except ClientError as e:
            logger.error(f"Error generating presigned URL: {e}")
            raise StorageError(f"Failed to generate presigned URL: {str(e)}")

    def file_exists(self, key: str) -> bool:
        try:
            self.get_file_metadata(key)
        except NotFoundError:
            return False
        return True

    def get_file_metadata(self, key: str) -> Dict[str, Any]:
        """
        Content type, size, modification time and user metadata of an object.

        Raises:
            NotFoundError: If the object does not exist
            StorageError: If the request fails
        """
        response = self._call('head_object', key)
        return {
            'content_type': response.get('ContentType'),
            'content_length': response.get('ContentLength'),
            'last_modified': response.get('LastModified'),
            'metadata': response.get('Metadata', {}),
        }

    def list_files(self, prefix: str = '') -> List[str]:
        """
        List every key in the bucket under a prefix, oldest upload first.

        Raises:
            StorageError: If the listing fails
        """
        objects = []
        try:
            paginator = self.s3.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                objects.extend(page.get('Contents', []))
        except ClientError as e:
            logger.error(f"Error listing s3://{self.bucket_name}/{prefix}: {e}")
            raise StorageError(f"Failed to list files: {str(e)}")

        objects.sort(key=lambda obj: obj['LastModified'])
        return [obj['Key'] for obj in objects]

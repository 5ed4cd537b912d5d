"""Remote OTM document store backed by S3."""

import os
import uuid
import logging
import mimetypes
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote

from shared.codec import encode_payload, decode_payload
from shared.s3 import S3Client
from shared.exceptions import NotFoundError, ValidationError
from shared.validators import (
    validate_file_name,
    sanitize_string
)

logger = logging.getLogger(__name__)

DOCUMENT_PREFIX = 'otm/'


class DocumentStoreService:
    """Stores and serves OTM documents per equipment."""

    def __init__(self, bucket: Optional[S3Client] = None):
        """Initialize the store on OTM_DOCUMENTS_BUCKET unless a bucket is given."""
        self.bucket = bucket or S3Client(os.environ.get('OTM_DOCUMENTS_BUCKET'))

    def store_document(
        self,
        equipment_code: str,
        file_name: str,
        file_data: str,
        technician: str = '',
        date: str = ''
    ) -> Dict[str, Any]:
        """
        Store an uploaded document.

        Args:
            equipment_code: Equipment the document belongs to
            file_name: Document file name
            file_data: Base64-encoded document
            technician: Technician name
            date: DD/MM/YYYY capture date

        Returns:
            fileId and fileName of the stored document

        Raises:
            ValidationError: If a field is invalid
            PayloadError: If the data is not valid base64
            StorageError: If the upload fails
        """
        equipment_code = sanitize_string(equipment_code)
        if not equipment_code or '/' in equipment_code:
            raise ValidationError("Invalid equipment code")

        file_name = validate_file_name(file_name)
        content = decode_payload(file_data)

        # One key per upload; file names repeat for same-day captures
        key = f"{DOCUMENT_PREFIX}{equipment_code}/{uuid.uuid4()}/{file_name}"
        content_type = mimetypes.guess_type(file_name)[0] or 'application/pdf'

        # S3 user metadata must be ASCII
        self.bucket.upload_file(
            content,
            key,
            content_type=content_type,
            metadata={
                'equipment_code': equipment_code,
                'technician': quote(sanitize_string(technician)),
                'date': quote(sanitize_string(date))
            }
        )

        logger.info(f"OTM stored: {key} ({len(content)} bytes)")
        return {'fileId': key, 'fileName': file_name}

    def list_documents(self, equipment_code: str) -> List[Dict[str, str]]:
        """Documents of one equipment, oldest first."""
        equipment_code = sanitize_string(equipment_code)
        if not equipment_code or '/' in equipment_code:
            raise ValidationError("Invalid equipment code")

        documents = []
        for key in self.bucket.list_files(prefix=f"{DOCUMENT_PREFIX}{equipment_code}/"):
            metadata = self.bucket.get_file_metadata(key).get('metadata', {})
            documents.append({
                'fileId': key,
                'fileName': key.rsplit('/', 1)[-1],
                'date': unquote(metadata.get('date', ''))
            })

        return documents

    def get_content(self, file_id: str) -> Dict[str, str]:
        """
        Base64 content of a document.

        Raises:
            ValidationError: If the id does not name an OTM document
            NotFoundError: If the document does not exist
        """
        file_id = self._validate_file_id(file_id)
        content = self.bucket.download_file(file_id)
        metadata = self.bucket.get_file_metadata(file_id)

        return {
            'content': encode_payload(content),
            'mimeType': metadata.get('content_type') or 'application/pdf',
            'fileName': file_id.rsplit('/', 1)[-1]
        }

    def get_download_url(self, file_id: str, expiration: int = 3600) -> str:
        """
        Presigned link to a document.

        Raises:
            NotFoundError: If the document does not exist
        """
        file_id = self._validate_file_id(file_id)
        if not self.bucket.file_exists(file_id):
            raise NotFoundError("Document not found")
        return self.bucket.get_presigned_url(file_id, expiration=expiration)

    @staticmethod
    def _validate_file_id(file_id: str) -> str:
        if not file_id or not file_id.startswith(DOCUMENT_PREFIX) or '..' in file_id:
            raise ValidationError("Invalid file id")
        return file_id

"""
Remote document store client.

Talks to the OTM document API (``action=upload|list|getContent|download``).
Upload failures raise so the queue can keep the task; read failures degrade
to empty results so a broken remote store never hides local documents.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from shared.config import get_drive_api_url, get_upload_timeout
from shared.exceptions import RemoteStoreError
from .models import UploadTask, RemoteOTM, RemoteFileContent

logger = logging.getLogger(__name__)


class DriveClient:
    """HTTP client for the remote OTM document store."""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            api_url: Store endpoint. Defaults to the DRIVE_API_URL env var.
            timeout: Seconds allowed for each request (default: UPLOAD_TIMEOUT_SECONDS or 30).
            session: Optional preconfigured requests session.
        """
        self.api_url = (api_url if api_url is not None else get_drive_api_url()).strip()
        self.timeout = timeout if timeout is not None else get_upload_timeout()
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url)

    def upload(self, task: UploadTask) -> Dict[str, Any]:
        """
        Deliver one document.

        Returns:
            The store's JSON answer; a 2xx/3xx answer without a JSON body
            counts as accepted.

        Raises:
            RemoteStoreError: On transport errors, timeouts and other status codes
        """
        if not self.is_configured:
            raise RemoteStoreError("Remote document store not configured")

        try:
            response = self.session.post(self.api_url, data=task.to_payload(), timeout=self.timeout)
        except requests.Timeout:
            raise RemoteStoreError("Timeout")
        except requests.RequestException as e:
            raise RemoteStoreError(f"Network error: {str(e)}")

        if not 200 <= response.status_code < 400:
            raise RemoteStoreError(f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return {'success': True, 'message': 'Enviado'}

    def list_history(self, equipment_code: str) -> List[RemoteOTM]:
        """Documents stored remotely for one equipment; empty on any failure."""
        if not self.is_configured:
            return []

        result = self._get({'action': 'list', 'equipmentCode': equipment_code})
        if not result:
            return []

        otms = []
        for entry in result.get('otms') or []:
            try:
                otms.append(RemoteOTM(**entry))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed remote OTM entry: {e}")
        return otms

    def get_file_content(self, file_id: str) -> Optional[RemoteFileContent]:
        """Base64 content of a remote document, or None."""
        if not self.is_configured:
            return None

        result = self._get({'action': 'getContent', 'fileId': file_id})
        if result and result.get('success') and result.get('content'):
            return RemoteFileContent(
                content=result['content'],
                mimeType=result.get('mimeType') or 'application/pdf',
                fileName=result.get('fileName') or 'documento.pdf'
            )
        return None

    def get_download_url(self, file_id: str) -> Optional[str]:
        """Direct link to a remote document, or None."""
        if not self.is_configured:
            return None

        result = self._get({'action': 'download', 'fileId': file_id})
        if not result:
            return None
        return result.get('url') or result.get('viewUrl')

    def _get(self, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error calling remote store ({params.get('action')}): {e}")
            return None

        return result if isinstance(result, dict) else None

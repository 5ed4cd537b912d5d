"""
Resilient upload queue for scanned OTM documents.

An upload is attempted right away when the device is online. When it is
offline, or the attempt fails for any network reason, the task is persisted
and retried once per connectivity-restored event until it is delivered.
There is no backoff and no attempt limit: tasks stay pending until delivered
or removed by hand.
"""

import os
import uuid
import logging
from datetime import datetime
from typing import List, Optional

from boto3.dynamodb.conditions import Attr

from shared.codec import encode_payload, decode_payload
from shared.config import DATE_FORMAT, DEFAULT_TECHNICIAN
from shared.dynamodb import DynamoDBClient
from shared.s3 import S3Client
from shared.exceptions import (
    SicoemException,
    NotFoundError,
    PayloadError,
    RemoteStoreError,
    StorageError,
    ValidationError
)
from shared.validators import sanitize_string
from .connectivity import ConnectivitySignal
from .drive_client import DriveClient
from .models import UploadTask, UploadResult
from .storage import OTMStorage

logger = logging.getLogger(__name__)

SEQUENCE_KEY = {'task_id': '__sequence__'}
SEQUENCE_ATTRIBUTE = 'last_sequence'


def build_file_name(equipment_code: str, date: str) -> str:
    """Remote file name of a document, e.g. ``OTM_123456789012_19-10-2026.pdf``."""
    return f"OTM_{equipment_code}_{date.replace('/', '-')}.pdf"


class PendingUploadStore:
    """Durable list of upload tasks waiting for delivery."""

    def __init__(
        self,
        pending_table: Optional[DynamoDBClient] = None,
        payload_bucket: Optional[S3Client] = None
    ):
        self.pending_table = pending_table or DynamoDBClient(os.environ.get('OTM_PENDING_TABLE'))
        self.payload_bucket = payload_bucket or S3Client(os.environ.get('OTM_LOCAL_BUCKET'))

    def append(self, task: UploadTask) -> None:
        """Persist a task. The payload is written before the record that points at it."""
        payload_key = f"pending/{task.task_id}.pdf"
        self.payload_bucket.upload_file(
            decode_payload(task.file_data),
            payload_key,
            content_type='application/pdf'
        )

        item = task.model_dump(exclude={'file_data'}, exclude_none=True)
        item['payload_key'] = payload_key
        try:
            item['sequence'] = self.pending_table.increment_counter(SEQUENCE_KEY, SEQUENCE_ATTRIBUTE)
            self.pending_table.put_item(item)
        except Exception as e:
            logger.error(f"Failed to queue upload {task.task_id}: {str(e)}")
            try:
                self.payload_bucket.delete_file(payload_key)
            except StorageError:
                logger.warning(f"Orphaned pending payload left at {payload_key}")
            raise

        logger.info(f"Upload queued: {task.file_name} ({task.task_id})")

    def list(self) -> List[UploadTask]:
        """Pending tasks in the order they were queued."""
        items = self.pending_table.scan_all(filter_expression=Attr('equipment_code').exists())
        items.sort(key=lambda item: item.get('sequence', 0))

        tasks = []
        for item in items:
            payload_key = item.pop('payload_key')
            item.pop('sequence', None)
            try:
                payload = self.payload_bucket.download_file(payload_key)
            except NotFoundError:
                logger.error(f"Pending upload {item['task_id']} has no payload at {payload_key}")
                continue
            tasks.append(UploadTask(file_data=encode_payload(payload), **item))

        return tasks

    def remove(self, task_id: str) -> None:
        """Drop a delivered task."""
        item = self.pending_table.get_item({'task_id': task_id})
        if not item:
            return

        self.pending_table.delete_item({'task_id': task_id})
        try:
            self.payload_bucket.delete_file(item['payload_key'])
        except StorageError:
            logger.warning(f"Could not delete payload of delivered upload {task_id}")


class UploadQueue:
    """Delivers documents to the remote store now, or later when connectivity returns."""

    def __init__(
        self,
        drive_client: DriveClient,
        pending_store: PendingUploadStore,
        connectivity: ConnectivitySignal,
        report_store: Optional[OTMStorage] = None
    ):
        """
        Initialize the queue and subscribe it to connectivity-restored events.

        Args:
            drive_client: Remote document store client
            pending_store: Durable pending task list
            connectivity: Online/offline signal
            report_store: Local report store whose sync flags are updated on delivery
        """
        self.drive_client = drive_client
        self.pending_store = pending_store
        self.connectivity = connectivity
        self.report_store = report_store

        connectivity.subscribe(self.retry_sweep)

    def build_task(
        self,
        equipment_code: str,
        document: bytes,
        technician: str = '',
        date: Optional[str] = None,
        report_id: Optional[int] = None
    ) -> UploadTask:
        """
        Build the upload task for a document.

        Raises:
            ValidationError: If the equipment code is missing
            PayloadError: If the document cannot be encoded
        """
        equipment_code = sanitize_string(equipment_code)
        if not equipment_code:
            raise ValidationError("Equipment code is required")

        date = date or datetime.now().strftime(DATE_FORMAT)

        return UploadTask(
            task_id=str(uuid.uuid4()),
            equipment_code=equipment_code,
            file_name=build_file_name(equipment_code, date),
            file_data=encode_payload(document),
            technician=sanitize_string(technician) or DEFAULT_TECHNICIAN,
            date=date,
            report_id=report_id,
            queued_at=datetime.now().isoformat()
        )

    def upload(
        self,
        equipment_code: str,
        document: bytes,
        technician: str = '',
        date: Optional[str] = None,
        report_id: Optional[int] = None
    ) -> UploadResult:
        """
        Upload a document, queueing it when it cannot be delivered now.

        Args:
            equipment_code: Equipment the document belongs to
            document: Document bytes (PDF)
            technician: Technician name (default placeholder when empty)
            date: DD/MM/YYYY date string (default: today)
            report_id: Local report to flag as synced on delivery

        Returns:
            delivered (with remote file id), queued, or failed when the
            payload could not be built or no remote store is configured
        """
        if not self.drive_client.is_configured:
            logger.warning("Remote document store not configured; upload skipped")
            return UploadResult(status='failed', error='Remote document store not configured')

        try:
            task = self.build_task(equipment_code, document, technician, date, report_id)
        except (ValidationError, PayloadError) as e:
            logger.error(f"Could not build upload payload: {e.message}")
            return UploadResult(status='failed', error=e.message)

        if not self.connectivity.is_online():
            self.pending_store.append(task)
            return UploadResult(
                status='queued',
                task_id=task.task_id,
                message='Saved for upload when connectivity returns'
            )

        try:
            file_id = self._deliver(task)
        except RemoteStoreError as e:
            logger.warning(f"Upload of {task.file_name} failed, queued for retry: {e.message}")
            self.pending_store.append(task)
            return UploadResult(status='queued', task_id=task.task_id, error=e.message)

        return UploadResult(status='delivered', file_id=file_id, task_id=task.task_id)

    def retry_sweep(self) -> None:
        """Try every pending task once; delivered tasks leave the pending list."""
        tasks = self.pending_store.list()
        if not tasks:
            return

        logger.info(f"Processing {len(tasks)} queued uploads...")

        delivered = 0
        for task in tasks:
            try:
                self._deliver(task)
            except RemoteStoreError as e:
                logger.warning(f"Queued upload {task.file_name} still failing: {e.message}")
                continue

            self.pending_store.remove(task.task_id)
            delivered += 1

        logger.info(f"Queued uploads delivered: {delivered}/{len(tasks)}")

    def pending_tasks(self) -> List[UploadTask]:
        return self.pending_store.list()

    def _deliver(self, task: UploadTask) -> Optional[str]:
        result = self.drive_client.upload(task)

        if not isinstance(result, dict) or not result.get('success'):
            error = result.get('error') if isinstance(result, dict) else None
            raise RemoteStoreError(error or 'Upload rejected')

        file_id = result.get('fileId')
        logger.info(f"OTM uploaded to remote store: {task.file_name} ({file_id})")

        if self.report_store and task.report_id:
            try:
                self.report_store.mark_synced(task.report_id, file_id)
            except SicoemException as e:
                logger.error(f"Delivered {task.file_name} but could not flag report {task.report_id}: {e.message}")

        return file_id

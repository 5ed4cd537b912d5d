"""OTM capture service: enhance, store locally, then sync to the remote store."""

import logging
from typing import List, Optional, Tuple

from enhancer.processor import DocumentEnhancer
from shared.exceptions import NotFoundError, PayloadError
from shared.validators import validate_equipment_code
from .connectivity import ConnectivitySignal
from .drive_client import DriveClient
from .history import fetch_history
from .models import OTMReport, UploadResult, CaptureResult, HistoryEntry, RemoteFileContent
from .storage import OTMStorage
from .upload_queue import PendingUploadStore, UploadQueue, build_file_name

logger = logging.getLogger(__name__)


class OTMService:
    """Service for capturing and browsing OTM documents of an equipment."""

    def __init__(
        self,
        storage: OTMStorage,
        upload_queue: UploadQueue,
        drive_client: DriveClient,
        enhancer: Optional[DocumentEnhancer] = None
    ):
        self.storage = storage
        self.upload_queue = upload_queue
        self.drive_client = drive_client
        self.enhancer = enhancer or DocumentEnhancer()

    def capture_document(
        self,
        equipment_code: str,
        image_bytes: bytes,
        technician_name: str = ''
    ) -> CaptureResult:
        """
        Capture an OTM for an equipment.

        The enhanced image is always stored locally first; the remote copy is
        best effort and never makes this call fail.

        Args:
            equipment_code: 12-digit equipment code
            image_bytes: Captured photo or scanner output
            technician_name: Technician capturing the document

        Returns:
            The stored report and the outcome of the upload

        Raises:
            ValidationError: If the equipment code is invalid
            ImageDecodeError: If the captured image cannot be decoded
            StorageError: If the local save fails
            DatabaseError: If the local save fails
        """
        equipment_code = validate_equipment_code(equipment_code)

        document = self.enhancer.enhance(image_bytes)
        report = self.storage.save_report(equipment_code, document.data, technician_name)

        upload = self.sync_report(report)
        return CaptureResult(report=report, upload=upload)

    def sync_report(self, report: OTMReport) -> UploadResult:
        """Send a stored report to the remote store as a PDF."""
        image = report.image if report.image is not None else self.storage.get_report_image(report.report_id)

        try:
            pdf = self.enhancer.to_pdf(image)
        except PayloadError as e:
            return UploadResult(status='failed', error=e.message)

        result = self.upload_queue.upload(
            report.equipment_code,
            pdf,
            technician=report.technician_name,
            date=report.date_formatted,
            report_id=report.report_id
        )

        if result.status == 'delivered':
            logger.info(f"OTM report {report.report_id} synced")
        return result

    def export_report_pdf(self, report_id: int) -> Tuple[str, bytes]:
        """
        PDF export of a local report.

        Returns:
            (file name, PDF bytes)

        Raises:
            NotFoundError: If the report does not exist
            PayloadError: If the PDF cannot be built
        """
        report = self.storage.get_report_by_id(report_id)
        if not report:
            raise NotFoundError("OTM report not found")

        return build_file_name(report.equipment_code, report.date_formatted), self.enhancer.to_pdf(report.image)

    def open_remote_document(self, file_id: str) -> Optional[RemoteFileContent]:
        return self.drive_client.get_file_content(file_id)

    def history(self, equipment_code: str) -> List[HistoryEntry]:
        return fetch_history(equipment_code, self.storage, self.drive_client)


def build_otm_service(connectivity: Optional[ConnectivitySignal] = None) -> OTMService:
    """
    Wire the OTM pipeline from environment configuration.

    Call once at process start; the returned service owns the only upload
    queue, subscribed to ``connectivity``.
    """
    connectivity = connectivity or ConnectivitySignal()
    storage = OTMStorage()
    drive_client = DriveClient()
    upload_queue = UploadQueue(
        drive_client=drive_client,
        pending_store=PendingUploadStore(),
        connectivity=connectivity,
        report_store=storage
    )
    return OTMService(storage, upload_queue, drive_client)

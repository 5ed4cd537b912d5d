"""Local OTM report store: records in DynamoDB, image payloads in S3."""

import os
import logging
from datetime import datetime
from typing import List, Optional

from boto3.dynamodb.conditions import Key, Attr

from shared.config import DATE_FORMAT, TIME_FORMAT
from shared.dynamodb import DynamoDBClient
from shared.s3 import S3Client
from shared.exceptions import NotFoundError, StorageError, ValidationError
from shared.validators import sanitize_string
from .models import OTMReport

logger = logging.getLogger(__name__)

# Item holding the id sequence; regular reports start at 1
COUNTER_KEY = {'report_id': 0}
COUNTER_ATTRIBUTE = 'last_report_id'

EQUIPMENT_CODE_INDEX = 'equipment-code-index'
DATE_INDEX = 'date-index'


class OTMStorage:
    """Durable local collection of scanned OTM reports."""

    def __init__(
        self,
        reports_table: Optional[DynamoDBClient] = None,
        images_bucket: Optional[S3Client] = None
    ):
        """Initialize the store, defaulting to the tables named in the environment."""
        self.reports_table = reports_table or DynamoDBClient(os.environ.get('OTM_REPORTS_TABLE'))
        self.images_bucket = images_bucket or S3Client(os.environ.get('OTM_LOCAL_BUCKET'))

    def save_report(
        self,
        equipment_code: str,
        image: bytes,
        technician_name: str = '',
        captured_at: Optional[datetime] = None
    ) -> OTMReport:
        """
        Save a new OTM report.

        Args:
            equipment_code: Equipment the document belongs to
            image: Enhanced document image
            technician_name: Technician who captured it (may be empty)
            captured_at: Capture time (default: now, local time)

        Returns:
            The stored report with its generated id

        Raises:
            ValidationError: If there is no image or the technician name is invalid
            StorageError: If the image cannot be stored
            DatabaseError: If the record cannot be stored
        """
        if not image:
            raise ValidationError("OTM image is required")
        technician_name = sanitize_string(technician_name, max_length=200)

        now = captured_at or datetime.now()
        report_id = self.reports_table.increment_counter(COUNTER_KEY, COUNTER_ATTRIBUTE)
        image_key = f"reports/{equipment_code}/{report_id}.jpg"

        report = OTMReport(
            report_id=report_id,
            equipment_code=equipment_code,
            captured_at=now.isoformat(),
            date_formatted=now.strftime(DATE_FORMAT),
            time_formatted=now.strftime(TIME_FORMAT),
            technician_name=technician_name,
            image_key=image_key,
            synced=False
        )

        self.images_bucket.upload_file(
            image,
            image_key,
            content_type='image/jpeg',
            metadata={'equipment_code': equipment_code, 'report_id': str(report_id)}
        )

        try:
            self.reports_table.put_item(report.model_dump(exclude_none=True))
        except Exception as e:
            logger.error(f"Failed to create OTM record {report_id}: {str(e)}")
            try:
                self.images_bucket.delete_file(image_key)
            except StorageError:
                logger.warning(f"Orphaned OTM image left at {image_key}")
            raise

        logger.info(f"OTM report saved locally: {report_id} ({equipment_code})")
        return report.model_copy(update={'image': image})

    def get_reports_by_code(self, equipment_code: str) -> List[OTMReport]:
        """All reports of one equipment, newest first. Images are not loaded."""
        items = self.reports_table.query_all(
            key_condition_expression=Key('equipment_code').eq(equipment_code),
            index_name=EQUIPMENT_CODE_INDEX,
            scan_forward=False
        )
        return [OTMReport(**item) for item in items]

    def get_reports_by_date(self, date_formatted: str) -> List[OTMReport]:
        """All reports captured on a DD/MM/YYYY day, oldest first."""
        items = self.reports_table.query_all(
            key_condition_expression=Key('date_formatted').eq(date_formatted),
            index_name=DATE_INDEX
        )
        return [OTMReport(**item) for item in items]

    def get_report_by_id(self, report_id: int) -> Optional[OTMReport]:
        """
        Get a single report with its image.

        Returns:
            The report, or None when no report has that id
        """
        if report_id is None or int(report_id) < 1:
            return None

        item = self.reports_table.get_item({'report_id': int(report_id)})
        if not item:
            return None

        report = OTMReport(**item)
        try:
            image = self.images_bucket.download_file(report.image_key)
        except NotFoundError:
            logger.error(f"OTM report {report_id} has no image at {report.image_key}")
            raise StorageError(f"Image missing for OTM report {report_id}")

        return report.model_copy(update={'image': image})

    def get_report_image(self, report_id: int) -> bytes:
        """
        Image payload of a report.

        Raises:
            NotFoundError: If the report does not exist
        """
        report = self.get_report_by_id(report_id)
        if not report:
            raise NotFoundError("OTM report not found")
        return report.image

    def mark_synced(self, report_id: int, remote_file_id: Optional[str] = None) -> OTMReport:
        """
        Flag a report as present in the remote store.

        Raises:
            NotFoundError: If the report does not exist
        """
        if int(report_id) < 1 or not self.reports_table.get_item({'report_id': int(report_id)}):
            raise NotFoundError("OTM report not found")

        update_parts = ["#synced = :synced"]
        expr_names = {'#synced': 'synced'}
        expr_values = {':synced': True}

        if remote_file_id:
            update_parts.append("#remote_file_id = :remote_file_id")
            expr_names['#remote_file_id'] = 'remote_file_id'
            expr_values[':remote_file_id'] = remote_file_id

        item = self.reports_table.update_item(
            key={'report_id': int(report_id)},
            update_expression="SET " + ", ".join(update_parts),
            expression_values=expr_values,
            expression_names=expr_names
        )

        logger.info(f"OTM report {report_id} marked as synced")
        return OTMReport(**item)

    def count_reports(self) -> int:
        """Total number of stored reports."""
        return len(self.reports_table.scan_all(filter_expression=Attr('equipment_code').exists()))

"""Merged local + remote OTM history for one equipment."""

import logging
from typing import List

from shared.exceptions import SicoemException
from .drive_client import DriveClient
from .models import HistoryEntry
from .storage import OTMStorage

logger = logging.getLogger(__name__)


def fetch_history(equipment_code: str, local_store: OTMStorage, drive_client: DriveClient) -> List[HistoryEntry]:
    """
    List every known document of an equipment.

    Local reports come first (newest first), followed by remote documents
    that are not already present locally. A remote document is considered
    the same as a local one when its date string equals the local report's
    formatted date, so two documents captured on the same day collapse into
    the local one.

    Either side failing yields an empty list for that side only.
    """
    try:
        local_reports = local_store.get_reports_by_code(equipment_code)
    except SicoemException as e:
        logger.warning(f"Error loading local reports for {equipment_code}: {e.message}")
        local_reports = []

    entries = [
        HistoryEntry(
            source='local',
            report_id=report.report_id,
            file_id=report.remote_file_id,
            date_formatted=report.date_formatted,
            time_formatted=report.time_formatted,
            synced=report.synced
        )
        for report in local_reports
    ]

    remote_reports = drive_client.list_history(equipment_code)
    local_dates = {report.date_formatted for report in local_reports}

    for remote in remote_reports:
        if remote.date in local_dates:
            continue
        entries.append(HistoryEntry(
            source='remote',
            file_id=remote.file_id,
            file_name=remote.file_name,
            date_formatted=remote.date,
            synced=True
        ))

    return entries

"""Unit tests for the merged OTM history."""

import pytest
from unittest.mock import Mock
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from otm.history import fetch_history
from otm.models import OTMReport, RemoteOTM
from shared.exceptions import DatabaseError

CODE = '123456789012'


def local_report(report_id, date, time='09:00'):
    return OTMReport(
        report_id=report_id,
        equipment_code=CODE,
        captured_at='2026-10-19T09:00:00',
        date_formatted=date,
        time_formatted=time,
        image_key=f'reports/{CODE}/{report_id}.jpg'
    )


class TestFetchHistory:
    """Test cases for fetch_history."""

    @pytest.fixture
    def local_store(self):
        return Mock()

    @pytest.fixture
    def drive_client(self):
        return Mock()

    def test_same_date_collapses_to_local(self, local_store, drive_client):
        """A remote document with the local report's date is not listed twice."""
        local_store.get_reports_by_code.return_value = [local_report(1, '19/10/2026')]
        drive_client.list_history.return_value = [
            RemoteOTM(fileId='f1', fileName='OTM_123456789012_19-10-2026.pdf', date='19/10/2026')
        ]

        history = fetch_history(CODE, local_store, drive_client)

        assert len(history) == 1
        assert history[0].source == 'local'
        assert history[0].report_id == 1

    def test_local_first_then_remote(self, local_store, drive_client):
        local_store.get_reports_by_code.return_value = [
            local_report(3, '19/10/2026'),
            local_report(2, '10/10/2026'),
        ]
        drive_client.list_history.return_value = [
            RemoteOTM(fileId='f0', fileName='a.pdf', date='01/09/2026'),
            RemoteOTM(fileId='f1', fileName='b.pdf', date='10/10/2026'),
            RemoteOTM(fileId='f2', fileName='c.pdf', date='05/09/2026'),
        ]

        history = fetch_history(CODE, local_store, drive_client)

        assert [(h.source, h.report_id or h.file_id) for h in history] == [
            ('local', 3), ('local', 2), ('remote', 'f0'), ('remote', 'f2')
        ]
        assert history[2].synced is True

    def test_local_error_degrades(self, local_store, drive_client):
        """A broken local store still shows remote documents."""
        local_store.get_reports_by_code.side_effect = DatabaseError()
        drive_client.list_history.return_value = [RemoteOTM(fileId='f1', date='01/01/2026')]

        history = fetch_history(CODE, local_store, drive_client)

        assert [h.file_id for h in history] == ['f1']

    def test_remote_empty(self, local_store, drive_client):
        local_store.get_reports_by_code.return_value = [local_report(1, '19/10/2026')]
        drive_client.list_history.return_value = []

        history = fetch_history(CODE, local_store, drive_client)

        assert [h.report_id for h in history] == [1]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

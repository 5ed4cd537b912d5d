"""OTM data models."""

from typing import Optional, Dict, Any, Literal

from pydantic import BaseModel, Field

from shared.codec import decode_payload


class OTMReport(BaseModel):
    """Locally stored scan of one maintenance work order."""

    report_id: int
    equipment_code: str
    captured_at: str
    date_formatted: str
    time_formatted: str
    technician_name: str = ""
    image_key: str
    image: Optional[bytes] = Field(default=None, repr=False, exclude=True)
    synced: bool = False
    remote_file_id: Optional[str] = None

    class Config:
        """Pydantic config."""
        from_attributes = True


class UploadTask(BaseModel):
    """One pending delivery of a document to the remote store."""

    task_id: str
    equipment_code: str
    file_name: str
    file_data: str = Field(..., repr=False, description="Base64-encoded document")
    technician: str
    date: str
    report_id: Optional[int] = None
    queued_at: str

    def to_payload(self) -> Dict[str, Any]:
        """Wire form expected by the remote document store."""
        return {
            'action': 'upload',
            'equipmentCode': self.equipment_code,
            'fileName': self.file_name,
            'fileData': self.file_data,
            'technician': self.technician,
            'date': self.date
        }


class UploadResult(BaseModel):
    """Outcome of an upload request."""

    status: Literal['delivered', 'queued', 'failed']
    file_id: Optional[str] = None
    task_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status != 'failed'

    @property
    def queued(self) -> bool:
        return self.status == 'queued'


class RemoteOTM(BaseModel):
    """Document entry as listed by the remote store."""

    file_id: str = Field(..., alias='fileId')
    file_name: str = Field(default='', alias='fileName')
    date: str = ''

    class Config:
        """Pydantic config."""
        populate_by_name = True


class RemoteFileContent(BaseModel):
    """Document content fetched from the remote store."""

    content: str = Field(..., repr=False)
    mime_type: str = Field(default='application/pdf', alias='mimeType')
    file_name: str = Field(default='documento.pdf', alias='fileName')

    class Config:
        """Pydantic config."""
        populate_by_name = True

    @property
    def data(self) -> bytes:
        return decode_payload(self.content)


class HistoryEntry(BaseModel):
    """One row of the merged local/remote OTM history of an equipment."""

    source: Literal['local', 'remote']
    report_id: Optional[int] = None
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    date_formatted: str
    time_formatted: str = ""
    synced: bool = False


class CaptureResult(BaseModel):
    """Result of capturing one OTM document."""

    report: OTMReport
    upload: UploadResult

from abc import ABC, abstractmethod
from typing import Optional

from vehicle_valuation_service.app.models import FileUpload


class AbstractBlobStore(ABC):
    @abstractmethod
    async def upload(self, data: bytes, content_type: str, path_hint: str) -> str:
        """
        Stores one file and returns the URL it can be fetched from.

        Args:
            data: Raw file content.
            content_type: MIME type recorded alongside the file.
            path_hint: "{vehicle_number}/{applicant_contact}/{uuid}-{filename}".
        """
        pass

    @abstractmethod
    async def download(self, file_id: str) -> Optional[FileUpload]:
        """Returns a stored file by id, or None when it does not exist."""
        pass

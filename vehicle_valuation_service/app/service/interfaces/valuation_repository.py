from abc import ABC, abstractmethod
from typing import Optional, List

from vehicle_valuation_service.app.models import CaseKey, ValuationDocumentDB


class AbstractValuationRepository(ABC):
    @abstractmethod
    async def load(self, key: CaseKey) -> Optional[ValuationDocumentDB]:
        """
        Reads one case document by its id and partition key.

        Returns:
            The stored document, or None when no case exists under that key.
        """
        pass

    @abstractmethod
    async def save(self, document: ValuationDocumentDB) -> ValuationDocumentDB:
        """
        Writes the whole case document under its own partition key.

        Stamps updated_at and bumps the version. Implementations that check
        versions raise ConcurrencyConflictError when the stored copy changed
        since the document was loaded.
        """
        pass

    @abstractmethod
    async def list_by_status(self, status: str) -> List[ValuationDocumentDB]:
        """Returns every case whose status equals the given value, across partitions."""
        pass

    async def load_or_create(self, key: CaseKey) -> ValuationDocumentDB:
        """Loads the case, or synthesizes an unsaved Open case (version 0) when absent."""
        document = await self.load(key)
        if document is None:
            document = ValuationDocumentDB.new(key)
        return document

import datetime
from typing import Dict, List, Optional, Tuple

import pytest
from unittest.mock import AsyncMock, MagicMock

from vehicle_valuation_service.app.models import (
    CaseKey, FileUpload, ValuationDocumentDB, WorkflowTableRecordDB, WorkflowTableUpdate,
)
from vehicle_valuation_service.app.service.exceptions import ConcurrencyConflictError
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.app.service.interfaces.rc_lookup_client import AbstractRcLookupClient
from vehicle_valuation_service.app.service.interfaces.valuation_estimator import AbstractValuationEstimator
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror


class InMemoryValuationRepository(AbstractValuationRepository):
    """Dict-backed repository with the same version check as the Mongo store."""

    def __init__(self):
        self.documents: Dict[Tuple[str, str], dict] = {}
        self.save_calls = 0

    async def load(self, key: CaseKey) -> Optional[ValuationDocumentDB]:
        stored = self.documents.get((key.valuation_id, key.partition_key))
        return ValuationDocumentDB(**stored) if stored else None

    async def save(self, document: ValuationDocumentDB) -> ValuationDocumentDB:
        self.save_calls += 1
        storage_key = (document.id, document.partition_key)
        stored = self.documents.get(storage_key)
        stored_version = stored["version"] if stored else 0
        if stored_version != document.version:
            raise ConcurrencyConflictError(document.id, document.version, stored_version)

        doc_dict = document.model_dump()
        doc_dict["version"] = document.version + 1
        doc_dict["updated_at"] = datetime.datetime.now(datetime.UTC)
        self.documents[storage_key] = doc_dict
        return ValuationDocumentDB(**doc_dict)

    async def list_by_status(self, status: str) -> List[ValuationDocumentDB]:
        return [ValuationDocumentDB(**doc) for doc in self.documents.values() if doc["status"] == status]


class InMemoryBlobStore(AbstractBlobStore):
    def __init__(self, failing_filenames=()):
        self.blobs: Dict[str, FileUpload] = {}
        self.path_hints: List[str] = []
        self.failing_filenames = set(failing_filenames)

    async def upload(self, data: bytes, content_type: str, path_hint: str) -> str:
        filename = path_hint.rsplit("/", 1)[-1].split("-", 5)[-1]
        if filename in self.failing_filenames:
            raise IOError(f"storage rejected {filename}")
        file_id = f"blob{len(self.blobs) + 1}"
        self.blobs[file_id] = FileUpload(filename=filename, content_type=content_type, data=data)
        self.path_hints.append(path_hint)
        return f"memory://blobs/{file_id}"

    async def download(self, file_id: str) -> Optional[FileUpload]:
        return self.blobs.get(file_id)


class InMemoryWorkflowTableStore:
    def __init__(self, fail: bool = False):
        self.records: Dict[str, WorkflowTableRecordDB] = {}
        self.fail = fail

    async def upsert(self, valuation_id: str, update: WorkflowTableUpdate) -> WorkflowTableRecordDB:
        if self.fail:
            raise RuntimeError("workflow table unavailable")
        record = WorkflowTableRecordDB(
            valuation_id=valuation_id,
            partition_key=f"{update.vehicle_number}|{update.applicant_contact}",
            **update.model_dump(),
        )
        self.records[valuation_id] = record
        return record

    async def get(self, valuation_id: str, vehicle_number: str, applicant_contact: str) -> Optional[WorkflowTableRecordDB]:
        record = self.records.get(valuation_id)
        if record and record.partition_key == f"{vehicle_number}|{applicant_contact}":
            return record
        return None

    async def delete(self, valuation_id: str, vehicle_number: str, applicant_contact: str) -> bool:
        if await self.get(valuation_id, vehicle_number, applicant_contact) is None:
            return False
        del self.records[valuation_id]
        return True

    async def list_in_progress(self) -> List[WorkflowTableRecordDB]:
        in_progress = [r for r in self.records.values() if r.status == "InProgress"]
        return sorted(in_progress, key=lambda r: r.created_at)


@pytest.fixture
def case_key() -> CaseKey:
    return CaseKey(valuation_id="val-001", vehicle_number="KA01AB1234", applicant_contact="9876543210")


@pytest.fixture
def repository() -> InMemoryValuationRepository:
    return InMemoryValuationRepository()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def workflow_table_store() -> InMemoryWorkflowTableStore:
    return InMemoryWorkflowTableStore()


@pytest.fixture
def mock_workflow_mirror():
    return MagicMock(spec=BackgroundMirror)


@pytest.fixture
def mock_rc_client():
    return AsyncMock(spec=AbstractRcLookupClient)


@pytest.fixture
def mock_estimator():
    return AsyncMock(spec=AbstractValuationEstimator)


@pytest.fixture
def api_client(repository, blob_store, workflow_table_store, mock_workflow_mirror, mock_rc_client, mock_estimator):
    """TestClient over the real app with every storage and upstream dependency replaced by a fake."""
    from fastapi.testclient import TestClient
    from vehicle_valuation_service.app.main import app
    from vehicle_valuation_service.app.dependencies.app_state import get_workflow_mirror
    from vehicle_valuation_service.infrastructure.ai_valuation_client import get_valuation_estimator
    from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository
    from vehicle_valuation_service.infrastructure.database.workflow_table_store import get_workflow_table_store
    from vehicle_valuation_service.infrastructure.rc_lookup_client import get_rc_lookup_client
    from vehicle_valuation_service.infrastructure.storage.gridfs_blob_store import get_blob_store

    app.dependency_overrides[get_valuation_repository] = lambda: repository
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_workflow_table_store] = lambda: workflow_table_store
    app.dependency_overrides[get_workflow_mirror] = lambda: mock_workflow_mirror
    app.dependency_overrides[get_rc_lookup_client] = lambda: mock_rc_client
    app.dependency_overrides[get_valuation_estimator] = lambda: mock_estimator
    yield TestClient(app)
    app.dependency_overrides.clear()

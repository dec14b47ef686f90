# Case-level lifecycle: strict existence read and soft delete
import datetime
import logging

from vehicle_valuation_service.app.models import CaseKey, CaseStatus, ValuationDocumentDB
from vehicle_valuation_service.app.service.exceptions import CaseNotFoundError
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository

logger = logging.getLogger(__name__)


async def handle_get_case(repository: AbstractValuationRepository, key: CaseKey) -> ValuationDocumentDB:
    document = await repository.load(key)
    if document is None:
        raise CaseNotFoundError(key.valuation_id, key.partition_key)
    return document


async def handle_delete_case(repository: AbstractValuationRepository, key: CaseKey) -> ValuationDocumentDB:
    """Marks the case Deleted; the document itself is kept."""
    document = await handle_get_case(repository, key)
    if document.status == CaseStatus.DELETED:
        logger.info(f"Valuation {key.valuation_id} is already deleted.")
        return document

    document.status = CaseStatus.DELETED.value
    document.deleted_at = datetime.datetime.now(datetime.UTC)
    saved = await repository.save(document)
    logger.info(f"Valuation {key.valuation_id} soft-deleted.")
    return saved

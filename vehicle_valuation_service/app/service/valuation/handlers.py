# Estimate the valuation of a case through the AI valuation assistant
import logging
from typing import Dict, Any

from opentelemetry import trace

from vehicle_valuation_service.app.models import CaseKey, ValuationDocumentDB, ValuationResponseDB
from vehicle_valuation_service.app.observability import section_writes_counter
from vehicle_valuation_service.app.service.exceptions import CaseNotFoundError
from vehicle_valuation_service.app.service.interfaces.valuation_estimator import AbstractValuationEstimator
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.valuation.ranges import parse_valuation_ranges

logger = logging.getLogger(__name__)


def build_valuation_facts(document: ValuationDocumentDB) -> Dict[str, Any]:
    facts: Dict[str, Any] = {}
    details = document.vehicle_details
    if details is not None:
        facts.update({
            "RegistrationNumber": details.registration_number or document.vehicle_number,
            "Make": details.make,
            "Model": details.model,
            "YearOfMfg": details.year_of_mfg or None,
            "Colour": details.colour,
            "Fuel": details.fuel,
            "EngineCC": details.engine_cc or None,
            "IDV": details.idv or None,
            "DateOfRegistration": details.date_of_registration.date().isoformat() if details.date_of_registration else None,
        })
    else:
        facts["RegistrationNumber"] = document.vehicle_number

    if document.stakeholder is not None:
        location = document.stakeholder.vehicle_location
        facts["City"] = location.district or location.name or None
    if document.inspection_details is not None:
        facts["Odometer"] = document.inspection_details.odometer
    return facts


async def handle_estimate_valuation(
    repository: AbstractValuationRepository,
    estimator: AbstractValuationEstimator,
    key: CaseKey,
) -> ValuationResponseDB:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "valuation.estimate")
    current_span.set_attribute("valuation.id", key.valuation_id)

    document = await repository.load(key)
    if document is None:
        raise CaseNotFoundError(key.valuation_id, key.partition_key)

    raw_response = await estimator.estimate(build_valuation_facts(document))
    valuation = parse_valuation_ranges(raw_response)

    document.valuation_response = valuation
    await repository.save(document)

    section_writes_counter.add(1, {"section": "valuation_response", "operation": "estimate"})
    current_span.add_event("valuation.estimated", {
        "valuation.id": key.valuation_id,
        "valuation.mid_range": valuation.mid_range,
    })
    logger.info(
        f"Valuation estimated for {key.valuation_id}: "
        f"low={valuation.low_range} mid={valuation.mid_range} high={valuation.high_range}"
    )
    return valuation

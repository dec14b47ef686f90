"""
Enrichment of stored vehicle details with the registration certificate (RC)
record of the vehicle.

The merge is "external value wins when present": every field the RC record
carries a usable value for overwrites the local one, everything else is left
alone. Applying the same record twice gives the same result as applying it
once.
"""
import datetime
import logging
import re
from typing import Optional, Any, Dict, Callable

from vehicle_valuation_service.app.models import CaseKey, RcRecord, VehicleDetailsDB
from vehicle_valuation_service.app.observability import section_writes_counter
from vehicle_valuation_service.app.service.exceptions import CaseNotFoundError, RcRecordNotFoundError
from vehicle_valuation_service.app.service.interfaces.rc_lookup_client import AbstractRcLookupClient
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.workflow import engine

logger = logging.getLogger(__name__)

# Formats seen in RC service payloads, most specific first
RC_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%d-%b-%Y",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d %b %Y",
    "%m/%Y",
    "%b-%Y",
)

NOT_BLACKLISTED = {"", "na", "n/a", "no", "none", "false", "not blacklisted", "clear"}


def parse_rc_date(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    for fmt in RC_DATE_FORMATS:
        try:
            parsed = datetime.datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=datetime.UTC)
    logger.debug(f"Unrecognized RC date value: {value!r}")
    return None


def parse_rc_int(value: Optional[str]) -> Optional[int]:
    number = parse_rc_float(value)
    return int(number) if number is not None else None


def parse_rc_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = re.search(r"\d+(?:\.\d+)?", value.replace(",", ""))
    return float(match.group()) if match else None


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# Local field -> how to derive its value from the RC record (None means "no value")
RC_FIELD_MAP: Dict[str, Callable[[RcRecord], Any]] = {
    "make": lambda rc: _text(rc.maker_description),
    "model": lambda rc: _text(rc.maker_model),
    "maker_variant": lambda rc: _text(rc.maker_variant),
    "body_type": lambda rc: _text(rc.body_type),
    "chassis_number": lambda rc: _text(rc.chassis_number),
    "engine_number": lambda rc: _text(rc.engine_number),
    "colour": lambda rc: _text(rc.color_type),
    "fuel": lambda rc: _text(rc.fuel_type),
    "owner_name": lambda rc: _text(rc.owner),
    "present_address": lambda rc: _text(rc.current_address),
    "permanent_address": lambda rc: _text(rc.permanent_address),
    "hypothecation": lambda rc: rc.financed,
    "lender": lambda rc: _text(rc.lender),
    "insurer": lambda rc: _text(rc.insurance_provider),
    "insurance_policy_no": lambda rc: _text(rc.insurance_policy_number),
    "insurance_valid_up_to": lambda rc: parse_rc_date(rc.insurance_upto),
    "date_of_registration": lambda rc: parse_rc_date(rc.registered),
    "class_of_vehicle": lambda rc: _text(rc.category_description),
    "category_code": lambda rc: _text(rc.category),
    "engine_cc": lambda rc: parse_rc_int(rc.cubic_capacity),
    "gross_vehicle_weight": lambda rc: parse_rc_float(rc.gross_weight),
    "seating_capacity": lambda rc: parse_rc_int(rc.seating_capacity),
    "rto": lambda rc: _text(rc.rto),
    "norms_type": lambda rc: _text(rc.norms_type),
    "pollution_certificate_number": lambda rc: _text(rc.pollution_certificate_number),
    "pollution_certificate_upto": lambda rc: parse_rc_date(rc.pollution_certificate_upto),
    "permit_no": lambda rc: _text(rc.permit_number),
    "permit_valid_up_to": lambda rc: parse_rc_date(rc.permit_upto),
    "permit_type": lambda rc: _text(rc.permit_type),
    "permit_issued": lambda rc: parse_rc_date(rc.permit_issued),
    "permit_from": lambda rc: parse_rc_date(rc.permit_from),
    "tax_upto": lambda rc: parse_rc_date(rc.tax_upto),
    "tax_paid_upto": lambda rc: _text(rc.tax_paid_upto),
    "ex_showroom_price": lambda rc: rc.ex_showroom_price,
    "blacklist_status": lambda rc: (
        None if rc.blacklist_status is None
        else rc.blacklist_status.strip().lower() not in NOT_BLACKLISTED
    ),
    "rc_status": lambda rc: (rc.status.strip().upper() == "ACTIVE") if _text(rc.status) else None,
    "manufactured_date": lambda rc: parse_rc_date(rc.manufactured),
}


def merge_rc_record(local: VehicleDetailsDB, rc: RcRecord) -> VehicleDetailsDB:
    """Returns a copy of `local` with every field the RC record has a value for overwritten."""
    updates: Dict[str, Any] = {}
    for field_name, derive in RC_FIELD_MAP.items():
        value = derive(rc)
        if value is not None:
            updates[field_name] = value

    manufactured = updates.get("manufactured_date")
    if manufactured is not None:
        updates["month_of_mfg"] = manufactured.month
        updates["year_of_mfg"] = manufactured.year

    return local.model_copy(update=updates)


async def handle_get_vehicle_details_with_rc(
    repository: AbstractValuationRepository,
    rc_client: AbstractRcLookupClient,
    key: CaseKey,
) -> VehicleDetailsDB:
    document = await repository.load(key)
    if document is None:
        raise CaseNotFoundError(key.valuation_id, key.partition_key)

    local = document.vehicle_details or VehicleDetailsDB()
    registration_number = local.registration_number or key.vehicle_number

    rc_record = await rc_client.lookup(registration_number)
    if rc_record is None:
        raise RcRecordNotFoundError(registration_number)

    merged = merge_rc_record(local, rc_record)
    if merged.registration_number is None:
        merged.registration_number = registration_number
    document.vehicle_details = merged
    engine.initialize_workflow(document)
    await repository.save(document)

    section_writes_counter.add(1, {"section": "vehicle_details", "operation": "rc_enrichment"})
    logger.info(f"Vehicle details for valuation {key.valuation_id} enriched from RC record {registration_number}")
    return merged

from fastapi import Query

from vehicle_valuation_service.app.models import CaseKey

async def get_case_key(
    valuation_id: str,
    vehicle_number: str = Query(..., min_length=1, description="Vehicle registration number the case is filed under."),
    applicant_contact: str = Query(..., min_length=1, description="Applicant contact the case is filed under."),
) -> CaseKey:
    """Builds the case identity from the `valuation_id` path parameter and the two partition query parameters."""
    return CaseKey(valuation_id=valuation_id, vehicle_number=vehicle_number, applicant_contact=applicant_contact)

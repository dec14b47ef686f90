from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RcRecord(BaseModel):
    """Registration certificate record as returned by the RC lookup service (camelCase JSON)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    valid: bool = False
    status: Optional[str] = None
    registered: Optional[str] = None
    manufacturer: Optional[str] = None
    manufactured: Optional[str] = None # "MM/YYYY"
    owner: Optional[str] = None
    father: Optional[str] = None
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    category: Optional[str] = None
    category_description: Optional[str] = None
    maker_description: Optional[str] = None
    maker_model: Optional[str] = None
    maker_variant: Optional[str] = None
    body_type: Optional[str] = None
    fuel_type: Optional[str] = None
    color_type: Optional[str] = None
    chassis_number: Optional[str] = None
    engine_number: Optional[str] = None
    cubic_capacity: Optional[str] = None
    gross_weight: Optional[str] = None
    seating_capacity: Optional[str] = None
    financed: Optional[bool] = None
    lender: Optional[str] = None
    rto: Optional[str] = None
    norms_type: Optional[str] = None
    pollution_certificate_number: Optional[str] = None
    pollution_certificate_upto: Optional[str] = None
    permit_number: Optional[str] = None
    permit_issued: Optional[str] = None
    permit_from: Optional[str] = None
    permit_type: Optional[str] = None
    permit_upto: Optional[str] = None
    tax_upto: Optional[str] = None
    tax_paid_upto: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    insurance_upto: Optional[str] = None
    ex_showroom_price: Optional[float] = None
    blacklist_status: Optional[str] = None

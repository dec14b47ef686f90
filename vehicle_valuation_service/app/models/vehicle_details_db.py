import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .file_upload import FileUpload


class VehicleDetailsDB(BaseModel):
    registration_number: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    month_of_mfg: int = 0
    year_of_mfg: int = 0
    body_type: Optional[str] = None
    chassis_number: Optional[str] = None
    engine_number: Optional[str] = None
    colour: Optional[str] = None
    fuel: Optional[str] = None
    owner_name: Optional[str] = None
    present_address: Optional[str] = None
    permanent_address: Optional[str] = None
    hypothecation: bool = False
    insurer: Optional[str] = None
    date_of_registration: Optional[datetime.datetime] = None
    class_of_vehicle: Optional[str] = None
    engine_cc: int = 0
    gross_vehicle_weight: float = 0.0
    owner_serial_no: Optional[str] = None
    seating_capacity: int = 0
    insurance_policy_no: Optional[str] = None
    insurance_valid_up_to: Optional[datetime.datetime] = None
    idv: float = 0.0 # Insured declared value, INR
    permit_no: Optional[str] = None
    permit_valid_up_to: Optional[datetime.datetime] = None
    fitness_no: Optional[str] = None
    fitness_valid_to: Optional[datetime.datetime] = None
    blacklist_status: bool = False
    rc_status: bool = False

    rto: Optional[str] = None
    lender: Optional[str] = None
    ex_showroom_price: Optional[float] = None
    category_code: Optional[str] = None
    norms_type: Optional[str] = None
    maker_variant: Optional[str] = None
    pollution_certificate_number: Optional[str] = None
    pollution_certificate_upto: Optional[datetime.datetime] = None
    permit_type: Optional[str] = None
    permit_issued: Optional[datetime.datetime] = None
    permit_from: Optional[datetime.datetime] = None
    tax_upto: Optional[datetime.datetime] = None
    tax_paid_upto: Optional[str] = None
    manufactured_date: Optional[datetime.datetime] = None

    # Blob URLs of the two photos captured with the RC details
    stencil_trace_url: Optional[str] = None
    chassis_no_photo_url: Optional[str] = None


class VehicleDetailsUpdate(VehicleDetailsDB):
    """Vehicle details write payload; a file replaces the matching URL, otherwise the URL given here is kept."""
    stencil_trace: Optional[FileUpload] = Field(default=None, exclude=True)
    chassis_no_photo: Optional[FileUpload] = Field(default=None, exclude=True)

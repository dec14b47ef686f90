import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from .file_upload import FileUpload


class VehicleLocation(BaseModel):
    pincode: str = ""
    name: str = ""
    block: str = ""
    district: str = ""
    division: str = ""
    state: str = ""
    country: str = ""


class Applicant(BaseModel):
    name: str = ""
    contact: str = ""


class StakeholderDocument(BaseModel):
    type: str # "RC", "Insurance" or "Other"
    file_path: str
    uploaded_at: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.UTC))


class StakeholderDB(BaseModel):
    name: str = ""
    executive_name: str = ""
    executive_contact: str = ""
    executive_whatsapp: Optional[str] = None
    executive_email: Optional[str] = None
    valuation_type: Optional[str] = None
    vehicle_segment: Optional[str] = None
    vehicle_location: VehicleLocation = Field(default_factory=VehicleLocation)
    applicant: Applicant = Field(default_factory=Applicant)
    documents: List[StakeholderDocument] = Field(default_factory=list)


class StakeholderUpdate(BaseModel):
    """Stakeholder write payload. The applicant contact always comes from the case identity."""
    name: str
    executive_name: str
    executive_contact: str
    executive_whatsapp: Optional[str] = None
    executive_email: Optional[str] = None
    valuation_type: Optional[str] = None
    vehicle_segment: Optional[str] = None
    vehicle_location: VehicleLocation = Field(default_factory=VehicleLocation)
    applicant_name: str = ""

    # Files attached by the router, never read from the JSON body
    rc_file: Optional[FileUpload] = Field(default=None, exclude=True)
    insurance_file: Optional[FileUpload] = Field(default=None, exclude=True)
    other_files: List[FileUpload] = Field(default_factory=list, exclude=True)


class StakeholderDocumentsUpload(BaseModel):
    rc_file: Optional[FileUpload] = None
    insurance_file: Optional[FileUpload] = None
    other_files: List[FileUpload] = Field(default_factory=list)

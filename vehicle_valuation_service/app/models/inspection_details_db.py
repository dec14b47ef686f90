import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from .file_upload import FileUpload


class InspectionDetailsDB(BaseModel):
    vehicle_inspected_by: Optional[str] = None
    date_of_inspection: Optional[datetime.datetime] = None
    inspection_location: Optional[str] = None
    vehicle_moved: Optional[bool] = None
    engine_started: Optional[bool] = None
    odometer: Optional[int] = None
    vin_plate: Optional[bool] = None
    body_type: Optional[str] = None
    overall_tyre_condition: Optional[str] = None
    other_accessory_fitment: Optional[bool] = None
    windshield_glass: Optional[str] = None
    road_worthy_condition: Optional[bool] = None
    engine_condition: Optional[str] = None
    suspension_system: Optional[str] = None
    steering_assy: Optional[str] = None
    brake_system: Optional[str] = None
    chassis_condition: Optional[str] = None
    body_condition: Optional[str] = None
    battery_condition: Optional[str] = None
    paint_work: Optional[str] = None
    clutch_system: Optional[str] = None
    gear_box_assy: Optional[str] = None
    propeller_shaft: Optional[str] = None
    differential_assy: Optional[str] = None
    cabin: Optional[str] = None
    dashboard: Optional[str] = None
    seats: Optional[str] = None
    head_lamps: Optional[str] = None
    electric_assembly: Optional[str] = None
    radiator: Optional[str] = None
    intercooler: Optional[str] = None
    all_hose_pipes: Optional[str] = None
    photo_urls: List[str] = Field(default_factory=list)


class InspectionDetailsUpdate(InspectionDetailsDB):
    """Inspection write payload; uploaded photos are appended after the URLs listed in photo_urls."""
    photos: List[FileUpload] = Field(default_factory=list, exclude=True)

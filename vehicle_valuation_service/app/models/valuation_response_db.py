from typing import Optional

from pydantic import BaseModel


class ValuationResponseDB(BaseModel):
    raw_response: Optional[str] = None
    low_range: float = 0.0 # INR
    mid_range: float = 0.0
    high_range: float = 0.0

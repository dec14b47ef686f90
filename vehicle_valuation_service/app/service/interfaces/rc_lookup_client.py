from abc import ABC, abstractmethod
from typing import Optional

from vehicle_valuation_service.app.models import RcRecord


class AbstractRcLookupClient(ABC):
    @abstractmethod
    async def lookup(self, registration_number: str) -> Optional[RcRecord]:
        """
        Fetches the registration certificate record for a vehicle.

        Returns:
            The record when the service reports it as valid, otherwise None.

        Raises:
            UpstreamUnavailableError: the service could not be reached or answered with an error.
        """
        pass

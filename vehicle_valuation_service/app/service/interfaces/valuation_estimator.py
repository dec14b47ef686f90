from abc import ABC, abstractmethod
from typing import Dict, Any


class AbstractValuationEstimator(ABC):
    @abstractmethod
    async def estimate(self, facts: Dict[str, Any]) -> str:
        """
        Asks the valuation assistant for low, mid and high INR price ranges.

        Args:
            facts: Vehicle facts (make, model, year, odometer, city...) to describe to the assistant.

        Returns:
            The assistant's free-text answer.
        """
        pass

# vehicle_valuation_service/app/__init__.py
import logging

logger = logging.getLogger(__name__)
logger.info("Vehicle Valuation App Initialized")

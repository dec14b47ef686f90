# FastAPI Application Entry Point
import logging
from fastapi import FastAPI
import httpx

# Configuration and Observability
from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.observability import setup_opentelemetry, logger

# Initialize OpenTelemetry
setup_opentelemetry(service_name=settings.SERVICE_NAME_API)

# Import instrumentors after OTel SDK is initialized
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

# Database connection
from vehicle_valuation_service.infrastructure.database import connection as mongo_connection
from vehicle_valuation_service.infrastructure.database.connection import (
    connect_to_mongo, close_mongo_connection, ensure_indexes,
)
from vehicle_valuation_service.infrastructure.database.workflow_table_store import WorkflowTableStore
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror

# API Routers
from vehicle_valuation_service.app.api.v1.endpoints import health as health_router
from vehicle_valuation_service.app.api.v1.endpoints import valuations as valuations_router
from vehicle_valuation_service.app.api.v1.endpoints import stakeholder as stakeholder_router
from vehicle_valuation_service.app.api.v1.endpoints import vehicle_details as vehicle_details_router
from vehicle_valuation_service.app.api.v1.endpoints import inspection as inspection_router
from vehicle_valuation_service.app.api.v1.endpoints import quality_control as quality_control_router
from vehicle_valuation_service.app.api.v1.endpoints import valuation_response as valuation_response_router
from vehicle_valuation_service.app.api.v1.endpoints import photos as photos_router
from vehicle_valuation_service.app.api.v1.endpoints import workflow_table as workflow_table_router
from vehicle_valuation_service.app.api.v1.endpoints import workflow as workflow_router
from vehicle_valuation_service.app.api.v1.endpoints import files as files_router

# --- FastAPI Application Instance ---
app = FastAPI(
    title="Vehicle Valuation Service",
    description="Manages vehicle valuation cases, their sections and the five-step approval workflow.",
    version="0.1.0"
)

# --- Event Handlers for DB Connection, Workflow Mirror & OTel Instrumentation ---
@app.on_event("startup")
async def startup_event():
    logger.info("FastAPI application startup...")
    try:
        app.state.http_client = httpx.AsyncClient(timeout=settings.DEFAULT_HTTP_TIMEOUT)
        HTTPXClientInstrumentor().instrument()
        logger.info(f"HTTPX AsyncClient initialized with timeout {settings.DEFAULT_HTTP_TIMEOUT} and instrumented.")

        await connect_to_mongo()
        await ensure_indexes(mongo_connection.db)
        logger.info("MongoDB connection established and indexes ensured.")

        PymongoInstrumentor().instrument()
        logger.info("PyMongo instrumentation complete.")

        app.state.workflow_mirror = BackgroundMirror(
            WorkflowTableStore(mongo_connection.db, settings.WORKFLOW_TABLE_COLLECTION)
        )
        logger.info("Workflow table mirror ready.")

    except Exception as e:
        logger.error(f"Failed during startup: {e}", exc_info=True)

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("FastAPI application shutdown...")

    mirror = getattr(app.state, "workflow_mirror", None)
    if mirror is not None:
        await mirror.drain()
        logger.info("Outstanding workflow table writes drained.")

    if hasattr(app.state, 'http_client') and app.state.http_client:
        await app.state.http_client.aclose()
        logger.info("HTTPX AsyncClient closed.")

    close_mongo_connection()
    logger.info("MongoDB connection closed.")

FastAPIInstrumentor.instrument_app(app)
logger.info("FastAPI instrumentation complete.")

# Include API Routers; literal paths are registered before the {valuation_id} ones they would shadow.
app.include_router(health_router.router, prefix="/api/v1")
app.include_router(valuations_router.router, prefix="/api/v1")
app.include_router(workflow_table_router.router, prefix="/api/v1")
app.include_router(workflow_router.router, prefix="/api/v1")
app.include_router(stakeholder_router.router, prefix="/api/v1")
app.include_router(vehicle_details_router.router, prefix="/api/v1")
app.include_router(inspection_router.router, prefix="/api/v1")
app.include_router(quality_control_router.router, prefix="/api/v1")
app.include_router(valuation_response_router.router, prefix="/api/v1")
app.include_router(photos_router.router, prefix="/api/v1")
app.include_router(files_router.router, prefix="/api/v1")

logger.info("API routers included. Application setup complete.")

# To run: uvicorn vehicle_valuation_service.app.main:app --reload --port 8000

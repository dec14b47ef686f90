import logging
from typing import List

from opentelemetry import trace, metrics
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader, ConsoleMetricExporter, MetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME as ResourceAttributesServiceName
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from pythonjsonlogger import jsonlogger

from vehicle_valuation_service.app.config import settings


logger = logging.getLogger("vehicle_valuation_service")

JSON_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(module)s %(funcName)s %(lineno)d %(otelTraceID)s %(otelSpanID)s %(message)s"

# httpx logs every request at INFO; the instrumentors already record them as spans
QUIET_LOGGERS = ("httpx", "httpcore", "pymongo")


def setup_json_logging():
    """Routes every log record through one JSON handler on the root logger. Safe to call twice."""
    root_logger = logging.getLogger()
    if any(isinstance(h.formatter, jsonlogger.JsonFormatter) for h in root_logger.handlers):
        return

    json_handler = logging.StreamHandler()
    json_handler.setFormatter(jsonlogger.JsonFormatter(
        fmt=JSON_LOG_FORMAT,
        rename_fields={"levelname": "level", "name": "logger_name", "asctime": "timestamp"},
    ))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(json_handler)

    log_level = settings.LOG_LEVEL.upper()
    root_logger.setLevel(log_level)
    logger.setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logger.info(f"JSON logging configured at level {log_level}.")


def _build_tracer_provider(resource: Resource) -> TracerProvider:
    tracer_provider = TracerProvider(resource=resource)
    if settings.OTEL_CONSOLE_EXPORT:
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    if settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT:
        logger.info(f"Exporting spans over OTLP to {settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT}")
        span_exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT, insecure=True)
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    return tracer_provider


def _build_metric_readers() -> List[MetricReader]:
    interval = settings.OTEL_METRIC_EXPORT_INTERVAL_MS
    readers: List[MetricReader] = []
    if settings.OTEL_CONSOLE_EXPORT:
        readers.append(PeriodicExportingMetricReader(ConsoleMetricExporter(), export_interval_millis=interval))
    if settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT:
        logger.info(f"Exporting metrics over OTLP to {settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT}")
        metric_exporter = OTLPMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT, insecure=True)
        readers.append(PeriodicExportingMetricReader(metric_exporter, export_interval_millis=interval))
    return readers


def setup_opentelemetry(service_name: str):
    """
    Installs the global tracer and meter providers for the API process.

    Spans and metrics go to the console unless OTEL_CONSOLE_EXPORT is off, and
    additionally to the OTLP collector for each configured endpoint.
    """
    resource = Resource(attributes={ResourceAttributesServiceName: service_name})

    trace.set_tracer_provider(_build_tracer_provider(resource))
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=_build_metric_readers()))
    logger.info(f"OpenTelemetry tracing and metrics configured for service: {service_name}.")

# Call at module load time
setup_json_logging()

tracer = trace.get_tracer("vehicle_valuation_service.tracer")
meter = metrics.get_meter("vehicle_valuation_service.meter")

workflow_transitions_counter = meter.create_counter(
    name="vehicle_valuation.workflow.transitions.total",
    description="Counts workflow step transitions, partitioned by action (start, complete, annotate).",
    unit="1"
)

section_writes_counter = meter.create_counter(
    name="vehicle_valuation.section.writes.total",
    description="Counts case section writes, partitioned by section and operation (upsert, delete).",
    unit="1"
)

mirror_failures_counter = meter.create_counter(
    name="vehicle_valuation.workflow_table.mirror.failures.total",
    description="Counts best-effort workflow table writes that failed.",
    unit="1"
)

upstream_request_duration = meter.create_histogram(
    name="vehicle_valuation.upstream.request.duration",
    description="Duration of calls to the RC lookup service and the valuation assistant, by service and outcome.",
    unit="s"
)

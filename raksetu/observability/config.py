# SPDX-License-Identifier: Apache-2.0

"""
OpenTelemetry Configuration

Sets up distributed tracing and structured logging for the Raksetu API.
"""

import json
import logging
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from ..config import Settings

SERVICE_NAME = 'raksetu-api'

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON with their extra fields and trace id."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()
        }

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            payload["trace_id"] = format(span_context.trace_id, "032x")

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


SAMPLE_RATIOS = {'production': 0.1, 'staging': 0.5}

LOG_LEVELS = {
    'production': logging.WARNING,
    'staging': logging.INFO,
    'development': logging.DEBUG,
    'test': logging.WARNING
}

# Third-party loggers that are noisy below WARNING outside development
CHATTY_LOGGERS = ('urllib3', 'pymongo', 'werkzeug')


def setup_observability(settings: Settings):
    """Install JSON logging and, when enabled, an OpenTelemetry tracer provider."""
    setup_structured_logging(settings.environment)

    if not settings.otel_enabled:
        return

    tracer_provider = TracerProvider(
        sampler=TraceIdRatioBased(SAMPLE_RATIOS.get(settings.environment, 1.0)),
        resource=Resource.create({
            "service.name": SERVICE_NAME,
            "service.version": settings.service_version,
            "deployment.environment": settings.environment
        })
    )

    exporter = None
    if settings.otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
    elif settings.environment == 'development':
        exporter = ConsoleSpanExporter()
    if exporter is not None:
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)


def setup_structured_logging(environment: str):
    """Route the root logger through StructuredFormatter at the environment's level."""
    root = logging.getLogger()
    root.setLevel(LOG_LEVELS.get(environment, logging.INFO))

    if not any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)

    if environment != 'development':
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

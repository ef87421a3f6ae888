# SPDX-License-Identifier: Apache-2.0

"""
Request instrumentation.

Wraps the app with the OpenTelemetry Flask instrumentation and logs one
structured line per request, tagged with the client's display language
and theme when a preference context was installed.
"""

import time
import logging
from flask import Flask, Response, g, request
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor

logger = logging.getLogger(__name__)

TRACE_HEADER = 'X-Trace-Id'

# Probes hit these constantly; completion is logged at debug level only
QUIET_PATHS = frozenset({'/api/healthz'})


def _preference_attributes() -> dict:
    context = g.get('preferences')
    if context is None:
        return {}
    return {
        "raksetu.client_id": context.client_id,
        "raksetu.language": context.locale.language,
        "raksetu.theme": context.theme.state.name.value
    }


def add_observability_middleware(app: Flask):
    """Instrument a Flask app and log request completion."""

    FlaskInstrumentor().instrument_app(app)

    @app.before_request
    def start_request_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_request(response: Response) -> Response:
        started = g.get('request_started')
        duration_ms = round((time.perf_counter() - started) * 1000, 2) if started else None

        span = trace.get_current_span()
        span_context = span.get_span_context()
        preference_attributes = _preference_attributes()

        if span.is_recording():
            span.set_attributes(preference_attributes)
            if duration_ms is not None:
                span.set_attribute("http.duration_ms", duration_ms)

        if span_context.is_valid:
            response.headers[TRACE_HEADER] = format(span_context.trace_id, "032x")

        level = logging.DEBUG if request.path in QUIET_PATHS else logging.INFO
        logger.log(
            level,
            "HTTP request completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                **{key.split('.', 1)[1]: value for key, value in preference_attributes.items()}
            }
        )
        return response

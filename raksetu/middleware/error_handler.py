# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured problem responses.
Provides centralized error handling and formatting for Flask applications.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Any, Dict, List, Optional, Tuple
from opentelemetry import trace
import logging

from ..utils.context import ProviderScopeError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

PROBLEM_TYPE_BASE = "https://raksetu.in/problems"


def build_problem(
    error_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Build an RFC 7807 style problem document."""
    problem = {
        "type": f"{PROBLEM_TYPE_BASE}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance
    }
    if errors:
        problem["errors"] = errors
    return problem


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ServiceUnavailableException(CustomException):
    """Exception for service unavailable errors."""

    def __init__(self, message: str):
        super().__init__(message, 503, "service-unavailable")


def format_validation_errors(validation_error) -> List[Dict[str, Any]]:
    """Flatten pydantic validation errors into field/message pairs."""
    formatted = []
    for error in validation_error.errors():
        formatted.append({
            "field": ".".join(str(part) for part in error.get("loc", ())) or None,
            "message": error.get("msg"),
            "type": error.get("type")
        })
    return formatted


class ErrorHandlerMiddleware:
    """
    Registers handlers that turn every error into a problem document.

    4xx responses are logged as warnings, 5xx and unexpected exceptions as
    errors with the traceback. Outside production the detail of unexpected
    exceptions is passed through to help local debugging.
    """

    HTTP_ERRORS = {
        400: ("bad-request", "Bad Request"),
        404: ("resource-not-found", "Resource Not Found"),
        405: ("method-not-allowed", "Method Not Allowed"),
        415: ("unsupported-media-type", "Unsupported Media Type"),
        422: ("validation-error", "Validation Error"),
        500: ("internal-server-error", "Internal Server Error"),
        502: ("bad-gateway", "Bad Gateway"),
        503: ("service-unavailable", "Service Unavailable"),
    }

    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()

    @property
    def expose_details(self) -> bool:
        return self.app.config.get('ENVIRONMENT') != 'production'

    def register_error_handlers(self):
        """Register error handlers with the Flask application."""
        for code, (error_type, title) in self.HTTP_ERRORS.items():
            self.app.register_error_handler(code, self._http_handler(error_type, title))

        self.app.register_error_handler(CustomException, self.handle_custom_exception)
        # Reading preferences outside a provider scope is a bug, not a client error
        self.app.register_error_handler(ProviderScopeError, self.handle_unexpected_error)
        self.app.register_error_handler(Exception, self.handle_exception)

    def _http_handler(self, error_type: str, title: str):
        def handler(error: HTTPException):
            return self.handle_http_error(error, error_type, title)
        return handler

    def _respond(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        exc_info: bool = False
    ) -> Tuple[Any, int]:
        with tracer.start_as_current_span("error_handler.respond") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": status,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if status >= 500 else logger.warning
            log(
                f"{title}: {detail}",
                extra={
                    "error_type": error_type,
                    "status_code": status,
                    "path": request.path,
                    "method": request.method
                },
                exc_info=exc_info
            )

            problem = build_problem(error_type, title, status, detail, request.path, errors)
            return jsonify(problem), status

    def handle_http_error(self, error: HTTPException, error_type: str, title: str) -> Tuple[Any, int]:
        """Handle werkzeug HTTP errors raised by routing or by abort()."""
        status = getattr(error, "code", None) or 500
        detail = str(getattr(error, "description", "") or title)
        if status >= 500 and not self.expose_details:
            detail = "An internal server error occurred"
        return self._respond(error_type, title, status, detail, exc_info=status >= 500)

    def handle_custom_exception(self, error: CustomException) -> Tuple[Any, int]:
        """Handle exceptions raised deliberately by routes and services."""
        errors = error.validation_errors if isinstance(error, ValidationException) else None
        title = error.error_type.replace("-", " ").title()
        return self._respond(error.error_type, title, error.status_code, error.message, errors)

    def handle_exception(self, error: Exception) -> Tuple[Any, int]:
        if isinstance(error, HTTPException):
            return self.handle_http_error(error, "http-error", error.name)
        return self.handle_unexpected_error(error)

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle exceptions no other handler claimed.

        Returns:
            Tuple of (JSON response, status code)
        """
        trace.get_current_span().record_exception(error)

        detail = "An unexpected error occurred"
        if self.expose_details:
            detail = f"{error.__class__.__name__}: {error}"

        return self._respond(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            exc_info=True
        )

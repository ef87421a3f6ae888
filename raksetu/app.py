# SPDX-License-Identifier: Apache-2.0

"""
Raksetu API - Flask Application Factory

Builds the Flask application with OpenAPI 3.0 support, wires the emergency
repository, preference store and translation catalog, and registers the
routes and error handlers.
"""

from datetime import datetime, timezone
from typing import Optional
import logging
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from .config import Settings
from .domain.locale import DetectionSettings
from .middleware.error_handler import ErrorHandlerMiddleware
from .observability.config import SERVICE_NAME, setup_observability
from .observability.middleware import add_observability_middleware
from .services.mongodb import EmergencyRepository, MongoDBService
from .services.preferences import InMemoryPreferenceBackend, PreferenceBackend
from .services.redis import RedisService
from .services.translations import (
    FileTranslationBackend,
    HttpTranslationBackend,
    TranslationCatalog
)
from .utils.context import PreferenceProvider

logger = logging.getLogger(__name__)

info = Info(
    title="Raksetu API",
    version="1.0.0",
    description="Emergency blood requests and client preferences for the Raksetu platform"
)

health_tag = Tag(name="Health", description="System health and status")


def create_preference_backend(settings: Settings) -> PreferenceBackend:
    """Preference backend selected by PREFERENCE_BACKEND."""
    if settings.preference_backend == 'memory':
        return InMemoryPreferenceBackend()
    return RedisService(settings.redis_url, default_ttl=settings.preference_ttl_seconds)


def create_translation_catalog(settings: Settings, detection: DetectionSettings) -> TranslationCatalog:
    """Translation catalog over the HTTP endpoint when configured, else the bundled files."""
    if settings.translations_base_url:
        backend = HttpTranslationBackend(
            settings.translations_base_url,
            timeout=settings.translation_timeout_seconds
        )
    else:
        backend = FileTranslationBackend(settings.translations_dir)

    return TranslationCatalog(
        backend,
        fallback_language=detection.fallback,
        max_workers=settings.translation_workers,
        placeholder=settings.missing_translation_placeholder
    )


def create_app(
    settings: Optional[Settings] = None,
    emergency_repository=None,
    preference_backend: Optional[PreferenceBackend] = None,
    translation_catalog: Optional[TranslationCatalog] = None,
    detection_settings: Optional[DetectionSettings] = None
) -> OpenAPI:
    """
    Create the Flask application.

    Collaborators not passed in are built from settings.

    Args:
        settings: Application settings, read from the environment by default
        emergency_repository: Source of emergency requests
        preference_backend: Backend of the per-client preference store
        translation_catalog: Translation resource cache
        detection_settings: Display language detection configuration

    Returns:
        Configured application
    """
    settings = settings or Settings.from_env()
    detection_settings = detection_settings or DetectionSettings()

    setup_observability(settings)

    app = OpenAPI(__name__, info=info)
    add_observability_middleware(app)

    app.config['ENVIRONMENT'] = settings.environment
    app.config['DEBUG'] = settings.environment == 'development'

    if emergency_repository is None:
        mongodb_service = MongoDBService(settings.mongodb_uri, settings.mongodb_database)
        emergency_repository = EmergencyRepository(mongodb_service)

    if preference_backend is None:
        preference_backend = create_preference_backend(settings)

    if translation_catalog is None:
        translation_catalog = create_translation_catalog(settings, detection_settings)

    preference_provider = PreferenceProvider(
        preference_backend,
        translation_catalog,
        detection_settings,
        secure_cookie=settings.is_production
    )
    preference_provider.init_app(app)

    ErrorHandlerMiddleware(app)

    # Make services available to routes
    app.settings = settings
    app.detection_settings = detection_settings
    app.emergency_repository = emergency_repository
    app.preference_backend = preference_backend
    app.translation_catalog = translation_catalog
    app.preference_provider = preference_provider

    from .routes.emergencies import emergencies_bp
    from .routes.preferences import preferences_bp
    from .routes.i18n import i18n_bp

    app.register_api(emergencies_bp)
    app.register_api(preferences_bp)
    app.register_api(i18n_bp)

    @app.get('/api/healthz', tags=[health_tag])
    def health_check():
        """Dependency health of the API."""
        dependencies = {}

        mongodb_service = getattr(emergency_repository, 'mongodb_service', None)
        if mongodb_service is not None:
            dependencies['mongodb'] = mongodb_service.health_check()

        if hasattr(preference_backend, 'health_check'):
            dependencies['preferences'] = preference_backend.health_check()

        unhealthy = [name for name, status in dependencies.items() if status.get('status') != 'healthy']
        status = 'unhealthy' if unhealthy else 'healthy'

        return jsonify({
            "status": status,
            "service": SERVICE_NAME,
            "version": settings.service_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": dependencies
        }), 503 if unhealthy else 200

    logger.info(
        "Application created",
        extra={"environment": settings.environment, "preference_backend": settings.preference_backend}
    )
    return app

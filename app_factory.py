"""
Application Factory

Creates and configures the Flask application with all dependencies.
Stores can be injected for tests; otherwise they are built from the
environment.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from droplink.application.dependency_container import DependencyContainer
from droplink.application.transfer_service import TransferService
from droplink.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from droplink.config.transfer_config import TransferConfig
from droplink.domain.file_storage import IBlobStore, IMetadataStore, MetadataManager
from droplink.infrastructure.redis_repository import RedisRepository
from droplink.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)

# Room for multipart boundaries and form fields on top of the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.storage_backend = os.getenv("STORAGE_BACKEND", "local").lower()
        self.metadata_enabled = os.getenv("METADATA_ENABLED", "true").lower() == "true"
        self.transfer = TransferConfig()


def create_app(
    config: Optional[AppConfig] = None,
    blob_store: Optional[IBlobStore] = None,
    metadata_store: Optional[IMetadataStore] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        blob_store: Blob store to use instead of the configured backend
        metadata_store: Metadata store to use instead of Redis

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = (
        config.transfer.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    )

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "expose_headers": ["Content-Type", "Content-Disposition", "ETag"],
                "max_age": 3600,
            }
        },
    )

    if blob_store is None:
        blob_store = _initialize_blob_store(config)
    if metadata_store is None and config.metadata_enabled:
        metadata_store = _initialize_metadata_store()

    _initialize_services(app, config, blob_store, metadata_store)
    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_blob_store(config: AppConfig) -> Optional[IBlobStore]:
    """
    Build the configured blob store.

    A failure leaves the app running without one; transfer operations then
    fail fast with a store-unavailable error.
    """
    try:
        return StorageFactory.create_storage(config.storage_backend)
    except (ValueError, RuntimeError) as e:
        logger.error(f"Blob store unavailable: {e}")
        return None


def _initialize_metadata_store() -> Optional[IMetadataStore]:
    """
    Connect the Redis metadata store.

    Runs without metadata when Redis cannot be reached: files stay
    downloadable by key, without short links or expiration.
    """
    try:
        init_redis()
        if not redis_health_check():
            logger.warning("Redis is not reachable, running without metadata")
            return None
        logger.info("Redis initialized successfully")
        return get_redis_repository()
    except Exception as e:
        logger.warning(f"Could not initialize Redis, running without metadata: {e}")
        return None


def _initialize_services(
    app: Flask,
    config: AppConfig,
    blob_store: Optional[IBlobStore],
    metadata_store: Optional[IMetadataStore],
) -> None:
    """
    Wire stores and services into a DependencyContainer on the app.

    ``app.transfer_service`` is attached for direct access from request
    handlers.
    """
    container = DependencyContainer()

    metadata_manager = None
    if metadata_store is not None:
        container.register_singleton(IMetadataStore, metadata_store)
        metadata_manager = MetadataManager(metadata_store)
        container.register_singleton(MetadataManager, metadata_manager)

    if blob_store is not None:
        container.register_singleton(IBlobStore, blob_store)

    transfer_service = TransferService(blob_store, metadata_manager, config.transfer)
    container.register_singleton(TransferService, transfer_service)
    container.register_singleton(TransferConfig, config.transfer)

    app.container = container
    app.transfer_service = transfer_service

    logger.info(
        f"Services initialized (blob_store={type(blob_store).__name__ if blob_store else None}, "
        f"metadata={'enabled' if metadata_manager else 'disabled'})"
    )


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    from droplink.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the blob store and Redis.

    Missing metadata only degrades the service; a missing blob store makes
    it unhealthy.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "blob_store": "unknown",
        "redis": "unknown",
    }

    container = app.container
    if container.is_registered(IBlobStore):
        health_status["blob_store"] = type(container.resolve(IBlobStore)).__name__
    else:
        health_status["blob_store"] = "unavailable"
        health_status["status"] = "unhealthy"

    if not container.is_registered(MetadataManager):
        health_status["redis"] = "disabled"
        if health_status["status"] == "ok":
            health_status["status"] = "degraded"
    elif not isinstance(container.resolve(IMetadataStore), RedisRepository):
        health_status["redis"] = "not_used"
    else:
        try:
            if redis_health_check():
                health_status["redis"] = "connected"
            else:
                health_status["redis"] = "disconnected"
                if health_status["status"] == "ok":
                    health_status["status"] = "degraded"
        except Exception as e:
            health_status["redis"] = f"error: {str(e)}"
            if health_status["status"] == "ok":
                health_status["status"] = "degraded"

    status_code = 503 if health_status["status"] == "unhealthy" else 200
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """Health check of the application and its stores."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code

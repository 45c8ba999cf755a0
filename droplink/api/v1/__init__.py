"""
API v1 - DropLink REST API

Versioned file-transfer endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="DropLink API",
    description="Temporary file sharing with short links, expiration and one-time downloads",
    doc="/docs",  # Swagger UI at /api/v1/docs
    contact="DropLink Team",
    license="MIT",
)

# Namespaces import `api` for their models, so they come last
from .namespaces import files_ns, links_ns  # noqa: E402

api.add_namespace(files_ns, path="/files")
api.add_namespace(links_ns, path="/links")

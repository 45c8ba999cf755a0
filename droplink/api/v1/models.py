"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields, reqparse
from werkzeug.datastructures import FileStorage

from droplink.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

upload_parser = reqparse.RequestParser()
upload_parser.add_argument(
    "file", location="files", type=FileStorage, required=True, help="File to share"
)
upload_parser.add_argument(
    "expires_in_hours",
    location="form",
    type=float,
    required=False,
    help="Hours until the file expires (omit for no expiration)",
)

download_parser = reqparse.RequestParser()
download_parser.add_argument(
    "one_time",
    location="args",
    type=str,
    required=False,
    choices=("true", "false"),
    help="Delete the file after this download (defaults to server policy)",
)

share_request = api.model(
    "ShareRequest",
    {
        "expires_in_hours": fields.Float(
            required=False,
            description="Reset the expiration to this many hours from now",
            example=24,
            min=0,
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "key": fields.String(
            description="Primary key", example="1718000000000-k3j9x0ab-report.pdf"
        ),
        "short_key": fields.String(
            description="Short link key", example="aZ3kQ9xB", allow_null=True
        ),
        "filename": fields.String(description="Original filename"),
        "size": fields.Integer(description="Size in bytes"),
        "content_type": fields.String(description="Stored content type"),
        "uploaded_at": fields.String(description="Upload time (ISO timestamp)"),
        "expires_at": fields.String(
            description="Expiration time (ISO timestamp)", allow_null=True
        ),
        "etag": fields.String(description="Entity tag of the stored object"),
        "download_url": fields.String(description="Download URL by key"),
        "short_url": fields.String(
            description="Download URL by short key", allow_null=True
        ),
    },
)

file_listing = api.model(
    "FileListing",
    {
        "key": fields.String(description="Primary key"),
        "filename": fields.String(description="Original filename"),
        "size": fields.Integer(description="Size in bytes"),
        "uploaded_at": fields.String(description="Upload time (ISO timestamp)"),
        "etag": fields.String(description="Entity tag"),
        "short_key": fields.String(description="Short link key", allow_null=True),
        "expires_at": fields.String(
            description="Expiration time (ISO timestamp)", allow_null=True
        ),
        "download_count": fields.Integer(
            description="Downloads so far", allow_null=True
        ),
        "has_metadata": fields.Boolean(description="Whether metadata was found"),
    },
)

file_list_response = api.model(
    "FileListResponse",
    {
        "files": fields.List(fields.Nested(file_listing), description="Stored files"),
        "count": fields.Integer(description="Number of files"),
    },
)

file_record_response = api.model(
    "FileRecordResponse",
    {
        "key": fields.String(description="Primary key"),
        "short_key": fields.String(description="Short link key", allow_null=True),
        "filename": fields.String(description="Original filename"),
        "size": fields.Integer(description="Size in bytes"),
        "uploaded_at": fields.String(description="Upload time (ISO timestamp)"),
        "expires_at": fields.String(
            description="Expiration time (ISO timestamp)", allow_null=True
        ),
        "download_count": fields.Integer(description="Downloads so far"),
        "last_accessed": fields.String(
            description="Last download time (ISO timestamp)", allow_null=True
        ),
        "download_url": fields.String(description="Download URL by short key"),
    },
)

delete_response = api.model(
    "DeleteResponse",
    {
        "key": fields.String(description="Primary key"),
        "deleted": fields.Boolean(description="Whether anything existed"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested action"),
    },
)

"""
API Namespaces - Organized endpoint groups
"""

import math
from io import BytesIO
from typing import Optional

from flask import current_app, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from droplink.api.v1.models import (
    delete_response,
    download_parser,
    error_response,
    file_list_response,
    file_record_response,
    share_request,
    upload_parser,
    upload_response,
)
from droplink.domain.errors import (
    BlobStoreError,
    DomainError,
    ErrorCategory,
    FileExpiredError,
    MetadataStoreError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
    create_error_response,
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _domain_error_response(
    error: DomainError,
    tag: str,
    identifier: str,
    not_found: ErrorCategory = ErrorCategory.FILE_NOT_FOUND,
):
    """Map a domain exception to a structured error response."""
    if isinstance(error, ValidationError):
        status_code = 413 if error.category == ErrorCategory.FILE_TOO_LARGE else 400
        current_app.logger.info(f"[{tag}] Rejected {identifier[:8]}: {error}")
        return create_error_response(error.category, str(error), status_code=status_code)

    if isinstance(error, NotFoundError):
        current_app.logger.info(f"[{tag}] Not found: {identifier[:8]}")
        return create_error_response(not_found, str(error), status_code=404)

    if isinstance(error, FileExpiredError):
        current_app.logger.info(f"[{tag}] Expired: {identifier[:8]}")
        return create_error_response(
            ErrorCategory.FILE_EXPIRED, str(error), status_code=410
        )

    if isinstance(error, StoreUnavailableError):
        current_app.logger.error(f"[{tag}] {error}")
        return create_error_response(
            ErrorCategory.STORE_UNAVAILABLE, str(error), status_code=500
        )

    if isinstance(error, (BlobStoreError, MetadataStoreError)):
        current_app.logger.error(
            f"[{tag}] Store failure for {identifier[:8]}: {error}", exc_info=True
        )
    else:
        current_app.logger.exception(f"[{tag}] Unexpected domain error: {error}")
    return create_error_response(ErrorCategory.SYSTEM_ERROR, str(error), status_code=500)


def _unexpected_error_response(error: Exception, tag: str):
    current_app.logger.exception(f"[{tag}] Unexpected error: {str(error)}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR, f"Internal server error: {str(error)}", status_code=500
    )


def _parse_hours(value) -> Optional[float]:
    """
    Parse an ``expires_in_hours`` value from form or JSON input.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("expires_in_hours must be a number")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError("expires_in_hours must be a number")
    if not math.isfinite(hours):
        raise ValidationError("expires_in_hours must be a finite number")
    return hours


def _parse_one_time(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValidationError("one_time must be 'true' or 'false'")


def _serve(served):
    response = send_file(
        BytesIO(served.content),
        mimetype=served.content_type,
        as_attachment=True,
        download_name=served.filename,
        etag=served.etag or False,
        conditional=False,
    )
    response.headers.update(NO_CACHE_HEADERS)
    return response


# =============================================================================
# Files Namespace - Upload, download, delete and listing
# =============================================================================

files_ns = Namespace("files", description="File transfer operations")


@files_ns.route("/")
class FileCollection(Resource):
    """Stored files"""

    @files_ns.doc("list_files")
    @files_ns.response(200, "Success", file_list_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self):
        """
        List stored files

        Newest first. Expired files are omitted; files without metadata are
        listed with the filename derived from their key.
        """
        try:
            listings = current_app.transfer_service.list_files()
            files = [listing.to_dict() for listing in listings]
            return {"files": files, "count": len(files)}, 200
        except DomainError as e:
            return _domain_error_response(e, "LIST_FILES_V1", "")
        except Exception as e:
            return _unexpected_error_response(e, "LIST_FILES_V1")

    @files_ns.doc("upload_file")
    @files_ns.expect(upload_parser)
    @files_ns.response(201, "File stored", upload_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(413, "File Too Large", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Upload a file

        Accepts multipart form data with a ``file`` part and an optional
        ``expires_in_hours`` field. Returns the primary key and, when short
        links are enabled, a short key.
        """
        try:
            upload = request.files.get("file")
            expires_in_hours = _parse_hours(request.form.get("expires_in_hours"))
        except RequestEntityTooLarge:
            current_app.logger.info("[UPLOAD_V1] Request body exceeds the upload limit")
            return create_error_response(
                ErrorCategory.FILE_TOO_LARGE, "Request body too large", status_code=413
            )
        except ValidationError as e:
            return _domain_error_response(e, "UPLOAD_V1", "")

        if upload is None:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "Missing 'file' in multipart form data",
                status_code=400,
            )

        try:
            content = upload.read()
            result = current_app.transfer_service.ingest(
                content,
                upload.filename or "",
                content_type=upload.mimetype or None,
                expires_in_hours=expires_in_hours,
            )

            body = result.to_dict()
            body["download_url"] = self.api.url_for(FileItem, identifier=result.key)
            body["short_url"] = (
                self.api.url_for(ShortLinkDownload, short_key=result.short_key)
                if result.short_key
                else None
            )
            current_app.logger.info(
                f"[UPLOAD_V1] Stored {result.filename} as {result.key[:8]}..."
            )
            return body, 201
        except DomainError as e:
            return _domain_error_response(e, "UPLOAD_V1", upload.filename or "")
        except Exception as e:
            return _unexpected_error_response(e, "UPLOAD_V1")


@files_ns.route("/<string:identifier>")
@files_ns.param("identifier", "Primary key or short key")
class FileItem(Resource):
    """A stored file"""

    @files_ns.doc("download_file")
    @files_ns.expect(download_parser)
    @files_ns.response(200, "File content")
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self, identifier):
        """
        Download a file

        Resolves short keys first, then primary keys. One-time downloads
        delete the file after it is read.
        """
        try:
            one_time = _parse_one_time(request.args.get("one_time"))
            current_app.logger.debug(
                f"[DOWNLOAD_FILE_V1] Resolving {identifier[:8]}... (one_time={one_time})"
            )
            served = current_app.transfer_service.resolve_and_serve(
                identifier, one_time=one_time
            )
            current_app.logger.info(
                f"[DOWNLOAD_FILE_V1] Serving {served.filename} for {identifier[:8]}"
            )
            return _serve(served)
        except DomainError as e:
            return _domain_error_response(e, "DOWNLOAD_FILE_V1", identifier)
        except Exception as e:
            return _unexpected_error_response(e, "DOWNLOAD_FILE_V1")

    @files_ns.doc("delete_file")
    @files_ns.response(200, "File deleted", delete_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def delete(self, identifier):
        """
        Delete a file and its metadata

        Succeeds when the file is already gone, including expired files.
        """
        try:
            deleted = current_app.transfer_service.purge(identifier)
            current_app.logger.info(
                f"[DELETE_FILE_V1] Purged {identifier[:8]}... (existed={deleted})"
            )
            return {"key": identifier, "deleted": deleted}, 200
        except DomainError as e:
            return _domain_error_response(e, "DELETE_FILE_V1", identifier)
        except Exception as e:
            return _unexpected_error_response(e, "DELETE_FILE_V1")


@files_ns.route("/<string:key>/share")
@files_ns.param("key", "Primary key")
class FileShare(Resource):
    """Short link management"""

    @files_ns.doc("create_share_link")
    @files_ns.expect(share_request)
    @files_ns.response(201, "Share link created", file_record_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self, key):
        """
        Create a new short link for a file

        Replaces any previous short link. ``expires_in_hours`` resets the
        expiration relative to now.
        """
        try:
            data = request.get_json(silent=True) or {}
            if not isinstance(data, dict):
                raise ValidationError("Request body must be a JSON object")
            expires_in_hours = _parse_hours(data.get("expires_in_hours"))

            record = current_app.transfer_service.create_share_link(
                key, expires_in_hours=expires_in_hours
            )
            return _record_body(self.api, record), 201
        except DomainError as e:
            return _domain_error_response(e, "SHARE_FILE_V1", key)
        except Exception as e:
            return _unexpected_error_response(e, "SHARE_FILE_V1")


# =============================================================================
# Links Namespace - Short link resolution
# =============================================================================

links_ns = Namespace("links", description="Short link operations")


def _record_body(api, record) -> dict:
    body = record.to_dict()
    body["download_url"] = (
        api.url_for(ShortLinkDownload, short_key=record.short_key)
        if record.short_key
        else api.url_for(FileItem, identifier=record.key)
    )
    return body


@links_ns.route("/<string:short_key>")
@links_ns.param("short_key", "Short link key")
class ShortLink(Resource):
    """Short link details"""

    @links_ns.doc("get_short_link")
    @links_ns.response(200, "Success", file_record_response)
    @links_ns.response(404, "Short Link Not Found", error_response)
    @links_ns.response(410, "File Expired", error_response)
    @links_ns.response(500, "Internal Server Error", error_response)
    def get(self, short_key):
        """
        Describe the file behind a short link

        Does not count as a download.
        """
        try:
            record = current_app.transfer_service.get_short_link_info(short_key)
            return _record_body(self.api, record), 200
        except DomainError as e:
            return _domain_error_response(
                e, "SHORT_LINK_V1", short_key, ErrorCategory.SHORT_LINK_NOT_FOUND
            )
        except Exception as e:
            return _unexpected_error_response(e, "SHORT_LINK_V1")


@links_ns.route("/<string:short_key>/download")
@links_ns.param("short_key", "Short link key")
class ShortLinkDownload(Resource):
    """One-time download through a short link"""

    @links_ns.doc("download_short_link")
    @links_ns.response(200, "File content")
    @links_ns.response(404, "Short Link Not Found", error_response)
    @links_ns.response(410, "File Expired", error_response)
    @links_ns.response(500, "Internal Server Error", error_response)
    def get(self, short_key):
        """
        Download a file through its short link

        Always a one-time download.
        """
        try:
            served = current_app.transfer_service.resolve_and_serve(
                short_key, one_time=True
            )
            current_app.logger.info(
                f"[SHORT_LINK_DOWNLOAD_V1] Serving {served.filename} for {short_key}"
            )
            return _serve(served)
        except DomainError as e:
            return _domain_error_response(
                e, "SHORT_LINK_DOWNLOAD_V1", short_key, ErrorCategory.SHORT_LINK_NOT_FOUND
            )
        except Exception as e:
            return _unexpected_error_response(e, "SHORT_LINK_DOWNLOAD_V1")

# careerspage/services/assets.py

import base64
import binascii
import logging
import mimetypes
import os
import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from careerspage.core.errors import StorageMisconfigured, UpstreamError, ValidationError
from careerspage.core.responses import success_response
from careerspage.db.models import utcnow
from careerspage.schemas import company_to_dict
from careerspage.services.ownership import require_company_owner
from careerspage.services.persistence import HandlerContext, commit_or_raise, translate_db_error
from careerspage.storage.db_binary import BucketNotFoundError, path_from_public_url

logger = logging.getLogger(__name__)

# branding key -> storage folder
ASSET_FOLDERS = {"logo": "logos", "banner": "banners"}


def decode_file_payload(file: Any) -> bytes:
    """Accepts a data URL, a bare base64 string, a list of byte values or raw bytes."""
    if isinstance(file, (bytes, bytearray)):
        return bytes(file)
    if isinstance(file, list):
        try:
            return bytes(file)
        except (TypeError, ValueError):
            raise ValidationError("File byte list must contain integers between 0 and 255")
    if isinstance(file, str):
        encoded = file.split(",", 1)[1] if file.startswith("data:") else file
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("File must be a data URL or base64-encoded content")
    raise ValidationError("Unsupported file payload")


def build_asset_path(company_slug: str, kind: str, filename: str | None) -> str:
    """companies/{slug}/{logos|banners}/{epoch_ms}-{kind}{ext}"""
    ext = os.path.splitext(filename or "")[1].lower() or ".png"
    return f"companies/{company_slug}/{ASSET_FOLDERS[kind]}/{int(time.time() * 1000)}-{kind}{ext}"


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "image/png"


def upload_asset(kind: str, payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Stores a logo/banner and points the company's branding at its public URL."""
    company_slug = payload.get("companySlug")
    file = payload.get("file")
    if not company_slug or not file:
        raise ValidationError("Company slug and file are required")

    company = require_company_owner(ctx.db, company_slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)

    content = decode_file_payload(file)
    if not content:
        raise ValidationError("Cannot upload an empty file")
    if len(content) > ctx.settings.MAX_FILE_SIZE:
        raise ValidationError(f"File exceeds the maximum size of {ctx.settings.MAX_FILE_SIZE} bytes")

    bucket = ctx.settings.STORAGE_BUCKET
    file_path = build_asset_path(company_slug, kind, payload.get("filename"))

    try:
        ctx.storage.upload(bucket, file_path, content, guess_content_type(file_path), upsert=True)
    except BucketNotFoundError as e:
        ctx.db.rollback()
        logger.error(f"UPLOAD_{kind.upper()}: {e}")
        raise StorageMisconfigured(
            f"Storage bucket not found. Create the '{bucket}' bucket before uploading assets",
            details=str(e),
        )
    except SQLAlchemyError as e:
        ctx.db.rollback()
        raise translate_db_error(e, f"upload {kind}")

    url = ctx.storage.get_public_url(bucket, file_path)
    logger.info(f"UPLOAD_{kind.upper()}: Generated {kind} URL: {url}")

    company.branding = {**(company.branding or {}), kind: url}
    company.updated_at = utcnow()
    commit_or_raise(ctx.db, "update company branding")
    ctx.db.refresh(company)

    return success_response(
        {f"{kind}Url": url, "filePath": file_path, "company": company_to_dict(company)},
        f"{kind.capitalize()} uploaded successfully",
    )


def _remove_blob_best_effort(ctx: HandlerContext, url: str | None, kind: str) -> bool:
    """Removes the stored file behind a branding URL. Failures are logged, never raised."""
    if not url:
        return False
    bucket = ctx.settings.STORAGE_BUCKET
    file_path = path_from_public_url(url, bucket)
    if file_path is None:
        logger.info(f"DELETE_{kind.upper()}: {url} is not stored in '{bucket}', nothing to remove")
        return False
    try:
        # Savepoint so a storage failure cannot poison the branding update
        with ctx.db.begin_nested():
            removed = ctx.storage.remove(bucket, [file_path])
        return removed > 0
    except Exception as e:
        logger.error(f"DELETE_{kind.upper()}: Error deleting {kind} file '{file_path}': {e}", exc_info=True)
        return False


def delete_asset(kind: str, payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    company_slug = payload.get("companySlug")
    if not company_slug:
        raise ValidationError("Company slug is required")

    company = require_company_owner(ctx.db, company_slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)
    branding = company.branding or {}
    removed = _remove_blob_best_effort(ctx, branding.get(kind), kind)

    company.branding = {**branding, kind: None}
    company.updated_at = utcnow()
    try:
        commit_or_raise(ctx.db, f"delete {kind}")
    except UpstreamError:
        logger.error(f"DELETE_{kind.upper()}: Failed to clear {kind} for '{company_slug}'")
        raise
    ctx.db.refresh(company)

    return success_response(
        {"company": company_to_dict(company), "fileRemoved": removed},
        f"{kind.capitalize()} deleted successfully",
    )


def upload_logo(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    return upload_asset("logo", payload, ctx)


def upload_banner(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    return upload_asset("banner", payload, ctx)


def delete_logo(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    return delete_asset("logo", payload, ctx)


def delete_banner(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    return delete_asset("banner", payload, ctx)

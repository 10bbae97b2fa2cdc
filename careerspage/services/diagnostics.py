# careerspage/services/diagnostics.py

import logging
import time
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from careerspage.core.errors import NotFound, UpstreamError
from careerspage.core.responses import success_response
from careerspage.db.models import Company
from careerspage.services.persistence import HandlerContext

logger = logging.getLogger(__name__)


def test_connection(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Counts companies to prove the database is reachable and the table exists."""
    try:
        count = ctx.db.scalar(select(func.count()).select_from(Company))
    except SQLAlchemyError as e:
        logger.error(f"TEST_CONNECTION: {e}", exc_info=True)
        raise UpstreamError("Failed to connect to database", details=str(e))
    return success_response({"tableExists": True, "companyCount": count}, "Database connection successful")


def test_storage(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """
    Walks the asset bucket through list, upload, public URL and remove.

    The test object never outlives the request: it is removed and the
    session rolled back whatever happens.
    """
    bucket_name = ctx.settings.STORAGE_BUCKET
    storage = ctx.storage

    buckets = storage.list_buckets()
    bucket = next((b for b in buckets if b.name == bucket_name), None)
    if bucket is None:
        raise NotFound(
            f"Bucket '{bucket_name}' not found",
            extra={
                "availableBuckets": [b.name for b in buckets],
                "instructions": f"Create the '{bucket_name}' bucket before uploading assets",
            },
        )

    test_path = f"test/test-{int(time.time() * 1000)}.txt"
    try:
        storage.upload(bucket_name, test_path, b"This is a test file", "text/plain")
        test_url = storage.get_public_url(bucket_name, test_path)
        storage.remove(bucket_name, [test_path])
    except SQLAlchemyError as e:
        logger.error(f"TEST_STORAGE: Test upload failed: {e}", exc_info=True)
        raise UpstreamError("Cannot upload to bucket", details=str(e))
    finally:
        ctx.db.rollback()

    logger.info(f"TEST_STORAGE: Bucket '{bucket_name}' OK (public={bucket.public})")
    return success_response(
        {
            "bucket": {"name": bucket_name, "public": bucket.public},
            "testUrl": test_url,
            "instructions": (
                "Bucket is public - files should be accessible"
                if bucket.public
                else f"Bucket '{bucket_name}' is NOT public. Mark it public to serve assets."
            ),
        },
        "Storage configuration is working",
    )

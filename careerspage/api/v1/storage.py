# careerspage/api/v1/storage.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from careerspage.db.database import get_db
from careerspage.storage.db_binary import PUBLIC_OBJECT_PREFIX, BucketNotFoundError, DatabaseBlobStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix=PUBLIC_OBJECT_PREFIX, tags=["storage"])


@router.get("/{bucket}/{path:path}")
def read_public_object(bucket: str, path: str, request: Request, db: Session = Depends(get_db)):
    """Serves a stored logo/banner by the public URL handed out at upload time."""
    storage = DatabaseBlobStorage(db, request.app.state.settings.PUBLIC_BASE_URL)
    try:
        found_bucket = storage.get_bucket(bucket)
    except BucketNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")

    # Private buckets are not served at all
    if not found_bucket.public:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")

    record = storage.download(bucket, path)
    if record is None:
        logger.info(f"DB-STORAGE: Public read miss for '{bucket}/{path}'")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")

    return Response(
        content=record.content,
        media_type=record.content_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )

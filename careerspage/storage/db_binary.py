import logging
import re
from urllib.parse import unquote, urlparse

from sqlalchemy import select
from sqlalchemy.orm import Session

from careerspage.db.models import StorageBucket, StoredObject, utcnow

logger = logging.getLogger(__name__)

PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public"


class StorageError(Exception):
    """Base exception for blob storage failures."""
    pass


class BucketNotFoundError(StorageError):
    pass


class ObjectExistsError(StorageError):
    pass


class DatabaseBlobStorage:
    """
    Bucket/path blob store kept in the application database.

    Writes are staged on the caller's session and flushed, never committed:
    the CALLER is responsible for db.commit() or db.rollback(), so an upload
    and the row that references it land in the same transaction.
    """

    def __init__(self, db: Session, public_base_url: str):
        self.db = db
        self.public_base_url = public_base_url.rstrip("/")

    def list_buckets(self) -> list[StorageBucket]:
        return list(self.db.scalars(select(StorageBucket).order_by(StorageBucket.name)))

    def get_bucket(self, bucket: str) -> StorageBucket:
        found = self.db.get(StorageBucket, bucket)
        if found is None:
            raise BucketNotFoundError(f"Bucket not found: {bucket}")
        return found

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> StoredObject:
        """Stores content under bucket/path and returns the flushed record."""
        if not content:
            raise ValueError("File content cannot be empty")
        self.get_bucket(bucket)

        logger.info(f"DB-STORAGE: Staging upload of '{bucket}/{path}' ({len(content)} bytes).")

        existing = self.download(bucket, path)
        if existing is not None:
            if not upsert:
                raise ObjectExistsError(f"Object already exists: {bucket}/{path}")
            existing.content = content
            existing.content_type = content_type
            existing.size = len(content)
            existing.updated_at = utcnow()
            self.db.flush()
            return existing

        record = StoredObject(
            bucket=bucket,
            path=path,
            content=content,
            content_type=content_type,
            size=len(content),
        )
        self.db.add(record)
        self.db.flush()

        logger.info(f"DB-STORAGE: Flushed '{bucket}/{path}'. Assigned provisional ID: {record.id}")
        return record

    def download(self, bucket: str, path: str) -> StoredObject | None:
        return self.db.scalars(
            select(StoredObject).where(StoredObject.bucket == bucket, StoredObject.path == path)
        ).first()

    def remove(self, bucket: str, paths: list[str]) -> int:
        """Deletes the given objects; returns how many existed."""
        removed = 0
        for path in paths:
            record = self.download(bucket, path)
            if record is None:
                logger.warning(f"DB-STORAGE: Nothing to remove at '{bucket}/{path}'.")
                continue
            self.db.delete(record)
            removed += 1
        self.db.flush()
        logger.info(f"DB-STORAGE: Removed {removed} object(s) from bucket '{bucket}'.")
        return removed

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}{PUBLIC_OBJECT_PREFIX}/{bucket}/{path}"


def path_from_public_url(url: str, bucket: str) -> str | None:
    """Recovers the object path from a public URL, or None if it is not one of ours."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    match = re.search(rf"{re.escape(PUBLIC_OBJECT_PREFIX)}/{re.escape(bucket)}/(.+)$", parsed.path)
    if not match:
        return None
    return unquote(match.group(1))

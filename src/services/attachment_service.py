"""Persistence for generated file attachments.

Attachments are immutable once stored. The client view carries the file
inline as base64 when it is small enough and always carries a download URL.
"""

import base64
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import FileAttachment, generate_uuid
from src.errors.domain import NotFoundError, PersistenceFailure
from src.services.file_export import EncodedFile

logger = logging.getLogger(__name__)

DEFAULT_INLINE_MAX_BYTES = 1024 * 1024
DOWNLOAD_URL_TEMPLATE = "/api/v1/files/{file_id}"


def attachment_payload(
    record: FileAttachment, inline_max_bytes: int = DEFAULT_INLINE_MAX_BYTES
) -> dict[str, Any]:
    """Build the client-facing view of an attachment.

    Args:
        record: Stored attachment.
        inline_max_bytes: Largest file embedded as content_base64.

    Returns:
        Dict with id, filename, mime, size, content_base64, download_url.
    """
    content_base64 = None
    if record.size <= inline_max_bytes:
        content_base64 = base64.b64encode(record.data).decode("ascii")
    return {
        "id": record.id,
        "filename": record.filename,
        "mime": record.mime,
        "size": record.size,
        "content_base64": content_base64,
        "download_url": DOWNLOAD_URL_TEMPLATE.format(file_id=record.id),
    }


class AttachmentService:
    """Store and read generated files.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def store(self, encoded: EncodedFile, message_id: str | None) -> FileAttachment:
        """Persist an encoded file, optionally tied to a message.

        Raises:
            PersistenceFailure: If the insert fails.
        """
        record = FileAttachment(
            id=generate_uuid(),
            filename=encoded.filename,
            mime=encoded.mime,
            size=encoded.size,
            data=encoded.data,
            message_id=message_id,
        )
        try:
            self._db.add(record)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceFailure("store attachment", e) from e
        logger.info(
            "Stored attachment %s (%s, %d bytes) for message %s",
            record.id,
            record.mime,
            record.size,
            message_id,
        )
        return record

    def get(self, file_id: str) -> FileAttachment:
        """Return an attachment.

        Raises:
            NotFoundError: If no file has that id.
        """
        record = self._db.get(FileAttachment, file_id)
        if record is None:
            raise NotFoundError("File", file_id)
        return record

    def list_for_messages(self, message_ids: list[str]) -> dict[str, list[FileAttachment]]:
        """Group attachments by owning message id, oldest first."""
        if not message_ids:
            return {}
        rows = self._db.execute(
            select(FileAttachment)
            .where(FileAttachment.message_id.in_(message_ids))
            .order_by(FileAttachment.created_at)
        ).scalars()
        grouped: dict[str, list[FileAttachment]] = {}
        for row in rows:
            grouped.setdefault(row.message_id, []).append(row)
        return grouped

"""API route for downloading generated file attachments."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from src.db.connection import get_db
from src.services.attachment_service import AttachmentService

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{file_id}")
def download_file(file_id: str, db: Session = Depends(get_db)) -> Response:
    """Return the stored bytes as an attachment download.

    Raises:
        NotFoundError: If no file has that id.
    """
    record = AttachmentService(db).get(file_id)
    return Response(
        content=record.data,
        media_type=record.mime,
        headers={"Content-Disposition": f'attachment; filename="{record.filename}"'},
    )

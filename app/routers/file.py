# app/routers/file.py
import logging
import os
import shutil
from uuid import uuid4
from typing import List, Optional

from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from sqlalchemy.orm import Session

from app.core import config, files_api
from app.core.access import get_owned_file, get_owned_project
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.file import (
    File as FileModel,  # Alias to avoid conflict with fastapi's `File`
    FILE_STATUS_ERROR,
    FILE_STATUS_PROCESSED,
    FILE_STATUS_UPLOADING,
)
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.file import FileContentData, FileListData, FileResponse, FileUploadData, FileUploadError

logger = logging.getLogger(__name__)

router = APIRouter()

REMOTE_UPLOAD_ERROR = "Failed to upload to OpenAI"

def is_supported_file(filename: str, mime_type: Optional[str]) -> bool:
    """A file is accepted if either its MIME type or its extension is on the allow-list."""
    ext = os.path.splitext(filename or "")[1].lower()
    return (mime_type or "") in config.ALLOWED_MIME_TYPES or ext in config.ALLOWED_EXTENSIONS

def _remove_staged(file_path: str) -> None:
    if os.path.exists(file_path):
        os.remove(file_path)

def _upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size

@router.post("/projects/{project_id}/upload", response_model=Envelope[FileUploadData])
def upload_files(
    project_id: str,
    files: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Upload up to MAX_FILES_PER_UPLOAD files to a project.

    The whole batch is rejected before anything is stored if it has too many
    files, an unsupported file or a file over MAX_FILE_SIZE. Otherwise, for each file:
      - the bytes are staged in UPLOAD_DIRECTORY,
      - a record is created with status "uploading",
      - the file is pushed to the Files API and the record becomes
        "processed" (with its openaiFileId) or "error",
      - the staged copy is removed.

    A failed remote upload keeps the record, with status "error".
    Runs in the threadpool: the Files API call blocks for up to its timeout.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files provided")
    if len(files) > config.MAX_FILES_PER_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. At most {config.MAX_FILES_PER_UPLOAD} files per upload",
        )
    for upload in files:
        if not is_supported_file(upload.filename, upload.content_type):
            raise HTTPException(
                status_code=400,
                detail=f"File type not supported: {upload.filename}. "
                       f"Allowed types: {', '.join(config.ALLOWED_EXTENSIONS)}",
            )
        if _upload_size(upload) > config.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {upload.filename}. "
                       f"Maximum size is {config.MAX_FILE_SIZE // (1024 * 1024)}MB",
            )

    project = get_owned_project(db, current_user, project_id)
    os.makedirs(config.UPLOAD_DIRECTORY, exist_ok=True)

    uploaded_files = []
    errors = []

    for upload in files:
        file_id = str(uuid4())
        unique_filename = f"{file_id}_{os.path.basename(upload.filename)}"
        file_path = os.path.join(config.UPLOAD_DIRECTORY, unique_filename)

        try:
            # Save to disk
            upload.file.seek(0)
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
            size = os.path.getsize(file_path)

            file_record = FileModel(
                id=file_id,
                filename=unique_filename,
                original_name=upload.filename,
                mime_type=upload.content_type or "application/octet-stream",
                size=size,
                status=FILE_STATUS_UPLOADING,
                project_id=project.id,
            )
            db.add(file_record)
            db.commit()

            try:
                file_record.openai_file_id = files_api.upload_file(file_path, upload.filename)
                file_record.status = FILE_STATUS_PROCESSED
            except files_api.FilesAPIError as e:
                logger.error("Files API upload failed for %s: %s", upload.filename, e)
                file_record.status = FILE_STATUS_ERROR
                file_record.error_message = REMOTE_UPLOAD_ERROR
            db.commit()
            db.refresh(file_record)

            uploaded_files.append(FileResponse.model_validate(file_record))
        except Exception as e:
            logger.exception("File processing error for %s", upload.filename)
            db.rollback()
            errors.append(FileUploadError(filename=upload.filename, error=str(e)))
        finally:
            _remove_staged(file_path)

    return Envelope(
        message=f"{len(uploaded_files)} files uploaded successfully",
        data=FileUploadData(files=uploaded_files, errors=errors),
    )

@router.get("/projects/{project_id}/files", response_model=Envelope[FileListData])
def list_files(project_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    project = get_owned_project(db, current_user, project_id)
    files = (
        db.query(FileModel)
        .filter(FileModel.project_id == project.id)
        .order_by(FileModel.created_at.desc())
        .all()
    )
    return Envelope(data=FileListData(files=[FileResponse.model_validate(f) for f in files]))

@router.delete("/{file_id}", response_model=Envelope)
def delete_file(file_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Delete a file record. The remote copy is deleted best-effort: a Files API
    failure is logged and the local deletion still happens.
    """
    file_record = get_owned_file(db, current_user, file_id)

    if file_record.openai_file_id and files_api.is_configured():
        try:
            files_api.delete_file(file_record.openai_file_id)
        except files_api.FilesAPIError as e:
            logger.error("Failed to delete %s from Files API: %s", file_record.openai_file_id, e)

    db.delete(file_record)
    db.commit()
    return Envelope(message="File deleted successfully")

@router.get("/{file_id}/content", response_model=Envelope[FileContentData])
def get_file_content(file_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    file_record = get_owned_file(db, current_user, file_id)

    if not file_record.openai_file_id:
        raise HTTPException(status_code=400, detail="File not processed yet")

    try:
        content = files_api.get_file_content(file_record.openai_file_id)
    except files_api.FilesAPIError as e:
        logger.error("Failed to get file content for %s: %s", file_record.openai_file_id, e)
        raise HTTPException(status_code=500, detail="Failed to retrieve file content")

    return Envelope(
        data=FileContentData(
            content=content,
            filename=file_record.original_name,
            mime_type=file_record.mime_type,
        )
    )

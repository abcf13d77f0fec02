"""Resume upload storage; produces the opaque resume reference for sessions."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from api.dependencies import get_settings
from api.schemas import UploadResp
from config import Settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx")
CHUNK_SIZE = 1024 * 1024


def _upload_dir(cfg: Settings) -> Path:
    path = Path(cfg.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _stored_name(original: str) -> str:  # Millisecond prefix keeps names unique per upload
    safe = Path(original).name.replace(" ", "_")
    return f"{int(time.time() * 1000)}-{safe}"


@router.post("/uploadResume", response_model=UploadResp)
def upload_resume(
    resume: Optional[UploadFile] = File(default=None),
    cfg: Settings = Depends(get_settings),
) -> UploadResp:
    if resume is None or not resume.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    extension = Path(resume.filename).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Invalid file type. Only PDF and DOC files allowed.")
    filename = _stored_name(resume.filename)
    target = _upload_dir(cfg) / filename
    written = 0
    try:
        with target.open("wb") as handle:
            while chunk := resume.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > cfg.UPLOAD_MAX_BYTES:
                    raise HTTPException(status_code=413, detail="File too large")
                handle.write(chunk)
    except HTTPException:
        target.unlink(missing_ok=True)
        raise
    logger.info("Stored resume upload filename=%s bytes=%d", filename, written)
    return UploadResp(resumeUrl=f"/uploads/{filename}", filename=filename)


@router.get("/uploads/{filename}")
def fetch_upload(filename: str, cfg: Settings = Depends(get_settings)) -> FileResponse:
    path = _upload_dir(cfg) / Path(filename).name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)

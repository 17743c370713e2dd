from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from app.core.security import require_admin
from app import models
from app.schemas.uploads import UploadOut
from app.services.uploads import PdfUploadGate

router = APIRouter(tags=["magazine"])


def get_upload_gate(request: Request) -> PdfUploadGate:
    return request.app.state.pdf_upload_gate


@router.get("/magazine/current")
def get_current_magazine(gate: PdfUploadGate = Depends(get_upload_gate)):
    """serve the current weekly discount magazine"""
    path = gate.current_file()
    if path is None:
        raise HTTPException(status_code=404, detail="Kein Magazin vorhanden")
    return FileResponse(path, media_type=gate.ALLOWED_CONTENT_TYPE, filename=gate.FILENAME)


@router.post("/admin/magazine/upload", response_model=UploadOut)
async def upload_magazine(
    request: Request,
    gate: PdfUploadGate = Depends(get_upload_gate),
    _: models.Admin = Depends(require_admin),
):
    """upload the weekly discount magazine; replaces the current one"""
    # size check from the header before the multipart body is parsed
    gate.check_content_length(request.headers.get("content-length"))

    async with request.form(max_files=1) as form:
        file = form.get("file")
        if not isinstance(file, UploadFile):
            raise HTTPException(status_code=400, detail="Keine Datei hochgeladen")
        stored = await gate.accept_upload(file)

    return UploadOut(
        url=stored.url,
        filename=stored.filename,
        size=stored.size,
        mimetype=stored.content_type,
    )

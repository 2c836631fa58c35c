"""Multipart upload endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from barn_gateway.api.dependencies import get_container, require_identity, require_token
from barn_gateway.api.errors import session_error_response
from barn_gateway.api.models import CompleteUploadRequest, InitUploadRequest
from barn_gateway.containers import AppContainer
from barn_gateway.domain.errors import Err, Ok

router = APIRouter(
    prefix="/upload", tags=["uploads"], dependencies=[Depends(require_identity)]
)


@router.post("/init")
async def init_upload(
    body: InitUploadRequest,
    request: Request,
    token: str = Depends(require_token),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Start an upload and return the pre-signed part URLs."""
    result = await container.upload_orchestrator.init_upload(
        token,
        file_name=body.file_name,
        file_type=body.file_type,
        part_count=body.parts,
        title=body.title,
    )
    match result:
        case Ok(session):
            return JSONResponse(
                {
                    "success": True,
                    "data": {
                        "upload_id": session.upload_id,
                        "video_id": session.video_id,
                        "key": session.key,
                        "part_urls": [
                            {"part_number": part.part_number, "url": part.url}
                            for part in session.part_urls
                        ],
                    },
                }
            )
        case Err(error):
            return session_error_response(
                request, container.session_resolver, error
            )


@router.post("/complete")
async def complete_upload(
    body: CompleteUploadRequest,
    request: Request,
    token: str = Depends(require_token),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Assemble the uploaded parts into the final video object."""
    result = await container.upload_orchestrator.complete_upload(
        token,
        upload_id=body.upload_id,
        video_id=body.video_id,
        key=body.key,
        completed_parts=[part.to_domain() for part in body.completed_parts],
        issued_part_numbers=body.issued_parts,
    )
    match result:
        case Ok(upload):
            return JSONResponse(
                {
                    "success": True,
                    "video_id": upload.video_id,
                    "parts": upload.part_count,
                }
            )
        case Err(error):
            return session_error_response(
                request, container.session_resolver, error
            )

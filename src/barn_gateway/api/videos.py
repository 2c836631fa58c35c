"""Video catalog endpoints proxied to the API."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from barn_gateway.api.dependencies import get_container, require_identity, require_token
from barn_gateway.api.errors import error_response, session_error_response
from barn_gateway.containers import AppContainer
from barn_gateway.domain.errors import Err, Ok
from barn_gateway.domain.identity import Identity
from barn_gateway.domain.videos import VideoRecord

router = APIRouter(tags=["videos"])


def _video_body(video: VideoRecord) -> dict[str, str]:
    return {
        "id": video.id,
        "title": video.title,
        "status": video.status,
        "playlist": video.playlist_url,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


@router.get("/videos")
async def list_videos(
    channel: str | None = None,
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """List videos, optionally for a single channel."""
    match await container.video_client.list_videos(channel):
        case Ok(videos):
            return JSONResponse({"videos": [_video_body(video) for video in videos]})
        case Err(error):
            return error_response(error)


@router.get("/me/videos")
async def my_videos(
    identity: Identity = Depends(require_identity),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """List the signed-in user's videos."""
    match await container.video_client.list_videos(identity.username):
        case Ok(videos):
            return JSONResponse({"videos": [_video_body(video) for video in videos]})
        case Err(error):
            return error_response(error)


@router.get("/videos/{video_id}")
async def get_video(
    video_id: str, container: AppContainer = Depends(get_container)
) -> JSONResponse:
    """Return a single video."""
    match await container.video_client.get_video(video_id):
        case Ok(video):
            return JSONResponse(_video_body(video))
        case Err(error):
            return error_response(error)


@router.delete("/videos", dependencies=[Depends(require_identity)])
async def delete_videos(
    request: Request,
    ids: str = Query(alias="id"),
    token: str = Depends(require_token),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Delete a comma-separated list of videos."""
    video_ids = [value.strip() for value in ids.split(",") if value.strip()]
    match await container.video_client.delete_videos(video_ids, token):
        case Ok(_):
            return JSONResponse({"success": True})
        case Err(error):
            return session_error_response(
                request, container.session_resolver, error
            )

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST

from devblog import dependencies as deps
from devblog.routers.posts import to_http_error
from devblog.schemas.blog import ImageUpload, ImageUploadResponse
from devblog.services.posts_service import PostsService
from devblog.session import AuthSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/images", response_model=ImageUploadResponse, status_code=HTTP_201_CREATED
)
async def upload_image(
    upload: ImageUpload,
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    """
    Store a pasted image in the blog repository and return the Markdown
    that references it.
    """
    if not upload.content_type.startswith("image/"):
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Not an image")
    try:
        data = base64.b64decode(upload.data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="Image data is not base64"
        )
    if not data:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Image is empty")

    try:
        path = await service.upload_image(
            session.owner, upload.content_type, data, name=upload.name
        )
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to upload image")

    logger.debug(f"Uploaded {len(data)} bytes to {path}")
    return ImageUploadResponse(path=path, markdown=f"![image](/{path})")

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_502_BAD_GATEWAY,
)

from devblog import dependencies as deps
from devblog.exceptions import (
    EditConflictError,
    FileAlreadyExistsError,
    GitHubAPIError,
    InvalidRequestError,
    PostNotFoundError,
)
from devblog.schemas.blog import FolderRequest, Post, PostDraft
from devblog.services.posts_service import PostsService
from devblog.session import AuthSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[Post])
async def list_posts(
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get all posts, newest first."""
    try:
        return await service.list_posts(session.owner)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=Post)
async def get_post(
    slug: str,
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single post by slug."""
    try:
        return await service.get_post(session.owner, slug)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to retrieve post")


@router.post("/posts", response_model=Post, status_code=HTTP_201_CREATED)
async def create_post(
    draft: PostDraft,
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    new_draft = draft.model_copy(update={"slug": None, "sha": None})
    try:
        return await service.save_post(session.owner, new_draft)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to create post")


@router.put("/posts/{slug}", response_model=Post)
async def update_post(
    slug: str,
    draft: PostDraft,
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    if not draft.sha:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail="sha of the loaded post is required to update it",
        )
    try:
        return await service.save_post(
            session.owner, draft.model_copy(update={"slug": slug})
        )
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to update post")


@router.delete("/posts/{slug}", status_code=HTTP_204_NO_CONTENT)
async def delete_post(
    slug: str,
    sha: str = Query(..., min_length=1, description="sha of the loaded post"),
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        await service.delete_post(session.owner, slug, sha)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_error(e, "Failed to delete post")
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.post("/folders", status_code=HTTP_201_CREATED)
async def create_folder(
    folder: FolderRequest,
    session: AuthSession = Depends(deps.get_session),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Initialize a post folder with a README describing the post format."""
    try:
        path = await service.initialize_folder(session.owner, folder.name)
    except HTTPException:
        raise
    except FileAlreadyExistsError:
        raise HTTPException(
            status_code=HTTP_409_CONFLICT,
            detail=f"Folder {folder.name} is already initialized",
        )
    except Exception as e:
        raise to_http_error(e, "Failed to create folder")
    return {"path": path}


def to_http_error(error: Exception, detail: str) -> HTTPException:
    if isinstance(error, PostNotFoundError):
        return HTTPException(status_code=HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, EditConflictError):
        return HTTPException(
            status_code=HTTP_409_CONFLICT,
            detail="This post changed since it was loaded. Reload it and try again.",
        )
    if isinstance(error, FileAlreadyExistsError):
        return HTTPException(
            status_code=HTTP_409_CONFLICT,
            detail="A post with this title already exists",
        )
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, GitHubAPIError):
        logger.error(f"{detail}: {error}")
        if error.status_code == HTTP_401_UNAUTHORIZED:
            return HTTPException(
                status_code=HTTP_401_UNAUTHORIZED,
                detail="GitHub session expired, please sign in again",
            )
        return HTTPException(
            status_code=HTTP_502_BAD_GATEWAY, detail="GitHub request failed"
        )

    logger.error(f"Unexpected error: {detail}: {error}")
    return HTTPException(status_code=500, detail=detail)

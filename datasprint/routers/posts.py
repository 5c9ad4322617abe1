from fastapi import APIRouter, Depends, status

from datasprint.models.user import UserEntry
from datasprint.routers.deps import get_current_user
from datasprint.schemas.otp import MessageResponse
from datasprint.schemas.posts import (
    PostCreate,
    PostEnvelope,
    PostListResponse,
    PostUpdate,
    PostWriteResponse,
)
from datasprint.services.posts import post_store

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListResponse)
def list_posts() -> PostListResponse:
    posts = post_store.list_published()
    return PostListResponse(posts=posts, count=len(posts))


@router.get("/{post_id}", response_model=PostEnvelope)
def get_post(post_id: str) -> PostEnvelope:
    return PostEnvelope(post=post_store.get(post_id))


@router.post("", response_model=PostWriteResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate, _: UserEntry = Depends(get_current_user)
) -> PostWriteResponse:
    return PostWriteResponse(
        message="Post created successfully", post=post_store.create(payload)
    )


@router.put("/{post_id}", response_model=PostWriteResponse)
def update_post(
    post_id: str, payload: PostUpdate, _: UserEntry = Depends(get_current_user)
) -> PostWriteResponse:
    return PostWriteResponse(
        message="Post updated successfully", post=post_store.update(post_id, payload)
    )


@router.delete("/{post_id}", response_model=MessageResponse, response_model_exclude_none=True)
def delete_post(post_id: str, _: UserEntry = Depends(get_current_user)) -> MessageResponse:
    post_store.delete(post_id)
    return MessageResponse(message="Post deleted successfully")

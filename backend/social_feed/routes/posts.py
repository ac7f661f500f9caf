from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from ..auth import bearer_scheme, get_current_user, get_viewer_id, resolve_feed_viewer
from ..config import Settings
from ..database import get_db_async, get_settings
from ..errors import NotFoundError, ValidationError
from ..feed import fetch_author_posts, fetch_feed, fetch_personalized_feed, fetch_post, parse_flag, to_post_out
from ..interactions import add_comment, list_comments, toggle_like
from ..models import Post, User
from ..schemas import CommentIn, FeedPage, LikeOut, PostId, UserId
from ..storage import MediaStore, get_media_store

router = APIRouter(prefix="/posts", tags=["posts"])

# Pagination arrives as raw strings so bad values can be clamped instead of rejected
@router.get("", response_model=FeedPage)
async def get_feed(
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    following: str | None = Query(None),
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_async),
    settings: Settings = Depends(get_settings),
):
    if parse_flag(following):
        viewer_id = resolve_feed_viewer(creds, settings)
        return await fetch_personalized_feed(db, viewer_id, limit, offset)
    return await fetch_feed(db, limit, offset)

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    image: UploadFile | None = File(None),
    caption: str = Form(""),
    db: AsyncSession = Depends(get_db_async),
    me: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    if image is None or not image.filename:
        raise ValidationError("Image is required")

    image_url = await media.save(image, "posts")
    p = Post(user_id=me.id, image_url=image_url, caption=caption.strip())
    db.add(p)
    await db.commit()
    await db.refresh(p)
    return {"message": "Post created", "post": to_post_out(p, me)}

@router.get("/user/{user_id}")
async def user_posts(user_id: UserId, db: AsyncSession = Depends(get_db_async)):
    return {"posts": await fetch_author_posts(db, user_id)}

@router.get("/{post_id}")
async def get_post(post_id: PostId, db: AsyncSession = Depends(get_db_async)):
    post = await fetch_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return {"post": post}

@router.post("/{post_id}/like", response_model=LikeOut)
async def like_post(post_id: PostId, db: AsyncSession = Depends(get_db_async), viewer_id: int = Depends(get_viewer_id)):
    liked = await toggle_like(db, viewer_id, post_id)
    return LikeOut(liked=liked, message="Post liked" if liked else "Post unliked")

@router.get("/{post_id}/comments")
async def get_comments(post_id: PostId, db: AsyncSession = Depends(get_db_async)):
    return {"comments": await list_comments(db, post_id)}

@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(post_id: PostId, payload: CommentIn, db: AsyncSession = Depends(get_db_async), me: User = Depends(get_current_user)):
    comment = await add_comment(db, me, post_id, payload.text)
    return {"message": "Comment added", "comment": comment}

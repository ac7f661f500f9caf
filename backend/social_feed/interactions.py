import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from .errors import NotFoundError, ValidationError
from .models import Comment, Like, Post, User
from .schemas import COMMENT_MAX_LENGTH, AuthorOut, CommentOut

logger = logging.getLogger(__name__)

async def _require_post(db: AsyncSession, post_id: int) -> Post:
    post = await db.get(Post, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post

async def _find_like(db: AsyncSession, user_id: int, post_id: int) -> Like | None:
    return await db.scalar(
        select(Like).where(Like.user_id == user_id, Like.post_id == post_id).limit(1)
    )

# Flips the like state of (user, post) and returns the new state
async def toggle_like(db: AsyncSession, user_id: int, post_id: int) -> bool:
    await _require_post(db, post_id)

    existing_like = await _find_like(db, user_id, post_id)
    if existing_like:
        await db.delete(existing_like)
        await db.commit()
        return False

    db.add(Like(user_id=user_id, post_id=post_id))
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent toggle inserted the same like; the post is liked either way
        await db.rollback()
        logger.info("duplicate like by user %s on post %s treated as no-op", user_id, post_id)
    return True

def to_comment_out(comment: Comment, author: User) -> CommentOut:
    return CommentOut(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        text=comment.text,
        created_at=comment.created_at,
        author=AuthorOut(id=author.id, username=author.username, avatar_url=author.avatar_url),
    )

async def add_comment(db: AsyncSession, author: User, post_id: int, text: str) -> CommentOut:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment text is required")
    if len(text) > COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment must be at most {COMMENT_MAX_LENGTH} characters")

    await _require_post(db, post_id)

    comment = Comment(user_id=author.id, post_id=post_id, text=text)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return to_comment_out(comment, author)

async def list_comments(db: AsyncSession, post_id: int) -> list[CommentOut]:
    await _require_post(db, post_id)

    rows = (await db.execute(
        select(Comment, User)
        .join(User, User.id == Comment.user_id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )).all()
    return [to_comment_out(comment, author) for comment, author in rows]

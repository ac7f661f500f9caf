import logging
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from .errors import ConflictError, NotFoundError
from .models import Follow, User

logger = logging.getLogger(__name__)

async def _find_edge(db: AsyncSession, follower_id: int, following_id: int) -> Follow | None:
    return await db.scalar(
        select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id).limit(1)
    )

async def follow(db: AsyncSession, follower_id: int, following_id: int) -> Follow:
    if follower_id == following_id:
        raise ConflictError("You cannot follow yourself")

    target_user = await db.get(User, following_id)
    if not target_user:
        raise NotFoundError("User not found")

    if await _find_edge(db, follower_id, following_id):
        raise ConflictError("Already following this user")

    edge = Follow(follower_id=follower_id, following_id=following_id)
    db.add(edge)
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent request created the same edge first
        await db.rollback()
        logger.info("duplicate follow %s -> %s rejected by the store", follower_id, following_id)
        raise ConflictError("Already following this user")

    await db.refresh(edge)
    return edge

async def unfollow(db: AsyncSession, follower_id: int, following_id: int):
    edge = await _find_edge(db, follower_id, following_id)
    if not edge:
        raise ConflictError("You are not following this user")
    await db.delete(edge)
    await db.commit()

async def is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    return await _find_edge(db, follower_id, following_id) is not None

async def follow_counts(db: AsyncSession, user_id: int) -> tuple[int, int]:
    followers = await db.scalar(select(func.count(Follow.id)).where(Follow.following_id == user_id))
    following = await db.scalar(select(func.count(Follow.id)).where(Follow.follower_id == user_id))
    return followers or 0, following or 0

# Feed query engine: newest-first pages of posts with author summary and like/comment counts
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Comment, Follow, Like, Post, User
from .schemas import MAX_DB_INT, AuthorOut, FeedPage, PostOut

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
MAX_OFFSET = MAX_DB_INT

# Pagination input is never rejected: garbage falls back to the defaults, the rest is clamped
def clamp_limit(raw) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, limit))

def clamp_offset(raw) -> int:
    try:
        offset = int(raw)
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_OFFSET, offset))

def parse_flag(raw) -> bool:
    if raw is None:
        return False
    return str(raw).strip().lower() in ("true", "1")


def _post_query() -> Select:
    like_count = (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    return (
        select(Post, User, like_count.label("like_count"), comment_count.label("comment_count"))
        .join(User, User.id == Post.user_id)
    )

def _newest_first(stmt: Select) -> Select:
    # ties on created_at fall back to insertion order
    return stmt.order_by(Post.created_at.desc(), Post.id.asc())

def to_post_out(post: Post, author: User, like_count: int = 0, comment_count: int = 0) -> PostOut:
    return PostOut(
        id=post.id,
        user_id=post.user_id,
        image_url=post.image_url,
        caption=post.caption,
        created_at=post.created_at,
        author=AuthorOut(id=author.id, username=author.username, avatar_url=author.avatar_url),
        like_count=like_count or 0,
        comment_count=comment_count or 0,
    )

async def _run(db: AsyncSession, stmt: Select) -> list[PostOut]:
    rows = (await db.execute(stmt)).all()
    return [to_post_out(post, author, likes, comments) for post, author, likes, comments in rows]


async def fetch_following_ids(db: AsyncSession, viewer_id: int) -> list[int]:
    return list((await db.scalars(
        select(Follow.following_id).where(Follow.follower_id == viewer_id)
    )).all())

# Returns one page of the feed; following_ids=None is the global feed, an empty list an empty page
async def fetch_feed(db: AsyncSession, limit, offset, following_ids: list[int] | None = None) -> FeedPage:
    limit = clamp_limit(limit)
    offset = clamp_offset(offset)

    if following_ids is not None and not following_ids:
        return FeedPage(posts=[], limit=limit, offset=offset)

    stmt = _post_query()
    if following_ids is not None:
        stmt = stmt.where(Post.user_id.in_(following_ids))
    stmt = _newest_first(stmt).offset(offset).limit(limit)

    return FeedPage(posts=await _run(db, stmt), limit=limit, offset=offset)

async def fetch_personalized_feed(db: AsyncSession, viewer_id: int, limit, offset) -> FeedPage:
    following_ids = await fetch_following_ids(db, viewer_id)
    return await fetch_feed(db, limit, offset, following_ids=following_ids)

async def fetch_post(db: AsyncSession, post_id: int) -> PostOut | None:
    posts = await _run(db, _post_query().where(Post.id == post_id))
    return posts[0] if posts else None

async def fetch_author_posts(db: AsyncSession, author_id: int) -> list[PostOut]:
    return await _run(db, _newest_first(_post_query().where(Post.user_id == author_id)))

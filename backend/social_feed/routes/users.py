from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from ..auth import get_viewer_id, require_same_user
from ..database import get_db_async
from ..errors import NotFoundError, ValidationError
from ..graph import follow, follow_counts, is_following, unfollow
from ..models import User
from ..schemas import FollowOut, ProfileOut, ProfileUpdateIn, UserId
from ..storage import MediaStore, get_media_store
from .auth import to_user_out

router = APIRouter(prefix="/users", tags=["users"])

async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    u = await db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    return u

@router.get("/{user_id}", response_model=ProfileOut)
async def get_profile(user_id: UserId, db: AsyncSession = Depends(get_db_async)):
    u = await _get_user_or_404(db, user_id)
    followers, following = await follow_counts(db, user_id)
    return ProfileOut(**to_user_out(u).model_dump(), followers=followers, following=following)

@router.put("/{user_id}")
async def update_profile(user_id: UserId, payload: ProfileUpdateIn, db: AsyncSession = Depends(get_db_async), viewer_id: int = Depends(get_viewer_id)):
    require_same_user(viewer_id, user_id)
    u = await _get_user_or_404(db, user_id)

    if payload.username is not None:
        username = payload.username.strip()
        if not username:
            raise ValidationError("Username must not be blank")
        u.username = username
    if payload.bio is not None:
        u.bio = payload.bio.strip()

    await db.commit()
    await db.refresh(u)
    return {"message": "Profile updated", "user": to_user_out(u)}

@router.post("/{user_id}/avatar")
async def upload_avatar(
    user_id: UserId,
    avatar: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db_async),
    viewer_id: int = Depends(get_viewer_id),
    media: MediaStore = Depends(get_media_store),
):
    require_same_user(viewer_id, user_id)
    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar image is required")

    u = await _get_user_or_404(db, user_id)
    u.avatar_url = await media.save(avatar, "avatars")
    await db.commit()
    await db.refresh(u)
    return {"message": "Avatar uploaded", "user": to_user_out(u)}

@router.post("/{user_id}/follow")
async def follow_user(user_id: UserId, db: AsyncSession = Depends(get_db_async), viewer_id: int = Depends(get_viewer_id)):
    edge = await follow(db, viewer_id, user_id)
    return {
        "message": "Followed successfully",
        "follow": FollowOut(id=edge.id, follower_id=edge.follower_id, following_id=edge.following_id),
    }

@router.post("/{user_id}/unfollow")
async def unfollow_user(user_id: UserId, db: AsyncSession = Depends(get_db_async), viewer_id: int = Depends(get_viewer_id)):
    await unfollow(db, viewer_id, user_id)
    return {"message": "Unfollowed successfully"}

@router.get("/{user_id}/isFollowing")
async def check_following(user_id: UserId, db: AsyncSession = Depends(get_db_async), viewer_id: int = Depends(get_viewer_id)):
    return {"isFollowing": await is_following(db, viewer_id, user_id)}

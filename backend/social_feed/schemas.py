from datetime import datetime
from typing import Annotated
from fastapi import Path
from pydantic import BaseModel, EmailStr, Field, field_validator

COMMENT_MAX_LENGTH = 1024

# Largest OFFSET both Postgres (bigint) and SQLite accept
MAX_DB_INT = 2**63 - 1
# Primary keys are INTEGER columns (int32 on Postgres)
MAX_ID = 2**31 - 1

# Path ids past the column range are a 400, not a driver overflow
PostId = Annotated[int, Path(le=MAX_ID)]
UserId = Annotated[int, Path(le=MAX_ID)]

# ---- Request bodies ----
class RegisterIn(BaseModel):
    username: str = Field(..., min_length=1, max_length=32)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)  # bcrypt only looks at 72 bytes
    bio: str = Field("", max_length=280)
    avatar_url: str | None = None

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def email_lower(cls, value: str) -> str:
        return value.strip().lower()

class LoginIn(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class ProfileUpdateIn(BaseModel):
    username: str | None = Field(None, max_length=32)
    bio: str | None = Field(None, max_length=280)

class CommentIn(BaseModel):
    text: str = ""

# ---- Responses ----
class AuthorOut(BaseModel):
    id: int
    username: str
    avatar_url: str | None = None

class UserOut(BaseModel):
    id: int
    username: str
    email: str
    avatar_url: str | None = None
    bio: str = ""
    created_at: datetime

class ProfileOut(UserOut):
    followers: int
    following: int

class PostOut(BaseModel):
    id: int
    user_id: int
    image_url: str
    caption: str
    created_at: datetime
    author: AuthorOut
    like_count: int = 0
    comment_count: int = 0

class FeedPage(BaseModel):
    posts: list[PostOut]
    limit: int
    offset: int

class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    text: str
    created_at: datetime
    author: AuthorOut

class FollowOut(BaseModel):
    id: int
    follower_id: int
    following_id: int

class AuthOut(BaseModel):
    message: str
    user: UserOut
    token: str

class LikeOut(BaseModel):
    liked: bool
    message: str

import logging
import time
import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from .config import Settings
from .database import get_db_async, get_settings
from .errors import AuthenticationError, AuthorizationError, NotFoundError
from .models import User
from .schemas import MAX_ID

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Hashes a raw (plain-text) password with bcrypt and returns the hash
def hash_password(raw_password: str) -> str:
    password_bytes = raw_password.encode("utf-8") # convert the password string to bytes
    salt = bcrypt.gensalt() # generate a random salt
    hashed_bytes = bcrypt.hashpw(password_bytes, salt) # hash the password
    hashed_string = hashed_bytes.decode("utf-8") # convert the hashed bytes to a string
    return hashed_string

# Verifies a raw password against a stored bcrypt hash
def verify_password(raw_password: str, hashed: str) -> bool:
    return bcrypt.checkpw(raw_password.encode("utf-8"), hashed.encode("utf-8"))

# Creates and returns a JWT containing the user's ID and expiration details
def generate_access_token(user_id: int, settings: Settings, ttl_seconds: int | None = None) -> str:
    now = int(time.time())
    if ttl_seconds is None:
        ttl_seconds = settings.token_ttl_days * 24 * 60 * 60

    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + ttl_seconds,
        "typ": "access"
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

# Verifies a JWT (given as a string) and returns the user id it carries.
# Raises jwt.InvalidTokenError for bad signatures, expired tokens and malformed subjects.
def decode_access_token(token: str, settings: Settings) -> int:
    data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    try:
        user_id = int(data.get("sub"))
    except (TypeError, ValueError):
        raise jwt.InvalidTokenError("token subject is not a user id")
    if not 0 < user_id <= MAX_ID:
        raise jwt.InvalidTokenError("token subject is out of range")
    return user_id

def _has_bearer(creds: HTTPAuthorizationCredentials | None) -> bool:
    return creds is not None and creds.scheme.lower() == "bearer" and bool(creds.credentials)

# --- Dependencies used by HTTP endpoints ---
# Rejects the request unless it carries a valid bearer token, returns the viewer's id
async def get_viewer_id(creds: HTTPAuthorizationCredentials = Depends(bearer_scheme), settings: Settings = Depends(get_settings)) -> int:
    if not _has_bearer(creds):
        raise AuthenticationError("No token provided")

    try:
        return decode_access_token(creds.credentials, settings)
    except jwt.InvalidTokenError as err:
        logger.warning("JWT verify error: %s", err)
        raise AuthenticationError("Invalid or expired token")

# Same as get_viewer_id but loads the user row too; a token for a missing user is a 404
async def get_current_user(viewer_id: int = Depends(get_viewer_id), db: AsyncSession = Depends(get_db_async)) -> User:
    user = await db.get(User, viewer_id)
    if not user:
        raise NotFoundError("User not found")
    return user

# The personalized feed tells "no credential" (401) apart from "bad credential" (403)
def resolve_feed_viewer(creds: HTTPAuthorizationCredentials | None, settings: Settings) -> int:
    if not _has_bearer(creds):
        raise AuthenticationError("Authentication required for personalized feed")

    try:
        return decode_access_token(creds.credentials, settings)
    except jwt.InvalidTokenError as err:
        logger.warning("Personalized feed token error: %s", err)
        raise AuthorizationError("Invalid or expired token")

def require_same_user(viewer_id: int, user_id: int):
    if viewer_id != user_id:
        raise AuthorizationError("Not authorized")

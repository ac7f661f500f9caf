import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

class Settings(BaseModel):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = Field(default=7, ge=1)
    cors_origins: list[str] = ["*"]
    media_root: str = "./media"
    media_url: str = "/media"
    allowed_image_extensions: list[str] = ["jpg", "jpeg", "png"]
    max_upload_bytes: int = Field(default=8 * 1024 * 1024, ge=1)
    sql_echo: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        # Loads .env
        load_dotenv()

        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set in environment variables")

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise RuntimeError("JWT_SECRET is not set")

        origins = os.getenv("FRONTEND_ORIGIN", "*")
        return cls(
            database_url=database_url,
            jwt_secret=jwt_secret,
            token_ttl_days=int(os.getenv("TOKEN_TTL_DAYS", "7")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            media_root=os.getenv("MEDIA_ROOT", "./media"),
            media_url=os.getenv("MEDIA_URL", "/media").rstrip("/"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(8 * 1024 * 1024))),
            sql_echo=os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

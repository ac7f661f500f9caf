import logging
import uuid
from pathlib import Path
from fastapi import Request, UploadFile
from starlette.concurrency import run_in_threadpool
from .errors import ValidationError

logger = logging.getLogger(__name__)

class MediaStore:
    # Keeps uploaded images on local disk and hands back the URL they are served under
    def __init__(self, root: str | Path, base_url: str, allowed_extensions: list[str], max_bytes: int = 8 * 1024 * 1024):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in allowed_extensions}
        self.max_bytes = max_bytes

    def ensure_root(self):
        self.root.mkdir(parents=True, exist_ok=True)

    def _extension(self, upload: UploadFile) -> str:
        filename = upload.filename or ""
        if "." not in filename:
            raise ValidationError("File must have an image extension")
        ext = filename.rsplit(".", 1)[1].lower()
        if ext not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationError(f"Unsupported image type, allowed: {allowed}")
        # some clients set no content type at all; a wrong one is rejected
        content_type = (upload.content_type or "").lower()
        if content_type and not content_type.startswith("image/"):
            raise ValidationError("Uploaded file is not an image")
        return ext

    async def save(self, upload: UploadFile, folder: str) -> str:
        ext = self._extension(upload)
        # one byte past the cap is enough to spot an oversized file
        data = await upload.read(self.max_bytes + 1)
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.max_bytes:
            raise ValidationError(f"Uploaded file is larger than {self.max_bytes} bytes")

        name = f"{uuid.uuid4().hex}.{ext}"
        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        # disk IO runs off the event loop
        await run_in_threadpool((target_dir / name).write_bytes, data)
        logger.info("stored upload %s/%s (%d bytes)", folder, name, len(data))
        return f"{self.base_url}/{folder}/{name}"

def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media_store

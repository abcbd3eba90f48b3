import asyncio
from typing import Protocol

from kost_backoffice.utils.cloudinary_utils import upload_document


class FileStore(Protocol):
    async def upload(self, content: bytes, file_name: str) -> str:
        """Store the bytes and return a URL. Raises UploadError on failure."""
        ...


class CloudinaryFileStore:
    async def upload(self, content: bytes, file_name: str) -> str:
        # Cloudinary's SDK blocks, keep it off the event loop
        result = await asyncio.to_thread(upload_document, content, file_name)
        return result["url"]

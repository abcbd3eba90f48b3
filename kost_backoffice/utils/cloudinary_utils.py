import cloudinary
import cloudinary.uploader

from kost_backoffice.core.config import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_FOLDER,
)
from kost_backoffice.core.errors import UploadError
from kost_backoffice.core.logging_config import get_logger

logger = get_logger()

cloudinary.config(
    cloud_name=CLOUDINARY_CLOUD_NAME,
    api_key=CLOUDINARY_API_KEY,
    api_secret=CLOUDINARY_API_SECRET,
)


def upload_document(content: bytes, file_name: str):
    # .docx / .pdf are stored as raw files so Cloudinary keeps them byte-for-byte
    try:
        result = cloudinary.uploader.upload(
            content,
            folder=CLOUDINARY_FOLDER,
            resource_type="raw",
            public_id=file_name,
            use_filename=True,
            unique_filename=False,
        )
    except Exception as e:
        logger.bind(log_type="document").error(f"Cloudinary upload error | file={file_name} | {e}")
        raise UploadError(f"Upload of {file_name} failed: {e}") from e

    url = result.get("secure_url")
    if not url:
        raise UploadError(f"Upload of {file_name} returned no URL")

    return {
        "url": url,
        "public_id": result.get("public_id")
    }

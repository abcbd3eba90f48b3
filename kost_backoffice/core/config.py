from datetime import timedelta, timezone
from pathlib import Path
from dotenv import load_dotenv
import os


PACKAGE_DIR = Path(__file__).resolve().parent.parent

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./kost.db")
REDIS_URL = os.getenv("REDIS_URL")

JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

LOG_DIR = os.getenv("LOG_DIR", "logs")

# Document generation
TEMPLATE_DIR = Path(os.getenv("TEMPLATE_DIR", PACKAGE_DIR / "templates"))
DOCUMENT_STEP_TIMEOUT_SECONDS = float(os.getenv("DOCUMENT_STEP_TIMEOUT_SECONDS", 30))
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB

# Issue dates on documents are printed in local time (WIB, UTC+7, has no DST)
DOCUMENT_UTC_OFFSET_HOURS = float(os.getenv("DOCUMENT_UTC_OFFSET_HOURS", 7))
DOCUMENT_TIMEZONE = timezone(timedelta(hours=DOCUMENT_UTC_OFFSET_HOURS))

# Cloudinary (file store)
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "booking_documents")

# Printed on every generated document
COMPANY_NAME = os.getenv("COMPANY_NAME", "SUMAN RESIDENCE")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "Lr. Apel Lamgugob, Kec. Syiah Kuala,")
COMPANY_CITY = os.getenv("COMPANY_CITY", "Kota Banda Aceh, 23115")
COMPANY_PHONE = os.getenv("COMPANY_PHONE", "0812-3456-7890")


def company_info() -> dict:
    return {
        "companyName": COMPANY_NAME,
        "companyAddress": COMPANY_ADDRESS,
        "companyCity": COMPANY_CITY,
        "companyPhone": COMPANY_PHONE,
    }

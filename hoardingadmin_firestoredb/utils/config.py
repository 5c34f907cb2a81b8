import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


GOOGLE_CLOUD_PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT_ID", "")
LOCAL_ENV = _env_flag("LOCAL_ENV")
TESTING = _env_flag("TESTING")

# Firebase Authentication REST API key (Identity Toolkit)
FIREBASE_WEB_API_KEY = os.getenv("FIREBASE_WEB_API_KEY", "")

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_UPLOAD_PRESET = os.getenv("CLOUDINARY_UPLOAD_PRESET", "hoardings_upload")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "hoardings")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")

# "permissive" keeps arbitrary status reassignment, "strict" only allows moves out of Pending
STATUS_TRANSITION_POLICY = os.getenv("STATUS_TRANSITION_POLICY", "permissive").strip().lower()

BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Kolkata")
NOTIFICATION_RETENTION_DAYS = int(os.getenv("NOTIFICATION_RETENTION_DAYS", "30"))
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if origin.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# start the contact message / booking listeners that file notifications when the API boots
ACTIVITY_NOTIFIER_ENABLED = _env_flag("ACTIVITY_NOTIFIER_ENABLED")

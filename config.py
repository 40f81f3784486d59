"""
Thumbnail Wizard - Configuration
================================
Central configuration for the wizard, the generation proxy and storage.

Configuration is loaded from environment variables, which can be set in a .env file.
See .env.example for a template.
"""

from pathlib import Path
import os

# Load environment variables from .env file
from dotenv import load_dotenv

# Find the project directory
PROJECT_DIR = Path(__file__).parent

# Load .env file if it exists
env_path = PROJECT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

# =============================================================================
# DIRECTORIES
# =============================================================================

# Root folder for the local object storage backend (one sub-folder per bucket)
STORAGE_DIR = Path(os.getenv("STORAGE_DIR", str(PROJECT_DIR / "storage")))

# Database path
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", str(PROJECT_DIR / "database" / "thumbnails.db")))

# =============================================================================
# API KEYS (loaded from .env - no defaults for security)
# =============================================================================

# OpenAI API for the vision description and (optionally) image rendering
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Supabase credentials (only used with STORAGE_BACKEND=supabase)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY", "")

# =============================================================================
# GENERATION SETTINGS
# =============================================================================

# Multimodal model that describes the thumbnail from the face + prompt
OPENAI_VISION_MODEL = os.getenv("OPENAI_VISION_MODEL", "gpt-4o-mini")
OPENAI_VISION_MAX_TOKENS = int(os.getenv("OPENAI_VISION_MAX_TOKENS", "1000"))
OPENAI_IMAGE_DETAIL = os.getenv("OPENAI_IMAGE_DETAIL", "high")  # low, high, auto

# When disabled the face image is echoed back as the generated thumbnail
IMAGE_GENERATION_ENABLED = os.getenv("IMAGE_GENERATION_ENABLED", "false").lower() == "true"

# OpenAI GPT Image settings (only with IMAGE_GENERATION_ENABLED)
OPENAI_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1")
OPENAI_IMAGE_SIZE = "1536x1024"     # "1024x1024", "1536x1024" (landscape), "1024x1536" (portrait)

# None = OpenAI client default
_timeout = os.getenv("OPENAI_TIMEOUT_SECONDS", "")
OPENAI_TIMEOUT_SECONDS = float(_timeout) if _timeout else None

THUMBNAIL_WIDTH = 1280
THUMBNAIL_HEIGHT = 720

# =============================================================================
# STORAGE SETTINGS
# =============================================================================

# "local" (directory per bucket) or "supabase"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

STYLES_BUCKET = os.getenv("STYLES_BUCKET", "styles")
FACES_BUCKET = os.getenv("FACES_BUCKET", "faces")
THUMBNAILS_BUCKET = os.getenv("THUMBNAILS_BUCKET", "thumbnails")

# URL prefix the local backend serves buckets under
PUBLIC_STORAGE_URL = os.getenv("PUBLIC_STORAGE_URL", "/storage")

# Uploaded face images
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
FACE_IMAGE_MAX_SIDE = 1024

# =============================================================================
# WIZARD SETTINGS
# =============================================================================

TOTAL_STEPS = 5

# Style assets recognised in the styles bucket (matched case-insensitively)
STYLE_IMAGE_EXTENSIONS = ("jpeg", "jpg", "png", "gif", "webp")

# Order in which file names are tried when only a style id is known
PREVIEW_EXTENSION_CANDIDATES = (".jpg", ".jpeg", ".png", ".webp")

# =============================================================================
# AUTH SETTINGS
# =============================================================================

AUTH_TOKEN_TTL_HOURS = int(os.getenv("AUTH_TOKEN_TTL_HOURS", str(24 * 7)))
AUTH_COOKIE_NAME = "access_token"
MIN_PASSWORD_LENGTH = 6

# =============================================================================
# SERVER SETTINGS (FastAPI)
# =============================================================================

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
DEBUG_MODE = os.getenv("DEBUG_MODE", "true").lower() == "true"

# The generation endpoint is called cross-origin, so the default is permissive
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SAVE_LOGS = os.getenv("SAVE_LOGS", "false").lower() == "true"
LOG_FILE = PROJECT_DIR / "logs" / "wizard.log"

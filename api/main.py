"""
FastAPI Main Application

YouTube Thumbnail Wizard Web Interface
"""

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path
from pydantic import BaseModel
import sys

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from api.routes import auth, generation, styles, thumbnails, wizard
from database.db import init_db, close_db
from config import (
    SERVER_HOST,
    SERVER_PORT,
    DEBUG_MODE,
    CORS_ALLOW_ORIGINS,
    CORS_ALLOW_HEADERS,
    STORAGE_BACKEND,
    STORAGE_DIR,
    PUBLIC_STORAGE_URL,
    TOTAL_STEPS,
)
from i18n.i18n import translate as t, set_language, get_language, SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE
from utils import setup_logger, ensure_dir

logger = setup_logger(__name__)

APP_VERSION = "1.0.0"


# ============================================================================
# LIFESPAN (startup/shutdown)
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    logger.info(f"Storage backend: {STORAGE_BACKEND}")

    yield

    await close_db()


# ============================================================================
# APP CREATION
# ============================================================================

app = FastAPI(
    title="YouTube Thumbnail Wizard",
    description="Step-by-step AI thumbnail creation from a face photo",
    version=APP_VERSION,
    lifespan=lifespan
)

# The generation endpoint is called from other origins (browser clients)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials="*" not in CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)

# Static files
STATIC_DIR = ROOT_DIR / "static"
STATIC_DIR.mkdir(exist_ok=True)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Local object storage is served by the app itself
if STORAGE_BACKEND == "local":
    ensure_dir(STORAGE_DIR)
    app.mount(PUBLIC_STORAGE_URL, StaticFiles(directory=str(STORAGE_DIR)), name="storage")

# Templates
TEMPLATES_DIR = ROOT_DIR / "templates"
TEMPLATES_DIR.mkdir(exist_ok=True)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Add i18n globals to Jinja2
templates.env.globals["t"] = t
templates.env.globals["get_language"] = get_language
templates.env.globals["SUPPORTED_LANGUAGES"] = SUPPORTED_LANGUAGES


# ============================================================================
# I18N MIDDLEWARE
# ============================================================================

@app.middleware("http")
async def i18n_middleware(request: Request, call_next):
    """Detect language from cookie and set it for the request."""
    lang_cookie = request.cookies.get("lang")
    if lang_cookie and lang_cookie in SUPPORTED_LANGUAGES:
        set_language(lang_cookie)
    else:
        set_language(DEFAULT_LANGUAGE)

    return await call_next(request)


# ============================================================================
# I18N ENDPOINT
# ============================================================================

class LanguageRequest(BaseModel):
    lang: str


@app.post("/api/lang")
async def set_language_endpoint(body: LanguageRequest):
    """Set language preference."""
    if body.lang not in SUPPORTED_LANGUAGES:
        return JSONResponse(
            status_code=400,
            content={"error": t('api.errors.unsupported_language', lang=body.lang)}
        )

    response = JSONResponse(content={"lang": body.lang, "success": True})
    response.set_cookie(
        key="lang",
        value=body.lang,
        max_age=365 * 24 * 60 * 60,  # 1 year
        httponly=False,
        samesite="lax"
    )
    return response


@app.get("/api/lang")
async def get_language_endpoint():
    """Get current language."""
    return {"lang": get_language()}


# ============================================================================
# ROUTES
# ============================================================================

# API routes
app.include_router(generation.router, prefix="/api", tags=["generation"])
app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])
app.include_router(styles.router, prefix="/api/styles", tags=["styles"])
app.include_router(thumbnails.router, prefix="/api/thumbnails", tags=["thumbnails"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])


# ============================================================================
# FRONTEND ROUTES
# ============================================================================

@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Dashboard - saved thumbnails."""
    return templates.TemplateResponse(request, "dashboard.html")


@app.get("/create", response_class=HTMLResponse)
async def create(request: Request):
    """Creation flow (upload, details, style, review)."""
    return templates.TemplateResponse(request, "create.html", {"total_steps": TOTAL_STEPS})


@app.get("/success", response_class=HTMLResponse)
async def success(request: Request):
    """Completion view; the page itself checks the session and redirects to /create."""
    return templates.TemplateResponse(request, "success.html")


@app.get("/auth", response_class=HTMLResponse)
async def auth_page(request: Request):
    """Sign-in / sign-up."""
    return templates.TemplateResponse(request, "auth.html")


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Unknown pages render the not-found view; API errors stay JSON."""
    if exc.status_code == 404 and not request.url.path.startswith("/api/"):
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"path": request.url.path},
            status_code=404
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": APP_VERSION}


# ============================================================================
# RUN
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=DEBUG_MODE,
        reload_dirs=[str(ROOT_DIR)]
    )

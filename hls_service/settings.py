from pathlib import Path
import os
import shlex
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def env(name: str, default=None, *, required: bool = False):
    val = os.getenv(name, default)
    if required and (val is None or (isinstance(val, str) and val.strip() == "")):
        raise ImproperlyConfigured(f"Missing required environment variable: {name}")
    return val

def env_bool(name: str, default: bool = False) -> bool:
    return str(os.getenv(name, str(default))).lower() in {"1", "true", "yes", "on"}

def env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name, str(default))
    try:
        val = int(raw)
    except ValueError:
        raise ImproperlyConfigured(f"{name} must be an integer, got {raw!r}") from None
    if val < minimum:
        raise ImproperlyConfigured(f"{name} must be >= {minimum}, got {val}")
    return val

def env_command(name: str, default: str) -> str:
    val = os.getenv(name, default)
    try:
        parts = shlex.split(val)
    except ValueError as e:
        raise ImproperlyConfigured(f"{name} is not a valid command line: {e}") from None
    if not parts:
        raise ImproperlyConfigured(f"{name} must name a program, got {val!r}")
    return val

# -----------------------------------------------------
# Paths & basics
# -----------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

DEBUG = env_bool("DEBUG", False)

# In production (DEBUG=False) you must set a strong secret in .env
SECRET_KEY = env("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me", required=not DEBUG)

# Keep hosts explicit by default
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",") if h.strip()]

# -----------------------------------------------------
# Applications
# -----------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",

    # Third-party
    "corsheaders",
    "rest_framework",

    # Local
    "converter",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "hls_service.urls"

WSGI_APPLICATION = "hls_service.wsgi.application"

# Nothing is persisted; the contrib apps above only need a database to import cleanly.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# -----------------------------------------------------
# Internationalization
# -----------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------
# Uploads & converted output
# -----------------------------------------------------
# Originals land in HLS_MEDIA_ROOT/uploads/, HLS output in HLS_MEDIA_ROOT/uploads/converted/
HLS_MEDIA_ROOT = Path(env("HLS_MEDIA_ROOT", str(BASE_DIR / "media")))

# Prefix for playlist URLs handed back to clients; empty means "use the request host"
HLS_PUBLIC_BASE_URL = env("HLS_PUBLIC_BASE_URL", "").rstrip("/")

# -----------------------------------------------------
# Transcoder
# -----------------------------------------------------
# May include a wrapper, e.g. "nice -n 10 ffmpeg"
FFMPEG_BIN = env_command("FFMPEG_BIN", "ffmpeg")
TRANSCODE_TIMEOUT_SECONDS = env_int("TRANSCODE_TIMEOUT_SECONDS", 60 * 60)  # 0 disables
TRANSCODE_CONCURRENCY = env_int("TRANSCODE_CONCURRENCY", 1, minimum=1)

# -----------------------------------------------------
# Django REST Framework
# -----------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
}

# -----------------------------------------------------
# CORS
# -----------------------------------------------------
CORS_ALLOW_ALL_ORIGINS = env_bool("CORS_ALLOW_ALL_ORIGINS", True)
CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()
]

# -----------------------------------------------------
# Logging
# -----------------------------------------------------
LOG_LEVEL = env("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "converter": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": True},
        "django": {"handlers": ["console"], "level": "INFO"},
    },
}

# -----------------------------------------------------
# Default PK type
# -----------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

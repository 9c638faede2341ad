# visaportal/settings.py
"""
Visaportal Django settings

CHANGE LOG
----------
2025-11-02 • AI blog pipeline settings block (AI_BLOG_*)                          # CHANGED:
- Chat model, Pexels key, site URL, admin/cron secrets, bulk delay, topic bounds. # CHANGED:
- Cover uploads go through default_storage; MEDIA_* stays the local default.     # CHANGED:

2025-10-20 • Trim INSTALLED_APPS to the CMS + AI blog apps
- Dropped stripe/anymail/captcha settings; no billing or mail on this site.

2025-08-16 • Logging encoding → settings-level (UTF-8)
- Added encoding='utf-8' to the RotatingFileHandler in LOGGING.handlers['file'] to
  prevent NUL bytes during rotation and make greps stable.
"""

from pathlib import Path
import os
import sys

from dotenv import load_dotenv

# ========= Base / Env =========
BASE_DIR = Path(__file__).resolve().parent.parent

ENV_CANDIDATES = [
    Path(os.path.expanduser('~/visaportal/.env')),   # server: ~/visaportal/.env
    BASE_DIR / '.env',                               # Local: project root
    BASE_DIR.parent / '.env',                        # Local: repo root (if settings/ nested)
]
for _env in ENV_CANDIDATES:
    if _env.exists():
        load_dotenv(_env)
        print(f"[settings] Loaded env from: {_env}")
        break
else:
    load_dotenv()  # fallback (no-op if missing)

DEBUG = os.getenv("DEBUG", "False") == "True"

# Test runs (pytest / manage.py test) get a throwaway key and plain-HTTP defaults.
TESTING = any("test" in (arg or "").lower() for arg in sys.argv[:2]) or "PYTEST_CURRENT_TEST" in os.environ

# ========= Secret Key =========
DJANGO_SECRET_KEY = os.getenv('DJANGO_SECRET_KEY')
if not DJANGO_SECRET_KEY:
    if not (DEBUG or TESTING):
        raise ValueError("DJANGO_SECRET_KEY must be set in .env file")
    DJANGO_SECRET_KEY = "insecure-dev-key-not-for-production"  # CHANGED:
SECRET_KEY = DJANGO_SECRET_KEY

# ========= Hosts / CSRF / Security =========
ALLOWED_HOSTS = [
    "127.0.0.1",
    "localhost",
    "www.kolayseyahat.net",
    "kolayseyahat.net",
    "testserver",
] + (os.getenv("ADDITIONAL_HOSTS", "").split(",") if os.getenv("ADDITIONAL_HOSTS") else [])

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG

# ========= Installed apps =========
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "corsheaders",
    "rest_framework",

    "cms",
    "ai_blog",
]

# ========= Middleware =========
# CORS middleware stays at the very top (django-cors-headers requirement)
MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

# ========= URL / Templates / WSGI =========
ROOT_URLCONF = "visaportal.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "visaportal.wsgi.application"

# ========= Database =========
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "OPTIONS": {"timeout": 30},
    }
}

# ========= Cache (rendered pages; invalidated on publish) =========
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "visaportal-pages",
    }
}

# ========= Password validation =========
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# ========= I18N =========
LANGUAGE_CODE = "tr"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ========= Security headers =========
SECURE_CONTENT_TYPE_NOSNIFF = True

if not (DEBUG or TESTING):
    SECURE_SSL_REDIRECT = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True

# ========= Static / Media =========
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if TESTING
            else "whitenoise.storage.CompressedManifestStaticFilesStorage"
        ),
    },
}

MEDIA_URL = os.getenv("MEDIA_URL", "/media/")
MEDIA_ROOT = BASE_DIR / "media"

# ========= Defaults =========
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ========= AI blog pipeline =========
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
AI_BLOG_CHAT_MODEL = os.getenv("AI_BLOG_CHAT_MODEL", "gpt-4o")
PEXELS_API_KEY = os.getenv("PEXELS_API_KEY", "")

AI_BLOG_SITE_URL = os.getenv("AI_BLOG_SITE_URL", "https://www.kolayseyahat.net").rstrip("/")
AI_BLOG_CONTENT_LANGUAGE = os.getenv("AI_BLOG_CONTENT_LANGUAGE", "Turkish")
AI_BLOG_ADMIN_KEY = os.getenv("AI_BLOG_ADMIN_KEY", "")
AI_BLOG_CRON_SECRET = os.getenv("AI_BLOG_CRON_SECRET", "")

AI_BLOG_BULK_DELAY_SECONDS = float(os.getenv("AI_BLOG_BULK_DELAY_SECONDS", "1.0"))
AI_BLOG_DEFAULT_TOPIC_COUNT = int(os.getenv("AI_BLOG_DEFAULT_TOPIC_COUNT", "10"))
AI_BLOG_MAX_TOPIC_COUNT = int(os.getenv("AI_BLOG_MAX_TOPIC_COUNT", "30"))
AI_BLOG_COVER_PREFIX = os.getenv("AI_BLOG_COVER_PREFIX", "blog-covers").strip("/")
AI_BLOG_HTTP_TIMEOUT = float(os.getenv("AI_BLOG_HTTP_TIMEOUT", "20"))

# ========= CORS / CSRF (single source of truth) =========
CORS_ALLOWED_ORIGINS = [
    "https://www.kolayseyahat.net",
    "https://kolayseyahat.net",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
# Admin frontends on other hosts (comma-separated), de-duped
for _o in os.getenv("AI_BLOG_ALLOWED_ORIGINS", "").split(","):
    _o = _o.strip()
    if _o and _o not in CORS_ALLOWED_ORIGINS:
        CORS_ALLOWED_ORIGINS.append(_o)

CSRF_TRUSTED_ORIGINS = list(CORS_ALLOWED_ORIGINS)

# Explicitly allow our admin auth header for preflight success
CORS_ALLOW_HEADERS = list({
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-admin-key",
})

# ========= REST framework (read-only plan browsing) =========
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["ai_blog.permissions.HasAdminKey"],
    "UNAUTHENTICATED_USER": None,
}

# ========= Logging =========
LOG_DIR = BASE_DIR / 'logs'
LOG_DIR.mkdir(exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_DIR / 'visaportal.log',
            'maxBytes': 1024*1024*15,
            'backupCount': 10,
            'formatter': 'verbose',
            'encoding': 'utf-8',
        },
        'console': {
            'level': 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'ai_blog': {
            'handlers': ['file', 'console'],
            'level': 'INFO',
            'propagate': True,
        },
        # Request one-liners from the pipeline endpoints
        'ai_blog.views': {
            'handlers': ['file', 'console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django': {
            'handlers': ['file'],
            'level': 'ERROR',
            'propagate': True,
        },
    },
}

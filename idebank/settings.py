import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_int(name, default):
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name, default):
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ('0', 'false', 'no', 'off', '')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'replace-this-with-your-secret-key')
DEBUG = _env_bool('DJANGO_DEBUG', True)
ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', '').split(',') if h.strip()]

INSTALLED_APPS = [
    'core',
    'ideas',
    'rebus',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'idebank.urls'

WSGI_APPLICATION = 'idebank.wsgi.application'

# The record store is an external service; nothing is kept locally
DATABASES = {}

LANGUAGE_CODE = 'nb'
TIME_ZONE = 'Europe/Oslo'
USE_I18N = True
USE_TZ = True

# Base64 images from the idea forms are compressed client side to ~500KB each
DATA_UPLOAD_MAX_MEMORY_SIZE = _env_int('DATA_UPLOAD_MAX_MEMORY_SIZE', 10 * 1024 * 1024)

# ---------------- Record store (Airtable) ----------------
AIRTABLE_TOKEN = os.getenv('AIRTABLE_TOKEN', '')
AIRTABLE_BASE_ID = os.getenv('AIRTABLE_BASE_ID', '')
AIRTABLE_TABLE_ID = os.getenv('AIRTABLE_TABLE_ID', '')
# Progress shares the ideas table unless a dedicated one is configured
AIRTABLE_PROGRESS_TABLE_ID = os.getenv('AIRTABLE_PROGRESS_TABLE_ID', AIRTABLE_TABLE_ID)
AIRTABLE_TIMEOUT = _env_float('AIRTABLE_TIMEOUT', 15.0)

# ---------------- Text generation ----------------
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'openai').lower()
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')
OPENAI_MODEL_ID = os.getenv('OPENAI_MODEL_ID', 'gpt-4o-mini')
GEMINI_API_KEY = os.getenv('GEMINI_API_KEY', '')
GEMINI_MODEL_ID = os.getenv('GEMINI_MODEL_ID', 'gemini-2.5-flash-lite')
BEDROCK_MODEL_ID = os.getenv('BEDROCK_MODEL_ID', 'us.amazon.nova-lite-v1:0')
AWS_REGION_NAME = (
    os.getenv('AWS_REGION_NAME')
    or os.getenv('AWS_REGION')
    or os.getenv('AWS_DEFAULT_REGION')
    or 'us-east-1'
)
LLM_TIMEOUT = _env_float('LLM_TIMEOUT', 30.0)

# ---------------- Image host (Cloudinary) ----------------
CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME', '')
CLOUDINARY_UPLOAD_PRESET = os.getenv('CLOUDINARY_UPLOAD_PRESET', '')
IMAGE_MAX_FILES = _env_int('IMAGE_MAX_FILES', 5)
IMAGE_MAX_BYTES = _env_int('IMAGE_MAX_BYTES', 4 * 1024 * 1024)
IMAGE_UPLOAD_TIMEOUT = _env_float('IMAGE_UPLOAD_TIMEOUT', 30.0)

# ---------------- Login (two fixed users) ----------------
APP_ADMIN_USERNAME = os.getenv('APP_ADMIN_USERNAME', '')
APP_ADMIN_PASSWORD = os.getenv('APP_ADMIN_PASSWORD', '')
APP_BASIC_USERNAME = os.getenv('APP_BASIC_USERNAME', '')
APP_BASIC_PASSWORD = os.getenv('APP_BASIC_PASSWORD', '')

# ---------------- Rate limiting ----------------
IDEAS_MAX_REQUESTS = _env_int('IDEAS_MAX_REQUESTS', 5)
IDEAS_WINDOW_SECONDS = _env_float('IDEAS_WINDOW_SECONDS', 10.0)
AI_ANALYZE_ENABLED = _env_bool('AI_ANALYZE_ENABLED', True)
AI_MAX_REQ_PER_HOUR = _env_int('AI_MAX_REQ_PER_HOUR', 10)
RATE_LIMIT_CLEANUP_SECONDS = _env_float('RATE_LIMIT_CLEANUP_SECONDS', 60.0)

# Logging configuration to output logs to console
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    },
}

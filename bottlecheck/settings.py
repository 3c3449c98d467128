import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "bottlecheck-insecure-dev-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    "catalog",
    "analyzer",
]

# No models: the catalog lives in memory
DATABASES = {}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True

# --- Component data ---
# Benchmark tables: every *.csv in this directory with Type/Model/Benchmark/URL
COMPONENT_DATA_DIR = Path(
    os.environ.get("BOTTLECHECK_DATA_DIR", BASE_DIR / "data")
)

# Name-only option tables, one file per axis
OPTIONS_DATA_DIR = Path(
    os.environ.get("BOTTLECHECK_OPTIONS_DIR", COMPONENT_DATA_DIR / "options")
)

OPTION_FILES = {
    "CPU": "cpu.csv",
    "GPU": "gpus.csv",
    "RAM": "ram.csv",
    "STORAGE": "hdd.csv",
    "RESOLUTION": "resolutions.csv",
}

OPTIONS_LIST_LIMIT = 300

# --- Logging ---
LOG_LEVEL = os.environ.get("BOTTLECHECK_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "catalog": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "analyzer": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

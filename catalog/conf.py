from pathlib import Path

from django.conf import settings

from catalog.services.options import OPTIONS_LIST_LIMIT


def component_data_dir() -> Path:
    return Path(getattr(settings, "COMPONENT_DATA_DIR", Path.cwd() / "data"))


def options_data_dir() -> Path:
    default = component_data_dir() / "options"
    return Path(getattr(settings, "OPTIONS_DATA_DIR", default))


def option_files() -> dict:
    return dict(getattr(settings, "OPTION_FILES", {}))


def options_list_limit() -> int:
    return int(getattr(settings, "OPTIONS_LIST_LIMIT", OPTIONS_LIST_LIMIT))

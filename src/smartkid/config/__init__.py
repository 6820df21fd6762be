import os


def get_settings_module() -> str:
    """Pick the settings module from ``APP_ENV`` (default: development)."""
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "smartkid.config.production"

    if env in {"test", "testing"}:
        return "smartkid.config.testing"

    return "smartkid.config.development"

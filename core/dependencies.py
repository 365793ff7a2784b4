from core.settings import Settings

# Settings singleton, set once by the host at startup
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the module settings."""
    assert (
        _settings is not None
    ), "Settings not initialized. Make sure create_module() or init_settings() was called."
    return _settings


def init_settings(settings: Settings | None = None) -> Settings:
    """Install the given settings, or load them from the environment."""
    global _settings
    _settings = settings if settings is not None else Settings()
    return _settings


def clear_settings():
    global _settings
    _settings = None

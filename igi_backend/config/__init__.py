from igi_backend.config.settings import settings, validate_environment

__all__ = ["settings", "validate_environment"]

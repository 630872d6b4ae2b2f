class ConfigurationError(ValueError):
    """Raised when a run cannot be configured. Always raised before dispatch starts."""

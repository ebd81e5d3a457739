"""Error kinds raised by the orgstat pipeline."""


class ConfigError(ValueError):
    """Raised when required settings are missing or invalid."""


class RepositoryListError(RuntimeError):
    """Raised when the organisation's repositories cannot be enumerated."""

    def __init__(self, organization: str, reason: BaseException) -> None:
        """Keep the organisation name alongside the underlying failure."""
        super().__init__(f"Could not list repositories for {organization}: {reason}")
        self.organization = organization


class RenderError(RuntimeError):
    """Raised when the report cannot be rendered or written."""

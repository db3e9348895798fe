"""Exception hierarchy shared by every carecommon component."""


class CareCommonError(Exception):
    """Base exception for carecommon."""


class ConfigError(CareCommonError):
    """Configuration could not be read, fetched or decoded."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source

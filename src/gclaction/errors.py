from __future__ import annotations


class GclActionError(Exception):
    """Base class for every error raised by gclaction."""


class ConfigurationError(GclActionError):
    """Fatal misconfiguration; aborts the run."""


class MalformedVersionError(ConfigurationError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"invalid version string '{value}', expected format v1.2 or v1.2.3"
        )
        self.value = value


class UnsupportedMajorVersionError(ConfigurationError):
    pass


class BelowMinimumVersionError(ConfigurationError):
    def __init__(self, requested: str, minimum: str) -> None:
        super().__init__(
            f"requested golangci-lint version '{requested}' isn't supported: "
            f"we support only {minimum} and later versions"
        )
        self.requested = requested
        self.minimum = minimum


class InvalidInputError(ConfigurationError):
    pass


class IncompatibleArgsError(ConfigurationError):
    pass


class WorkingDirectoryError(ConfigurationError):
    pass


class VersionResolutionError(GclActionError):
    pass


class VersionNotFoundError(VersionResolutionError):
    def __init__(self, key: str) -> None:
        super().__init__(f"requested golangci-lint version '{key}' doesn't exist")
        self.key = key


class VersionUnavailableError(VersionResolutionError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(reason)
        self.key = key
        self.reason = reason


class MalformedMappingError(VersionResolutionError):
    pass


class RemoteFetchError(GclActionError):
    def __init__(self, operation: str, last_error: BaseException | None) -> None:
        super().__init__(f"failed to execute operation '{operation}': {last_error}")
        self.operation = operation
        self.last_error = last_error


class HttpStatusError(GclActionError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"{url} returned HTTP code {status_code}")
        self.url = url
        self.status_code = status_code


class InstallError(GclActionError):
    pass


class CacheError(GclActionError):
    pass


class CacheValidationError(CacheError):
    pass


class CacheReservationError(CacheError):
    pass


class LintOutputError(GclActionError):
    pass


class CheckRunNotFoundError(GclActionError):
    pass


class MalformedResponseError(GclActionError):
    pass

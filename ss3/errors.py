from __future__ import annotations
"""Error taxonomy shared by every ss3 command."""
from enum import Enum
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError


ENV_PREFIX = "SS3"


class ErrorKind(Enum):
    CONFIGURATION = "configuration"
    PATH_INVALID = "path_invalid"
    POLICY_CONFLICT = "policy_conflict"
    UNSUPPORTED = "unsupported"
    PROVIDER = "provider"
    IO = "io"
    COMMAND = "command"


class Ss3Error(Exception):
    """Base class for every error raised by ss3."""

    kind: ErrorKind = ErrorKind.CONFIGURATION


# -- Configuration


class NoCredentialsFoundError(Ss3Error):
    """Raised when no credential source yields keys for a bucket."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, bucket: Optional[str]):
        self.bucket = bucket
        super().__init__(_no_credentials_message(bucket))


class MissingRegionOrEndpointError(Ss3Error):
    kind = ErrorKind.CONFIGURATION

    def __init__(self):
        super().__init__(
            "Missing config. The credential environment variables or config must have "
            "either a REGION or ENDPOINT. Both absent."
        )


def _no_credentials_message(bucket: Optional[str]) -> str:
    p = ENV_PREFIX
    target = f"'{bucket}'" if bucket else "(no bucket)"
    return (
        f"No credential found for bucket {target}. Provide the following (by order of precedence):\n"
        f"  - Provide bucket {p}_BUCKET_... environments (will take precedence on profile env/configs)\n"
        f"    - {p}_BUCKET_bucket_name_KEY_ID\n"
        f"    - {p}_BUCKET_bucket_name_KEY_SECRET\n"
        f"    - {p}_BUCKET_bucket_name_REGION\n"
        f"    - {p}_BUCKET_bucket_name_ENDPOINT (optional)\n"
        f"  - Provide '--profile profile_name' with the following {p}_PROFILE_... environments:\n"
        f"    - {p}_PROFILE_profile_name_KEY_ID\n"
        f"    - {p}_PROFILE_profile_name_KEY_SECRET\n"
        f"    - {p}_PROFILE_profile_name_REGION\n"
        f"    - {p}_PROFILE_profile_name_ENDPOINT (optional)\n"
        "  - Provide '--profile profile_name' which should be configured in the aws default config files\n"
        "    (~/.aws/credentials, ~/.aws/config), with the secret optionally stored in the OS keychain\n"
        "    under the 'ss3' service and the profile name\n"
        "  - As a last fallback, use the default AWS environment variables:\n"
        "    - AWS_ACCESS_KEY_ID\n"
        "    - AWS_SECRET_ACCESS_KEY\n"
        "    - AWS_DEFAULT_REGION\n"
        "    - AWS_ENDPOINT (optional)\n"
        "  NOTE: '-' characters in profile and bucket names will be replaced by '_' for environment names above."
    )


# -- Paths


class InvalidS3UrlError(Ss3Error):
    kind = ErrorKind.PATH_INVALID

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Not a valid s3 url '{url}'. Should be format 's3://bucket_name[/path/to/object]'"
        )


class FilePathNotFoundError(Ss3Error):
    kind = ErrorKind.PATH_INVALID

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File path '{path}' not found.")


class InvalidPathError(Ss3Error):
    kind = ErrorKind.PATH_INVALID

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot perform, invalid key '{path}'")


# -- Overwrite policy


class ObjectExistsError(Ss3Error):
    """Raised in fail mode when the destination object already exists."""

    kind = ErrorKind.POLICY_CONFLICT

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Fail mode is on and the object '{url}' already exists")


class FileExistsOverFailError(Ss3Error):
    """Raised in fail mode when the destination file already exists."""

    kind = ErrorKind.POLICY_CONFLICT

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Fail mode is on and the file '{path}' already exists")


class NotSupportedError(Ss3Error):
    kind = ErrorKind.UNSUPPORTED

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Not Supported - '{feature}' feature is not supported.")


class CommandError(Ss3Error):
    kind = ErrorKind.COMMAND

    def __init__(self, cause: str):
        super().__init__(f"Invalid command. Cause: {cause}")


# -- Provider


class ProviderError(Ss3Error):
    """A failed object store request, independent of the client library."""

    kind = ErrorKind.PROVIDER

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"S3 ERROR:\n       Code: {code}\n    Message: {message}")

    @classmethod
    def from_boto(cls, exc: Exception) -> "ProviderError":
        if isinstance(exc, ClientError):
            error = exc.response.get("Error", {})
            code = str(error.get("Code") or "NO_CODE")
            message = str(error.get("Message") or exc)
            return cls(code, message)
        return cls(type(exc).__name__, str(exc))


PROVIDER_ERRORS = (ClientError, BotoCoreError)


def error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, Ss3Error):
        return exc.kind
    if isinstance(exc, OSError):
        return ErrorKind.IO
    return ErrorKind.PROVIDER

"""Exception taxonomy and classification of native directory result codes."""

import re
from enum import Enum
from typing import Dict, Optional, Type

from . import constants as c


class DirectoryError(Exception):
    """Base class for all errors raised by directory_link."""


class ConfigurationError(DirectoryError, ValueError):
    """An operation was called with an invalid combination of arguments."""


class SessionStateError(DirectoryError):
    """An operation was attempted on a suspended or destroyed session."""


class NativeError(DirectoryError):
    """
    A failure reported by the directory client.

    Carries the raw native code and the server's diagnostic message, if any.
    """

    def __init__(self, code: int, message: Optional[str] = None):
        self.code = code
        self.message = message
        text = f"{describe(code)} (code {code})"
        if message:
            text += f": {message}"
        super().__init__(text)


class AuthenticationError(NativeError):
    """Bind rejected: bad credentials or an account restriction."""


class ConnectivityError(NativeError):
    """The directory server could not be reached."""


class UnsupportedFeatureError(NativeError):
    """The server rejected a critical extension it does not support."""


class ErrorKind(Enum):
    NO_ERROR = "no_error"
    AUTHENTICATION = "authentication"
    CONNECTIVITY = "connectivity"
    UNSUPPORTED_FEATURE = "unsupported_feature"
    NATIVE = "native"


ERROR_KINDS: Dict[int, ErrorKind] = {
    c.SUCCESS: ErrorKind.NO_ERROR,
    c.SERVER_DOWN: ErrorKind.CONNECTIVITY,
    c.UNAVAILABLE_CRITICAL_EXTENSION: ErrorKind.UNSUPPORTED_FEATURE,
    c.INAPPROPRIATE_AUTHENTICATION: ErrorKind.AUTHENTICATION,
    c.INVALID_CREDENTIALS: ErrorKind.AUTHENTICATION,
    c.INSUFFICIENT_ACCESS_RIGHTS: ErrorKind.AUTHENTICATION,
    c.AD_USER_NOT_FOUND: ErrorKind.AUTHENTICATION,
    c.AD_INVALID_CREDENTIALS: ErrorKind.AUTHENTICATION,
    c.AD_NOT_PERMITTED_TO_LOGON_AT_THIS_TIME: ErrorKind.AUTHENTICATION,
    c.AD_RESTRICTED_TO_SPECIFIC_MACHINES: ErrorKind.AUTHENTICATION,
    c.AD_PASSWORD_EXPIRED: ErrorKind.AUTHENTICATION,
    c.AD_ACCOUNT_DISABLED: ErrorKind.AUTHENTICATION,
    c.AD_ACCOUNT_EXPIRED: ErrorKind.AUTHENTICATION,
    c.AD_USER_MUST_RESET_PASSWORD: ErrorKind.AUTHENTICATION,
    c.AD_ACCOUNT_LOCKED_OUT: ErrorKind.AUTHENTICATION,
}

_DESCRIPTIONS: Dict[int, str] = {
    c.SUCCESS: "success",
    c.SERVER_DOWN: "server unreachable",
    c.OPERATIONS_ERROR: "operations error",
    c.PROTOCOL_ERROR: "protocol error",
    c.UNAVAILABLE_CRITICAL_EXTENSION: "unavailable critical extension",
    c.INAPPROPRIATE_AUTHENTICATION: "inappropriate authentication",
    c.INVALID_CREDENTIALS: "invalid credentials",
    c.INSUFFICIENT_ACCESS_RIGHTS: "insufficient access rights",
    c.UNAVAILABLE: "server unavailable",
    c.OTHER: "other",
    c.AD_USER_NOT_FOUND: "user not found",
    c.AD_INVALID_CREDENTIALS: "invalid credentials",
    c.AD_NOT_PERMITTED_TO_LOGON_AT_THIS_TIME: "not permitted to logon at this time",
    c.AD_RESTRICTED_TO_SPECIFIC_MACHINES: "restricted to specific machines",
    c.AD_PASSWORD_EXPIRED: "password expired",
    c.AD_ACCOUNT_DISABLED: "account disabled",
    c.AD_ACCOUNT_EXPIRED: "account expired",
    c.AD_USER_MUST_RESET_PASSWORD: "user must reset password",
    c.AD_ACCOUNT_LOCKED_OUT: "account locked out",
}

_EXCEPTIONS: Dict[ErrorKind, Type[NativeError]] = {
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.CONNECTIVITY: ConnectivityError,
    ErrorKind.UNSUPPORTED_FEATURE: UnsupportedFeatureError,
    ErrorKind.NATIVE: NativeError,
}

# e.g. "80090308: LdapErr: DSID-0C09044E, comment: AcceptSecurityContext error, data 775, v4563"
AD_ERROR_CODE_RE = re.compile(r"\bdata\s+([0-9a-fA-F]+)\b")


def classify(code: int) -> ErrorKind:
    """
    Map a native result code to its error kind.

    Codes missing from ERROR_KINDS are reported as ErrorKind.NATIVE.
    """
    return ERROR_KINDS.get(code, ErrorKind.NATIVE)


def describe(code: int) -> str:
    return _DESCRIPTIONS.get(code, "unclassified directory error")


def parse_ad_error_code(message: Optional[str]) -> Optional[int]:
    """
    Extract the Active Directory sub-code from a diagnostic message.

    Args:
        message: Diagnostic message returned with a bind result

    Returns:
        The sub-code as an integer, or None when the message carries none
    """
    if not message:
        return None
    match = AD_ERROR_CODE_RE.search(message)
    if not match:
        return None
    return int(match.group(1), 16)


def error_for(code: int, message: Optional[str] = None) -> NativeError:
    """
    Build the exception matching a failed native code.

    Args:
        code: Native result code, must not be SUCCESS
        message: Optional diagnostic message from the server

    Returns:
        An instance of the NativeError subclass for the code's kind

    Raises:
        ValueError: If code signals success
    """
    kind = classify(code)
    if kind is ErrorKind.NO_ERROR:
        raise ValueError("Result code 0 does not describe a failure")
    return _EXCEPTIONS[kind](code, message)

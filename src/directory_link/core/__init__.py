"""Core session functionality for directory_link."""

from .client import ConnectionHandle, DirectoryClient, Ldap3Client
from .controls import ControlRegistry, ExtendedControl
from .errors import (
    DirectoryError,
    ConfigurationError,
    SessionStateError,
    NativeError,
    AuthenticationError,
    ConnectivityError,
    UnsupportedFeatureError,
    ErrorKind,
    classify,
    error_for,
    parse_ad_error_code,
)
from .logging import setup_logging
from .rootdse import RootDSE, DEFAULT_ATTRIBUTES
from .session import Session, SessionSnapshot, SessionState, connect

__all__ = [
    "ConnectionHandle",
    "DirectoryClient",
    "Ldap3Client",
    "ControlRegistry",
    "ExtendedControl",
    "DirectoryError",
    "ConfigurationError",
    "SessionStateError",
    "NativeError",
    "AuthenticationError",
    "ConnectivityError",
    "UnsupportedFeatureError",
    "ErrorKind",
    "classify",
    "error_for",
    "parse_ad_error_code",
    "setup_logging",
    "RootDSE",
    "DEFAULT_ATTRIBUTES",
    "Session",
    "SessionSnapshot",
    "SessionState",
    "connect",
]

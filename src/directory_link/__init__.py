"""
directory_link - directory server sessions that survive process boundaries.

This package wraps an LDAP connection to Active Directory or another directory
server: connecting, StartTLS, binding, requesting extended controls and
reading the RootDSE. A bound session can be exported to a handle-free snapshot
and resumed in another process, for example between the requests of a paged
search.
"""

__version__ = "0.1.0"

from .core.errors import (
    DirectoryError,
    ConfigurationError,
    SessionStateError,
    NativeError,
    AuthenticationError,
    ConnectivityError,
    UnsupportedFeatureError,
)
from .core.session import Session, SessionSnapshot, SessionState, connect

__all__ = [
    "DirectoryError",
    "ConfigurationError",
    "SessionStateError",
    "NativeError",
    "AuthenticationError",
    "ConnectivityError",
    "UnsupportedFeatureError",
    "Session",
    "SessionSnapshot",
    "SessionState",
    "connect",
]

"""
Directory server session.

A Session owns one native connection handle and the configuration needed to
rebuild it. The handle cannot be serialised, so a session is suspended with
export(), which releases the handle and clears credentials, and continued
elsewhere with Session.resume(), which opens a new connection from the
exported configuration. The resumed session has to be bound again.

Example:

    session = Session('example.com')
    session.use_tls().bind('user@example.com', 'secret')
    snapshot = session.export().to_json()
    # ... in a later request ...
    session = Session.resume(snapshot)
    session.bind('user@example.com', 'secret')
"""

import copy
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from . import constants as c
from .client import ConnectionHandle, DirectoryClient, Ldap3Client
from .controls import ControlRegistry, ExtendedControl
from .errors import ConfigurationError, NativeError, SessionStateError, error_for
from .logging import log_session_event
from .rootdse import RootDSE, merge_attributes
from ..config.models import Config

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CONNECTED = "connected"
    BOUND = "bound"
    SUSPENDED = "suspended"
    DESTROYED = "destroyed"


class SessionSnapshot(BaseModel):
    """Handle-free, credential-free record of a suspended session."""

    domain: str = Field(..., description="Directory server the session was connected to")
    port: int = Field(..., description="Port of the connection")
    options: Dict[int, Any] = Field(default_factory=dict, description="All connection options, pinned ones included")
    tls_enabled: bool = Field(default=False, description="Whether StartTLS was negotiated")

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "SessionSnapshot":
        return cls.model_validate_json(data)


def _user_options(options: Optional[Mapping[int, Any]]) -> Dict[int, Any]:
    return {key: copy.deepcopy(value) for key, value in (options or {}).items() if key not in c.PINNED_OPTIONS}


class Session:
    """
    Connection to a directory server.

    Protocol version 3 is enforced and automatic referral chasing is
    disabled for every session; use redirect() to follow a referral.
    A Session is not thread-safe.
    """

    def __init__(self,
                 domain: str,
                 port: int = 389,
                 options: Optional[Mapping[int, Any]] = None,
                 client: Optional[DirectoryClient] = None):
        """
        Connect to a directory server.

        Options are stored and applied to the connection on bind(). Pinned
        options (protocol version, referrals) cannot be overridden.

        Args:
            domain: DNS name of the directory server, i.e. example.com
            port: Port to use for the connection
            options: Connection options keyed by option identifier
            client: Directory client to use; defaults to an Ldap3Client

        Raises:
            ConnectivityError: If the server cannot be reached
        """
        self._domain = domain
        self._port = port
        self._client = client or Ldap3Client()
        self._options = _user_options(options)
        self._controls = ControlRegistry.from_option(self._options.get(c.OPT_SERVER_CONTROLS))
        self._credentials: Optional[Tuple[Optional[str], Optional[str]]] = None
        self._tls_enabled = False
        self._bound = False
        self._root_dse: Optional[RootDSE] = None
        self._handle: Optional[ConnectionHandle] = None
        self._state = SessionState.DESTROYED

        self._connect()

    def _connect(self) -> None:
        handle = self._client.open(self._domain, self._port)
        try:
            for key, value in c.PINNED_OPTIONS.items():
                code = self._client.set_option(handle, key, value)
                if code != c.SUCCESS:
                    raise error_for(code, self._client.read_message(handle))
        except NativeError:
            self._client.close(handle)
            raise

        self._handle = handle
        self._bound = False
        self._state = SessionState.CONNECTED
        logger.debug(f"Connected to {self._domain}:{self._port}")

    @classmethod
    def from_config(cls, config: Config, client: Optional[DirectoryClient] = None) -> "Session":
        """
        Connect using a loaded configuration.

        Args:
            config: Loaded configuration
            client: Directory client; built from the configuration when omitted

        Returns:
            A connected, unbound session, TLS-enabled if configured
        """
        session = cls(
            config.directory.domain,
            config.directory.port,
            config.directory.options,
            client=client or Ldap3Client.from_config(config)
        )
        if config.directory.use_tls:
            session.use_tls()
        return session

    @classmethod
    def resume(cls,
               snapshot: Union[SessionSnapshot, Mapping[str, Any], str, bytes],
               client: Optional[DirectoryClient] = None) -> "Session":
        """
        Rebuild a session from an exported snapshot.

        A new connection is opened and TLS is re-negotiated if it was
        enabled. The session is not bound.

        Args:
            snapshot: SessionSnapshot, its JSON form, or an equivalent mapping
            client: Directory client to use for the new connection

        Returns:
            A connected, unbound session
        """
        if isinstance(snapshot, (str, bytes)):
            snapshot = SessionSnapshot.from_json(snapshot)
        elif not isinstance(snapshot, SessionSnapshot):
            snapshot = SessionSnapshot.model_validate(snapshot)

        session = cls(snapshot.domain, snapshot.port, snapshot.options, client=client)
        if snapshot.tls_enabled:
            session.use_tls()

        log_session_event("resume", snapshot.domain, True, f"tls={snapshot.tls_enabled}")
        return session

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def port(self) -> int:
        return self._port

    @property
    def options(self) -> Dict[int, Any]:
        """Copy of all options; pinned values always win."""
        merged = copy.deepcopy(self._options)
        merged.update(c.PINNED_OPTIONS)
        return merged

    @property
    def credentials(self) -> Optional[Tuple[Optional[str], Optional[str]]]:
        return self._credentials

    @property
    def tls_enabled(self) -> bool:
        return self._tls_enabled

    @property
    def bound(self) -> bool:
        return self._bound

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def controls(self) -> Tuple[ExtendedControl, ...]:
        return self._controls.controls

    @property
    def handle(self) -> ConnectionHandle:
        """The live connection handle, for callers performing their own operations."""
        self._require_live()
        return self._handle

    @property
    def client(self) -> DirectoryClient:
        return self._client

    def _require_live(self) -> None:
        if self._state in (SessionState.SUSPENDED, SessionState.DESTROYED) or self._handle is None:
            raise SessionStateError(f"Session to {self._domain} is {self._state.value}")

    def bind(self, username: Optional[str] = None, password: Optional[str] = None) -> "Session":
        """
        Bind to the directory server, anonymously when no username is given.

        Pending options are applied first.

        Args:
            username: Name to bind as (DN, UPN or DOMAIN\\user)
            password: Password for username

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: If a username is given without a password
            AuthenticationError: If the server rejects the credentials
            ConnectivityError: If the server is unreachable
            NativeError: For any other failure
        """
        self._require_live()

        if username and not password:
            raise ConfigurationError("You must supply a password if you supply a username")

        self._options.update(self._set_options(self._options))

        code = self._client.bind(self._handle, username, password)
        if code != c.SUCCESS:
            error = error_for(code, self._client.read_message(self._handle))
            log_session_event("bind", self._domain, False, f"{type(error).__name__} code={code}")
            raise error

        self._credentials = (username, password)
        self._bound = True
        self._state = SessionState.BOUND
        log_session_event("bind", self._domain, True, f"user={username or 'anonymous'}")
        return self

    def use_tls(self) -> "Session":
        """
        Negotiate StartTLS on the connection.

        Call this before bind() so credentials are not sent in clear text.
        Certificate trust depends on the client configuration.

        Returns:
            self, for chaining

        Raises:
            NativeError: If TLS negotiation fails
        """
        self._require_live()

        code = self._client.start_tls(self._handle)
        if code != c.SUCCESS:
            raise NativeError(code, self._client.read_message(self._handle))

        self._tls_enabled = True
        return self

    def apply_option(self, key: int, value: Any) -> "Session":
        """Apply and store a single connection option."""
        return self.apply_options({key: value})

    def apply_options(self, options: Mapping[int, Any]) -> "Session":
        """
        Apply and store connection options; pinned options are skipped.

        Raises:
            UnsupportedFeatureError: If the server rejects a critical extension
            NativeError: For any other rejected option
        """
        self._require_live()
        accepted = self._set_options(options)
        self._options.update(accepted)
        if c.OPT_SERVER_CONTROLS in accepted:
            self._controls = ControlRegistry.from_option(accepted[c.OPT_SERVER_CONTROLS])
        return self

    def _set_options(self, options: Mapping[int, Any]) -> Dict[int, Any]:
        """Apply options to the handle and return the accepted ones without storing them."""
        accepted: Dict[int, Any] = {}
        for key, value in options.items():
            if key in c.PINNED_OPTIONS:
                continue

            code = self._client.set_option(self._handle, key, value)
            if code != c.SUCCESS:
                raise error_for(code, self._client.read_message(self._handle))

            accepted[key] = copy.deepcopy(value)
        return accepted

    def root_dse(self, attributes: Optional[Union[str, Iterable[str]]] = None) -> RootDSE:
        """
        Read the RootDSE entry from the server and refresh the cache.

        The default attribute set (see rootdse.DEFAULT_ATTRIBUTES) is always
        requested. Use cached_root_dse() when a cached copy is good enough.

        Args:
            attributes: One or more attributes to read in addition to the defaults

        Returns:
            The freshly read RootDSE
        """
        self._require_live()

        entry = self._client.read_entry(self._handle, '', merge_attributes(attributes))
        self._root_dse = RootDSE(entry)
        logger.debug(f"Loaded RootDSE from {self._domain}")
        return self._root_dse

    def cached_root_dse(self) -> RootDSE:
        """Return the cached RootDSE, loading it on first use."""
        if self._root_dse is None:
            return self.root_dse()
        return self._root_dse

    def enable_control(self, oid: str, critical: bool = False, value: Any = None) -> bool:
        """
        Request an extended control for all following operations.

        Args:
            oid: Control OID; must be advertised by the server
            critical: The server must refuse operations if it cannot honour the control
            value: Accepted for compatibility; control values are not encoded

        Returns:
            False if the server does not advertise the control, True otherwise

        Raises:
            UnsupportedFeatureError: If the server rejects the control as critical
        """
        self._require_live()

        if not self.cached_root_dse().supports_control(oid):
            logger.info(f"Control {oid} is not supported by {self._domain}")
            return False

        registry = self._controls.with_control(ExtendedControl(oid, critical, value))
        self._options.update(self._set_options({c.OPT_SERVER_CONTROLS: registry.as_option()}))
        self._controls = registry
        return True

    def show_deleted(self, critical: bool = False) -> bool:
        """Include deleted objects in search results."""
        return self.enable_control(c.CONTROL_SHOW_DELETED, critical)

    def redirect(self, domain: str) -> "Session":
        """
        Open a session to another server with this session's configuration.

        Port, options, TLS and credentials are carried over. Used to follow
        referrals explicitly.

        Args:
            domain: DNS name of the server to connect to

        Returns:
            A new session, bound with the same credentials
        """
        self._require_live()

        session = Session(domain, self._port, dict(self._options), client=self._client)
        if self._tls_enabled:
            session.use_tls()

        username, password = self._credentials or (None, None)
        session.bind(username, password)

        log_session_event("redirect", self._domain, True, f"to={domain}")
        return session

    def export(self) -> SessionSnapshot:
        """
        Suspend the session into a transportable snapshot.

        The connection is released and credentials are cleared; this
        session cannot be used afterwards. Continue with Session.resume().

        Returns:
            Snapshot with domain, port, options and TLS state

        Raises:
            SessionStateError: If the session is already suspended or destroyed
        """
        self._require_live()

        snapshot = SessionSnapshot(
            domain=self._domain,
            port=self._port,
            options=self.options,
            tls_enabled=self._tls_enabled,
        )

        self._release()
        self._credentials = None
        self._bound = False
        self._root_dse = None
        self._state = SessionState.SUSPENDED

        log_session_event("export", self._domain, True)
        return snapshot

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self._client.close(handle)

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._state is SessionState.DESTROYED and self._handle is None:
            return
        try:
            self._release()
        finally:
            self._credentials = None
            self._bound = False
            self._state = SessionState.DESTROYED

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def __del__(self):
        # Partially constructed sessions have no handle attribute yet
        if getattr(self, '_handle', None) is not None:
            self.close()

    def __str__(self) -> str:
        return self._domain

    def __repr__(self) -> str:
        return f"<Session {self._domain}:{self._port} {self._state.value}>"


def connect(domain: str,
            port: int = 389,
            options: Optional[Mapping[int, Any]] = None,
            client: Optional[DirectoryClient] = None) -> Session:
    """Open a session to a directory server; see Session."""
    return Session(domain, port, options, client=client)

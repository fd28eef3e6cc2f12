"""Directory client capability and its ldap3 implementation."""

import logging
import ssl
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

import ldap3
from ldap3 import Server, Connection, BASE, DSA
from ldap3.core.exceptions import LDAPException, LDAPCommunicationError

from . import constants as c
from .errors import ERROR_KINDS, ConnectivityError, SessionStateError, error_for, parse_ad_error_code
from ..config.models import Config

logger = logging.getLogger(__name__)


class ConnectionHandle:
    """
    Owned native connection resource.

    A handle is acquired by DirectoryClient.open and released by
    DirectoryClient.close. It is never reused after release.
    """

    def __init__(self, connection: Any, domain: str, port: int):
        self.connection = connection
        self.domain = domain
        self.port = port
        self.options: Dict[int, Any] = {}
        self.last_error = c.SUCCESS
        self.last_message: Optional[str] = None
        self.released = False

    def native(self) -> Any:
        """Return the underlying connection, refusing released handles."""
        if self.released:
            raise SessionStateError(f"Connection handle for {self.domain}:{self.port} has been released")
        return self.connection

    def __repr__(self) -> str:
        state = "released" if self.released else "open"
        return f"<ConnectionHandle {self.domain}:{self.port} {state}>"


class DirectoryClient(ABC):
    """
    Primitives a Session orchestrates.

    Every method except open and read_entry reports failures as native
    result codes; read_error returns the last code recorded on a handle.
    """

    @abstractmethod
    def open(self, domain: str, port: int) -> ConnectionHandle:
        """Acquire a handle, raising ConnectivityError if the server is unreachable."""

    @abstractmethod
    def set_option(self, handle: ConnectionHandle, key: int, value: Any) -> int:
        pass

    @abstractmethod
    def start_tls(self, handle: ConnectionHandle) -> int:
        pass

    @abstractmethod
    def bind(self, handle: ConnectionHandle,
             username: Optional[str] = None,
             password: Optional[str] = None) -> int:
        pass

    @abstractmethod
    def close(self, handle: ConnectionHandle) -> None:
        pass

    @abstractmethod
    def read_entry(self, handle: ConnectionHandle, base: str,
                   attributes: Iterable[str]) -> Dict[str, List[Any]]:
        pass

    def read_error(self, handle: ConnectionHandle) -> int:
        return handle.last_error

    def read_message(self, handle: ConnectionHandle) -> Optional[str]:
        return handle.last_message

    @staticmethod
    def _record(handle: ConnectionHandle, code: int, message: Optional[str] = None) -> int:
        handle.last_error = code
        handle.last_message = message
        return code


class Ldap3Client(DirectoryClient):
    """
    DirectoryClient backed by ldap3.

    Connections are opened with protocol version 3 and automatic referral
    chasing disabled; server controls registered through set_option are
    sent with every bind and entry read. Other options, OPT_NETWORK_TIMEOUT
    included, are only recorded on the handle: timeouts are fixed when the
    connection is opened.
    """

    def __init__(self,
                 connect_timeout: int = 30,
                 receive_timeout: int = 10,
                 use_ssl: bool = False,
                 validate_certificate: bool = True,
                 ca_cert_file: Optional[str] = None):
        """
        Initialize the ldap3 client.

        Args:
            connect_timeout: Socket connect timeout in seconds
            receive_timeout: Receive timeout in seconds
            use_ssl: Connect over LDAPS instead of plain LDAP
            validate_certificate: Require a valid server certificate for TLS
            ca_cert_file: Optional CA bundle used to validate the server
        """
        self.connect_timeout = connect_timeout
        self.receive_timeout = receive_timeout
        self.use_ssl = use_ssl
        self.tls = ldap3.Tls(
            validate=ssl.CERT_REQUIRED if validate_certificate else ssl.CERT_NONE,
            ca_certs_file=ca_cert_file
        )

    @classmethod
    def from_config(cls, config: Config) -> "Ldap3Client":
        return cls(
            connect_timeout=config.directory.timeout,
            receive_timeout=config.directory.receive_timeout,
            use_ssl=config.security.use_ssl,
            validate_certificate=config.security.validate_certificate,
            ca_cert_file=config.security.ca_cert_file,
        )

    def open(self, domain: str, port: int) -> ConnectionHandle:
        try:
            logger.debug(f"Opening connection to {domain}:{port}")
            server = Server(
                domain,
                port=port,
                use_ssl=self.use_ssl,
                get_info=DSA,
                tls=self.tls,
                connect_timeout=self.connect_timeout
            )
            connection = Connection(
                server,
                version=c.LDAP_VERSION3,
                auto_referrals=False,
                receive_timeout=self.receive_timeout,
                raise_exceptions=False
            )
            connection.open()
        except LDAPException as e:
            logger.warning(f"Connection failed to {domain}:{port}: {e}")
            raise ConnectivityError(c.SERVER_DOWN, str(e))

        return ConnectionHandle(connection, domain, port)

    def set_option(self, handle: ConnectionHandle, key: int, value: Any) -> int:
        connection = handle.native()

        if key == c.OPT_PROTOCOL_VERSION:
            if value != c.LDAP_VERSION3:
                return self._record(handle, c.PROTOCOL_ERROR, f"Unsupported protocol version: {value}")
            connection.version = value
        elif key == c.OPT_REFERRALS:
            connection.auto_referrals = bool(value)
        elif key == c.OPT_SERVER_CONTROLS:
            supported = self._supported_controls(connection)
            for control in value or []:
                if control.get("critical") and supported is not None and control["oid"] not in supported:
                    return self._record(
                        handle,
                        c.UNAVAILABLE_CRITICAL_EXTENSION,
                        f"Critical control {control['oid']} is not supported by {handle.domain}"
                    )

        handle.options[key] = value
        return self._record(handle, c.SUCCESS)

    def start_tls(self, handle: ConnectionHandle) -> int:
        connection = handle.native()

        try:
            if connection.start_tls(read_server_info=False):
                logger.debug(f"TLS negotiated with {handle.domain}")
                return self._record(handle, c.SUCCESS)
        except LDAPCommunicationError as e:
            return self._record(handle, c.SERVER_DOWN, str(e))
        except LDAPException as e:
            return self._record(handle, c.OTHER, str(e))

        return self._record_result(handle, connection.result)

    def bind(self, handle: ConnectionHandle,
             username: Optional[str] = None,
             password: Optional[str] = None) -> int:
        connection = handle.native()

        if username:
            connection.user = username
            connection.password = password
            connection.authentication = ldap3.SIMPLE
        else:
            connection.user = ''
            connection.password = None
            connection.authentication = ldap3.ANONYMOUS

        try:
            if connection.bind(read_server_info=False, controls=self.controls(handle)):
                return self._record(handle, c.SUCCESS)
        except LDAPCommunicationError as e:
            return self._record(handle, c.SERVER_DOWN, str(e))
        except LDAPException as e:
            return self._record(handle, c.OTHER, str(e))

        return self._record_result(handle, connection.result)

    def close(self, handle: ConnectionHandle) -> None:
        if handle.released:
            return
        try:
            handle.connection.unbind()
            logger.debug(f"Unbound from {handle.domain}:{handle.port}")
        except LDAPException as e:
            logger.warning(f"Error during unbind from {handle.domain}: {e}")
        finally:
            handle.released = True

    def read_entry(self, handle: ConnectionHandle, base: str,
                   attributes: Iterable[str]) -> Dict[str, List[Any]]:
        connection = handle.native()

        try:
            success = connection.search(
                search_base=base,
                search_filter='(objectClass=*)',
                search_scope=BASE,
                attributes=list(attributes),
                controls=self.controls(handle)
            )
        except LDAPCommunicationError as e:
            raise error_for(self._record(handle, c.SERVER_DOWN, str(e)), str(e))

        if not success:
            code = self._record_result(handle, connection.result)
            raise error_for(code, handle.last_message)

        self._record(handle, c.SUCCESS)
        if not connection.entries:
            return {}
        return dict(connection.entries[0].entry_attributes_as_dict)

    def _record_result(self, handle: ConnectionHandle, result: Optional[Dict[str, Any]]) -> int:
        result = result or {}
        code = result.get('result', c.OTHER)
        message = result.get('message') or result.get('description')
        ad_code = parse_ad_error_code(result.get('message'))
        if code == c.INVALID_CREDENTIALS and ad_code in ERROR_KINDS and ad_code != c.SUCCESS:
            code = ad_code
        # Called only for failed operations
        if code == c.SUCCESS:
            code = c.OTHER
        return self._record(handle, code, message)

    @staticmethod
    def controls(handle: ConnectionHandle) -> Optional[List[tuple]]:
        """
        Registered server controls in ldap3 form.

        Pass the result as `controls=` to operations performed directly on
        the handle's connection so they carry the session's controls.
        """
        controls = handle.options.get(c.OPT_SERVER_CONTROLS)
        if not controls:
            return None
        # Control values are not BER-encoded; only oid and criticality are sent
        return [(control["oid"], bool(control.get("critical")), None) for control in controls]

    @staticmethod
    def _supported_controls(connection: Any) -> Optional[List[str]]:
        info = getattr(connection.server, 'info', None)
        if info is None or not getattr(info, 'supported_controls', None):
            return None
        return [entry[0] if isinstance(entry, tuple) else entry for entry in info.supported_controls]

"""Shared fixtures for directory_link tests."""

from typing import Any, Dict, Iterable, List, Optional

import pytest

from directory_link.core import constants as c
from directory_link.core.client import ConnectionHandle, DirectoryClient
from directory_link.core.errors import ConnectivityError


ROOT_DSE = {
    'dnsHostName': ['dc1.example.com'],
    'defaultNamingContext': ['DC=example,DC=com'],
    'rootDomainNamingContext': ['DC=example,DC=com'],
    'configurationNamingContext': ['CN=Configuration,DC=example,DC=com'],
    'schemaNamingContext': ['CN=Schema,CN=Configuration,DC=example,DC=com'],
    'namingContexts': ['DC=example,DC=com', 'CN=Configuration,DC=example,DC=com'],
    'highestCommittedUSN': ['123456'],
    'supportedControl': [c.CONTROL_PAGED_RESULTS, c.CONTROL_SHOW_DELETED, c.CONTROL_SERVER_SORT],
    'supportedLDAPVersion': ['3', '2'],
    'supportedSASLMechanisms': ['GSSAPI', 'GSS-SPNEGO', 'EXTERNAL', 'DIGEST-MD5'],
    'currentTime': ['20261017093015.0Z'],
}


class FakeDirectoryClient(DirectoryClient):
    """In-memory directory client recording every call."""

    def __init__(self):
        self.accounts = {'alice@example.com': 'secret'}
        self.root_dse = dict(ROOT_DSE)
        self.unreachable = set()
        self.rejected_options: Dict[int, int] = {}
        self.bind_error: Optional[int] = None
        self.tls_error: Optional[int] = None
        self.handles: List[ConnectionHandle] = []
        self.calls: List[tuple] = []

    def open(self, domain: str, port: int) -> ConnectionHandle:
        self.calls.append(('open', domain, port))
        if domain in self.unreachable:
            raise ConnectivityError(c.SERVER_DOWN, f"Can't contact {domain}")
        handle = ConnectionHandle(object(), domain, port)
        self.handles.append(handle)
        return handle

    def set_option(self, handle, key, value):
        handle.native()
        self.calls.append(('set_option', key, value))
        if key in self.rejected_options:
            return self._record(handle, self.rejected_options[key], 'rejected')
        handle.options[key] = value
        return self._record(handle, c.SUCCESS)

    def start_tls(self, handle):
        handle.native()
        self.calls.append(('start_tls', handle.domain))
        if self.tls_error is not None:
            return self._record(handle, self.tls_error, 'TLS negotiation failed')
        return self._record(handle, c.SUCCESS)

    def bind(self, handle, username=None, password=None):
        handle.native()
        self.calls.append(('bind', username))
        if self.bind_error is not None:
            return self._record(handle, self.bind_error, 'bind failed')
        if username and self.accounts.get(username) != password:
            return self._record(handle, c.INVALID_CREDENTIALS, 'invalid credentials')
        return self._record(handle, c.SUCCESS)

    def close(self, handle):
        self.calls.append(('close', handle.domain))
        handle.released = True

    def read_entry(self, handle, base: str, attributes: Iterable[str]) -> Dict[str, List[Any]]:
        handle.native()
        attributes = list(attributes)
        self.calls.append(('read_entry', base, attributes))
        wanted = {name.lower() for name in attributes}
        return {name: values for name, values in self.root_dse.items() if name.lower() in wanted}

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def client():
    """Fake directory client."""
    return FakeDirectoryClient()

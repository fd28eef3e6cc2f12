"""RootDSE metadata snapshot."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_ATTRIBUTES = (
    'dnsHostName',
    'defaultNamingContext',
    'highestCommittedUSN',
    'supportedControl',
    'supportedLDAPVersion',
    'supportedSASLMechanisms',
    'rootDomainNamingContext',
    'configurationNamingContext',
    'schemaNamingContext',
    'namingContexts',
    'currentTime',
)


def merge_attributes(extra: Optional[Any] = None) -> List[str]:
    """
    Combine DEFAULT_ATTRIBUTES with caller-requested attributes.

    Args:
        extra: A single attribute name or an iterable of names

    Returns:
        Attribute list without case-insensitive duplicates, defaults first
    """
    if extra is None:
        extra = []
    elif isinstance(extra, str):
        extra = [extra]

    merged: List[str] = []
    seen = set()
    for name in list(DEFAULT_ATTRIBUTES) + list(extra):
        if name.lower() not in seen:
            seen.add(name.lower())
            merged.append(name)
    return merged


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def parse_generalized_time(value: str) -> datetime:
    """Parse an LDAP generalized time such as 20261017093015.0Z."""
    value = value.rstrip('Z')
    if '.' in value:
        value = value.split('.', 1)[0]
    return datetime.strptime(value, '%Y%m%d%H%M%S').replace(tzinfo=timezone.utc)


class RootDSE:
    """Read-only view of the RootDSE entry with case-insensitive lookups."""

    def __init__(self, attributes: Mapping[str, Any]):
        self._attributes: Dict[str, List[Any]] = {}
        for name, values in attributes.items():
            if not isinstance(values, (list, tuple)):
                values = [values]
            self._attributes[name.lower()] = list(values)

    def get(self, name: str, default: Optional[List[Any]] = None) -> Optional[List[Any]]:
        return self._attributes.get(name.lower(), default)

    def first(self, name: str) -> Optional[str]:
        values = self._attributes.get(name.lower())
        if not values:
            return None
        return _text(values[0])

    def __getitem__(self, name: str) -> List[Any]:
        return self._attributes[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._attributes

    def as_dict(self) -> Dict[str, List[Any]]:
        return {name: list(values) for name, values in self._attributes.items()}

    @property
    def dns_host_name(self) -> Optional[str]:
        return self.first('dnsHostName')

    @property
    def default_naming_context(self) -> Optional[str]:
        return self.first('defaultNamingContext')

    @property
    def root_domain_naming_context(self) -> Optional[str]:
        return self.first('rootDomainNamingContext')

    @property
    def configuration_naming_context(self) -> Optional[str]:
        return self.first('configurationNamingContext')

    @property
    def schema_naming_context(self) -> Optional[str]:
        return self.first('schemaNamingContext')

    @property
    def naming_contexts(self) -> List[str]:
        return [_text(value) for value in self.get('namingContexts', [])]

    @property
    def highest_committed_usn(self) -> Optional[int]:
        value = self.first('highestCommittedUSN')
        return int(value) if value is not None else None

    @property
    def supported_controls(self) -> List[str]:
        return [_text(value) for value in self.get('supportedControl', [])]

    @property
    def supported_ldap_versions(self) -> List[int]:
        return [int(_text(value)) for value in self.get('supportedLDAPVersion', [])]

    @property
    def supported_sasl_mechanisms(self) -> List[str]:
        return [_text(value) for value in self.get('supportedSASLMechanisms', [])]

    @property
    def current_time(self) -> Optional[datetime]:
        values = self.get('currentTime')
        if not values:
            return None
        value = values[0]
        # ldap3 already converts generalized time when it knows the syntax
        if isinstance(value, datetime):
            return value
        return parse_generalized_time(_text(value))

    def supports_control(self, oid: str) -> bool:
        return oid in self.supported_controls

    def __repr__(self) -> str:
        return f"<RootDSE {self.dns_host_name or '?'} {self.default_naming_context or ''}>"

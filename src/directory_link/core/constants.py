"""Connection option identifiers, result codes and well-known control OIDs."""

from types import MappingProxyType

# Option identifiers (libldap numbering)
OPT_REFERRALS = 0x0008
OPT_SIZELIMIT = 0x0003
OPT_TIMELIMIT = 0x0004
OPT_PROTOCOL_VERSION = 0x0011
OPT_SERVER_CONTROLS = 0x0012
OPT_NETWORK_TIMEOUT = 0x5005

LDAP_VERSION3 = 3

# Always applied at connect time and never overridable by callers
PINNED_OPTIONS = MappingProxyType({
    OPT_PROTOCOL_VERSION: LDAP_VERSION3,
    OPT_REFERRALS: 0,
})

# LDAP result codes
SUCCESS = 0
SERVER_DOWN = -1
OPERATIONS_ERROR = 1
PROTOCOL_ERROR = 2
UNAVAILABLE_CRITICAL_EXTENSION = 12
INAPPROPRIATE_AUTHENTICATION = 48
INVALID_CREDENTIALS = 49
INSUFFICIENT_ACCESS_RIGHTS = 50
UNAVAILABLE = 52
OTHER = 80

# Active Directory bind sub-codes ("data" field of the diagnostic message)
AD_USER_NOT_FOUND = 0x525
AD_INVALID_CREDENTIALS = 0x52E
AD_NOT_PERMITTED_TO_LOGON_AT_THIS_TIME = 0x530
AD_RESTRICTED_TO_SPECIFIC_MACHINES = 0x531
AD_PASSWORD_EXPIRED = 0x532
AD_ACCOUNT_DISABLED = 0x533
AD_ACCOUNT_EXPIRED = 0x701
AD_USER_MUST_RESET_PASSWORD = 0x773
AD_ACCOUNT_LOCKED_OUT = 0x775

# Server controls
CONTROL_SHOW_DELETED = "1.2.840.113556.1.4.417"
CONTROL_PAGED_RESULTS = "1.2.840.113556.1.4.319"
CONTROL_SERVER_SORT = "1.2.840.113556.1.4.473"

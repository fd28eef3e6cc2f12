"""Tests for error classification."""

import pytest

from directory_link.core import constants as c
from directory_link.core.errors import (
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    ErrorKind,
    NativeError,
    UnsupportedFeatureError,
    classify,
    error_for,
    parse_ad_error_code,
)


CLASSIFICATION_TABLE = [
    (0, ErrorKind.NO_ERROR),
    (-1, ErrorKind.CONNECTIVITY),
    (12, ErrorKind.UNSUPPORTED_FEATURE),
    (48, ErrorKind.AUTHENTICATION),
    (49, ErrorKind.AUTHENTICATION),
    (50, ErrorKind.AUTHENTICATION),
    (0x525, ErrorKind.AUTHENTICATION),
    (0x52E, ErrorKind.AUTHENTICATION),
    (0x530, ErrorKind.AUTHENTICATION),
    (0x531, ErrorKind.AUTHENTICATION),
    (0x532, ErrorKind.AUTHENTICATION),
    (0x533, ErrorKind.AUTHENTICATION),
    (0x701, ErrorKind.AUTHENTICATION),
    (0x773, ErrorKind.AUTHENTICATION),
    (0x775, ErrorKind.AUTHENTICATION),
]


@pytest.mark.parametrize("code,kind", CLASSIFICATION_TABLE)
def test_classify_known_codes(code, kind):
    """Every code in the table maps to its documented kind."""
    assert classify(code) is kind


@pytest.mark.parametrize("code", [1, 2, 32, 52, 53, 80, -7, 0x52F, 99999])
def test_classify_unknown_codes_are_native(code):
    """Codes outside the table fall back to NATIVE."""
    assert classify(code) is ErrorKind.NATIVE


def test_error_for_builds_matching_exception():
    """error_for picks the exception class for the code's kind."""
    assert type(error_for(c.INVALID_CREDENTIALS)) is AuthenticationError
    assert type(error_for(c.AD_ACCOUNT_LOCKED_OUT)) is AuthenticationError
    assert type(error_for(c.SERVER_DOWN)) is ConnectivityError
    assert type(error_for(c.UNAVAILABLE_CRITICAL_EXTENSION)) is UnsupportedFeatureError
    assert type(error_for(c.OTHER)) is NativeError


def test_error_for_keeps_code_and_message():
    """The raw code and diagnostic message are kept for diagnostics."""
    error = error_for(c.AD_PASSWORD_EXPIRED, "data 532")
    
    assert error.code == 0x532
    assert error.message == "data 532"
    assert "password expired" in str(error)
    assert isinstance(error, NativeError)


def test_error_for_rejects_success():
    """Success is not an error."""
    with pytest.raises(ValueError):
        error_for(c.SUCCESS)


def test_configuration_error_is_value_error():
    """ConfigurationError can be caught as ValueError."""
    with pytest.raises(ValueError):
        raise ConfigurationError("bad call")


@pytest.mark.parametrize("message,expected", [
    ("80090308: LdapErr: DSID-0C09044E, comment: AcceptSecurityContext error, data 52e, v4563", 0x52E),
    ("80090308: LdapErr: DSID-0C09044E, comment: AcceptSecurityContext error, data 775, v4563", 0x775),
    ("80090308: LdapErr: DSID-0C0903A9, comment: AcceptSecurityContext error, data 701, v1db1", 0x701),
    ("invalid credentials", None),
    ("", None),
    (None, None),
])
def test_parse_ad_error_code(message, expected):
    """The AD sub-code is read from the diagnostic message."""
    assert parse_ad_error_code(message) == expected

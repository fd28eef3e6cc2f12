"""Tests for configuration module."""

import pytest
import tempfile
import json
import logging
import os

from directory_link.config.loader import load_config, validate_config
from directory_link.config.models import Config, DirectoryConfig, LoggingConfig
from directory_link.core import constants as c


@pytest.fixture
def config_data():
    """Minimal configuration."""
    return {
        "directory": {
            "domain": "example.com",
            "port": 389,
            "use_tls": True,
            "options": {"3": 500}
        }
    }


def test_load_config_from_file(config_data):
    """Test loading configuration from JSON file."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        config_path = f.name
    
    try:
        config = load_config(config_path)
        assert isinstance(config, Config)
        assert config.directory.domain == "example.com"
        assert config.directory.use_tls is True
        assert config.directory.options == {c.OPT_SIZELIMIT: 500}
    finally:
        os.unlink(config_path)


def test_load_config_from_env(config_data, monkeypatch):
    """Test loading configuration from environment variable."""
    config_data["directory"]["domain"] = "env.example.com"
    
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        config_path = f.name
    
    try:
        monkeypatch.setenv('DIRECTORY_LINK_CONFIG', config_path)
        
        config = load_config()
        assert config.directory.domain == "env.example.com"
    finally:
        os.unlink(config_path)


def test_load_config_without_path(monkeypatch):
    """Test error when neither path nor environment variable is given."""
    monkeypatch.delenv('DIRECTORY_LINK_CONFIG', raising=False)
    
    with pytest.raises(ValueError, match="No configuration file specified"):
        load_config()


def test_missing_config_file():
    """Test handling of missing configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path/config.json")


def test_invalid_json():
    """Test handling of invalid JSON."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        f.write("invalid json content")
        config_path = f.name
    
    try:
        with pytest.raises(json.JSONDecodeError):
            load_config(config_path)
    finally:
        os.unlink(config_path)


def test_default_values():
    """Test default configuration values."""
    config = Config(directory={"domain": "example.com"})
    
    assert config.directory.port == 389
    assert config.directory.use_tls is False
    assert config.directory.options == {}
    assert config.security.use_ssl is False
    assert config.security.validate_certificate is True
    assert config.logging.level == "INFO"


def test_domain_must_not_be_url():
    """Test validation of URL-shaped domains."""
    with pytest.raises(ValueError, match="host name"):
        DirectoryConfig(domain="ldap://example.com")


def test_invalid_port():
    """Test validation of port range."""
    with pytest.raises(ValueError, match="Port"):
        DirectoryConfig(domain="example.com", port=70000)


def test_missing_required_fields():
    """Test validation of missing required fields."""
    with pytest.raises(ValueError):
        Config(directory={"port": 389})


def test_logging_level_is_normalised():
    """Test logging level validation."""
    assert LoggingConfig(level="debug").level == "DEBUG"
    
    with pytest.raises(ValueError):
        LoggingConfig(level="verbose")


def test_validate_config_warns_about_pinned_options(caplog):
    """Test warnings for options that will be ignored."""
    config = Config(directory={"domain": "example.com", "use_tls": True,
                               "options": {str(c.OPT_PROTOCOL_VERSION): 2}})
    
    with caplog.at_level(logging.WARNING, logger="directory_link.config.loader"):
        validate_config(config)
    
    assert "will be ignored" in caplog.text


def test_validate_config_warns_about_plaintext(caplog):
    """Test warning for unencrypted connections."""
    config = Config(directory={"domain": "example.com"})
    
    with caplog.at_level(logging.WARNING, logger="directory_link.config.loader"):
        validate_config(config)
    
    assert "not encrypted" in caplog.text

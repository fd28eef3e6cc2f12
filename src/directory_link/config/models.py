"""Configuration models for directory_link."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator


class DirectoryConfig(BaseModel):
    """Directory server connection configuration."""
    
    domain: str = Field(..., description="DNS name of the directory server")
    port: int = Field(default=389, description="Port for the connection")
    use_tls: bool = Field(default=False, description="Negotiate StartTLS after connecting")
    options: Dict[int, Any] = Field(default_factory=dict, description="Connection options applied on bind")
    timeout: int = Field(default=30, description="Connection timeout in seconds")
    receive_timeout: int = Field(default=10, description="Receive timeout in seconds")
    
    @field_validator('domain')
    @classmethod
    def validate_domain(cls, v):
        """Reject URLs and empty names."""
        v = v.strip()
        if not v:
            raise ValueError('Domain must not be empty')
        if '://' in v:
            raise ValueError('Domain must be a host name, not a URL')
        return v
    
    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        """Validate port range."""
        if not 1 <= v <= 65535:
            raise ValueError('Port must be between 1 and 65535')
        return v
    
    @field_validator('timeout', 'receive_timeout')
    @classmethod
    def validate_positive_int(cls, v):
        """Validate positive integers."""
        if v <= 0:
            raise ValueError('Value must be positive')
        return v


class SecurityConfig(BaseModel):
    """Transport security configuration."""
    
    use_ssl: bool = Field(default=False, description="Connect over LDAPS")
    validate_certificate: bool = Field(default=True, description="Validate server certificate")
    ca_cert_file: Optional[str] = Field(default=None, description="CA certificate file path")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    file: Optional[str] = Field(default=None, description="Log file path")
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class."""
    
    directory: DirectoryConfig
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

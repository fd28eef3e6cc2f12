"""Configuration loader for directory_link."""

import json
import os
import logging
from pathlib import Path
from typing import Optional

from .models import Config
from ..core.constants import PINNED_OPTIONS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DIRECTORY_LINK_CONFIG"


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from JSON file.
    
    Args:
        config_path: Path to configuration file. If None, uses the
                    DIRECTORY_LINK_CONFIG environment variable.
    
    Returns:
        Config: Loaded and validated configuration
        
    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
        json.JSONDecodeError: If config file is not valid JSON
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR)
        if not config_path:
            raise ValueError(
                f"No configuration file specified. Either provide config_path or set {CONFIG_ENV_VAR} environment variable."
            )
    
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    
    logger.info(f"Loading configuration from: {config_path}")
    
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        
        config = Config(**config_data)
        logger.info("Configuration loaded successfully")
        
        logger.debug(f"Directory server: {config.directory.domain}:{config.directory.port}")
        logger.debug(f"StartTLS: {config.directory.use_tls}, LDAPS: {config.security.use_ssl}")
        
        return config
        
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise
    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise


def validate_config(config: Config) -> None:
    """
    Perform additional validation on configuration.
    
    Only warns; nothing here makes a configuration unusable.
    
    Args:
        config: Configuration to validate
    """
    directory = config.directory
    
    if directory.use_tls and config.security.use_ssl:
        logger.warning("StartTLS requested on an LDAPS connection; the link is already encrypted")
    
    if not directory.use_tls and not config.security.use_ssl:
        logger.warning(f"Connection to {directory.domain} is not encrypted; credentials are sent in clear text")
    
    if config.security.use_ssl and directory.port == 389:
        logger.warning("LDAPS enabled but port is 389; LDAPS normally listens on 636")
    
    for key in directory.options:
        if key in PINNED_OPTIONS:
            logger.warning(f"Option {key:#x} is fixed to {PINNED_OPTIONS[key]} and will be ignored")
    
    logger.info("Configuration validation completed")

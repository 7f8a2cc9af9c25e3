"""Configuration loading for the SM Markets scraper."""
import copy
import logging
from pathlib import Path

import yaml


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config.yaml'

DEFAULT_CONFIG = {
    'site': {
        'item_selector': '[data-role="gallery-items"] .category-root-2k1',
        'gallery_selector': '[data-role="gallery-items"]',
        'card_selector': '.category-root-2k1',
        'container_selector': '.infinite-scroll-component',
        'grid_selectors': [
            '[data-role=gallery-items]',
            '.category-items-2Qm',
            '.category-root-2k1',
        ],
        'fields': {
            'name': 'a.item-name-23v span',
            'url': 'a.item-name-23v',
            'uom': '.item-productInfo-1X5 .item-uom-12l',
            'price': '.item-price-xqn',
            'weighted_price': '.item-weightedPrice-1Ys',
            'image': '.item-imageContainer-2mg img.image-loaded-ktU',
        },
        'overlay_selectors': [
            'button:has-text("Accept")',
            'button:has-text("OK")',
            'button:has-text("Got it")',
            'aside[id^="quickviewPopup"] button',
        ],
    },
    'browser': {
        'user_agent': (
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
            '(KHTML, like Gecko) Chrome/120 Safari/537.36'
        ),
        'locale': 'en-PH',
        'timezone_id': 'Asia/Manila',
        'viewport': {'width': 1366, 'height': 900},
        'device_scale_factor': 1,
        'blocked_resource_types': ['media', 'font'],
        'headful_linger_ms': 3000,
    },
    'scroll': {
        'max_iterations': 500,
        'pulses_per_iteration': 5,
        'max_stable': 6,
        'save_interval': 5,
        'wait_ms': 600,
        'headful_wait_ms': 800,
        'growth_timeout_ms': 5000,
        'overlay_click_timeout_ms': 1000,
    },
    'logging': {
        'level': 'INFO',
        'file': 'logs/scraper.log',
        'console': True,
    },
    'output': {
        'excel_enabled': False,
    },
}


def merge_config(base: dict, overrides: dict) -> dict:
    """
    Recursively merge ``overrides`` into a copy of ``base``.
    
    Nested dictionaries are merged key by key and an empty (null) section
    keeps its defaults. Any other value (lists included) replaces the base
    value outright.
    
    Args:
        base: Base configuration dictionary
        overrides: Values taking precedence over ``base``
        
    Returns:
        New merged dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: str = None) -> dict:
    """
    Load configuration from YAML file on top of the built-in defaults.
    
    When no path is given, ``config.yaml`` in the working directory is used
    if present, otherwise the defaults alone.
    
    Args:
        config_path: Path to config file
        
    Returns:
        Configuration dictionary
        
    Raises:
        FileNotFoundError: An explicitly named config file does not exist
        yaml.YAMLError: The config file is not valid YAML
    """
    if config_path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            return copy.deepcopy(DEFAULT_CONFIG)
        config_path = DEFAULT_CONFIG_PATH
    
    with open(config_path, 'r', encoding='utf-8') as f:
        user_config = yaml.safe_load(f) or {}
    
    if not isinstance(user_config, dict):
        raise yaml.YAMLError(f"Top level of {config_path} must be a mapping")
    
    logger.debug(f"Configuration loaded from: {config_path}")
    return merge_config(DEFAULT_CONFIG, user_config)

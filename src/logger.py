"""Logging configuration for the SM Markets scraper."""
import logging
import os


def setup_logging(config: dict):
    """
    Configure logging for the application.
    
    Args:
        config: Logging configuration dictionary
    """
    log_level = config.get('level', 'INFO')
    log_file = config.get('file', 'logs/scraper.log')
    console_enabled = config.get('console', True)
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    
    # Configure root logger
    logger = logging.getLogger()
    logger.setLevel(level)
    
    # Clear existing handlers
    logger.handlers.clear()
    
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    
    # File handler (disabled with an empty path)
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
    
    # Reduce noise from third-party libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('playwright').setLevel(logging.WARNING)
    
    logger.debug(
        f"Logging configured for SM Markets scraper: level={log_level}, "
        f"file={log_file or 'none'}, console={'on' if console_enabled else 'off'}"
    )

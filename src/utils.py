"""Utility functions for the SM Markets scraper."""
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


_WHITESPACE_RE = re.compile(r'\s+')
_NON_PRICE_CHARS_RE = re.compile(r'[^0-9.,]')
_LEADING_NUMBER_RE = re.compile(r'\d+(?:\.\d*)?|\.\d+')


def sanitize_text(value) -> str:
    """
    Collapse runs of whitespace into single spaces and trim.
    
    Args:
        value: Any value; falsy values become an empty string
        
    Returns:
        Normalized string
    """
    if not value:
        return ""
    return _WHITESPACE_RE.sub(' ', str(value)).strip()


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Parse a currency-formatted string into a number.
    
    Everything except digits, dots and commas is stripped, commas are
    treated as thousands separators, and the leading numeric part is read.
    
    Args:
        text: Price string (e.g. '₱1,250.50')
        
    Returns:
        Price as float, or None when nothing numeric remains
    """
    if not text:
        return None
    
    cleaned = _NON_PRICE_CHARS_RE.sub('', str(text)).replace(',', '')
    match = _LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def default_csv_path(json_path) -> Path:
    """CSV path next to ``json_path`` with the extension swapped to ``.csv``."""
    path = Path(json_path)
    if path.suffix.lower() == '.json':
        return path.with_suffix('.csv')
    return path.with_name(path.name + '.csv')

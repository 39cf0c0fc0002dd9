"""
Shared utility functions for the blog API.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique string ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "tok")
        
    Returns:
        A unique ID like "tok_a1b2c3d4e5f6a7b8"
    """
    uid = uuid.uuid4().hex[:16]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("blogapi").setLevel(level.upper())

"""
Kestrel Shared Module
=====================

Configuration, structured logging, and the Rich console used by the
Kestrel tool.
"""

from shared.config import KestrelConfig, get_config

__all__ = ["KestrelConfig", "get_config"]

"""
Cloud Posture - shared execution core for cloud security-posture checks

This package provides the response cache facade, finding collection and the
orchestration contract every check runs through.
"""

__version__ = "1.0.0"
__author__ = "Security Team"
__email__ = "security@example.com"

from .core.cache import CacheEntry, ResponseCache, ProvenanceTrace, lookup, load_cache
from .core.errors import format_error
from .core.framework import SecurityCheck, CheckContext, CheckResult, Finding, Status, ResultCollector
from .core.settings import Settings
from .core.regions import resolve
from .core.engine import ScanEngine
from .core.registry import CheckRegistry

__all__ = [
    "CacheEntry",
    "ResponseCache",
    "ProvenanceTrace",
    "lookup",
    "load_cache",
    "format_error",
    "SecurityCheck",
    "CheckContext",
    "CheckResult",
    "Finding",
    "Status",
    "ResultCollector",
    "Settings",
    "resolve",
    "ScanEngine",
    "CheckRegistry",
]

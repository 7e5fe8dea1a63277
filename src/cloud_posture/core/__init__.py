"""Core framework components for the posture scanner"""

from .cache import CacheEntry, EntryState, ResponseCache, ProvenanceTrace, lookup, load_cache
from .errors import CloudPostureError, MalformedCacheError, CompletionError, SettingsError, format_error
from .framework import SecurityCheck, CheckContext, CheckResult, Finding, Status, ResultCollector
from .orchestration import Completion, bounded_gather
from .settings import Settings, Tunable
from .regions import resolve, default_region
from .engine import ScanEngine
from .registry import CheckRegistry

__all__ = [
    "CacheEntry",
    "EntryState",
    "ResponseCache",
    "ProvenanceTrace",
    "lookup",
    "load_cache",
    "CloudPostureError",
    "MalformedCacheError",
    "CompletionError",
    "SettingsError",
    "format_error",
    "SecurityCheck",
    "CheckContext",
    "CheckResult",
    "Finding",
    "Status",
    "ResultCollector",
    "Completion",
    "bounded_gather",
    "Settings",
    "Tunable",
    "resolve",
    "default_region",
    "ScanEngine",
    "CheckRegistry",
]

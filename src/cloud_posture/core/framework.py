"""
Core framework classes and interfaces for security checks
"""

import asyncio
import concurrent.futures
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .cache import CacheEntry, ProvenanceTrace, lookup
from .config import GLOBAL_REGION
from .errors import CompletionError, format_error
from .orchestration import Completion, bounded_gather
from .regions import AWS, RegionSet, default_region, resolve
from .settings import Settings, Tunable


class Status(Enum):
    """Finding status codes. Codes are compared for equality only."""
    OK = 0
    WARN = 1
    FAIL = 2
    UNKNOWN = 3

    @classmethod
    def coerce(cls, value: Any) -> "Status":
        if isinstance(value, cls):
            return value
        return cls(value)


@dataclass(frozen=True)
class Finding:
    """One reported outcome of a check"""
    status: Status
    message: str
    region: str = GLOBAL_REGION
    resource: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to dictionary for JSON output"""
        result = {
            'status': self.status.value,
            'message': self.message,
            'region': self.region,
        }
        if self.resource is not None:
            result['resource'] = self.resource
        return result


class ResultCollector:
    """Append-only, ordered list of findings"""

    def __init__(self):
        self._findings: List[Finding] = []
        self._sealed = False
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._findings)

    def __iter__(self):
        return iter(list(self._findings))

    def __getitem__(self, index):
        return self._findings[index]

    @property
    def findings(self) -> List[Finding]:
        return list(self._findings)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _append(self, findings: Iterable[Finding]):
        with self._lock:
            if self._sealed:
                raise CompletionError("Result collector is sealed; the check already completed")
            self._findings.extend(findings)

    def record(self, status: Any, message: str, region: str = GLOBAL_REGION,
               resource: Optional[str] = None) -> Finding:
        finding = Finding(Status.coerce(status), message, region, resource)
        self._append([finding])
        return finding

    def extend(self, other: "ResultCollector"):
        self._append(other.findings)

    def seal(self):
        with self._lock:
            self._sealed = True


@dataclass
class CheckResult:
    """Findings and provenance produced by one check run"""
    check_id: str
    check_title: str
    findings: List[Finding] = field(default_factory=list)
    source: ProvenanceTrace = field(default_factory=ProvenanceTrace)
    error: Optional[BaseException] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'check_id': self.check_id,
            'check_title': self.check_title,
            'findings': [finding.to_dict() for finding in self.findings],
            'source': self.source.to_dict(),
            'error': str(self.error) if self.error is not None else None,
        }


class CheckContext:
    """Per-run view a check works through.

    Holds the cache, the resolved regions, and the finding and provenance
    buffers. Fan-out helpers give each branch its own buffers and merge them
    back in source order once every branch has finished.
    """

    def __init__(self, cache: Mapping, settings: Settings, regions: RegionSet,
                 default_region: str, results: Optional[ResultCollector] = None,
                 source: Optional[ProvenanceTrace] = None):
        self.cache = cache
        self.settings = settings
        self.regions = regions
        self.default_region = default_region
        self.results = results if results is not None else ResultCollector()
        self.source = source if source is not None else ProvenanceTrace()

    def lookup(self, key_path: Sequence[str]) -> CacheEntry:
        return lookup(self.cache, self.source, key_path)

    def add_result(self, status: Any, message: str, region: str = GLOBAL_REGION,
                   resource: Optional[str] = None) -> Finding:
        return self.results.record(status, message, region, resource)

    def listing(self, key_path: Sequence[str], region: str, noun: str,
                resource: Optional[str] = None, report_absent: bool = False,
                unable_message: Optional[str] = None,
                empty_message: Optional[str] = None) -> Optional[Any]:
        """Look up a listing and report the outcomes that end a branch.

        Returns the data when there is something to descend into. Otherwise
        records UNKNOWN for an errored lookup (and for an absent one when
        ``report_absent`` is set), OK for an empty result, and returns None.
        """
        entry = self.lookup(key_path)

        if entry.is_absent and not report_absent:
            return None

        if not entry.is_present:
            prefix = unable_message or f"Unable to query for {noun}"
            self.add_result(Status.UNKNOWN, f"{prefix}: {format_error(entry)}", region, resource)
            return None

        if not entry.data:
            self.add_result(Status.OK, empty_message or f"No {noun} found", region, resource)
            return None

        return entry.data

    def branch(self) -> "CheckContext":
        return CheckContext(self.cache, self.settings, self.regions, self.default_region)

    def join(self, branch: "CheckContext"):
        self.results.extend(branch.results)
        self.source.merge(branch.source)

    async def each(self, items: Iterable[Any],
                   worker: Callable[["CheckContext", Any], Any]):
        """Run ``worker(ctx, item)`` for every item, bounded by max_concurrency.

        Every branch is joined in source order, including those that finished
        next to a failing one; the first failure is raised after the join.
        """
        pairs = [(self.branch(), item) for item in items]
        outcomes = await bounded_gather(pairs, lambda pair: worker(*pair),
                                        self.settings.max_concurrency,
                                        return_exceptions=True)
        for branch, _ in pairs:
            self.join(branch)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    async def each_region(self, worker: Callable[["CheckContext", str], Any]):
        await self.each(self.regions, worker)

    def seal(self):
        self.results.seal()
        self.source.seal()


class SecurityCheck(ABC):
    """Abstract base class for security checks.

    Subclasses fill in the metadata in ``__init__`` and implement
    ``evaluate``. ``run`` is the callback form of the contract and ``scan``
    the awaitable one; both finish with every branch joined and the
    findings and provenance sealed.
    """

    def __init__(self):
        self.check_id: str = ""
        self.check_title: str = ""
        self.service: str = ""
        self.domain: str = ""
        self.description: str = ""
        self.more_info: str = ""
        self.link: str = ""
        self.recommended_action: str = ""
        self.apis: List[str] = []
        self.tunables: Dict[str, Tunable] = {}
        self.provider: str = AWS
        self.region_service: str = "ec2"
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def evaluate(self, ctx: CheckContext):
        """Evaluate the rule, recording findings through ``ctx``"""
        pass

    def tunable(self, name: str, settings: Settings) -> str:
        return self.tunables[name].resolve(settings)

    def regions_for(self, settings: Settings) -> RegionSet:
        return resolve(settings, self.provider, self.region_service)

    async def scan(self, cache: Mapping, settings: Any = None) -> CheckResult:
        """Run the check and return its result; faults end up in ``error``"""
        results = ResultCollector()
        source = ProvenanceTrace()
        error = None

        try:
            settings = Settings.coerce(settings)
            ctx = CheckContext(cache, settings, self.regions_for(settings),
                               default_region(settings), results, source)
            await self.evaluate(ctx)
        except Exception as e:
            self.logger.error(f"Check {self.check_id} failed: {str(e)}")
            error = e

        results.seal()
        source.seal()
        self.logger.debug(f"Check {self.check_id} completed with {len(results)} findings")
        return CheckResult(self.check_id, self.check_title, results.findings, source, error)

    def execute(self, cache: Mapping, settings: Any = None) -> CheckResult:
        """Run the check to completion on a fresh event loop.

        Called from inside a running loop, the check runs on a worker thread
        with its own loop and this call blocks until it finishes.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.scan(cache, settings))

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self.scan(cache, settings)).result()

    def run(self, cache: Mapping, settings: Any,
            callback: Callable[[Optional[BaseException], List[Finding], ProvenanceTrace], Any]) -> Any:
        """Run the check and invoke ``callback(err, findings, source)`` once"""
        completion = Completion(callback)
        try:
            result = self.execute(cache, settings)
        except Exception as e:
            self.logger.error(f"Check {self.check_id} failed: {str(e)}")
            return completion.fire(e, [], ProvenanceTrace())
        return completion.fire(result.error, result.findings, result.source)

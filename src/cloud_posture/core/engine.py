"""
Core scanning engine that runs security checks against a response cache
"""

import logging
import time
import concurrent.futures
from typing import Any, List, Mapping, Optional

from .config import DEFAULT_MAX_WORKERS
from .framework import CheckResult, SecurityCheck
from .registry import CheckRegistry


class ScanEngine:
    """Core scanning engine that orchestrates security checks"""

    def __init__(self, registry: CheckRegistry):
        self.registry = registry

    def select_checks(self, check_ids: List[str] = None,
                      services: List[str] = None) -> List[SecurityCheck]:
        """Determine which checks to run"""
        if check_ids:
            checks = [self.registry.get_check(check_id) for check_id in check_ids]
            return [check for check in checks if check is not None]

        if services:
            checks = []
            for service in services:
                checks.extend(self.registry.get_checks_by_service(service))
            return checks

        return self.registry.get_all_checks()

    def _execute(self, check: SecurityCheck, cache: Mapping, settings: Any) -> CheckResult:
        try:
            result = check.execute(cache, settings)
        except Exception as e:
            logging.error(f"Check {check.check_title} failed: {str(e)}")
            return CheckResult(check.check_id, check.check_title, error=e)

        if result.error is not None:
            logging.debug(f"Check {check.check_title} failed: {str(result.error)}")
        else:
            logging.info(f"Completed check: {check.check_title} "
                         f"({len(result.findings)} findings)")
        return result

    def run_scan(self, cache: Mapping, settings: Any = None,
                 check_ids: List[str] = None,
                 services: List[str] = None,
                 parallel: bool = True,
                 max_workers: int = DEFAULT_MAX_WORKERS,
                 timeout: Optional[float] = None) -> List[CheckResult]:
        """Run the selected checks and return their results in check order.

        A check still running when ``timeout`` seconds have passed is no
        longer waited for and is left out of the results.
        """
        checks = self.select_checks(check_ids, services)

        if not checks:
            logging.warning("No checks selected for scanning")
            return []

        logging.info(f"Running {len(checks)} security checks...")

        if parallel and len(checks) > 1:
            results = self._run_parallel(checks, cache, settings, max_workers, timeout)
        else:
            results = self._run_sequential(checks, cache, settings, timeout)

        total = sum(len(result.findings) for result in results)
        logging.info(f"Scan completed. Total findings: {total}")
        return results

    def _run_parallel(self, checks, cache, settings, max_workers, timeout) -> List[CheckResult]:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = [executor.submit(self._execute, check, cache, settings)
                       for check in checks]
            concurrent.futures.wait(futures, timeout=timeout)

            results = []
            for check, future in zip(checks, futures):
                if future.done():
                    results.append(future.result())
                else:
                    logging.warning(f"Check {check.check_title} did not complete "
                                    f"within {timeout} seconds")
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _run_sequential(self, checks, cache, settings, timeout) -> List[CheckResult]:
        deadline = time.monotonic() + timeout if timeout is not None else None
        results = []
        for check in checks:
            if deadline is not None and time.monotonic() >= deadline:
                logging.warning(f"Check {check.check_title} skipped: scan deadline reached")
                continue
            results.append(self._execute(check, cache, settings))
        return results

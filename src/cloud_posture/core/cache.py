"""
Response cache access: tri-state cache entries, lookups and provenance
"""

import json
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from json import JSONDecodeError
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from .errors import CloudPostureError, CompletionError, MalformedCacheError


KeyPath = Tuple[str, ...]


class EntryState(Enum):
    ABSENT = "absent"
    ERRORED = "errored"
    PRESENT = "present"


@dataclass(frozen=True)
class CacheEntry:
    """Outcome of one cached API call for one key path.

    Exactly one of absent, errored or present holds. ``data`` may only be read
    from a present entry; ``raw`` keeps the untouched cache node for the
    provenance trace.
    """
    state: EntryState
    payload: Any = None
    error: Any = None
    raw: Any = None

    @classmethod
    def absent(cls) -> "CacheEntry":
        return cls(EntryState.ABSENT)

    @classmethod
    def errored(cls, error: Any = None, raw: Any = None) -> "CacheEntry":
        return cls(EntryState.ERRORED, error=error, raw=raw)

    @classmethod
    def present(cls, data: Any, raw: Any = None) -> "CacheEntry":
        return cls(EntryState.PRESENT, payload=data, raw=raw)

    @property
    def is_absent(self) -> bool:
        return self.state is EntryState.ABSENT

    @property
    def is_errored(self) -> bool:
        return self.state is EntryState.ERRORED

    @property
    def is_present(self) -> bool:
        return self.state is EntryState.PRESENT

    @property
    def data(self) -> Any:
        if self.state is not EntryState.PRESENT:
            raise CloudPostureError(f"Cannot read data from a {self.state.value} cache entry")
        return self.payload


class ResponseCache(Mapping):
    """Read-only view over the nested response cache built by collectors.

    Shape: service -> operation -> region -> [sub-key ...] -> leaf, where a
    leaf is ``{"data": ...}`` or ``{"err": ...}`` and ``None`` means the call
    was never collected.
    """

    def __init__(self, tree: Optional[Mapping] = None):
        self._tree = tree if tree is not None else {}
        if not isinstance(self._tree, Mapping):
            raise MalformedCacheError((), f"cache root must be a mapping, not {type(self._tree).__name__}")

    def __getitem__(self, key):
        return self._tree[key]

    def __iter__(self):
        return iter(self._tree)

    def __len__(self):
        return len(self._tree)

    def lookup(self, key_path: Sequence[str],
               provenance: Optional["ProvenanceTrace"] = None) -> CacheEntry:
        return lookup(self, provenance, key_path)

    @classmethod
    def from_file(cls, path: str) -> "ResponseCache":
        return load_cache(path)


class ProvenanceTrace(Mapping):
    """Every lookup a check performed, keyed by the lookup path.

    Sealed once the check completes; recording after that raises.
    """

    def __init__(self):
        self._entries: Dict[KeyPath, CacheEntry] = {}
        self._sealed = False
        self._lock = threading.Lock()

    def __getitem__(self, key_path) -> CacheEntry:
        return self._entries[tuple(key_path)]

    def __contains__(self, key_path) -> bool:
        try:
            return tuple(key_path) in self._entries
        except TypeError:
            return False

    def __iter__(self) -> Iterator[KeyPath]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def record(self, key_path: Sequence[str], entry: CacheEntry):
        """Record a lookup; a repeated path replaces its entry in its original position"""
        with self._lock:
            if self._sealed:
                raise CompletionError("Provenance trace is sealed; the check already completed")
            key_path = tuple(key_path)
            self._entries[key_path] = entry

    def merge(self, other: "ProvenanceTrace"):
        """Fold a branch trace into this one, keeping the branch's order"""
        for key_path, entry in other.items():
            self.record(key_path, entry)

    def seal(self):
        with self._lock:
            self._sealed = True

    def to_dict(self) -> Dict[str, Any]:
        """Render the trace in the same nested shape as the cache"""
        tree: Dict[str, Any] = {}
        # Branches built here, as opposed to raw cache nodes which are never mutated
        branches = {id(tree)}
        for key_path, entry in self._entries.items():
            node = tree
            for key in key_path[:-1]:
                if key not in node:
                    node[key] = {}
                    branches.add(id(node[key]))
                node = node[key]
                if id(node) not in branches:
                    break
            else:
                leaf = key_path[-1]
                if id(node.get(leaf)) not in branches:
                    node[leaf] = entry.raw
        return tree


def _classify(key_path: KeyPath, node: Any) -> CacheEntry:
    if node is None:
        return CacheEntry.absent()

    if not isinstance(node, Mapping):
        raise MalformedCacheError(
            key_path, f"expected a cache leaf mapping, found {type(node).__name__}")

    if node.get("err"):
        return CacheEntry.errored(node["err"], raw=node)

    data = node.get("data")
    if data is not None:
        return CacheEntry.present(data, raw=node)

    # A leaf without usable data is a failed collection
    return CacheEntry.errored(None, raw=node)


def lookup(cache: Mapping, provenance: Optional[ProvenanceTrace],
           key_path: Sequence[str]) -> CacheEntry:
    """Navigate ``cache`` along ``key_path`` and classify what is found.

    Missing keys and ``None`` nodes give an absent entry; a leaf holding
    ``err`` gives an errored entry; a leaf holding ``data`` (even empty) gives
    a present entry. Every lookup is recorded in ``provenance``. Raises
    MalformedCacheError when a non-mapping sits where a branch or leaf is
    expected.
    """
    key_path = tuple(key_path)
    if not key_path:
        raise MalformedCacheError(key_path, "empty key path")

    node: Any = cache
    for depth, key in enumerate(key_path):
        if node is None:
            break
        if not isinstance(node, Mapping):
            raise MalformedCacheError(
                key_path[:depth], f"expected a mapping, found {type(node).__name__}")
        node = node.get(key)

    entry = _classify(key_path, node)
    if provenance is not None:
        provenance.record(key_path, entry)
    return entry


def load_cache(path: str) -> ResponseCache:
    """Load a collector's JSON dump into a ResponseCache"""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Cache file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            tree = json.load(fh)
    except JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno} column {e.colno})") from e
    return ResponseCache(tree)

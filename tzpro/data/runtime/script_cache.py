"""Bounded cache of contract script metadata with single-flight loading.

Architecture:
    The cache maps contract addresses to ScriptMetadata in an LRU structure
    of fixed capacity. Concurrent misses for the same address collapse into
    one load: the first caller starts the loader as its own task, and every
    caller (the first included) awaits the same shared future and receives
    the identical ScriptMetadata instance.

Design Decisions:
    - OrderedDict LRU: ``move_to_end`` on hit, ``popitem(last=False)`` on
      eviction
    - One lock for the LRU and the in-flight registry; the loader itself
      runs outside the lock
    - The load runs on the event loop of the first caller and publishes
      through a ``concurrent.futures.Future``, so callers on other threads
      or loops join it with ``asyncio.wrap_future``
    - Callers await through ``asyncio.shield``; cancelling any caller, the
      first included, leaves the load running for the others
    - Failed loads are not cached; every waiter receives the error and the
      next call starts a fresh load
    - Owned by the client session, not a process-wide singleton
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from collections import OrderedDict
from collections.abc import Awaitable, Callable

from ..models.script import ScriptMetadata
from .telemetry import log_script_cache_event

ScriptLoader = Callable[[str], Awaitable[ScriptMetadata]]


class ScriptCache:
    """LRU cache of ScriptMetadata keyed by contract address."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("ScriptCache capacity must be >= 1")
        self._capacity = capacity
        self._entries: OrderedDict[str, ScriptMetadata] = OrderedDict()
        self._inflight: dict[str, concurrent.futures.Future[ScriptMetadata]] = {}
        # Strong references; the event loop only keeps weak ones to tasks
        self._loads: set[asyncio.Task[None]] = set()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._entries

    def get(self, address: str) -> ScriptMetadata | None:
        """Return cached metadata and mark it most recently used, or None."""
        with self._lock:
            script = self._entries.get(address)
            if script is not None:
                self._entries.move_to_end(address)
        log_script_cache_event(event="hit" if script is not None else "miss", address=address)
        return script

    def add(self, address: str, script: ScriptMetadata) -> None:
        """Insert or replace metadata, evicting the least recently used entry."""
        with self._lock:
            self._store(address, script)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def get_or_load(self, address: str, loader: ScriptLoader) -> ScriptMetadata:
        """Return cached metadata or load it exactly once for concurrent callers.

        The load is started on the running loop of the first caller. Callers
        may come from any thread or event loop; cancelling one of them never
        cancels the load the others are waiting on.

        Args:
            address: Contract address
            loader: Async function fetching and decoding the script

        Returns:
            The cached (or freshly loaded) ScriptMetadata

        Raises:
            Exception: Whatever the loader raised, delivered to every waiter
        """
        with self._lock:
            script = self._entries.get(address)
            if script is not None:
                self._entries.move_to_end(address)
                shared = None
                owner = False
            else:
                shared = self._inflight.get(address)
                owner = shared is None
                if owner:
                    shared = concurrent.futures.Future()
                    self._inflight[address] = shared

        if script is not None:
            log_script_cache_event(event="hit", address=address)
            return script

        assert shared is not None
        if owner:
            log_script_cache_event(event="load", address=address)
            task = asyncio.ensure_future(self._load(address, loader, shared))
            with self._lock:
                self._loads.add(task)
            task.add_done_callback(self._forget_load)
        else:
            log_script_cache_event(event="join", address=address)

        return await asyncio.shield(asyncio.wrap_future(shared))

    async def _load(
        self,
        address: str,
        loader: ScriptLoader,
        shared: concurrent.futures.Future[ScriptMetadata],
    ) -> None:
        try:
            script = await loader(address)
        except asyncio.CancelledError:
            with self._lock:
                self._inflight.pop(address, None)
            shared.cancel()
            raise
        except Exception as e:
            with self._lock:
                self._inflight.pop(address, None)
            shared.set_exception(e)
            return

        with self._lock:
            self._store(address, script)
            self._inflight.pop(address, None)
            size = len(self._entries)
        shared.set_result(script)
        log_script_cache_event(event="stored", address=address, size=size)

    def _forget_load(self, task: asyncio.Task[None]) -> None:
        with self._lock:
            self._loads.discard(task)

    def _store(self, address: str, script: ScriptMetadata) -> None:
        self._entries[address] = script
        self._entries.move_to_end(address)
        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            log_script_cache_event(event="evicted", address=evicted, size=len(self._entries))

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Lock Set
Ordered collection of user-declared forced pairs.

Invariant: the locks form a bipartite partial matching: no item is the
source of two locks and no item is the target of two locks. Every
mutation that would break this raises LockConflictError and leaves the
set unchanged.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence, Union

from app.core.errors import LockConflictError, ValidationError
from app.models.matching import Lock
from app.utils.logger import get_logger

log = get_logger(__name__)

LockLike = Union[Lock, Sequence[str]]


class LockSet:
    def __init__(self) -> None:
        self._locks: list[Lock] = []

    @classmethod
    def from_pairs(cls, pairs: Iterable[LockLike] | None) -> "LockSet":
        """Build a LockSet, validating every pair in declaration order."""
        if isinstance(pairs, LockSet):
            return pairs.copy()

        lock_set = cls()
        for pair in pairs or ():
            if isinstance(pair, Lock):
                lock_set.add_lock(pair.source, pair.target)
            elif isinstance(pair, dict):
                lock_set.add_lock(pair.get("source"), pair.get("target"))
            elif isinstance(pair, (list, tuple)) and len(pair) == 2:
                lock_set.add_lock(pair[0], pair[1])
            else:
                raise ValidationError(f"Malformed lock {pair!r}; expected a (source, target) pair.")
        return lock_set

    def copy(self) -> "LockSet":
        clone = LockSet()
        clone._locks = list(self._locks)
        return clone

    # ─── Mutation ────────────────────────────────────────────────────────────

    def add_lock(self, source: str, target: str) -> Lock:
        """
        Append a lock.

        Raises:
            LockConflictError: if the pair already exists, or source is
                already locked as a source, or target as a target.
            ValidationError: if either side is blank or not a string.
        """
        lock = _make_lock(source, target)

        for existing in self._locks:
            if existing == lock:
                raise LockConflictError(
                    f"Lock '{lock.source}' = '{lock.target}' already exists."
                )
            if existing.source == lock.source:
                raise LockConflictError(
                    f"'{lock.source}' is already locked to '{existing.target}'."
                )
            if existing.target == lock.target:
                raise LockConflictError(
                    f"'{lock.target}' is already locked to '{existing.source}'."
                )

        self._locks.append(lock)
        log.debug("lock_added", source=lock.source, target=lock.target, total=len(self._locks))
        return lock

    def remove_lock(self, index: int) -> Lock:
        """Remove and return the lock at position index (IndexError if out of range)."""
        if not 0 <= index < len(self._locks):
            raise IndexError(
                f"Lock index {index} out of range (have {len(self._locks)} locks)."
            )
        lock = self._locks.pop(index)
        log.debug("lock_removed", index=index, source=lock.source, target=lock.target)
        return lock

    # ─── Queries ─────────────────────────────────────────────────────────────

    @property
    def sources(self) -> set[str]:
        return {lock.source for lock in self._locks}

    @property
    def targets(self) -> set[str]:
        return {lock.target for lock in self._locks}

    def to_pairs(self) -> list[tuple[str, str]]:
        return [lock.as_pair() for lock in self._locks]

    def locks(self) -> list[Lock]:
        return list(self._locks)

    def validate_against(self, list_a: Sequence[str], list_b: Sequence[str]) -> None:
        """
        Ensure every lock refers to items actually present in the lists.

        Raises:
            ValidationError: on the first lock with a dangling side.
        """
        items_a = set(list_a)
        items_b = set(list_b)
        for lock in self._locks:
            if lock.source not in items_a:
                raise ValidationError(f"Locked source '{lock.source}' is not in List A.")
            if lock.target not in items_b:
                raise ValidationError(f"Locked target '{lock.target}' is not in List B.")

    def prune(self, list_a: Sequence[str], list_b: Sequence[str]) -> list[Lock]:
        """Drop locks whose source or target left the lists. Returns the dropped locks."""
        items_a = set(list_a)
        items_b = set(list_b)
        kept = [lock for lock in self._locks if lock.source in items_a and lock.target in items_b]
        dropped = [lock for lock in self._locks if lock not in kept]
        self._locks = kept
        if dropped:
            log.info("locks_pruned", dropped=len(dropped), kept=len(kept))
        return dropped

    def __iter__(self) -> Iterator[Lock]:
        return iter(list(self._locks))

    def __len__(self) -> int:
        return len(self._locks)

    def __getitem__(self, index: int) -> Lock:
        return self._locks[index]

    def __repr__(self) -> str:
        return f"LockSet({self.to_pairs()!r})"


def _make_lock(source: str, target: str) -> Lock:
    for side in (source, target):
        if side is not None and not isinstance(side, str):
            raise ValidationError(
                f"Lock items must be strings, got {type(side).__name__} {side!r}."
            )
    source = (source or "").strip()
    target = (target or "").strip()
    if not source or not target:
        raise ValidationError("Choose an item from both lists to add a lock.")
    return Lock(source=source, target=target)

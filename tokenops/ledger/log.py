"""
Append-only, hash-chained ledger log (JSONL).

Each line is a chain record:
    {"prev_hash": "...", "event_hash": "...", "event": {...}}

event_hash = sha256(prev_hash + canonical_json(event)). The first record
chains to ZERO_HASH, so modifying, dropping or reordering any line breaks
every hash after it.
"""

import hashlib
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from ..core.canonical import canonical_json_bytes, canonical_json_str
from ..core.errors import LedgerError

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None

ZERO_HASH = "0" * 64


@dataclass(frozen=True)
class LedgerEvent:
    """
    Immutable ledger record.

    Fields:
        type: TokenCreated, TokenAssociated or TokenTransferred
        aggregate_id: Token id the event applies to
        ts: Consensus timestamp in nanoseconds
        payload: Event-specific data
        meta: Transaction id, signer public key, signature
        seq: Sequence number (assigned on append)
    """
    type: str
    aggregate_id: str
    ts: int
    payload: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)
    seq: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "aggregate_id": self.aggregate_id,
            "seq": self.seq,
            "ts": self.ts,
            "payload": self.payload,
            "meta": self.meta,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "LedgerEvent":
        return LedgerEvent(
            type=data["type"],
            aggregate_id=data["aggregate_id"],
            seq=data.get("seq"),
            ts=data["ts"],
            payload=data.get("payload") or {},
            meta=data.get("meta") or {},
        )


def hash_event(prev_hash: str, event: LedgerEvent) -> str:
    """SHA-256 of prev_hash followed by the canonical event JSON."""
    b = prev_hash.encode("utf-8") + canonical_json_bytes(event.to_dict())
    return hashlib.sha256(b).hexdigest()


def chain_record(prev_hash: str, event: LedgerEvent) -> Dict[str, Any]:
    return {
        "prev_hash": prev_hash,
        "event_hash": hash_event(prev_hash, event),
        "event": event.to_dict(),
    }


@dataclass
class ChainVerification:
    valid: bool
    checked: int = 0
    error: Optional[str] = None
    mismatch_seq: Optional[int] = None
    expected: Optional[str] = None
    actual: Optional[str] = None


class LedgerLog:
    """
    File-backed append-only ledger log.

    Guarantees:
    - Append-only (no mutations)
    - Exclusive flock around each append
    - Fsync after each append
    """

    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        if not os.path.exists(path):
            with open(path, "wb") as f:
                f.write(b"")

    def _last_seq_and_hash(self, f) -> Tuple[int, str]:
        last_seq = -1
        last_hash = ZERO_HASH
        f.seek(0)
        for line in f:
            if not line.strip():
                continue
            rec = json.loads(line)
            last_seq = rec["event"]["seq"]
            last_hash = rec["event_hash"]
        return last_seq, last_hash

    def append(self, event: LedgerEvent) -> LedgerEvent:
        """
        Append event, assigning the next sequence number.

        Returns:
            The event as stored (with seq)

        Raises:
            LedgerError: If the write fails
        """
        try:
            with open(self.path, "a+b") as f:
                if fcntl:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    last_seq, last_hash = self._last_seq_and_hash(f)
                    stored = LedgerEvent(
                        type=event.type,
                        aggregate_id=event.aggregate_id,
                        seq=last_seq + 1,
                        ts=event.ts,
                        payload=event.payload,
                        meta=event.meta,
                    )
                    line = canonical_json_str(chain_record(last_hash, stored)) + "\n"
                    f.seek(0, os.SEEK_END)
                    f.write(line.encode("utf-8"))
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    if fcntl:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except (OSError, ValueError, KeyError) as ex:
            raise LedgerError(f"Cannot append to ledger log {self.path}: {ex}") from ex
        return stored

    def records(self) -> Iterator[Dict[str, Any]]:
        """Raw chain records in file order."""
        with open(self.path, "rb") as f:
            for line in f:
                if not line.strip():
                    continue
                yield json.loads(line)

    def read(self, aggregate_id: Optional[str] = None, from_seq: int = 0) -> Iterator[LedgerEvent]:
        """
        Read events in sequence order.

        Args:
            aggregate_id: Filter by token id (None = all)
            from_seq: Start from this sequence (inclusive)
        """
        try:
            for rec in self.records():
                ev = rec["event"]
                if ev["seq"] < from_seq:
                    continue
                if aggregate_id is not None and ev["aggregate_id"] != aggregate_id:
                    continue
                yield LedgerEvent.from_dict(ev)
        except (ValueError, KeyError) as ex:
            raise LedgerError(f"Corrupt ledger log {self.path}: {ex}") from ex

    def last_hash(self) -> str:
        with open(self.path, "rb") as f:
            _, last_hash = self._last_seq_and_hash(f)
        return last_hash

    def verify(self) -> ChainVerification:
        """
        Recompute the hash chain and report the first broken link.
        """
        prev_hash = ZERO_HASH
        checked = 0
        try:
            for rec in self.records():
                event = LedgerEvent.from_dict(rec.get("event") or {})
                if rec.get("prev_hash") != prev_hash:
                    return ChainVerification(
                        valid=False,
                        checked=checked,
                        error="prev_hash mismatch",
                        mismatch_seq=event.seq,
                        expected=prev_hash,
                        actual=rec.get("prev_hash"),
                    )
                computed = hash_event(prev_hash, event)
                if rec.get("event_hash") != computed:
                    return ChainVerification(
                        valid=False,
                        checked=checked,
                        error="event_hash mismatch",
                        mismatch_seq=event.seq,
                        expected=computed,
                        actual=rec.get("event_hash"),
                    )
                if event.seq != checked:
                    return ChainVerification(
                        valid=False,
                        checked=checked,
                        error="sequence gap",
                        mismatch_seq=event.seq,
                        expected=str(checked),
                        actual=str(event.seq),
                    )
                prev_hash = computed
                checked += 1
        except (ValueError, KeyError) as ex:
            return ChainVerification(valid=False, checked=checked, error=f"unreadable record: {ex}")
        return ChainVerification(valid=True, checked=checked)

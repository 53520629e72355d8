"""
Local ledger: hash-chained transaction log, replay reducer and the
TransactionService that submits to it.
"""

from .log import ZERO_HASH, ChainVerification, LedgerEvent, LedgerLog, chain_record, hash_event
from .reducer import LedgerState, Reducer, build_reducer, replay
from .local import LocalLedgerService

__all__ = [
    "ZERO_HASH",
    "ChainVerification",
    "LedgerEvent",
    "LedgerLog",
    "chain_record",
    "hash_event",
    "LedgerState",
    "Reducer",
    "build_reducer",
    "replay",
    "LocalLedgerService",
]

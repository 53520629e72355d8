"""
Ledger reducer: pure state transitions for token events.

Replaying the log through the reducer yields the current ledger view.
Handlers never mutate their input; they return a new token record.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

from ..core.errors import LedgerError
from .log import LedgerEvent

TOKEN_CREATED = "TokenCreated"
TOKEN_ASSOCIATED = "TokenAssociated"
TOKEN_TRANSFERRED = "TokenTransferred"

Handler = Callable[[Optional[Dict[str, Any]], LedgerEvent], Dict[str, Any]]


@dataclass(frozen=True)
class LedgerState:
    """
    Replayed ledger view.

    Fields:
        version: Number of events applied
        tokens: token_id -> token record (treasury, supply, associations, balances)
    """
    version: int = 0
    tokens: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def get_token(self, token_id: str) -> Optional[Dict[str, Any]]:
        return self.tokens.get(token_id)

    def with_token(self, token_id: str, record: Dict[str, Any]) -> "LedgerState":
        tokens = dict(self.tokens)
        tokens[token_id] = record
        return LedgerState(version=self.version + 1, tokens=tokens)

    def is_associated(self, token_id: str, account_id: str) -> bool:
        token = self.tokens.get(token_id)
        if not token:
            return False
        return account_id == token["treasury"] or account_id in token["associations"]

    def balance(self, token_id: str, account_id: str) -> int:
        token = self.tokens.get(token_id) or {}
        return int((token.get("balances") or {}).get(account_id, 0))


class Reducer:
    """
    Registry of event handlers.

    Usage:
        reducer = build_reducer()
        state = reducer.apply(state, event)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type] = handler

    def apply(self, state: LedgerState, event: LedgerEvent) -> LedgerState:
        """
        Raises:
            LedgerError: If no handler is registered for the event type
        """
        if event.type not in self._handlers:
            raise LedgerError(f"No handler for event type: {event.type}")
        current = state.get_token(event.aggregate_id)
        return state.with_token(event.aggregate_id, self._handlers[event.type](current, event))


def handle_token_created(current: Optional[Dict[str, Any]], event: LedgerEvent) -> Dict[str, Any]:
    p = event.payload
    treasury = p["treasuryId"]
    initial = int(p.get("initialSupply", 0))
    return {
        "tokenId": event.aggregate_id,
        "name": p.get("name", ""),
        "symbol": p.get("symbol", ""),
        "decimals": int(p.get("decimals", 0)),
        "supplyType": p.get("supplyType", "INFINITE"),
        "maxSupply": int(p.get("maxSupply", 0)),
        "totalSupply": initial,
        "treasury": treasury,
        "associations": [],
        "balances": {treasury: initial},
        "createdSeq": event.seq,
    }


def handle_token_associated(current: Optional[Dict[str, Any]], event: LedgerEvent) -> Dict[str, Any]:
    if current is None:
        raise LedgerError(f"Association for unknown token {event.aggregate_id}")
    account_id = event.payload["accountId"]
    record = dict(current)
    if account_id not in record["associations"]:
        record["associations"] = list(record["associations"]) + [account_id]
    return record


def handle_token_transferred(current: Optional[Dict[str, Any]], event: LedgerEvent) -> Dict[str, Any]:
    if current is None:
        raise LedgerError(f"Transfer of unknown token {event.aggregate_id}")
    p = event.payload
    amount = int(p["amount"])
    balances = dict(current.get("balances") or {})
    balances[p["from"]] = int(balances.get(p["from"], 0)) - amount
    balances[p["to"]] = int(balances.get(p["to"], 0)) + amount
    record = dict(current)
    record["balances"] = balances
    return record


def build_reducer() -> Reducer:
    reducer = Reducer()
    reducer.register(TOKEN_CREATED, handle_token_created)
    reducer.register(TOKEN_ASSOCIATED, handle_token_associated)
    reducer.register(TOKEN_TRANSFERRED, handle_token_transferred)
    return reducer


def replay(events: Iterable[LedgerEvent], reducer: Optional[Reducer] = None) -> LedgerState:
    """Fold events into a LedgerState, in order."""
    reducer = reducer or build_reducer()
    state = LedgerState()
    for event in events:
        state = reducer.apply(state, event)
    return state

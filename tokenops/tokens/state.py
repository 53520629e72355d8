"""
Entity state store for tokens.

Tokens live in the "token-tokens" namespace keyed by token id. Every
mutation is a read-modify-write of one record; callers serialize mutations
per token.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.errors import StateStoreError, TokenNotFound
from ..core.models import Association, TokenData
from ..state.store import StateStore

logger = logging.getLogger(__name__)

TOKEN_NAMESPACE = "token-tokens"


class TokenStateStore:
    """
    Usage:
        tokens = TokenStateStore(state)
        tokens.save_token(data.token_id, data)
        tokens.add_association("0.0.1001", "0.0.2002", "alice")
    """

    def __init__(self, state: StateStore) -> None:
        self.state = state

    def save_token(self, token_id: str, data: TokenData) -> None:
        """Upsert token record (idempotent for identical data)."""
        logger.debug(f"[TOKEN STATE] Saving token {token_id}")
        try:
            self.state.set(TOKEN_NAMESPACE, token_id, data.to_dict())
        except StateStoreError as ex:
            logger.error(f"[TOKEN STATE] Failed to save token {token_id}: {ex}")
            raise

    def get_token(self, token_id: str) -> Optional[TokenData]:
        raw = self.state.get(TOKEN_NAMESPACE, token_id)
        if raw is None:
            logger.debug(f"[TOKEN STATE] Token {token_id} not found")
            return None
        return TokenData.from_dict(raw)

    def list_tokens(self, network: Optional[str] = None) -> List[TokenData]:
        tokens = [TokenData.from_dict(raw) for raw in self.state.list(TOKEN_NAMESPACE)]
        if network:
            tokens = [t for t in tokens if t.network == network]
        logger.debug(f"[TOKEN STATE] Listed {len(tokens)} tokens")
        return tokens

    def remove_token(self, token_id: str) -> bool:
        """
        Returns:
            True if a record was removed
        """
        if not self.state.has(TOKEN_NAMESPACE, token_id):
            return False
        self.state.delete(TOKEN_NAMESPACE, token_id)
        logger.debug(f"[TOKEN STATE] Removed token {token_id}")
        return True

    def add_association(self, token_id: str, account_id: str, name: str) -> TokenData:
        """
        Record an association on a stored token.

        Adding an account that is already associated leaves the record as is.

        Returns:
            The stored token after the call

        Raises:
            TokenNotFound: If token_id is not stored
        """
        token = self.get_token(token_id)
        if token is None:
            raise TokenNotFound(token_id)

        if token.has_association(account_id):
            logger.warning(f"[TOKEN STATE] Association {account_id} already exists for token {token_id}")
            return token

        updated = token.with_association(Association(name=name, account_id=account_id))
        self.save_token(token_id, updated)
        logger.debug(f"[TOKEN STATE] Added association {account_id} to token {token_id}")
        return updated

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate counts, recomputed from every stored token."""
        tokens = self.list_tokens()
        by_network: Dict[str, int] = {}
        by_supply_type: Dict[str, int] = {}
        with_associations = 0
        total_associations = 0

        for token in tokens:
            by_network[token.network] = by_network.get(token.network, 0) + 1
            supply = token.supply_type.value
            by_supply_type[supply] = by_supply_type.get(supply, 0) + 1
            if token.associations:
                with_associations += 1
                total_associations += len(token.associations)

        return {
            "total": len(tokens),
            "byNetwork": by_network,
            "bySupplyType": by_supply_type,
            "withAssociations": with_associations,
            "totalAssociations": total_associations,
        }

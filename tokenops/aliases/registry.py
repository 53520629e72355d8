"""
Alias registry.

Maps (alias, entity type, network) to an AliasRecord. At most one record
exists per triple; register() never overwrites.
"""

import logging
from typing import List, Optional

from ..core.errors import DuplicateAlias
from ..core.models import AliasRecord, EntityType
from ..state.store import StateStore

logger = logging.getLogger(__name__)

ALIAS_NAMESPACE = "aliases"


def compose_key(alias: str, entity_type: EntityType, network: str) -> str:
    return f"{network}:{entity_type.value}:{alias}"


class AliasRegistry:

    def __init__(self, state: StateStore) -> None:
        self.state = state

    def register(self, record: AliasRecord) -> AliasRecord:
        """
        Store a new alias record.

        Raises:
            DuplicateAlias: If the (alias, type, network) triple is taken
        """
        key = compose_key(record.alias, record.entity_type, record.network)
        if self.state.has(ALIAS_NAMESPACE, key):
            raise DuplicateAlias(record.alias, record.entity_type.value, record.network)
        self.state.set(ALIAS_NAMESPACE, key, record.to_dict())
        logger.debug(
            f"[ALIAS] Registered {record.alias} ({record.entity_type.value}) on {record.network} -> {record.entity_id}"
        )
        return record

    def resolve(self, alias: str, entity_type: EntityType, network: str) -> Optional[AliasRecord]:
        data = self.state.get(ALIAS_NAMESPACE, compose_key(alias, entity_type, network))
        return AliasRecord.from_dict(data) if data else None

    def list(self, network: Optional[str] = None, entity_type: Optional[EntityType] = None) -> List[AliasRecord]:
        records = []
        for data in self.state.list(ALIAS_NAMESPACE):
            record = AliasRecord.from_dict(data)
            if network and record.network != network:
                continue
            if entity_type and record.entity_type != entity_type:
                continue
            records.append(record)
        return records

    def find_by_entity(self, entity_id: str, entity_type: EntityType, network: str) -> Optional[AliasRecord]:
        """Reverse lookup: first alias naming entity_id (linear scan)."""
        for record in self.list(network=network, entity_type=entity_type):
            if record.entity_id == entity_id:
                return record
        return None

    def remove(self, alias: str, entity_type: EntityType, network: str) -> bool:
        """
        Remove an alias record.

        Returns:
            True if a record was removed
        """
        key = compose_key(alias, entity_type, network)
        if not self.state.has(ALIAS_NAMESPACE, key):
            return False
        self.state.delete(ALIAS_NAMESPACE, key)
        logger.debug(f"[ALIAS] Removed {alias} ({entity_type.value}) on {network}")
        return True

"""
Tests for the alias registry.

Critical: At most one record per (alias, type, network), never overwritten.
"""

import pytest

from tokenops.aliases.registry import ALIAS_NAMESPACE, AliasRegistry
from tokenops.core.errors import DuplicateAlias
from tokenops.core.models import AliasRecord, EntityType
from tokenops.state.memory_store import MemoryStateStore


def _record(alias="alice", entity_type=EntityType.ACCOUNT, network="testnet", entity_id="0.0.2002", **kw):
    return AliasRecord(alias=alias, entity_type=entity_type, network=network, entity_id=entity_id, **kw)


def test_register_and_resolve():
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record(key_ref_id="kr_1", public_key="02ab"))

    record = registry.resolve("alice", EntityType.ACCOUNT, "testnet")
    assert record.entity_id == "0.0.2002"
    assert record.key_ref_id == "kr_1"
    assert record.public_key == "02ab"


def test_storage_key_layout():
    state = MemoryStateStore()
    AliasRegistry(state).register(_record())
    assert state.keys(ALIAS_NAMESPACE) == ["testnet:account:alice"]


def test_duplicate_rejected_and_not_overwritten():
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record())

    with pytest.raises(DuplicateAlias):
        registry.register(_record(entity_id="0.0.9999"))
    assert registry.resolve("alice", EntityType.ACCOUNT, "testnet").entity_id == "0.0.2002"


def test_same_name_other_type_or_network():
    """Uniqueness is per (alias, type, network)."""
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record())
    registry.register(_record(entity_type=EntityType.TOKEN, entity_id="0.0.1001"))
    registry.register(_record(network="mainnet", entity_id="0.0.7"))

    assert registry.resolve("alice", EntityType.TOKEN, "testnet").entity_id == "0.0.1001"
    assert registry.resolve("alice", EntityType.ACCOUNT, "mainnet").entity_id == "0.0.7"
    assert registry.resolve("alice", EntityType.KEY, "testnet") is None


def test_list_filters():
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record())
    registry.register(_record(alias="gold", entity_type=EntityType.TOKEN, entity_id="0.0.1001"))
    registry.register(_record(alias="bob", network="mainnet", entity_id="0.0.3003"))

    assert len(registry.list()) == 3
    assert {r.alias for r in registry.list(network="testnet")} == {"alice", "gold"}
    assert [r.alias for r in registry.list(network="testnet", entity_type=EntityType.TOKEN)] == ["gold"]


def test_find_by_entity():
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record(alias="gold", entity_type=EntityType.TOKEN, entity_id="0.0.1001"))

    assert registry.find_by_entity("0.0.1001", EntityType.TOKEN, "testnet").alias == "gold"
    assert registry.find_by_entity("0.0.1001", EntityType.TOKEN, "mainnet") is None


def test_remove():
    registry = AliasRegistry(MemoryStateStore())
    registry.register(_record())

    assert registry.remove("alice", EntityType.ACCOUNT, "testnet")
    assert not registry.remove("alice", EntityType.ACCOUNT, "testnet")
    assert registry.resolve("alice", EntityType.ACCOUNT, "testnet") is None

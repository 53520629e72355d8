"""
Tests for canonical serialization.

Critical: Transaction signing and state files depend on deterministic bytes.
"""

from tokenops.core.canonical import canonical_json_bytes, canonical_json_str, canonicalize
from tokenops.tx.service import TOKEN_ASSOCIATE, Transaction


def test_dict_key_order_independent():
    """Different key insertion orders produce identical bytes."""
    a = {"tokenId": "0.0.1001", "accountId": "0.0.2002", "nested": {"z": 1, "a": 2}}
    b = {"nested": {"a": 2, "z": 1}, "accountId": "0.0.2002", "tokenId": "0.0.1001"}
    assert canonical_json_bytes(a) == canonical_json_bytes(b)


def test_tuples_become_lists():
    assert canonicalize({"fees": ({"type": "fixed"},)}) == {"fees": [{"type": "fixed"}]}


def test_compact_separators():
    assert canonical_json_str({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_unicode_kept():
    assert canonical_json_str({"name": "Göld"}) == '{"name":"Göld"}'


def test_signing_bytes_stable():
    """Equal transactions sign the same bytes regardless of body key order."""
    tx1 = Transaction(kind=TOKEN_ASSOCIATE, account_id="0.0.2002", body={"tokenId": "0.0.1", "accountId": "0.0.2002"})
    tx2 = Transaction(kind=TOKEN_ASSOCIATE, account_id="0.0.2002", body={"accountId": "0.0.2002", "tokenId": "0.0.1"})
    assert tx1.signing_bytes() == tx2.signing_bytes()


def test_signing_bytes_cover_kind_and_account():
    body = {"tokenId": "0.0.1", "accountId": "0.0.2002"}
    tx = Transaction(kind=TOKEN_ASSOCIATE, account_id="0.0.2002", body=body)
    other = Transaction(kind=TOKEN_ASSOCIATE, account_id="0.0.3003", body=body)
    assert tx.signing_bytes() != other.signing_bytes()


def test_enum_members_written_as_values():
    from tokenops.core.models import EntityType

    assert canonical_json_str({"type": EntityType.TOKEN}) == '{"type":"token"}'


def test_bytes_written_as_hex():
    assert canonicalize({"sig": b"\x01\xab"}) == {"sig": "01ab"}

"""
Tests for token command handlers.

Critical: State is written only after the ledger reports success, and every
failure comes back as a single "<action>: <cause>" message.
"""

import json
import logging
import os
import tempfile

from tokenops.core.models import AliasRecord, EntityType, SupplyType, TransactionResult
from tokenops.keys.signer import SigningKey
from tokenops.tests.helpers import (
    ALICE_ID,
    ALICE_KEY,
    BOB_ID,
    BOB_KEY,
    OPERATOR_ID,
    RecordingLedger,
    make_services,
)
from tokenops.tokens.commands import (
    FAILURE,
    SUCCESS,
    associate_token,
    create_token,
    create_token_from_file,
    list_tokens,
    remove_token,
    token_stats,
    transfer_token,
)

REJECTED = TransactionResult(success=False, transaction_id="tx-rejected", receipt={"status": "REJECTED"})


def _register_alice(services):
    handle = services.kcs.import_secret(ALICE_KEY)
    services.aliases.register(
        AliasRecord(
            alias="alice",
            entity_type=EntityType.ACCOUNT,
            network="testnet",
            entity_id=ALICE_ID,
            key_ref_id=handle.key_ref_id,
            public_key=handle.public_key,
        )
    )
    return handle


def _write_definition(services, name, data):
    os.makedirs(services.settings.input_dir, exist_ok=True)
    path = os.path.join(services.settings.input_dir, f"token.{name}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


def test_create_with_treasury_secret():
    """The id:secret treasury signs the create and the token is persisted."""
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = create_token({"name": "Gold", "symbol": "GLD", "treasury": "0.0.123:abc123"}, services)

        assert result.status == SUCCESS
        assert result.output["tokenId"] == "0.0.999"
        assert result.output["treasuryId"] == "0.0.123"

        mode, tx, key_ref_id = ledger.submits[0]
        assert mode == "key_ref"
        assert services.kcs.get_public_key(key_ref_id) == SigningKey.from_secret("abc123").public_key_hex()

        token = services.tokens.get_token("0.0.999")
        assert token.treasury_id == "0.0.123"
        assert token.network == "testnet"
        assert token.initial_supply == 1_000_000
        assert token.keys.treasury_key == SigningKey.from_secret("abc123").public_key_hex()
        assert token.keys.admin_key == services.resolver.operator_account("testnet").public_key


def test_create_with_operator_treasury():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = create_token({"name": "Gold", "symbol": "GLD"}, services)

        assert result.ok
        assert result.output["treasuryId"] == OPERATOR_ID
        assert ledger.submits[0][0] == "operator"


def test_create_with_unknown_treasury_alias():
    """An unknown alias fails before anything reaches the ledger."""
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = create_token({"name": "Gold", "symbol": "GLD", "treasury": "alice"}, services)

        assert result.status == FAILURE
        assert result.error_message == 'Failed to create token: Alias "alice" not found for account on testnet'
        assert ledger.invocations == 0
        assert services.tokens.list_tokens() == []


def test_create_without_operator():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger, operator=False)

        result = create_token({"name": "Gold", "symbol": "GLD"}, services)

        assert not result.ok
        assert result.error_message.startswith("Failed to create token: No credentials found for testnet")
        assert ledger.invocations == 0


def test_create_validation_failure():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = create_token({"name": "Gold", "symbol": "GLD", "supply_type": "FINITE"}, services)
        assert result.error_message.startswith("Failed to create token:")
        assert "Max supply is required" in result.error_message

        result = create_token(
            {"name": "Gold", "symbol": "GLD", "supply_type": "FINITE", "max_supply": 5, "initial_supply": 10},
            services,
        )
        assert "cannot be less than initial supply" in result.error_message
        assert ledger.invocations == 0


def test_create_finite():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        result = create_token(
            {"name": "Gold", "symbol": "GLD", "supply_type": "finite", "max_supply": "5000", "initial_supply": "100"},
            services,
        )
        assert result.ok
        token = services.tokens.get_token("0.0.999")
        assert token.supply_type == SupplyType.FINITE
        assert token.max_supply == 5000


def test_create_rejected_persists_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger(results=[REJECTED]))

        result = create_token({"name": "Gold", "symbol": "GLD", "alias": "gold"}, services)

        assert result.error_message == "Failed to create token: Token creation failed"
        assert services.tokens.list_tokens() == []
        assert services.aliases.list() == []


def test_create_success_without_token_id():
    with tempfile.TemporaryDirectory() as tmpdir:
        malformed = TransactionResult(success=True, transaction_id="tx", entity_id=None)
        services = make_services(tmpdir, ledger=RecordingLedger(results=[malformed]))

        result = create_token({"name": "Gold", "symbol": "GLD"}, services)

        assert not result.ok
        assert "returned no entity id" in result.error_message
        assert services.tokens.list_tokens() == []


def test_create_with_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = create_token({"name": "Gold", "symbol": "GLD", "alias": "gold"}, services)
        assert result.output["alias"] == "gold"
        assert services.resolver.resolve_token("gold", "testnet").token_id == "0.0.999"

        again = create_token({"name": "Gold", "symbol": "GLD", "alias": "gold"}, services)
        assert again.error_message == 'Failed to create token: Alias "gold" already exists for token on testnet'
        assert len(ledger.submits) == 1


def test_associate_with_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)
        handle = _register_alice(services)
        create_token({"name": "Gold", "symbol": "GLD", "alias": "gold"}, services)

        result = associate_token({"token": "gold", "account": "alice"}, services)

        assert result.ok
        assert result.output == {
            "transactionId": "tx-1",
            "tokenId": "0.0.999",
            "accountId": ALICE_ID,
            "associated": True,
        }
        assert ledger.submits[1][0] == "key_ref"
        assert ledger.submits[1][2] == handle.key_ref_id
        associations = services.tokens.get_token("0.0.999").associations
        assert [(a.name, a.account_id) for a in associations] == [("alice", ALICE_ID)]


def test_associate_with_secret_uses_account_id_as_name():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        create_token({"name": "Gold", "symbol": "GLD"}, services)

        result = associate_token({"token": "0.0.999", "account": f"{BOB_ID}:{BOB_KEY}"}, services)

        assert result.ok
        association = services.tokens.get_token("0.0.999").associations[0]
        assert association.name == BOB_ID


def test_associate_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        create_token({"name": "Gold", "symbol": "GLD"}, services)
        services.ledger.results.append(REJECTED)

        result = associate_token({"token": "0.0.999", "account": f"{BOB_ID}:{BOB_KEY}"}, services)

        assert result.error_message == "Failed to associate token: Token association failed"
        assert services.tokens.get_token("0.0.999").associations == ()


def test_associate_token_not_stored_locally():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())

        result = associate_token({"token": "0.0.4040", "account": f"{BOB_ID}:{BOB_KEY}"}, services)

        assert result.error_message == "Failed to associate token: Token 0.0.4040 not found"
        assert services.tokens.list_tokens() == []


def test_associate_bare_id_cannot_sign():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = associate_token({"token": "0.0.999", "account": BOB_ID}, services)

        assert not result.ok
        assert ledger.invocations == 0


def test_transfer_from_operator():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        result = transfer_token({"token": "0.0.999", "to": BOB_ID, "amount": "25"}, services)

        assert result.ok
        assert result.output["from"] == OPERATOR_ID
        assert result.output["to"] == BOB_ID
        assert result.output["amount"] == 25
        assert ledger.submits[0][0] == "operator"
        assert ledger.builds[0].body == {"tokenId": "0.0.999", "to": BOB_ID, "amount": 25}


def test_transfer_from_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)
        handle = _register_alice(services)

        result = transfer_token({"token": "0.0.999", "from": "alice", "to": BOB_ID, "amount": 1}, services)

        assert result.output["from"] == ALICE_ID
        assert ledger.submits[0][2] == handle.key_ref_id


def test_transfer_failures():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger(results=[REJECTED])
        services = make_services(tmpdir, ledger=ledger)

        bad_source = transfer_token({"token": "0.0.999", "from": BOB_ID, "to": ALICE_ID, "amount": 1}, services)
        assert bad_source.error_message.startswith("Failed to transfer token:")
        assert ledger.invocations == 0

        bad_amount = transfer_token({"token": "0.0.999", "to": BOB_ID, "amount": 0}, services)
        assert not bad_amount.ok

        rejected = transfer_token({"token": "0.0.999", "to": BOB_ID, "amount": 1}, services)
        assert rejected.error_message == "Failed to transfer token: Token transfer failed"


def test_create_from_file_with_partial_associations(caplog):
    """A failed association is reported and logged, the command still succeeds."""
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger(
            results=[
                TransactionResult(success=True, transaction_id="tx-create", entity_id="0.0.999"),
                TransactionResult(success=True, transaction_id="tx-alice"),
                REJECTED,
            ]
        )
        services = make_services(tmpdir, ledger=ledger)
        _write_definition(
            services,
            "gold",
            {
                "name": "Gold",
                "symbol": "GLD",
                "decimals": 2,
                "supplyType": "finite",
                "initialSupply": 1000,
                "maxSupply": 0,
                "treasury": {"accountId": "0.0.123", "key": "abc123"},
                "keys": {"adminKey": "02ab", "supplyKey": "02cd"},
                "associations": [
                    {"accountId": ALICE_ID, "key": ALICE_KEY, "name": "alice"},
                    {"accountId": BOB_ID, "key": BOB_KEY},
                ],
                "customFees": [{"type": "fixed", "amount": 5, "unitType": "HBAR", "collectorId": "0.0.123"}],
            },
        )

        with caplog.at_level(logging.WARNING):
            result = create_token_from_file({"file": "gold", "alias": "gold"}, services)

        assert result.ok
        assert result.output["tokenId"] == "0.0.999"
        assert result.output["maxSupply"] == 1000
        assert result.output["associations"] == [
            {"accountId": ALICE_ID, "name": "alice", "success": True, "transactionId": "tx-alice"},
            {"accountId": BOB_ID, "name": BOB_ID, "success": False},
        ]

        modes = [(mode, arg) for mode, _, arg in ledger.submits]
        assert modes[1] == ("key", SigningKey.from_secret(ALICE_KEY).public_key_hex())
        assert modes[2] == ("key", SigningKey.from_secret(BOB_KEY).public_key_hex())

        token = services.tokens.get_token("0.0.999")
        assert [a.account_id for a in token.associations] == [ALICE_ID]
        assert token.keys.supply_key == "02cd"
        assert token.custom_fees[0].collector_id == "0.0.123"
        assert services.resolver.resolve_token("gold", "testnet").token_id == "0.0.999"

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert f"Failed to associate account {BOB_ID} with token 0.0.999" in warnings[0].getMessage()


def test_create_from_file_by_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        path = os.path.join(tmpdir, "custom.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "name": "Silver",
                    "symbol": "SLV",
                    "decimals": 0,
                    "supplyType": "infinite",
                    "initialSupply": 10,
                    "treasury": "0.0.123:abc123",
                    "keys": {"adminKey": "02ab"},
                },
                f,
            )

        result = create_token_from_file({"file": path}, services)

        assert result.ok
        assert result.output["associations"] == []
        assert result.output["supplyType"] == "INFINITE"


def test_create_from_file_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        missing = create_token_from_file({"file": "nope"}, services)
        assert missing.error_message.startswith("Failed to create token from file: Token file not found")

        _write_definition(services, "bad", {"name": "Gold"})
        invalid = create_token_from_file({"file": "bad"}, services)
        assert "Invalid token definition file token.bad.json" in invalid.error_message

        with open(os.path.join(services.settings.input_dir, "token.binary.json"), "wb") as f:
            f.write(b'{"name": "\xff\xfe"}')
        undecodable = create_token_from_file({"file": "binary"}, services)
        assert undecodable.status == FAILURE
        assert undecodable.error_message.startswith("Failed to create token from file: Token file")
        assert "not valid UTF-8" in undecodable.error_message

        assert not create_token_from_file({}, services).ok
        assert ledger.invocations == 0


def test_list_stats_and_remove():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger(
            results=[
                TransactionResult(success=True, transaction_id="tx-1", entity_id="0.0.1001"),
                TransactionResult(success=True, transaction_id="tx-2", entity_id="0.0.1002"),
            ]
        )
        services = make_services(tmpdir, ledger=ledger)
        create_token({"name": "Gold", "symbol": "GLD", "alias": "gold"}, services)
        create_token({"name": "Silver", "symbol": "SLV"}, services)

        listed = list_tokens({"network": "testnet"}, services)
        assert listed.output["count"] == 2
        assert listed.output["tokens"][0]["alias"] == "gold"
        assert "alias" not in listed.output["tokens"][1]

        stats = token_stats({}, services)
        assert stats.output["total"] == 2
        assert stats.output["byNetwork"] == {"testnet": 2}

        removed = remove_token({"token": "gold"}, services)
        assert removed.output == {"tokenId": "0.0.1001", "removed": True}
        assert services.tokens.get_token("0.0.1001") is None

        again = remove_token({"token": "0.0.1001"}, services)
        assert again.error_message == "Failed to remove token: Token 0.0.1001 not found"


def test_end_to_end_on_local_ledger():
    """create, associate and transfer against the local ledger."""
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir)
        _register_alice(services)

        created = create_token({"name": "Gold", "symbol": "GLD", "initial_supply": 100, "alias": "gold"}, services)
        assert created.output["tokenId"] == "0.0.1001"

        assert associate_token({"token": "gold", "account": "alice"}, services).ok
        again = associate_token({"token": "gold", "account": "alice"}, services)
        assert again.error_message == "Failed to associate token: Token association failed"

        sent = transfer_token({"token": "gold", "to": "alice", "amount": 30}, services)
        assert sent.ok

        too_much = transfer_token({"token": "gold", "to": "alice", "amount": 71}, services)
        assert too_much.error_message == "Failed to transfer token: Token transfer failed"

        state = services.ledger.state()
        assert state.balance("0.0.1001", OPERATOR_ID) == 70
        assert state.balance("0.0.1001", ALICE_ID) == 30
        assert services.ledger.verify_chain().valid
        assert len(services.tokens.get_token("0.0.1001").associations) == 1

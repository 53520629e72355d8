"""
Tests for reference resolution.

Critical: Resolution never touches the ledger, and an account that must sign
is never resolved without a signing key.
"""

import tempfile

import pytest

from tokenops.core.errors import AliasNotFound, InvalidReference, MissingCredentials, ResolutionFailure
from tokenops.core.models import AliasRecord, EntityType, ResolutionSource
from tokenops.keys.signer import SigningKey
from tokenops.resolve.resolver import AccountRole
from tokenops.tests.helpers import ALICE_ID, ALICE_KEY, BOB_ID, OPERATOR_ID, RecordingLedger, make_services


def _register_alice(services, with_key=True):
    handle = services.kcs.import_secret(ALICE_KEY) if with_key else None
    services.aliases.register(
        AliasRecord(
            alias="alice",
            entity_type=EntityType.ACCOUNT,
            network="testnet",
            entity_id=ALICE_ID,
            key_ref_id=handle.key_ref_id if handle else None,
            public_key=handle.public_key if handle else None,
        )
    )
    return handle


def test_treasury_id_with_secret():
    """An id:secret treasury imports the key and signs as that id."""
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        account = services.resolver.resolve_account("0.0.123:abc123", AccountRole.TREASURY, "testnet")

        assert account.account_id == "0.0.123"
        assert account.source == ResolutionSource.SECRET
        assert account.signing_key_ref.startswith("kr_")
        assert account.public_key == SigningKey.from_secret("abc123").public_key_hex()
        assert services.kcs.get_public_key(account.signing_key_ref) == account.public_key


def test_id_with_secret_bad_id():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        with pytest.raises(InvalidReference):
            services.resolver.resolve_account("alice:abc123", AccountRole.ACCOUNT, "testnet")


def test_unknown_alias_does_not_touch_ledger():
    with tempfile.TemporaryDirectory() as tmpdir:
        ledger = RecordingLedger()
        services = make_services(tmpdir, ledger=ledger)

        with pytest.raises(AliasNotFound) as exc_info:
            services.resolver.resolve_account("alice", AccountRole.ACCOUNT, "testnet")
        assert exc_info.value.alias == "alice"
        assert ledger.invocations == 0


def test_signing_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        handle = _register_alice(services)

        account = services.resolver.resolve_account("alice", AccountRole.SOURCE, "testnet")
        assert account.account_id == ALICE_ID
        assert account.signing_key_ref == handle.key_ref_id
        assert account.alias == "alice"
        assert account.can_sign


def test_address_only_alias():
    """An alias without a key serves as destination but not as a signer."""
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        _register_alice(services, with_key=False)

        destination = services.resolver.resolve_account("alice", AccountRole.DESTINATION, "testnet")
        assert destination.account_id == ALICE_ID
        assert not destination.can_sign

        with pytest.raises(InvalidReference):
            services.resolver.resolve_account("alice", AccountRole.ACCOUNT, "testnet")


def test_alias_with_removed_key():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        handle = _register_alice(services)
        services.kcs.remove_key(handle.key_ref_id)

        with pytest.raises(MissingCredentials):
            services.resolver.resolve_account("alice", AccountRole.ACCOUNT, "testnet")


def test_bare_id_only_for_destination():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())

        destination = services.resolver.resolve_account(BOB_ID, AccountRole.DESTINATION, "testnet")
        assert destination.account_id == BOB_ID
        assert destination.source == ResolutionSource.BARE_ID

        for role in (AccountRole.ACCOUNT, AccountRole.TREASURY, AccountRole.SOURCE):
            with pytest.raises(InvalidReference):
                services.resolver.resolve_account(BOB_ID, role, "testnet")


def test_absent_falls_back_to_operator():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())

        for role in (AccountRole.TREASURY, AccountRole.SOURCE):
            account = services.resolver.resolve_account(None, role, "testnet")
            assert account.account_id == OPERATOR_ID
            assert account.source == ResolutionSource.OPERATOR

        with pytest.raises(InvalidReference):
            services.resolver.resolve_account(None, AccountRole.DESTINATION, "testnet")
        with pytest.raises(InvalidReference):
            services.resolver.resolve_account("  ", AccountRole.ACCOUNT, "testnet")


def test_absent_without_operator():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger(), operator=False)
        with pytest.raises(MissingCredentials):
            services.resolver.resolve_account(None, AccountRole.TREASURY, "testnet")


def test_aliases_are_per_network():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        _register_alice(services)
        with pytest.raises(AliasNotFound):
            services.resolver.resolve_account("alice", AccountRole.ACCOUNT, "mainnet")


def test_resolve_token():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        services.aliases.register(
            AliasRecord(alias="gold", entity_type=EntityType.TOKEN, network="testnet", entity_id="0.0.1001")
        )

        assert services.resolver.resolve_token("0.0.1001", "testnet").token_id == "0.0.1001"
        token = services.resolver.resolve_token("gold", "testnet")
        assert token.token_id == "0.0.1001"
        assert token.alias == "gold"

        with pytest.raises(AliasNotFound) as exc_info:
            services.resolver.resolve_token("silver", "testnet")
        assert exc_info.value.entity_type == "token"
        with pytest.raises(InvalidReference):
            services.resolver.resolve_token("0.0.1001:abc", "testnet")
        with pytest.raises(InvalidReference):
            services.resolver.resolve_token(None, "testnet")


def test_resolve_key():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        handle = _register_alice(services)
        operator_key = services.resolver.operator_account("testnet").public_key

        assert services.resolver.resolve_key(None, "testnet") == operator_key
        assert services.resolver.resolve_key("alice", "testnet") == handle.public_key
        assert services.resolver.resolve_key(handle.public_key, "testnet") == handle.public_key
        assert services.resolver.resolve_key("0.0.5:abc123", "testnet") == SigningKey.from_secret("abc123").public_key_hex()

        with pytest.raises(InvalidReference):
            services.resolver.resolve_key(ALICE_ID, "testnet")
        with pytest.raises(ResolutionFailure):
            services.resolver.resolve_key("nobody", "testnet")


def test_resolve_key_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        services = make_services(tmpdir, ledger=RecordingLedger())
        handle = services.kcs.import_secret("beef")
        services.aliases.register(
            AliasRecord(
                alias="admin",
                entity_type=EntityType.KEY,
                network="testnet",
                entity_id=handle.key_ref_id,
                key_ref_id=handle.key_ref_id,
                public_key=handle.public_key,
            )
        )
        assert services.resolver.resolve_key("admin", "testnet") == handle.public_key

"""
Reference resolver.

Turns raw command parameters into canonical ids and signing-key handles.
Resolution reads the credential store and alias registry only; it never
talks to the ledger.
"""

import logging
from enum import Enum
from typing import Optional

from ..aliases.registry import AliasRegistry
from ..core.errors import (
    AliasNotFound,
    InvalidReference,
    MissingCredentials,
    ResolutionFailure,
)
from ..core.ids import is_entity_id
from ..core.models import EntityType, ResolutionSource, ResolvedAccount, ResolvedToken
from ..core.references import Alias, BareId, IdWithSecret, parse_reference
from ..keys.kcs import KeyCredentialStore

logger = logging.getLogger(__name__)


class AccountRole(str, Enum):
    """Role an account parameter plays in a command."""
    ACCOUNT = "account"
    TREASURY = "treasury"
    SOURCE = "source"
    DESTINATION = "destination"

    @property
    def requires_signer(self) -> bool:
        return self is not AccountRole.DESTINATION

    @property
    def falls_back_to_operator(self) -> bool:
        return self in (AccountRole.TREASURY, AccountRole.SOURCE)


def _is_absent(raw: Optional[str]) -> bool:
    return raw is None or not raw.strip()


class ReferenceResolver:
    """
    Resolves account, token and key references for one network at a time.

    Usage:
        resolver = ReferenceResolver(kcs, aliases)
        treasury = resolver.resolve_account("0.0.123:302e...", AccountRole.TREASURY, "testnet")
        token = resolver.resolve_token("my-token", "testnet")
    """

    def __init__(self, kcs: KeyCredentialStore, aliases: AliasRegistry) -> None:
        self.kcs = kcs
        self.aliases = aliases

    def operator_account(self, network: str) -> ResolvedAccount:
        """
        Default operator as a signing-capable account.

        Raises:
            MissingCredentials: If no operator is configured for network
        """
        operator = self.kcs.get_default_operator(network)
        if operator is None:
            raise MissingCredentials(f"No credentials found for {network}: set a default operator")
        return ResolvedAccount(
            account_id=operator.account_id,
            source=ResolutionSource.OPERATOR,
            signing_key_ref=operator.key_ref_id,
            public_key=self.kcs.get_public_key(operator.key_ref_id),
        )

    def resolve_account(self, raw: Optional[str], role: AccountRole, network: str) -> ResolvedAccount:
        """
        Resolve an account parameter for role.

        An absent parameter resolves to the default operator for roles that
        allow it. A bare id is accepted only when the role does not sign.

        Raises:
            AliasNotFound: If an alias is not registered on network
            MissingCredentials: If no signer can be found
            InvalidKeyMaterial: If an id:secret pair carries a bad secret
            InvalidReference: If the reference cannot serve the role
        """
        if _is_absent(raw):
            if role.falls_back_to_operator:
                logger.debug(f"[RESOLVE] {role.value} absent, using default operator on {network}")
                return self.operator_account(network)
            raise InvalidReference(f"{role.value} is required")

        parsed = parse_reference(raw)

        if isinstance(parsed, IdWithSecret):
            if not is_entity_id(parsed.entity_id):
                raise InvalidReference(f"Invalid account id in {role.value}: {parsed.entity_id}")
            handle = self.kcs.import_secret(parsed.secret)
            logger.debug(f"[RESOLVE] {role.value} {parsed.entity_id} signs with {handle.key_ref_id}")
            return ResolvedAccount(
                account_id=parsed.entity_id,
                source=ResolutionSource.SECRET,
                signing_key_ref=handle.key_ref_id,
                public_key=handle.public_key,
            )

        if isinstance(parsed, BareId):
            if role.requires_signer:
                raise InvalidReference(
                    f"{role.value} {parsed.entity_id} needs a signing key: use <id>:<privateKey> or an alias"
                )
            return ResolvedAccount(account_id=parsed.entity_id, source=ResolutionSource.BARE_ID)

        if isinstance(parsed, Alias):
            return self._resolve_account_alias(parsed.name, role, network)

        raise InvalidReference(f"Unrecognized reference: {raw}")

    def _resolve_account_alias(self, name: str, role: AccountRole, network: str) -> ResolvedAccount:
        record = self.aliases.resolve(name, EntityType.ACCOUNT, network)
        if record is None:
            raise AliasNotFound(name, EntityType.ACCOUNT.value, network)

        if not role.requires_signer:
            return ResolvedAccount(
                account_id=record.entity_id,
                source=ResolutionSource.ALIAS,
                public_key=record.public_key,
                alias=name,
            )

        if not record.key_ref_id:
            raise InvalidReference(f'Alias "{name}" has no key and cannot sign as {role.value}')
        public_key = self.kcs.get_public_key(record.key_ref_id)
        if public_key is None:
            raise MissingCredentials(f'Key {record.key_ref_id} of alias "{name}" is not in the credential store')

        logger.debug(f"[RESOLVE] alias {name} -> {record.entity_id} ({record.key_ref_id})")
        return ResolvedAccount(
            account_id=record.entity_id,
            source=ResolutionSource.ALIAS,
            signing_key_ref=record.key_ref_id,
            public_key=public_key,
            alias=name,
        )

    def resolve_token(self, raw: Optional[str], network: str) -> ResolvedToken:
        """
        Resolve a token parameter (alias or bare id).

        Raises:
            AliasNotFound: If a token alias is not registered on network
            InvalidReference: If raw is absent or an id:secret pair
        """
        if _is_absent(raw):
            raise InvalidReference("token is required")

        parsed = parse_reference(raw)
        if isinstance(parsed, IdWithSecret):
            raise InvalidReference("Tokens cannot be referenced with a private key")
        if isinstance(parsed, BareId):
            return ResolvedToken(token_id=parsed.entity_id)

        record = self.aliases.resolve(parsed.name, EntityType.TOKEN, network)
        if record is None:
            raise AliasNotFound(parsed.name, EntityType.TOKEN.value, network)
        return ResolvedToken(token_id=record.entity_id, alias=parsed.name)

    def resolve_key(self, raw: Optional[str], network: str) -> str:
        """
        Resolve a key parameter to a public key.

        Lookup order: account alias with a key, key alias, a public key held
        by the credential store. An absent parameter yields the default
        operator's key.

        Raises:
            MissingCredentials: If absent and no operator is configured
            ResolutionFailure: If nothing matches
        """
        if _is_absent(raw):
            operator = self.operator_account(network)
            return operator.public_key or ""

        parsed = parse_reference(raw)
        if isinstance(parsed, IdWithSecret):
            return self.kcs.import_secret(parsed.secret).public_key
        if isinstance(parsed, BareId):
            raise InvalidReference(f"{parsed.entity_id} is an entity id, not a key")

        name = parsed.name
        account = self.aliases.resolve(name, EntityType.ACCOUNT, network)
        if account and account.key_ref_id:
            public_key = self.kcs.get_public_key(account.key_ref_id)
            if public_key:
                return public_key

        key = self.aliases.resolve(name, EntityType.KEY, network)
        if key:
            if key.public_key:
                return key.public_key
            if key.key_ref_id and self.kcs.get_public_key(key.key_ref_id):
                return self.kcs.get_public_key(key.key_ref_id) or ""

        key_ref_id = self.kcs.find_by_public_key(name)
        if key_ref_id:
            return self.kcs.get_public_key(key_ref_id) or ""

        raise ResolutionFailure(f"Key {name} not found as account alias, key alias or stored key on {network}")

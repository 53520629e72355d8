"""
Token command handlers.

Each handler takes the flat argument map of one invocation plus the wired
CoreServices and returns a CommandResult. Handlers never exit the process:
every TokenOpsError becomes a failure result with a single message, and
anything else propagates to the host.

Flow of a write command:
    validate -> resolve references -> orchestrator.execute -> persist state
State is written only after the orchestrator reports success.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..core.errors import DuplicateAlias, InvalidParameters, TokenNotFound, TokenOpsError
from ..core.models import AliasRecord, EntityType, SupplyType, TokenData, TokenKeys
from ..logging_config import get_logger
from ..resolve.resolver import AccountRole
from ..services import CoreServices
from ..tx.orchestrator import DirectKeySigner, OperationKind, signer_for
from ..tx.service import TokenAssociateParams, TokenCreateParams, TokenTransferParams
from .file_loader import load_token_definition
from .schema import (
    TokenAssociateCommand,
    TokenCreateCommand,
    TokenFileDefinition,
    TokenTransferCommand,
    validate_params,
)

Log = Union[logging.Logger, logging.LoggerAdapter]

SUCCESS = "success"
FAILURE = "failure"


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one command.

    Fields:
        status: "success" or "failure"
        output: Command output (success only)
        error_message: "<action>: <cause>" (failure only)
    """
    status: str
    output: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @staticmethod
    def success(output: Dict[str, Any]) -> "CommandResult":
        return CommandResult(status=SUCCESS, output=output)

    @staticmethod
    def failure(message: str) -> "CommandResult":
        return CommandResult(status=FAILURE, error_message=message)


def _fail(log: Log, action: str, ex: Exception) -> CommandResult:
    message = f"{action}: {ex}"
    log.error(message)
    return CommandResult.failure(message)


def _ensure_alias_free(services: CoreServices, alias: Optional[str], entity_type: EntityType) -> None:
    if alias and services.aliases.resolve(alias, entity_type, services.network):
        raise DuplicateAlias(alias, entity_type.value, services.network)


def create_token(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """
    Create a token.

    Args (map keys):
        name, symbol, treasury?, decimals?, initial_supply?, supply_type?,
        max_supply?, admin_key?, alias?
    """
    log = logger or get_logger(__name__)
    try:
        params = validate_params(TokenCreateCommand, args)
        network = services.network

        treasury = services.resolver.resolve_account(params.treasury, AccountRole.TREASURY, network)
        admin_key = services.resolver.resolve_key(params.admin_key, network)

        max_supply = 0
        if params.supply_type == SupplyType.FINITE:
            max_supply = params.max_supply if params.max_supply is not None else params.initial_supply
            if max_supply < params.initial_supply:
                raise InvalidParameters(
                    f"Max supply ({max_supply}) cannot be less than initial supply ({params.initial_supply})"
                )
        _ensure_alias_free(services, params.alias, EntityType.TOKEN)

        log.info(f"Creating token {params.name} ({params.symbol}) with treasury {treasury.account_id}")
        result = services.orchestrator.execute(
            OperationKind.CREATE,
            TokenCreateParams(
                name=params.name,
                symbol=params.symbol,
                treasury_id=treasury.account_id,
                admin_key=admin_key,
                decimals=params.decimals,
                initial_supply=params.initial_supply,
                supply_type=params.supply_type,
                max_supply=max_supply,
            ),
            signer_for(treasury),
        )
        token_id = result.entity_id or ""

        services.tokens.save_token(
            token_id,
            TokenData(
                token_id=token_id,
                name=params.name,
                symbol=params.symbol,
                decimals=params.decimals,
                initial_supply=params.initial_supply,
                supply_type=params.supply_type,
                max_supply=max_supply,
                treasury_id=treasury.account_id,
                keys=TokenKeys(admin_key=admin_key, treasury_key=treasury.public_key or ""),
                network=network,
            ),
        )
        if params.alias:
            services.aliases.register(
                AliasRecord(
                    alias=params.alias,
                    entity_type=EntityType.TOKEN,
                    network=network,
                    entity_id=token_id,
                    created_at=services.clock.now_iso(),
                )
            )

        output: Dict[str, Any] = {
            "tokenId": token_id,
            "name": params.name,
            "symbol": params.symbol,
            "treasuryId": treasury.account_id,
            "decimals": params.decimals,
            "initialSupply": params.initial_supply,
            "supplyType": params.supply_type.value,
            "maxSupply": max_supply,
            "transactionId": result.transaction_id,
            "network": network,
        }
        if params.alias:
            output["alias"] = params.alias
        log.info(f"Token created: {token_id}")
        return CommandResult.success(output)
    except TokenOpsError as ex:
        return _fail(log, "Failed to create token", ex)


def associate_token(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """
    Associate an account with a token.

    The association is recorded under the account alias when one was given,
    otherwise under the account id.
    """
    log = logger or get_logger(__name__)
    try:
        params = validate_params(TokenAssociateCommand, args)
        network = services.network

        token = services.resolver.resolve_token(params.token, network)
        account = services.resolver.resolve_account(params.account, AccountRole.ACCOUNT, network)

        log.info(f"Associating account {account.account_id} with token {token.token_id}")
        result = services.orchestrator.execute(
            OperationKind.ASSOCIATE,
            TokenAssociateParams(token_id=token.token_id, account_id=account.account_id),
            signer_for(account),
        )
        services.tokens.add_association(token.token_id, account.account_id, account.alias or account.account_id)

        return CommandResult.success(
            {
                "transactionId": result.transaction_id,
                "tokenId": token.token_id,
                "accountId": account.account_id,
                "associated": True,
            }
        )
    except TokenOpsError as ex:
        return _fail(log, "Failed to associate token", ex)


def transfer_token(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """
    Transfer token units. The source falls back to the default operator.
    """
    log = logger or get_logger(__name__)
    try:
        params = validate_params(TokenTransferCommand, args)
        network = services.network

        token = services.resolver.resolve_token(params.token, network)
        source = services.resolver.resolve_account(params.from_, AccountRole.SOURCE, network)
        destination = services.resolver.resolve_account(params.to, AccountRole.DESTINATION, network)

        log.info(f"Transferring {params.amount} of {token.token_id} from {source.account_id} to {destination.account_id}")
        result = services.orchestrator.execute(
            OperationKind.TRANSFER,
            TokenTransferParams(
                token_id=token.token_id,
                from_account_id=source.account_id,
                to_account_id=destination.account_id,
                amount=params.amount,
            ),
            signer_for(source),
        )
        return CommandResult.success(
            {
                "transactionId": result.transaction_id,
                "tokenId": token.token_id,
                "from": source.account_id,
                "to": destination.account_id,
                "amount": params.amount,
            }
        )
    except TokenOpsError as ex:
        return _fail(log, "Failed to transfer token", ex)


def create_token_from_definition(
    definition: TokenFileDefinition,
    services: CoreServices,
    logger: Optional[Log] = None,
    alias: Optional[str] = None,
) -> CommandResult:
    """
    Create a token from a validated definition, then associate its accounts.

    Associations run one at a time, each signed with the key given for it
    in the file. A failed association is logged as a warning and reported
    with success=False; it does not fail the command.
    """
    log = logger or get_logger(__name__)
    try:
        network = services.network
        treasury = services.resolver.resolve_account(definition.treasury_reference(), AccountRole.TREASURY, network)
        _ensure_alias_free(services, alias, EntityType.TOKEN)

        keys = definition.keys
        supply_type = definition.token_supply_type
        max_supply = definition.effective_max_supply
        custom_fees = definition.to_custom_fees()

        result = services.orchestrator.execute(
            OperationKind.CREATE,
            TokenCreateParams(
                name=definition.name,
                symbol=definition.symbol,
                treasury_id=treasury.account_id,
                admin_key=keys.admin_key,
                decimals=definition.decimals,
                initial_supply=definition.initial_supply,
                supply_type=supply_type,
                max_supply=max_supply,
                supply_key=keys.supply_key,
                wipe_key=keys.wipe_key,
                kyc_key=keys.kyc_key,
                freeze_key=keys.freeze_key,
                pause_key=keys.pause_key,
                fee_schedule_key=keys.fee_schedule_key,
                custom_fees=custom_fees,
                memo=definition.memo,
            ),
            signer_for(treasury),
        )
        token_id = result.entity_id or ""

        services.tokens.save_token(
            token_id,
            TokenData(
                token_id=token_id,
                name=definition.name,
                symbol=definition.symbol,
                decimals=definition.decimals,
                initial_supply=definition.initial_supply,
                supply_type=supply_type,
                max_supply=max_supply,
                treasury_id=treasury.account_id,
                keys=TokenKeys(
                    admin_key=keys.admin_key,
                    supply_key=keys.supply_key,
                    wipe_key=keys.wipe_key,
                    kyc_key=keys.kyc_key,
                    freeze_key=keys.freeze_key,
                    pause_key=keys.pause_key,
                    fee_schedule_key=keys.fee_schedule_key,
                    treasury_key=treasury.public_key or "",
                ),
                network=network,
                custom_fees=custom_fees,
            ),
        )
        if alias:
            services.aliases.register(
                AliasRecord(
                    alias=alias,
                    entity_type=EntityType.TOKEN,
                    network=network,
                    entity_id=token_id,
                    created_at=services.clock.now_iso(),
                )
            )
        log.info(f"Token created from file: {token_id}")
    except TokenOpsError as ex:
        return _fail(log, "Failed to create token from file", ex)

    associations: List[Dict[str, Any]] = []
    for entry in definition.associations:
        name = entry.name or entry.account_id
        try:
            signing_key = services.kcs.load_signing_key(entry.key)
            assoc = services.orchestrator.execute(
                OperationKind.ASSOCIATE,
                TokenAssociateParams(token_id=token_id, account_id=entry.account_id),
                DirectKeySigner(signing_key),
            )
            services.tokens.add_association(token_id, entry.account_id, name)
            associations.append(
                {"accountId": entry.account_id, "name": name, "success": True, "transactionId": assoc.transaction_id}
            )
        except TokenOpsError as ex:
            log.warning(f"Failed to associate account {entry.account_id} with token {token_id}: {ex}")
            associations.append({"accountId": entry.account_id, "name": name, "success": False})

    output: Dict[str, Any] = {
        "tokenId": token_id,
        "name": definition.name,
        "symbol": definition.symbol,
        "treasuryId": treasury.account_id,
        "decimals": definition.decimals,
        "initialSupply": definition.initial_supply,
        "supplyType": supply_type.value,
        "maxSupply": max_supply,
        "transactionId": result.transaction_id,
        "network": network,
        "associations": associations,
    }
    if alias:
        output["alias"] = alias
    return CommandResult.success(output)


def create_token_from_file(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """
    Load token.<file>.json (or an explicit .json path) and create the token.

    Args (map keys):
        file: Definition name or path
        alias?: Token alias to register
    """
    log = logger or get_logger(__name__)
    try:
        if not args.get("file"):
            raise InvalidParameters("file: a token definition name or path is required")
        definition = load_token_definition(args["file"], services.settings.input_dir)
    except TokenOpsError as ex:
        return _fail(log, "Failed to create token from file", ex)
    return create_token_from_definition(definition, services, logger=log, alias=args.get("alias"))


def list_tokens(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """List stored tokens, optionally for one network, with their aliases."""
    log = logger or get_logger(__name__)
    try:
        network = args.get("network")
        tokens = []
        for token in services.tokens.list_tokens(network):
            data = token.to_dict()
            record = services.aliases.find_by_entity(token.token_id, EntityType.TOKEN, token.network)
            if record:
                data["alias"] = record.alias
            tokens.append(data)
        return CommandResult.success({"tokens": tokens, "count": len(tokens), "network": network})
    except TokenOpsError as ex:
        return _fail(log, "Failed to list tokens", ex)


def token_stats(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    log = logger or get_logger(__name__)
    try:
        return CommandResult.success(services.tokens.get_stats())
    except TokenOpsError as ex:
        return _fail(log, "Failed to compute token statistics", ex)


def remove_token(args: Dict[str, Any], services: CoreServices, logger: Optional[Log] = None) -> CommandResult:
    """Remove a token from local state. Aliases pointing at it are kept."""
    log = logger or get_logger(__name__)
    try:
        token = services.resolver.resolve_token(args.get("token"), services.network)
        if not services.tokens.remove_token(token.token_id):
            raise TokenNotFound(token.token_id)
        return CommandResult.success({"tokenId": token.token_id, "removed": True})
    except TokenOpsError as ex:
        return _fail(log, "Failed to remove token", ex)

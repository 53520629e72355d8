"""
Service wiring.

The host (CLI invocation or test) builds one CoreServices and passes it to
every command handler. Nothing in tokenops keeps module-level registries.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .aliases.registry import AliasRegistry
from .config import Settings, operator_from_env
from .core.clock import SystemClock
from .keys.kcs import KeyCredentialStore, OperatorSource
from .keys.secrets import SecretStorage, StateSecretStorage
from .ledger.local import LocalLedgerService
from .resolve.resolver import ReferenceResolver
from .state.file_store import FileStateStore
from .state.store import StateStore
from .tokens.state import TokenStateStore
from .tx.orchestrator import TransactionOrchestrator
from .tx.service import TransactionService


@dataclass
class CoreServices:
    settings: Settings
    network: str
    state: StateStore
    kcs: KeyCredentialStore
    aliases: AliasRegistry
    resolver: ReferenceResolver
    ledger: TransactionService
    orchestrator: TransactionOrchestrator
    tokens: TokenStateStore
    clock: Any


def build_services(
    settings: Settings,
    state: Optional[StateStore] = None,
    ledger: Optional[TransactionService] = None,
    clock: Any = None,
    secrets: Optional[SecretStorage] = None,
    operator_source: Optional[OperatorSource] = None,
) -> CoreServices:
    """
    Wire the core services for settings.network.

    Args:
        settings: Loaded settings
        state: State store (default: FileStateStore under settings.state_dir)
        ledger: Transaction service (default: LocalLedgerService under settings.ledger_dir)
        clock: Time source (default: SystemClock)
        secrets: Secret storage (default: StateSecretStorage over state)
        operator_source: Default-operator bootstrap (default: environment)
    """
    clock = clock or SystemClock()
    state = state if state is not None else FileStateStore(str(settings.state_dir))
    kcs = KeyCredentialStore(
        state,
        secrets or StateSecretStorage(state),
        algorithm=settings.key_algorithm,
        clock=clock,
        operator_source=operator_source or operator_from_env,
    )
    aliases = AliasRegistry(state)
    if ledger is None:
        ledger = LocalLedgerService.for_network(kcs, settings.network, str(settings.ledger_dir), clock=clock)

    return CoreServices(
        settings=settings,
        network=settings.network,
        state=state,
        kcs=kcs,
        aliases=aliases,
        resolver=ReferenceResolver(kcs, aliases),
        ledger=ledger,
        orchestrator=TransactionOrchestrator(ledger),
        tokens=TokenStateStore(state),
        clock=clock,
    )

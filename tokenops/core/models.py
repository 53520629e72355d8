"""
Domain records for token operations.

All records are immutable. Persisted records round-trip through
to_dict()/from_dict() using the camelCase field names of the state files.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

SUPPORTED_NETWORKS = ("mainnet", "testnet", "previewnet", "localnet")


class EntityType(str, Enum):
    ACCOUNT = "account"
    TOKEN = "token"
    KEY = "key"


class SupplyType(str, Enum):
    FINITE = "FINITE"
    INFINITE = "INFINITE"


class ResolutionSource(str, Enum):
    """How a ResolvedAccount was obtained."""
    ALIAS = "alias"
    SECRET = "secret"
    BARE_ID = "bare_id"
    OPERATOR = "operator"


@dataclass(frozen=True)
class KeyHandle:
    """Opaque reference to key material held by the credential store."""
    key_ref_id: str
    public_key: str


@dataclass(frozen=True)
class OperatorRecord:
    """Default identity used when no explicit signer is supplied."""
    account_id: str
    key_ref_id: str


@dataclass(frozen=True)
class ResolvedAccount:
    """
    Canonical account resolution.

    signing_key_ref is None when the role only needs an address.
    """
    account_id: str
    source: ResolutionSource
    signing_key_ref: Optional[str] = None
    public_key: Optional[str] = None
    alias: Optional[str] = None

    @property
    def can_sign(self) -> bool:
        return self.signing_key_ref is not None


@dataclass(frozen=True)
class ResolvedToken:
    token_id: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class AliasRecord:
    """Human alias bound to an entity id on one network."""
    alias: str
    entity_type: EntityType
    network: str
    entity_id: str
    key_ref_id: Optional[str] = None
    public_key: Optional[str] = None
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "alias": self.alias,
            "type": self.entity_type.value,
            "network": self.network,
            "entityId": self.entity_id,
            "createdAt": self.created_at,
        }
        if self.key_ref_id:
            data["keyRefId"] = self.key_ref_id
        if self.public_key:
            data["publicKey"] = self.public_key
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AliasRecord":
        return AliasRecord(
            alias=data["alias"],
            entity_type=EntityType(data["type"]),
            network=data["network"],
            entity_id=data["entityId"],
            key_ref_id=data.get("keyRefId"),
            public_key=data.get("publicKey"),
            created_at=data.get("createdAt", ""),
        )


@dataclass(frozen=True)
class Association:
    name: str
    account_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "accountId": self.account_id}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Association":
        return Association(name=data["name"], account_id=data["accountId"])


_FEE_FIELDS = (
    ("type", "type"),
    ("amount", "amount"),
    ("unit_type", "unitType"),
    ("denom", "denom"),
    ("numerator", "numerator"),
    ("denominator", "denominator"),
    ("min", "min"),
    ("max", "max"),
    ("collector_id", "collectorId"),
    ("exempt", "exempt"),
)


@dataclass(frozen=True)
class CustomFee:
    """Fixed or fractional custom fee attached to a token."""
    type: str
    amount: Optional[int] = None
    unit_type: Optional[str] = None
    denom: Optional[str] = None
    numerator: Optional[int] = None
    denominator: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None
    collector_id: Optional[str] = None
    exempt: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for attr, key in _FEE_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "CustomFee":
        return CustomFee(**{attr: data.get(key) for attr, key in _FEE_FIELDS})


_KEY_FIELDS = (
    ("admin_key", "adminKey"),
    ("supply_key", "supplyKey"),
    ("wipe_key", "wipeKey"),
    ("kyc_key", "kycKey"),
    ("freeze_key", "freezeKey"),
    ("pause_key", "pauseKey"),
    ("fee_schedule_key", "feeScheduleKey"),
    ("treasury_key", "treasuryKey"),
)


@dataclass(frozen=True)
class TokenKeys:
    """Public keys attached to a token. Empty string means unset."""
    admin_key: str
    supply_key: str = ""
    wipe_key: str = ""
    kyc_key: str = ""
    freeze_key: str = ""
    pause_key: str = ""
    fee_schedule_key: str = ""
    treasury_key: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in _KEY_FIELDS}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TokenKeys":
        return TokenKeys(**{attr: data.get(key) or "" for attr, key in _KEY_FIELDS})


@dataclass(frozen=True)
class TokenData:
    """
    Locally persisted view of a created token.

    Invariants:
    - max_supply >= initial_supply when supply_type is FINITE
    - associations holds at most one entry per account_id
    """
    token_id: str
    name: str
    symbol: str
    decimals: int
    initial_supply: int
    supply_type: SupplyType
    max_supply: int
    treasury_id: str
    keys: TokenKeys
    network: str
    associations: Tuple[Association, ...] = ()
    custom_fees: Tuple[CustomFee, ...] = ()

    def __post_init__(self) -> None:
        if self.supply_type == SupplyType.FINITE and self.max_supply < self.initial_supply:
            raise ValueError(
                f"Max supply ({self.max_supply}) cannot be less than initial supply ({self.initial_supply})"
            )
        seen = set()
        for assoc in self.associations:
            if assoc.account_id in seen:
                raise ValueError(f"Duplicate association for account {assoc.account_id}")
            seen.add(assoc.account_id)

    def has_association(self, account_id: str) -> bool:
        return any(a.account_id == account_id for a in self.associations)

    def with_association(self, association: Association) -> "TokenData":
        """Return a copy with association appended."""
        return replace(self, associations=self.associations + (association,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenId": self.token_id,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "initialSupply": self.initial_supply,
            "supplyType": self.supply_type.value,
            "maxSupply": self.max_supply,
            "treasuryId": self.treasury_id,
            "keys": self.keys.to_dict(),
            "network": self.network,
            "associations": [a.to_dict() for a in self.associations],
            "customFees": [f.to_dict() for f in self.custom_fees],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TokenData":
        return TokenData(
            token_id=data["tokenId"],
            name=data["name"],
            symbol=data["symbol"],
            decimals=int(data.get("decimals", 0)),
            initial_supply=int(data.get("initialSupply", 0)),
            supply_type=SupplyType(data.get("supplyType", "INFINITE")),
            max_supply=int(data.get("maxSupply", 0)),
            treasury_id=data.get("treasuryId", ""),
            keys=TokenKeys.from_dict(data.get("keys") or {}),
            network=data["network"],
            associations=tuple(Association.from_dict(a) for a in data.get("associations") or []),
            custom_fees=tuple(CustomFee.from_dict(f) for f in data.get("customFees") or []),
        )


@dataclass(frozen=True)
class TransactionResult:
    """
    Normalized outcome of a submitted transaction.

    entity_id carries the created id (token id for creates).
    """
    success: bool
    transaction_id: str
    entity_id: Optional[str] = None
    receipt: Dict[str, Any] = field(default_factory=dict)

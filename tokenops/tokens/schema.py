"""
Validation models for token command parameters and token definition files.

Command models accept the flat argument map the CLI builds; the file model
accepts the camelCase JSON of a token.<name>.json definition and rejects
unknown keys.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..core.errors import InvalidParameters
from ..core.ids import ENTITY_ID_PATTERN
from ..core.models import CustomFee, SupplyType

ENTITY_ID_REGEX = ENTITY_ID_PATTERN.pattern

M = TypeVar("M", bound=BaseModel)


def validate_params(model: Type[M], data: Dict[str, Any]) -> M:
    """
    Validate data against model.

    Raises:
        InvalidParameters: With one "<field>: <message>" entry per issue
    """
    try:
        return model.model_validate(data)
    except ValidationError as ex:
        issues = []
        for err in ex.errors():
            where = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
            issues.append(f"{where}: {err.get('msg')}")
        raise InvalidParameters("; ".join(issues)) from ex


class TokenCreateCommand(BaseModel):
    """Parameters of `token create`."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100, description="Token name.")
    symbol: str = Field(..., min_length=1, max_length=10, description="Token symbol.")
    treasury: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Treasury alias or account-id:private-key; default operator when omitted.",
    )
    decimals: int = Field(default=0, ge=0, le=255)
    initial_supply: int = Field(default=1_000_000, ge=0, description="Initial supply in base units.")
    supply_type: SupplyType = Field(default=SupplyType.INFINITE)
    max_supply: Optional[int] = Field(default=None, ge=0, description="Required when supply type is FINITE.")
    admin_key: Optional[str] = Field(default=None, min_length=1)
    alias: Optional[str] = Field(default=None, min_length=1, description="Token alias to register.")

    @field_validator("supply_type", mode="before")
    @classmethod
    def _upper_supply_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _check_max_supply(self) -> "TokenCreateCommand":
        if self.supply_type == SupplyType.FINITE and self.max_supply is None:
            raise ValueError("Max supply is required when supply type is FINITE")
        if self.supply_type == SupplyType.INFINITE and self.max_supply is not None:
            raise ValueError(
                "Max supply should not be provided when supply type is INFINITE, "
                "set supply type to FINITE to specify max supply"
            )
        return self


class TokenAssociateCommand(BaseModel):
    """Parameters of `token associate`."""

    model_config = ConfigDict(str_strip_whitespace=True)

    token: str = Field(..., min_length=1, description="Token id or alias.")
    account: str = Field(..., min_length=1, description="Account alias or account-id:private-key.")


class TokenTransferCommand(BaseModel):
    """Parameters of `token transfer`."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    token: str = Field(..., min_length=1)
    from_: Optional[str] = Field(
        default=None,
        alias="from",
        min_length=1,
        description="Source alias or account-id:private-key; default operator when omitted.",
    )
    to: str = Field(..., min_length=1, description="Destination alias or account id.")
    amount: int = Field(..., gt=0, description="Amount in base units.")


class _FileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class FileTreasury(_FileModel):
    account_id: str = Field(..., pattern=ENTITY_ID_REGEX)
    key: str = Field(..., min_length=1)


class FileKeys(_FileModel):
    admin_key: str = Field(..., min_length=1)
    supply_key: str = ""
    wipe_key: str = ""
    kyc_key: str = ""
    freeze_key: str = ""
    pause_key: str = ""
    fee_schedule_key: str = ""


class FileAssociation(_FileModel):
    account_id: str = Field(..., pattern=ENTITY_ID_REGEX)
    key: str = Field(..., min_length=1, description="Private key of the associating account.")
    name: Optional[str] = Field(default=None, min_length=1)


class FixedFee(_FileModel):
    type: Literal["fixed"]
    amount: int = Field(..., gt=0)
    unit_type: Literal["HBAR", "TOKEN"]
    denom: Optional[str] = None
    collector_id: Optional[str] = Field(default=None, pattern=ENTITY_ID_REGEX)
    exempt: Optional[bool] = None


class FractionalFee(_FileModel):
    type: Literal["fractional"]
    numerator: int = Field(..., gt=0)
    denominator: int = Field(..., gt=0)
    min: Optional[int] = Field(default=None, ge=0)
    max: Optional[int] = Field(default=None, ge=0)
    collector_id: Optional[str] = Field(default=None, pattern=ENTITY_ID_REGEX)
    exempt: Optional[bool] = None


FeeDefinition = Annotated[Union[FixedFee, FractionalFee], Field(discriminator="type")]


class TokenFileDefinition(_FileModel):
    """Contents of a token.<name>.json definition file."""

    name: str = Field(..., min_length=1, max_length=100)
    symbol: str = Field(..., min_length=1, max_length=20)
    decimals: int = Field(..., ge=0, le=18)
    supply_type: Literal["finite", "infinite"]
    initial_supply: int = Field(..., ge=0)
    max_supply: int = Field(default=0, ge=0)
    treasury: Union[FileTreasury, str]
    keys: FileKeys
    associations: List[FileAssociation] = Field(default_factory=list)
    custom_fees: List[FeeDefinition] = Field(default_factory=list)
    memo: str = Field(default="", max_length=100)

    @model_validator(mode="after")
    def _check_supply(self) -> "TokenFileDefinition":
        if self.supply_type == "finite" and self.max_supply and self.max_supply < self.initial_supply:
            raise ValueError(
                f"maxSupply ({self.max_supply}) cannot be less than initialSupply ({self.initial_supply})"
            )
        return self

    @property
    def token_supply_type(self) -> SupplyType:
        return SupplyType(self.supply_type.upper())

    @property
    def effective_max_supply(self) -> int:
        """0 for infinite tokens; a finite max of 0 defaults to the initial supply."""
        if self.supply_type == "infinite":
            return 0
        return self.max_supply or self.initial_supply

    def treasury_reference(self) -> str:
        """Treasury as a resolver reference (object form becomes id:key)."""
        if isinstance(self.treasury, FileTreasury):
            return f"{self.treasury.account_id}:{self.treasury.key}"
        return self.treasury

    def to_custom_fees(self) -> Tuple[CustomFee, ...]:
        fees = []
        for fee in self.custom_fees:
            if isinstance(fee, FixedFee):
                fees.append(
                    CustomFee(
                        type=fee.type,
                        amount=fee.amount,
                        unit_type=fee.unit_type,
                        denom=fee.denom,
                        collector_id=fee.collector_id,
                        exempt=fee.exempt,
                    )
                )
            else:
                fees.append(
                    CustomFee(
                        type=fee.type,
                        numerator=fee.numerator,
                        denominator=fee.denominator,
                        min=fee.min,
                        max=fee.max,
                        collector_id=fee.collector_id,
                        exempt=fee.exempt,
                    )
                )
        return tuple(fees)

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from user_address_api.core.settings import S
from user_address_api.core.validation import (
    ADDRESS_TYPES,
    STATES,
    is_valid_address_type,
    is_valid_country,
    is_valid_postcode,
    is_valid_state,
    is_valid_street_address,
    is_valid_suburb,
)

STREET_ADDRESS_MAX_LEN = 256
SUBURB_MAX_LEN = 128

STREET_ADDRESS_MESSAGE = (
    "streetAddress can only contain letters, numbers, spaces, hyphens, apostrophes, "
    "periods, commas, and # symbols"
)
SUBURB_MESSAGE = "suburb can only contain letters, numbers, spaces, hyphens, apostrophes, and periods"
STATE_MESSAGE = f"state must be a valid Australian state code ({', '.join(STATES)})"
POSTCODE_MESSAGE = "postcode must be exactly 4 digits"
COUNTRY_MESSAGE = "country can only contain letters, numbers, spaces, hyphens, and apostrophes"
ADDRESS_TYPE_MESSAGE = f"addressType must be one of [{', '.join(ADDRESS_TYPES)}]"


class AddressField(str, Enum):
    """Attributes an address update may set."""

    STREET_ADDRESS = "streetAddress"
    SUBURB = "suburb"
    STATE = "state"
    POSTCODE = "postcode"
    COUNTRY = "country"
    ADDRESS_TYPE = "addressType"
    UPDATED_AT = "updatedAt"


PatchSet = Dict[AddressField, str]

COMPARABLE_FIELDS = (
    AddressField.STREET_ADDRESS,
    AddressField.SUBURB,
    AddressField.STATE,
    AddressField.POSTCODE,
    AddressField.COUNTRY,
    AddressField.ADDRESS_TYPE,
)


class _AddressRules(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, populate_by_name=True)

    @field_validator("street_address", check_fields=False)
    @classmethod
    def _street_address(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_street_address(v):
            raise ValueError(STREET_ADDRESS_MESSAGE)
        return v

    @field_validator("suburb", check_fields=False)
    @classmethod
    def _suburb(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_suburb(v):
            raise ValueError(SUBURB_MESSAGE)
        return v

    @field_validator("state", check_fields=False)
    @classmethod
    def _state(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not is_valid_state(v):
            raise ValueError(STATE_MESSAGE)
        return v.upper()

    @field_validator("postcode", check_fields=False)
    @classmethod
    def _postcode(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_postcode(v):
            raise ValueError(POSTCODE_MESSAGE)
        return v

    @field_validator("country", check_fields=False)
    @classmethod
    def _country(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_country(v):
            raise ValueError(COUNTRY_MESSAGE)
        return v

    @field_validator("address_type", check_fields=False)
    @classmethod
    def _address_type(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not is_valid_address_type(v):
            raise ValueError(ADDRESS_TYPE_MESSAGE)
        return v.lower()


class AddressCreateIn(_AddressRules):
    street_address: str = Field(alias="streetAddress", min_length=1, max_length=STREET_ADDRESS_MAX_LEN)
    suburb: str = Field(min_length=1, max_length=SUBURB_MAX_LEN)
    state: str
    postcode: str
    country: str = Field(default_factory=lambda: S.default_country)
    address_type: Optional[str] = Field(default=None, alias="addressType")


class AddressUpdateIn(_AddressRules):
    street_address: Optional[str] = Field(
        default=None, alias="streetAddress", min_length=1, max_length=STREET_ADDRESS_MAX_LEN
    )
    suburb: Optional[str] = Field(default=None, min_length=1, max_length=SUBURB_MAX_LEN)
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    address_type: Optional[str] = Field(default=None, alias="addressType")

    @field_validator("street_address", "suburb", "state", "postcode", "country", "address_type", mode="before")
    @classmethod
    def _not_null(cls, v: Any, info: ValidationInfo) -> Any:
        # defaults are not validated, so None here was sent explicitly
        if v is None:
            field = cls.model_fields[info.field_name]
            raise ValueError(f'"{field.alias or info.field_name}" must be a string')
        return v

    def patch_fields(self) -> PatchSet:
        values = self.model_dump(by_alias=True, exclude_none=True)
        return {AddressField(name): value for name, value in values.items()}


class AddressOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    address_id: str = Field(alias="addressId")
    street_address: Optional[str] = Field(default=None, alias="streetAddress")
    suburb: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    address_type: Optional[str] = Field(default=None, alias="addressType")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class AddressCreatedResp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    address_id: str = Field(alias="addressId")
    address: AddressOut


class AddressListResp(BaseModel):
    message: str
    addresses: List[AddressOut]


class AddressUpdatedResp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    address: AddressOut
    address_id: str = Field(alias="addressId")


class ClientCreateReq(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    client_name: str = Field(alias="clientName", min_length=1, max_length=128)
    description: str = Field(default="", max_length=512)


class ErrorResp(BaseModel):
    message: str
    error: Optional[str] = None


def describe_validation_error(exc: ValidationError) -> str:
    """First validation error rendered as a single human-readable sentence."""
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err.get("loc", ()))
    if err.get("type") == "value_error":
        return str(err["ctx"]["error"])
    if err.get("type") == "extra_forbidden":
        return f'"{field}" is not allowed'
    if not field:
        return err.get("msg", "Invalid request body")
    return f'"{field}": {err.get("msg", "invalid value")}'

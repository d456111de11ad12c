"""Typed request parameters: strict decoding plus semantic validation.

Every parameter type is a pydantic model that forbids unknown fields and
runs in strict mode, so a misspelled or wrongly typed field is an
invalid-params error rather than being ignored or coerced. Format rules
(hex lengths, address checksums, non-negative integers) are field
constraints; cross-field rules live in ``check()``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pegnet_api.exceptions import EntryError, InvalidParamsError, TokenNotFoundError
from pegnet_api.factom.addresses import is_valid_fa_address
from pegnet_api.factom.entry import Entry

_HASH_PATTERN = r"^[0-9a-fA-F]{64}$"
_HEX_PATTERN = r"^(?:[0-9a-fA-F]{2})*$"

MAX_HEIGHT = 2**32 - 1
MAX_OFFSET = 2**63 - 1


def _check_fa_address(value: str | None) -> str | None:
    if value is not None and not is_valid_fa_address(value):
        raise ValueError("invalid factoid address")
    return value


class Params(BaseModel):
    """Base class for method parameters."""

    model_config = ConfigDict(extra="forbid", strict=True)

    def check(self) -> None:
        """Semantic validation run after decoding. Raises InvalidParamsError."""

    def valid_chain_id(self) -> str | None:
        """Chain ID the request targets, if it names one."""
        return None


class ParamsGetTransaction(Params):
    entry_hash: str | None = Field(default=None, alias="entryhash", pattern=_HASH_PATTERN)

    def check(self) -> None:
        if self.entry_hash is None:
            raise InvalidParamsError('required: "entryhash"')


class ParamsGetTransactionStatus(ParamsGetTransaction):
    pass


class ParamsGetTransactions(Params):
    """History query: one selector plus shared paging and action filters."""

    entry_hash: str | None = Field(default=None, alias="entryhash", pattern=_HASH_PATTERN)
    address: str | None = None
    height: int | None = Field(default=None, ge=0, le=MAX_HEIGHT)
    offset: int = Field(default=0, ge=0, le=MAX_OFFSET)
    desc: bool = False
    transfer: bool = False
    conversion: bool = False
    coinbase: bool = False
    burn: bool = False

    @field_validator("address")
    @classmethod
    def address_is_fa(cls, value: str | None) -> str | None:
        return _check_fa_address(value)

    def check(self) -> None:
        if self.entry_hash is None and self.address is None and self.height is None:
            raise InvalidParamsError('required: one of "entryhash", "address" or "height"')


class ParamsGetPegnetBalances(Params):
    address: str | None = None

    @field_validator("address")
    @classmethod
    def address_is_fa(cls, value: str | None) -> str | None:
        return _check_fa_address(value)

    def check(self) -> None:
        if self.address is None:
            raise InvalidParamsError('required: "address"')


class ParamsGetPegnetRates(Params):
    height: int | None = Field(default=None, ge=0, le=MAX_HEIGHT)

    def check(self) -> None:
        if self.height is None:
            raise InvalidParamsError('required: "height"')


class ParamsSendTransaction(Params):
    """An entry given either as ``raw`` binary or as ``extids`` + ``content`` (hex)."""

    chain_id: str | None = Field(default=None, alias="chainid", pattern=_HASH_PATTERN)
    ext_ids: list[str] | None = Field(default=None, alias="extids")
    content: str | None = Field(default=None, pattern=_HEX_PATTERN)
    raw: str | None = Field(default=None, pattern=_HEX_PATTERN)
    dry_run: bool = Field(default=False, alias="dryrun")

    @field_validator("ext_ids")
    @classmethod
    def ext_ids_are_hex(cls, value: list[str] | None) -> list[str] | None:
        if value is not None:
            for ext_id in value:
                if len(ext_id) % 2 or any(c not in "0123456789abcdefABCDEF" for c in ext_id):
                    raise ValueError("ext ids must be hex encoded")
        return value

    def check(self) -> None:
        if self.raw is not None:
            if self.content is not None or self.ext_ids is not None:
                raise InvalidParamsError('"raw" cannot be combined with "extids" or "content"')
        elif self.content is None:
            raise InvalidParamsError('required: "raw" or "content"')
        try:
            self.entry()
        except EntryError as e:
            raise InvalidParamsError(f"invalid entry: {e}") from e

    def valid_chain_id(self) -> str | None:
        return self.chain_id.lower() if self.chain_id is not None else None

    def entry(self) -> Entry:
        """Build the entry described by these parameters (chain ID not yet bound)."""
        if self.raw is not None:
            return Entry.unmarshal_binary(bytes.fromhex(self.raw))
        return Entry(
            ext_ids=[bytes.fromhex(x) for x in self.ext_ids or []],
            content=bytes.fromhex(self.content or ""),
        )


def _describe(error: ValidationError) -> str:
    first = error.errors(include_url=False)[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{loc}: {first['msg']}" if loc else first["msg"]


def decode_params(
    params_type: type[Params] | None,
    payload: Any,
    chain_id: str,
) -> Params | None:
    """Decode and validate a raw ``params`` payload for one method.

    Args:
        params_type: The method's declared parameter model, or None if the
            method takes no parameters.
        payload: The decoded JSON ``params`` value; None when absent or null.
        chain_id: The single recognized transaction chain ID.

    Returns:
        The validated parameter object, or None for parameter-less methods.

    Raises:
        InvalidParamsError: On unexpected, unknown or malformed parameters.
        TokenNotFoundError: If the parameters target another chain.
    """
    if params_type is None:
        if payload is not None:
            raise InvalidParamsError('no "params" accepted')
        return None

    if payload is None:
        params = params_type()
        params.check()
        return params

    try:
        params = params_type.model_validate(payload)
    except ValidationError as e:
        raise InvalidParamsError(_describe(e)) from e

    params.check()

    target = params.valid_chain_id()
    if target is not None and target != chain_id.lower():
        raise TokenNotFoundError()
    return params

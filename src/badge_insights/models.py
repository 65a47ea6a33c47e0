"""Pydantic models for the insight pipeline.

``ExpectedBalanceRule`` — a user-authored ownership rule persisted in the snap state.
``SnapState`` — the whole persisted state object (rules plus any extra fields).
``BalanceCheckResult`` — the outcome of one rule evaluated against one address.
``Insight`` — a discovered address with its check results.
``GetExpectedRequest`` / ``SetExpectedRequest`` — the custom RPC requests.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from badge_insights.exceptions import InvalidParamsError, MethodNotFoundError

SATISFIED_MESSAGE = "✅ - Satisfied"
NOT_SATISFIED_MESSAGE = "❌ - Not satisfied"


# ---------------------------------------------------------------------------
# Persisted configuration
# ---------------------------------------------------------------------------


class ExpectedBalanceRule(BaseModel):
    """An expected asset-ownership rule.

    Attributes:
        label: Display label, e.g. ``"Badge Holder"``.
        asset_ownership_requirements: Opaque condition group forwarded
            verbatim to the verification service.
    """

    model_config = ConfigDict(populate_by_name=True)

    label: str
    asset_ownership_requirements: Any = Field(default=None, alias="assetOwnershipRequirements")

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase dict stored in snap state."""
        return self.model_dump(by_alias=True)


class SnapState(BaseModel):
    """The persisted snap state.

    Unknown top-level fields are kept so a read returns exactly what was written.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    expected_balances: list[ExpectedBalanceRule] = Field(default_factory=list, alias="expectedBalances")

    @field_validator("expected_balances", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Transient results
# ---------------------------------------------------------------------------


class BalanceCheckResult(BaseModel):
    """Outcome of evaluating one rule against one address."""

    label: str
    message: str
    satisfied: bool = False

    @classmethod
    def from_verdict(cls, label: str, satisfied: bool) -> "BalanceCheckResult":
        message = SATISFIED_MESSAGE if satisfied else NOT_SATISFIED_MESSAGE
        return cls(label=label, message=message, satisfied=satisfied)


class Insight(BaseModel):
    """A discovered address and the ownership checks evaluated for it."""

    value: str
    balance_checks: list[BalanceCheckResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Custom RPC requests
# ---------------------------------------------------------------------------


class GetExpectedRequest(BaseModel):
    """Read the full stored configuration."""

    method: Literal["get_expected"] = "get_expected"
    params: Any = None


class SetExpectedRequest(BaseModel):
    """Replace the stored configuration with ``params``."""

    method: Literal["set_expected"] = "set_expected"
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _validate_state(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, Mapping):
            # Reject malformed rules here, but store the mapping untouched.
            try:
                SnapState.model_validate(dict(v))
            except ValidationError as exc:
                raise ValueError(f"malformed expectedBalances ({exc.error_count()} error(s))") from exc
        return v


RpcRequest = Annotated[Union[GetExpectedRequest, SetExpectedRequest], Field(discriminator="method")]

RPC_METHODS = ("get_expected", "set_expected")

_RPC_ADAPTER: TypeAdapter[GetExpectedRequest | SetExpectedRequest] = TypeAdapter(RpcRequest)


def parse_rpc_request(request: Mapping[str, Any]) -> GetExpectedRequest | SetExpectedRequest:
    """Validate a raw ``{"method": ..., "params": ...}`` request.

    Raises:
        MethodNotFoundError: If the method is not one of ``RPC_METHODS``.
        InvalidParamsError: If the params fail validation.
    """
    method = request.get("method") if isinstance(request, Mapping) else None
    if method not in RPC_METHODS:
        raise MethodNotFoundError(str(method))
    try:
        return _RPC_ADAPTER.validate_python(dict(request))
    except ValidationError as exc:
        raise InvalidParamsError(f"Invalid params for {method}: {exc.error_count()} error(s)") from exc

"""
Command Payloads.

Pydantic models for the ``payload`` object of each command. Validation
errors become InvalidPayload, which the dispatcher reports as a 400.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from portfolio_gateway.resilience.errors import InvalidPayload

M = TypeVar("M", bound=BaseModel)

_PAYLOAD_CONFIG = {"frozen": True, "populate_by_name": True, "extra": "ignore"}


class EmptyPayload(BaseModel):
    """Commands without parameters; extra keys are ignored."""

    model_config = _PAYLOAD_CONFIG


class TickerPayload(BaseModel):
    ticker: str = Field(..., min_length=1)

    model_config = _PAYLOAD_CONFIG

    @field_validator("ticker")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ticker must not be blank")
        return value


class OptionChainPayload(TickerPayload):
    date: Optional[str] = None


class FxPayload(BaseModel):
    from_currency: str = Field(..., alias="from", min_length=3, max_length=3)
    to_currency: str = Field(..., alias="to", min_length=3, max_length=3)

    model_config = _PAYLOAD_CONFIG

    @field_validator("from_currency", "to_currency")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class TemplatePayload(BaseModel):
    template: Literal["aggressive", "shariah"]

    model_config = _PAYLOAD_CONFIG

    @field_validator("template", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class ChatPayload(BaseModel):
    message: str = Field(..., min_length=1)
    history: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "extra": "ignore"}


class PortfolioPayload(BaseModel):
    """Portfolio analytics payloads are accepted as-is."""

    model_config = {"extra": "allow"}


def parse_payload(command: str, model: Type[M], payload: Any) -> M:
    """
    Validate a raw payload against ``model``.

    Raises:
        InvalidPayload: If the payload is not an object or fails validation
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidPayload(command, "payload must be an object")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidPayload(command, problems) from None

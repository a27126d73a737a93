"""Validation models for provider payloads.

Upstream search providers name the same attribute in several ways. Each
field below lists its accepted names in priority order; the first one
carrying a non-empty value wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def _address_text(value: Any) -> str:
    """Extract an address from a plain string or a provider address object."""
    if isinstance(value, Mapping):
        if "address" in value:
            return _address_text(value["address"])
        if "emailAddress" in value:
            return _address_text(value["emailAddress"])
        return ""
    if value is None:
        return ""
    return str(value)


class RawMessage(BaseModel):
    """One message record as delivered by the search provider."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    message_id: str = Field(
        default="",
        validation_alias=AliasChoices("messageId", "id", "internetMessageId"),
    )
    conversation_id: str | None = Field(
        default=None, validation_alias=AliasChoices("conversationId", "threadId")
    )
    subject: str = Field(default="", validation_alias=AliasChoices("subject"))
    sender: str = Field(
        default="",
        validation_alias=AliasChoices(
            "from", AliasPath("fromEmail", "address"), "sender"
        ),
    )
    to: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("to"))
    cc: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("cc"))
    sent_at: Any = Field(
        default=None,
        validation_alias=AliasChoices(
            "sentAt", "dateTime", "receivedAt", "receivedTime", "sentTime"
        ),
    )
    snippet: str = Field(default="", validation_alias=AliasChoices("snippet", "preview"))
    body_text: str = Field(default="", validation_alias=AliasChoices("bodyText"))
    body_html: str = Field(
        default="", validation_alias=AliasChoices("bodyHtml", "body")
    )

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        # Empty aliases must not shadow a later alias that carries a value.
        if isinstance(data, Mapping):
            cleaned = {
                key: value
                for key, value in data.items()
                if value is not None and value != ""
            }
            # Nested sender objects are flattened so an empty address is dropped too.
            if "fromEmail" in cleaned:
                address = _address_text(cleaned.pop("fromEmail")).strip()
                if address:
                    cleaned["fromEmail"] = {"address": address}
            return cleaned
        return data

    @field_validator("message_id", mode="before")
    @classmethod
    def coerce_message_id(cls, value: Any) -> str:
        return str(value).strip()

    @field_validator("conversation_id", mode="before")
    @classmethod
    def coerce_conversation_id(cls, value: Any) -> str | None:
        text = str(value).strip()
        return text or None

    @field_validator("subject", "snippet", "body_text", "body_html", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return str(value)

    @field_validator("sender", mode="before")
    @classmethod
    def coerce_sender(cls, value: Any) -> str:
        return _address_text(value)

    @field_validator("to", "cc", mode="before")
    @classmethod
    def coerce_address_list(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, (list, tuple)):
            items = value
        else:
            items = [value]
        return tuple(_address_text(item) for item in items)


class ResultsBatch(BaseModel):
    """Results posted back for one query: ``{queryId, emails: [...]}``."""

    model_config = ConfigDict(extra="ignore")

    query_id: str = Field(
        min_length=1, validation_alias=AliasChoices("queryId", "query_id")
    )
    emails: list[Any]

    @field_validator("query_id")
    @classmethod
    def strip_query_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("queryId must not be blank")
        return stripped

    @field_validator("emails", mode="before")
    @classmethod
    def require_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            raise ValueError("emails must be a list")
        return value


__all__ = ["RawMessage", "ResultsBatch"]

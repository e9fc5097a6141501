# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for pyompquery.

Provides validated, immutable records for every query response kind, and the
configuration model used to describe a query target.
"""

from __future__ import annotations

from collections.abc import Mapping
from ipaddress import IPv4Address
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .protocol import RconRequest, Request, RequestKind

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF
PING_PAYLOAD_SIZE = 4


# ============================================================================
# Configuration Models
# ============================================================================


class QueryTarget(BaseModel):
    """A server to query, as kept in caller configuration."""

    model_config = ConfigDict(validate_assignment=True)

    host: IPv4Address
    port: int = Field(default=7777, ge=0, le=U16_MAX)
    rcon_password: str | None = Field(
        default=None,
        description="Password for remote console commands",
        repr=False,
    )

    def request(self, kind: RequestKind) -> Request:
        """Create an unbuilt request of the given kind for this target."""
        return Request(kind, self.host, self.port)

    def rcon(self, command: str) -> RconRequest:
        """Create an unbuilt remote console request for this target."""
        if self.rcon_password is None:
            raise ValueError(f"No rcon_password configured for {self.host}:{self.port}")
        return RconRequest(self.host, self.port, self.rcon_password, command)


# ============================================================================
# Response Models
# ============================================================================


class InformationRecord(BaseModel):
    """Server metadata returned for an INFORMATION request."""

    model_config = ConfigDict(frozen=True)

    password: bool
    players: int = Field(ge=0, le=U16_MAX)
    max_players: int = Field(ge=0, le=U16_MAX)
    hostname: str
    gamemode: str
    language: str


class RulesRecord(BaseModel):
    """Server rules (name -> value) returned for a RULES request."""

    model_config = ConfigDict(frozen=True)

    rules: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("rules", mode="after")
    @classmethod
    def freeze_rules(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("rules")
    def serialize_rules(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.rules.get(name, default)

    def __len__(self) -> int:
        return len(self.rules)


class Player(BaseModel):
    """A connected player as listed by a CLIENT_LIST request."""

    model_config = ConfigDict(frozen=True)

    nickname: str
    score: int = Field(ge=0, le=U32_MAX)


class ClientListRecord(BaseModel):
    """Players in the order the server sent them."""

    model_config = ConfigDict(frozen=True)

    players: tuple[Player, ...] = ()


class DetailedPlayer(BaseModel):
    """A connected player with id and latency."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0, le=U8_MAX)
    nickname: str
    score: int = Field(ge=0, le=U32_MAX)
    ping: int = Field(ge=0, le=U32_MAX, description="Latency in milliseconds")


class DetailedPlayerRecord(BaseModel):
    """Detailed player list in the order the server sent it."""

    model_config = ConfigDict(frozen=True)

    players: tuple[DetailedPlayer, ...] = ()


class IsOpenMpServerRecord(BaseModel):
    """Whether the server runs open.mp."""

    model_config = ConfigDict(frozen=True)

    is_open_mp: bool

    def __bool__(self) -> bool:
        return self.is_open_mp


class PingRecord(BaseModel):
    """
    The four bytes echoed by a PING request.

    The payload is opaque; callers time the round trip themselves.
    """

    model_config = ConfigDict(frozen=True)

    payload: bytes

    @field_validator("payload")
    @classmethod
    def validate_payload(cls, v: bytes) -> bytes:
        if len(v) != PING_PAYLOAD_SIZE:
            raise ValueError(f"Ping payload must be {PING_PAYLOAD_SIZE} bytes, got {len(v)}")
        return v


class RconResponseRecord(BaseModel):
    """One line of remote console output."""

    model_config = ConfigDict(frozen=True)

    message: str

# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Query Response Encoding/Decoding.

This module turns the raw bytes of a server reply into typed records, and
provides the inverse encoders used to build replies for fixtures and server
emulation.

Binary Format Conventions:
- Every response starts with the 11-byte request header echoed by the server
- All multi-byte integers are little-endian and unsigned
- Strings are length-prefixed; the prefix width depends on the field
- Booleans are 1 byte and true only when equal to 0x01
- Bytes after the last field are ignored

Decoders are pure functions: each call reads from its own PacketReader and
touches no shared state, so independent buffers can be decoded from any
number of threads at once.
"""

from __future__ import annotations

import logging
import struct
from typing import Callable, Union

from pydantic import BaseModel

from .charset import UTF8, WINDOWS_1251
from .exceptions import PayloadTooLargeError, ReadError
from .models import (
    PING_PAYLOAD_SIZE,
    ClientListRecord,
    DetailedPlayer,
    DetailedPlayerRecord,
    InformationRecord,
    IsOpenMpServerRecord,
    PingRecord,
    Player,
    RconResponseRecord,
    RulesRecord,
)
from .protocol import HEADER_SIZE, RequestKind

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class PacketReader:
    """
    Sequential little-endian reader over a response buffer.

    Every read either consumes exactly the bytes it needs or raises
    ReadError; a short buffer is never silently truncated.
    """

    def __init__(self, data: Buffer) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._pos, 0)

    def skip(self, count: int) -> None:
        """Advance the cursor. Skipping past the end fails on the next read."""
        self._pos += count

    def _unpack(self, fmt: struct.Struct) -> int:
        try:
            (value,) = fmt.unpack_from(self._data, self._pos)
        except struct.error as exc:
            raise ReadError(self._pos, fmt.size, self.remaining) from exc
        self._pos += fmt.size
        return value

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_bool(self) -> bool:
        return self.read_u8() == 1

    def read_bytes(self, count: int) -> bytes:
        if count > self.remaining:
            raise ReadError(self._pos, count, self.remaining)
        value = self._data[self._pos:self._pos + count]
        self._pos += count
        return value

    def read_utf8(self, count: int) -> str:
        return UTF8.decode(self.read_bytes(count))

    def read_legacy(self, count: int) -> str:
        return WINDOWS_1251.decode(self.read_bytes(count))


def _open(data: Buffer) -> PacketReader:
    reader = PacketReader(data)
    reader.skip(HEADER_SIZE)
    return reader


def _check_header(header: bytes) -> bytes:
    if len(header) != HEADER_SIZE:
        raise ValueError(f"Invalid header size: {len(header)}, expected {HEADER_SIZE}")
    return bytes(header)


def _prefixed(field: str, raw: bytes, prefix: struct.Struct) -> bytes:
    max_size = (1 << (8 * prefix.size)) - 1
    if len(raw) > max_size:
        raise PayloadTooLargeError(field, len(raw), max_size)
    return prefix.pack(len(raw)) + raw


def _count(field: str, count: int) -> bytes:
    if count > 0xFFFF:
        raise PayloadTooLargeError(field, count, 0xFFFF)
    return _U16.pack(count)


# =============================================================================
# Information Response
# =============================================================================


def decode_information(data: Buffer) -> InformationRecord:
    """
    Decode an INFORMATION response.

    Format: [11B header][1B password][2B players][2B max_players]
            [4B hostname_len][hostname (Windows-1251)]
            [4B gamemode_len][gamemode (UTF-8)]
            [4B language_len][language (Windows-1251)]
    """
    reader = _open(data)

    password = reader.read_bool()
    players = reader.read_u16()
    max_players = reader.read_u16()

    hostname_len = reader.read_u32()
    hostname = reader.read_legacy(hostname_len)

    gamemode_len = reader.read_u32()
    gamemode = reader.read_utf8(gamemode_len)

    language_len = reader.read_u32()
    language = reader.read_legacy(language_len)

    return InformationRecord(
        password=password,
        players=players,
        max_players=max_players,
        hostname=hostname,
        gamemode=gamemode,
        language=language,
    )


def encode_information_response(record: InformationRecord, header: bytes) -> bytes:
    """Encode an INFORMATION response echoing header."""
    parts = [
        _check_header(header),
        _U8.pack(1 if record.password else 0),
        _U16.pack(record.players),
        _U16.pack(record.max_players),
        _prefixed("hostname", WINDOWS_1251.encode(record.hostname), _U32),
        _prefixed("gamemode", UTF8.encode(record.gamemode), _U32),
        _prefixed("language", WINDOWS_1251.encode(record.language), _U32),
    ]
    return b"".join(parts)


# =============================================================================
# Rules Response
# =============================================================================


def decode_rules(data: Buffer) -> RulesRecord:
    """
    Decode a RULES response.

    Format: [11B header][2B count][rules...]
    Each rule: [1B name_len][name][1B value_len][value]

    A rule name sent twice keeps the later value.
    """
    reader = _open(data)

    rule_count = reader.read_u16()
    rules: dict[str, str] = {}

    for _ in range(rule_count):
        name_len = reader.read_u8()
        name = reader.read_utf8(name_len)

        value_len = reader.read_u8()
        value = reader.read_utf8(value_len)

        if name in rules:
            logger.debug("Rule %r sent twice, keeping later value", name)
        rules[name] = value

    return RulesRecord(rules=rules)


def encode_rules_response(record: RulesRecord, header: bytes) -> bytes:
    """Encode a RULES response echoing header."""
    parts = [_check_header(header), _count("rules", len(record.rules))]
    for name, value in record.rules.items():
        parts.append(_prefixed("rule name", UTF8.encode(name), _U8))
        parts.append(_prefixed("rule value", UTF8.encode(value), _U8))
    return b"".join(parts)


# =============================================================================
# Client List Response
# =============================================================================


def decode_client_list(data: Buffer) -> ClientListRecord:
    """
    Decode a CLIENT_LIST response.

    Format: [11B header][2B count][players...]
    Each player: [1B nickname_len][nickname][4B score]
    """
    reader = _open(data)

    player_count = reader.read_u16()
    players = []

    for _ in range(player_count):
        nickname_len = reader.read_u8()
        nickname = reader.read_utf8(nickname_len)
        score = reader.read_u32()

        players.append(Player(nickname=nickname, score=score))

    return ClientListRecord(players=tuple(players))


def encode_client_list_response(record: ClientListRecord, header: bytes) -> bytes:
    """Encode a CLIENT_LIST response echoing header."""
    parts = [_check_header(header), _count("players", len(record.players))]
    for player in record.players:
        parts.append(_prefixed("nickname", UTF8.encode(player.nickname), _U8))
        parts.append(_U32.pack(player.score))
    return b"".join(parts)


# =============================================================================
# Detailed Player Information Response
# =============================================================================


def decode_detailed_players(data: Buffer) -> DetailedPlayerRecord:
    """
    Decode a DETAILED_PLAYER_INFO response.

    Format: [11B header][2B count][players...]
    Each player: [1B id][1B nickname_len][nickname][4B score][4B ping]
    """
    reader = _open(data)

    player_count = reader.read_u16()
    players = []

    for _ in range(player_count):
        player_id = reader.read_u8()
        nickname_len = reader.read_u8()
        nickname = reader.read_utf8(nickname_len)
        score = reader.read_u32()
        ping = reader.read_u32()

        players.append(DetailedPlayer(id=player_id, nickname=nickname, score=score, ping=ping))

    return DetailedPlayerRecord(players=tuple(players))


def encode_detailed_players_response(record: DetailedPlayerRecord, header: bytes) -> bytes:
    """Encode a DETAILED_PLAYER_INFO response echoing header."""
    parts = [_check_header(header), _count("players", len(record.players))]
    for player in record.players:
        parts.append(_U8.pack(player.id))
        parts.append(_prefixed("nickname", UTF8.encode(player.nickname), _U8))
        parts.append(_U32.pack(player.score))
        parts.append(_U32.pack(player.ping))
    return b"".join(parts)


# =============================================================================
# Is open.mp Server / Ping / Rcon Responses
# =============================================================================


def decode_is_open_mp_server(data: Buffer) -> IsOpenMpServerRecord:
    """Decode an IS_OPEN_MP_SERVER response. Format: [11B header][1B flag]"""
    reader = _open(data)
    return IsOpenMpServerRecord(is_open_mp=reader.read_bool())


def encode_is_open_mp_server_response(record: IsOpenMpServerRecord, header: bytes) -> bytes:
    """Encode an IS_OPEN_MP_SERVER response echoing header."""
    return _check_header(header) + _U8.pack(1 if record.is_open_mp else 0)


def decode_ping(data: Buffer) -> PingRecord:
    """Decode a PING response. Format: [11B header][4B payload]"""
    reader = _open(data)
    return PingRecord(payload=reader.read_bytes(PING_PAYLOAD_SIZE))


def encode_ping_response(record: PingRecord, header: bytes) -> bytes:
    """Encode a PING response echoing header."""
    return _check_header(header) + record.payload


def decode_rcon_response(data: Buffer) -> RconResponseRecord:
    """
    Decode one line of RCON_COMMAND output.

    Format: [11B header][2B message_len][message (Windows-1251)]
    """
    reader = _open(data)
    message_len = reader.read_u16()
    return RconResponseRecord(message=reader.read_legacy(message_len))


def encode_rcon_response(record: RconResponseRecord, header: bytes) -> bytes:
    """Encode one line of RCON_COMMAND output echoing header."""
    return _check_header(header) + _prefixed(
        "message", WINDOWS_1251.encode(record.message), _U16
    )


# =============================================================================
# Dispatch
# =============================================================================

DECODERS: dict[RequestKind, Callable[[Buffer], BaseModel]] = {
    RequestKind.INFORMATION: decode_information,
    RequestKind.RULES: decode_rules,
    RequestKind.CLIENT_LIST: decode_client_list,
    RequestKind.DETAILED_PLAYER_INFO: decode_detailed_players,
    RequestKind.RCON_COMMAND: decode_rcon_response,
    RequestKind.PING: decode_ping,
    RequestKind.IS_OPEN_MP_SERVER: decode_is_open_mp_server,
}


def decode_response(kind: RequestKind, data: Buffer) -> BaseModel:
    """
    Decode a response with the decoder matching the request kind that was sent.

    Args:
        kind: Kind of the request the response answers.
        data: Raw datagram, including the echoed header.

    Returns:
        The record type for that kind.

    Raises:
        ReadError: If the buffer is too short.
        LegacyEncodingError: If a Windows-1251 field cannot be decoded.
        Utf8Error: If a UTF-8 field is invalid.
    """
    kind = RequestKind(kind)
    logger.debug("Decoding %s response (%d bytes)", kind.name, len(data))
    return DECODERS[kind](data)

# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
SA-MP / open.mp Query Protocol Requests.

Request Format:
    +-------+-------+-------+-------+-------+-------+-------+-------+-------+-------+-------+
    | 'S'   | 'A'   | 'M'   | 'P'   | IPv4 address (4 bytes)        | Port  | Port  | Op    |
    |       |       |       |       | network order                 | low   | high  |       |
    +-------+-------+-------+-------+-------+-------+-------+-------+-------+-------+-------+

Header Fields:
    - Magic (4 bytes): ASCII "SAMP" - Identifies the query protocol
    - Address (4 bytes): IPv4 octets of the queried server
    - Port (2 bytes): Queried server port, low byte first
    - Op (1 byte): ASCII opcode of the request kind

Servers echo these 11 bytes at the start of every reply. Remote console
requests carry a payload after the header:

    [2B password_len][password][2B command_len][command]   (little-endian)
"""

from __future__ import annotations

import logging
import struct
from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Union

from .charset import UTF8
from .exceptions import (
    InvalidAddressError,
    InvalidPortError,
    PacketNotBuiltError,
    PayloadTooLargeError,
)

logger = logging.getLogger(__name__)

# Protocol constants
MAGIC: bytes = b"SAMP"
HEADER_SIZE: int = 11
MAX_PORT: int = 0xFFFF
MAX_RCON_FIELD_SIZE: int = 0xFFFF

AddressLike = Union[str, IPv4Address, IPv6Address]


class RequestKind(IntEnum):
    """Opcodes for query requests. Each value is a single ASCII byte."""

    INFORMATION = 0x69  # 'i'
    RULES = 0x72  # 'r'
    CLIENT_LIST = 0x63  # 'c'
    DETAILED_PLAYER_INFO = 0x64  # 'd'
    RCON_COMMAND = 0x78  # 'x'
    PING = 0x70  # 'p'
    IS_OPEN_MP_SERVER = 0x6F  # 'o'

    @property
    def opcode(self) -> bytes:
        """The opcode as it appears on the wire."""
        return bytes([self.value])


def parse_ipv4(address: AddressLike) -> IPv4Address:
    """
    Coerce an address to IPv4Address.

    Raises:
        InvalidAddressError: If the address is IPv6 or not an IP address.
    """
    if isinstance(address, IPv4Address):
        return address
    try:
        parsed = ip_address(address)
    except ValueError as exc:
        raise InvalidAddressError(str(address)) from exc
    if not isinstance(parsed, IPv4Address):
        raise InvalidAddressError(str(parsed))
    return parsed


def validate_port(port: int) -> int:
    """Return port unchanged, or raise InvalidPortError if it is not a 16-bit int."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidPortError(port)
    if not 0 <= port <= MAX_PORT:
        raise InvalidPortError(port)
    return port


def encode_header(kind: RequestKind, address: AddressLike, port: int) -> bytes:
    """
    Encode the 11-byte request header.

    The port is written as two separate bytes, low byte first.
    """
    addr = parse_ipv4(address)
    validate_port(port)

    data = bytearray(HEADER_SIZE)
    data[0:4] = MAGIC
    data[4:8] = addr.packed
    data[8] = port & 0xFF
    data[9] = (port >> 8) & 0xFF
    data[10] = RequestKind(kind)
    return bytes(data)


def encode_rcon_payload(password: str, command: str) -> bytes:
    """
    Encode the remote console payload that follows the header.

    Format: [2B password_len][password][2B command_len][command]
    """
    parts = []
    for name, value in (("password", password), ("command", command)):
        raw = UTF8.encode(value)
        if len(raw) > MAX_RCON_FIELD_SIZE:
            raise PayloadTooLargeError(name, len(raw), MAX_RCON_FIELD_SIZE)
        parts.append(struct.pack("<H", len(raw)))
        parts.append(raw)
    return b"".join(parts)


class Request:
    """
    A query request addressed to one server.

    Construction only validates the target. The wire bytes are produced by an
    explicit build() and read back with get_data(); reading before building
    raises PacketNotBuiltError.

    Usage:
        request = Request(RequestKind.INFORMATION, "127.0.0.1", 7777)
        request.build()
        sock.sendto(request.get_data(), ("127.0.0.1", 7777))
    """

    def __init__(self, kind: RequestKind, address: AddressLike, port: int) -> None:
        self.kind = RequestKind(kind)
        self.address = parse_ipv4(address)
        self.port = validate_port(port)
        self._data: bytes | None = None

    @property
    def is_built(self) -> bool:
        return self._data is not None

    def build(self) -> None:
        """
        Encode the request into its wire bytes.

        Fields are validated again, so an address or port changed after
        construction is checked here.

        Raises:
            InvalidAddressError: If the address is no longer IPv4.
            InvalidPortError: If the port is out of range.
        """
        self.address = parse_ipv4(self.address)
        self._data = encode_header(self.kind, self.address, self.port)
        logger.debug(
            "Built %s request for %s:%d (%d bytes)",
            self.kind.name,
            self.address,
            self.port,
            len(self._data),
        )

    def get_data(self) -> bytes:
        """
        Return the built request bytes.

        Raises:
            PacketNotBuiltError: If build() was never called.
        """
        if self._data is None:
            raise PacketNotBuiltError()
        return self._data

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.name}, "
            f"address={self.address}, port={self.port}, built={self.is_built})"
        )


class RconRequest(Request):
    """
    An authenticated remote console command.

    Unlike query requests it carries a payload after the header, so its data
    is longer than HEADER_SIZE.
    """

    def __init__(self, address: AddressLike, port: int, password: str, command: str) -> None:
        super().__init__(RequestKind.RCON_COMMAND, address, port)
        self.password = password
        self.command = command

    def build(self) -> None:
        """
        Encode header and payload.

        Raises:
            PayloadTooLargeError: If password or command exceed 65535 bytes.
        """
        payload = encode_rcon_payload(self.password, self.command)
        super().build()
        self._data += payload

    @property
    def payload(self) -> bytes:
        """The bytes following the header."""
        return self.get_data()[HEADER_SIZE:]

    def __repr__(self) -> str:
        # password is never shown
        return (
            f"{self.__class__.__name__}(address={self.address}, port={self.port}, "
            f"command={self.command!r}, built={self.is_built})"
        )

# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
pyompquery - Python codec for the SA-MP / open.mp server query protocol.

Builds query requests and decodes server replies into typed records:
- Server information (host name, game mode, player counts)
- Server rules
- Client list and detailed player information
- Ping echo and the open.mp capability flag
- Remote console (rcon) commands

The package never opens sockets. You own the transport; pyompquery only
turns addresses into bytes and bytes into records.

Quick Start:
    >>> import socket
    >>> from pyompquery import Request, RequestKind, decode_information
    >>>
    >>> request = Request(RequestKind.INFORMATION, "127.0.0.1", 7777)
    >>> request.build()
    >>> sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    >>> sock.settimeout(2.0)
    >>> sock.sendto(request.get_data(), ("127.0.0.1", 7777))
    >>> info = decode_information(sock.recv(2048))
    >>> print(info.hostname, info.players, info.max_players)

Dispatch by kind:
    >>> from pyompquery import decode_response
    >>> record = decode_response(RequestKind.RULES, datagram)

Remote console:
    >>> from pyompquery import RconRequest
    >>> request = RconRequest("127.0.0.1", 7777, "changeme", "varlist")
    >>> request.build()
    >>> sock.sendto(request.get_data(), ("127.0.0.1", 7777))
"""

from .binary import (
    DECODERS,
    PacketReader,
    decode_client_list,
    decode_detailed_players,
    decode_information,
    decode_is_open_mp_server,
    decode_ping,
    decode_rcon_response,
    decode_response,
    decode_rules,
    encode_client_list_response,
    encode_detailed_players_response,
    encode_information_response,
    encode_is_open_mp_server_response,
    encode_ping_response,
    encode_rcon_response,
    encode_rules_response,
)
from .charset import UTF8, WINDOWS_1251, TextCodec
from .exceptions import (
    DecodeError,
    InvalidAddressError,
    InvalidPortError,
    LegacyEncodingError,
    PacketNotBuiltError,
    PayloadTooLargeError,
    QueryError,
    ReadError,
    Utf8Error,
    Windows1251Error,
)
from .models import (
    ClientListRecord,
    DetailedPlayer,
    DetailedPlayerRecord,
    InformationRecord,
    IsOpenMpServerRecord,
    PingRecord,
    Player,
    QueryTarget,
    RconResponseRecord,
    RulesRecord,
)
from .protocol import HEADER_SIZE, MAGIC, RconRequest, Request, RequestKind, encode_header

__version__ = "0.3.0"
__author__ = "Firefly Software Solutions Inc."
__license__ = "Apache-2.0"

__all__ = [
    # Protocol
    "HEADER_SIZE",
    "MAGIC",
    "RequestKind",
    "Request",
    "RconRequest",
    "encode_header",
    # Configuration
    "QueryTarget",
    # Records (Pydantic models)
    "InformationRecord",
    "RulesRecord",
    "Player",
    "ClientListRecord",
    "DetailedPlayer",
    "DetailedPlayerRecord",
    "IsOpenMpServerRecord",
    "PingRecord",
    "RconResponseRecord",
    # Decoding
    "DECODERS",
    "PacketReader",
    "decode_response",
    "decode_information",
    "decode_rules",
    "decode_client_list",
    "decode_detailed_players",
    "decode_is_open_mp_server",
    "decode_ping",
    "decode_rcon_response",
    # Encoding
    "encode_information_response",
    "encode_rules_response",
    "encode_client_list_response",
    "encode_detailed_players_response",
    "encode_is_open_mp_server_response",
    "encode_ping_response",
    "encode_rcon_response",
    # Text codecs
    "TextCodec",
    "UTF8",
    "WINDOWS_1251",
    # Exceptions
    "QueryError",
    "InvalidAddressError",
    "InvalidPortError",
    "PacketNotBuiltError",
    "PayloadTooLargeError",
    "DecodeError",
    "ReadError",
    "LegacyEncodingError",
    "Windows1251Error",
    "Utf8Error",
]

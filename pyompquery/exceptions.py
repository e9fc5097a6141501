# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Custom exceptions for the pyompquery codec.

All exceptions inherit from QueryError, making it easy to catch every
codec-related error with a single except clause:

    try:
        record = decode_information(data)
    except QueryError as e:
        print(f"Query error: {e}")

For more granular error handling, catch specific exception types:

    try:
        record = decode_client_list(data)
    except ReadError as e:
        print(f"Truncated reply: needed {e.needed} bytes at offset {e.offset}")
    except Utf8Error as e:
        print(f"Bad nickname: {e}")
"""

from __future__ import annotations


class QueryError(Exception):
    """
    Base exception for all pyompquery errors.

    All pyompquery exceptions inherit from this class, allowing you to catch
    all codec-related errors with a single except clause.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message}\n\n  Hint: {hint}"
        super().__init__(message)


class InvalidAddressError(QueryError):
    """
    Raised when a request is addressed to something other than IPv4.

    The query protocol frames the target address as four octets, so IPv6
    addresses and host names cannot be encoded.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(
            f"{address} is not a valid IPv4 address",
            hint="Resolve host names to an IPv4 address before building the request",
        )


class InvalidPortError(QueryError):
    """Raised when a port does not fit in an unsigned 16-bit integer."""

    def __init__(self, port: int) -> None:
        self.port = port
        super().__init__(f"{port} is not a valid port (expected 0-65535)")


class PacketNotBuiltError(QueryError):
    """
    Raised when request data is read before the request was built.

    Call build() on the request first; get_data() never returns zeroed or
    stale bytes.
    """

    def __init__(self) -> None:
        super().__init__(
            "Data not available because packet was not built",
            hint="Call request.build() before request.get_data()",
        )


class PayloadTooLargeError(QueryError):
    """Raised when a value does not fit in its length or count prefix."""

    def __init__(self, field: str, size: int, max_size: int) -> None:
        self.field = field
        self.size = size
        self.max_size = max_size
        super().__init__(f"Field '{field}' is {size} long, maximum is {max_size}")


class DecodeError(QueryError):
    """Base exception for failures while decoding a server response."""


class ReadError(DecodeError):
    """
    Raised when a response buffer ends before a field could be read.

    This typically means:
    - The datagram was truncated by the transport
    - The reply was decoded with the decoder of a different request kind
    - The server sent a malformed packet
    """

    def __init__(self, offset: int, needed: int, available: int) -> None:
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"Failed to read data from packet: needed {needed} bytes at offset "
            f"{offset}, {available} available"
        )


class LegacyEncodingError(DecodeError):
    """
    Raised when text cannot be converted with the Windows-1251 code page.

    No replacement characters are substituted; a single unmapped byte makes
    the whole field fail.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to decode data with WINDOWS_1251: {reason}")


# Name used by other query libraries for the same condition
Windows1251Error = LegacyEncodingError


class Utf8Error(DecodeError):
    """Raised when bytes that should be UTF-8 are not valid UTF-8."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to decode data to utf-8: {reason}")

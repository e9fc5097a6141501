#!/usr/bin/env python3
"""
03_error_handling.py - Error Handling Patterns

This example demonstrates, without a server:
- Invalid addresses (IPv6, host names)
- Reading a request before it was built
- Truncated replies
- Text that fails Windows-1251 or UTF-8 decoding

Run with:
    python 03_error_handling.py
"""

from pyompquery import (
    InvalidAddressError,
    LegacyEncodingError,
    PacketNotBuiltError,
    ReadError,
    Request,
    RequestKind,
    Utf8Error,
    decode_client_list,
    decode_information,
    encode_header,
)


def address_errors():
    """Handling address errors"""
    print("Address Error Handling")
    print("-" * 50)

    for address in ("::1", "play.example.com"):
        try:
            Request(RequestKind.INFORMATION, address, 7777)
        except InvalidAddressError as e:
            print(f"✓ Caught invalid address {e.address!r}")


def build_errors():
    """Handling read-before-build"""
    print("\nBuild Error Handling")
    print("-" * 50)

    request = Request(RequestKind.RULES, "127.0.0.1", 7777)
    try:
        request.get_data()
    except PacketNotBuiltError as e:
        print(f"✓ Caught: {e}")


def decode_errors():
    """Handling malformed replies"""
    print("\nDecode Error Handling")
    print("-" * 50)

    header = encode_header(RequestKind.INFORMATION, "127.0.0.1", 7777)

    try:
        decode_information(header + b"\x00\x01")
    except ReadError as e:
        print(f"✓ Truncated reply at offset {e.offset}")

    bad_hostname = header + b"\x00\x00\x00\x00\x00" + b"\x01\x00\x00\x00\x98"
    try:
        decode_information(bad_hostname)
    except LegacyEncodingError as e:
        print(f"✓ Bad host name: {e.reason}")

    bad_nickname = header[:10] + b"c" + b"\x01\x00" + b"\x02\xc3\x28" + b"\x00\x00\x00\x00"
    try:
        decode_client_list(bad_nickname)
    except Utf8Error as e:
        print(f"✓ Bad nickname: {e.reason}")


def main():
    address_errors()
    build_errors()
    decode_errors()


if __name__ == "__main__":
    main()

# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Text codecs for query packet strings.

Server metadata mixes two encodings: host names and languages are sent in
the Windows-1251 code page, everything else in UTF-8. Both codecs decode
strictly and raise a codec-specific exception instead of substituting
replacement characters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .exceptions import LegacyEncodingError, Utf8Error

LEGACY_ENCODING: str = "cp1251"


class TextCodec(ABC):
    @abstractmethod
    def encode(self, text: str) -> bytes:
        pass

    @abstractmethod
    def decode(self, data: bytes) -> str:
        pass


class Utf8Codec(TextCodec):
    def encode(self, text: str) -> bytes:
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as exc:
            # lone surrogates
            raise Utf8Error(str(exc)) from exc

    def decode(self, data: bytes) -> str:
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise Utf8Error(str(exc)) from exc


class Windows1251Codec(TextCodec):
    def encode(self, text: str) -> bytes:
        try:
            return text.encode(LEGACY_ENCODING)
        except UnicodeEncodeError as exc:
            raise LegacyEncodingError(str(exc)) from exc

    def decode(self, data: bytes) -> str:
        try:
            return bytes(data).decode(LEGACY_ENCODING)
        except UnicodeDecodeError as exc:
            raise LegacyEncodingError(str(exc)) from exc


UTF8 = Utf8Codec()
WINDOWS_1251 = Windows1251Codec()

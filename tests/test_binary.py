# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Tests for query response decoding and encoding."""

import struct
from concurrent.futures import ThreadPoolExecutor

import pytest

from pyompquery.binary import (
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
from pyompquery.exceptions import (
    LegacyEncodingError,
    PayloadTooLargeError,
    ReadError,
    Utf8Error,
    Windows1251Error,
)
from pyompquery.models import (
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
from pyompquery.protocol import HEADER_SIZE, RequestKind, encode_header


def header(kind: RequestKind) -> bytes:
    return encode_header(kind, "127.0.0.1", 7777)


def information_packet(
    hostname: bytes = "Сервер".encode("cp1251"),
    gamemode: bytes = b"Freeroam",
    language: bytes = "Русский".encode("cp1251"),
) -> bytes:
    return b"".join(
        [
            header(RequestKind.INFORMATION),
            b"\x01",
            struct.pack("<HH", 12, 100),
            struct.pack("<I", len(hostname)),
            hostname,
            struct.pack("<I", len(gamemode)),
            gamemode,
            struct.pack("<I", len(language)),
            language,
        ]
    )


def client_list_packet(entries: list[tuple[bytes, int]]) -> bytes:
    parts = [header(RequestKind.CLIENT_LIST), struct.pack("<H", len(entries))]
    for nickname, score in entries:
        parts.append(struct.pack("<B", len(nickname)) + nickname + struct.pack("<I", score))
    return b"".join(parts)


class TestPacketReader:
    """Tests for PacketReader."""

    def test_reads_little_endian(self) -> None:
        """Test integer reads are little-endian."""
        reader = PacketReader(b"\x01\x02\x03\x04\x05\x06\x07")
        assert reader.read_u8() == 0x01
        assert reader.read_u16() == 0x0302
        assert reader.read_u32() == 0x07060504
        assert reader.remaining == 0

    def test_bool_only_one_is_true(self) -> None:
        """Test only 0x01 decodes as true."""
        reader = PacketReader(b"\x00\x01\x02")
        assert reader.read_bool() is False
        assert reader.read_bool() is True
        assert reader.read_bool() is False

    def test_underrun_reports_position(self) -> None:
        """Test a short read reports offset and sizes."""
        reader = PacketReader(b"\x01\x02\x03")
        reader.read_u8()
        with pytest.raises(ReadError) as exc_info:
            reader.read_u32()
        assert exc_info.value.offset == 1
        assert exc_info.value.needed == 4
        assert exc_info.value.available == 2
        assert isinstance(exc_info.value.__cause__, struct.error)

    def test_read_bytes_underrun(self) -> None:
        """Test read_bytes never truncates."""
        reader = PacketReader(b"abc")
        with pytest.raises(ReadError):
            reader.read_bytes(4)
        assert reader.offset == 0

    def test_skip_past_end(self) -> None:
        """Test skipping past the end fails on the next read."""
        reader = PacketReader(b"abc")
        reader.skip(HEADER_SIZE)
        assert reader.remaining == 0
        with pytest.raises(ReadError):
            reader.read_u8()

    def test_accepts_bytearray_and_memoryview(self) -> None:
        """Test non-bytes buffers are accepted."""
        assert PacketReader(bytearray(b"\x07")).read_u8() == 7
        assert PacketReader(memoryview(b"\x08")).read_u8() == 8


class TestInformation:
    """Tests for INFORMATION responses."""

    def test_decode(self) -> None:
        """Test decoding a complete information reply."""
        record = decode_information(information_packet())

        assert record.password is True
        assert record.players == 12
        assert record.max_players == 100
        assert record.hostname == "Сервер"
        assert record.gamemode == "Freeroam"
        assert record.language == "Русский"

    def test_gamemode_is_utf8(self) -> None:
        """Test game mode is decoded as UTF-8, not Windows-1251."""
        record = decode_information(information_packet(gamemode="Дрифт".encode("utf-8")))
        assert record.gamemode == "Дрифт"

    def test_invalid_legacy_hostname(self) -> None:
        """Test an unmapped Windows-1251 byte in the host name fails."""
        with pytest.raises(LegacyEncodingError):
            decode_information(information_packet(hostname=b"bad \x98 name"))

    def test_invalid_legacy_language(self) -> None:
        """Test an unmapped Windows-1251 byte in the language fails."""
        with pytest.raises(Windows1251Error):
            decode_information(information_packet(language=b"\x98"))

    def test_invalid_utf8_gamemode(self) -> None:
        """Test invalid UTF-8 in the game mode fails with Utf8Error."""
        with pytest.raises(Utf8Error):
            decode_information(information_packet(gamemode=b"\xff\xfe"))

    def test_header_only(self) -> None:
        """Test a header-only buffer fails with ReadError."""
        with pytest.raises(ReadError):
            decode_information(header(RequestKind.INFORMATION))

    def test_every_truncation_fails(self) -> None:
        """Test cutting the reply anywhere inside the payload fails."""
        packet = information_packet()
        for length in range(len(packet)):
            with pytest.raises(ReadError):
                decode_information(packet[:length])

    def test_trailing_bytes_ignored(self) -> None:
        """Test padding after the payload is ignored."""
        record = decode_information(information_packet() + b"\x00" * 32)
        assert record.hostname == "Сервер"

    def test_encode(self) -> None:
        """Test encoding reproduces the hand-built reply."""
        record = InformationRecord(
            password=True,
            players=12,
            max_players=100,
            hostname="Сервер",
            gamemode="Freeroam",
            language="Русский",
        )
        assert encode_information_response(record, header(RequestKind.INFORMATION)) == (
            information_packet()
        )

    def test_encode_unmappable_hostname(self) -> None:
        """Test host names outside Windows-1251 cannot be encoded."""
        record = InformationRecord(
            password=False, players=0, max_players=0, hostname="日本", gamemode="", language=""
        )
        with pytest.raises(LegacyEncodingError):
            encode_information_response(record, header(RequestKind.INFORMATION))


class TestRules:
    """Tests for RULES responses."""

    def test_decode(self) -> None:
        """Test decoding rules into a mapping."""
        packet = b"".join(
            [
                header(RequestKind.RULES),
                struct.pack("<H", 2),
                b"\x07version\x0a0.3.7-R2-1",
                b"\x06weburl\x07open.mp",
            ]
        )

        record = decode_rules(packet)
        assert record.rules == {"version": "0.3.7-R2-1", "weburl": "open.mp"}
        assert record.get("version") == "0.3.7-R2-1"
        assert record.get("missing", "-") == "-"
        assert len(record) == 2

    def test_duplicate_names_keep_last(self) -> None:
        """Test a repeated rule name overwrites the earlier value."""
        packet = header(RequestKind.RULES) + struct.pack("<H", 2) + b"\x01a\x011\x01a\x012"
        assert decode_rules(packet).rules == {"a": "2"}

    def test_empty(self) -> None:
        """Test zero rules decode to an empty mapping."""
        assert decode_rules(header(RequestKind.RULES) + b"\x00\x00").rules == {}

    def test_count_exceeds_entries(self) -> None:
        """Test a count larger than the entries sent fails."""
        packet = header(RequestKind.RULES) + struct.pack("<H", 3) + b"\x01a\x011"
        with pytest.raises(ReadError):
            decode_rules(packet)

    def test_truncated_value(self) -> None:
        """Test a value shorter than its length prefix fails."""
        packet = header(RequestKind.RULES) + struct.pack("<H", 1) + b"\x01a\x05ab"
        with pytest.raises(ReadError):
            decode_rules(packet)

    def test_invalid_utf8_name(self) -> None:
        """Test invalid UTF-8 in a rule name fails."""
        packet = header(RequestKind.RULES) + struct.pack("<H", 1) + b"\x01\xff\x011"
        with pytest.raises(Utf8Error):
            decode_rules(packet)

    def test_roundtrip(self) -> None:
        """Test N encoded rules decode to an equal mapping."""
        rules = {f"rule{i}": f"value {i}" for i in range(40)}
        rules["mapname"] = "San Andreas"
        data = encode_rules_response(RulesRecord(rules=rules), header(RequestKind.RULES))

        decoded = decode_rules(data)
        assert len(decoded) == len(rules)
        assert decoded.rules == rules

    def test_encode_name_too_long(self) -> None:
        """Test names longer than 255 bytes cannot be encoded."""
        record = RulesRecord(rules={"n" * 256: "v"})
        with pytest.raises(PayloadTooLargeError) as exc_info:
            encode_rules_response(record, header(RequestKind.RULES))
        assert exc_info.value.max_size == 255


class TestClientList:
    """Tests for CLIENT_LIST responses."""

    def test_decode_preserves_order(self) -> None:
        """Test players come back in server order."""
        packet = client_list_packet([(b"zed", 1), (b"alice", 500), (b"Bob", 30)])
        record = decode_client_list(packet)

        assert [p.nickname for p in record.players] == ["zed", "alice", "Bob"]
        assert [p.score for p in record.players] == [1, 500, 30]

    def test_max_score(self) -> None:
        """Test scores are unsigned 32-bit."""
        record = decode_client_list(client_list_packet([(b"max", 0xFFFFFFFF)]))
        assert record.players[0].score == 0xFFFFFFFF

    def test_invalid_utf8_nickname(self) -> None:
        """Test invalid UTF-8 in a nickname fails with Utf8Error."""
        with pytest.raises(Utf8Error):
            decode_client_list(client_list_packet([(b"\xc3\x28", 1)]))

    def test_missing_score(self) -> None:
        """Test a player without a score fails."""
        packet = header(RequestKind.CLIENT_LIST) + struct.pack("<H", 1) + b"\x03abc\x01\x00"
        with pytest.raises(ReadError):
            decode_client_list(packet)

    def test_header_only(self) -> None:
        """Test a header-only buffer fails."""
        with pytest.raises(ReadError):
            decode_client_list(header(RequestKind.CLIENT_LIST))

    def test_roundtrip(self) -> None:
        """Test N encoded players decode in the same order."""
        players = tuple(Player(nickname=f"player_{i}", score=i * 7) for i in range(50))
        record = ClientListRecord(players=players)
        data = encode_client_list_response(record, header(RequestKind.CLIENT_LIST))

        decoded = decode_client_list(data)
        assert len(decoded.players) == 50
        assert decoded == record


class TestDetailedPlayers:
    """Tests for DETAILED_PLAYER_INFO responses."""

    def test_decode(self) -> None:
        """Test decoding id, nickname, score and ping."""
        packet = b"".join(
            [
                header(RequestKind.DETAILED_PLAYER_INFO),
                struct.pack("<H", 2),
                b"\x00\x04Kane" + struct.pack("<II", 10, 45),
                b"\x07\x04Abel" + struct.pack("<II", 3, 120),
            ]
        )
        record = decode_detailed_players(packet)

        assert record.players == (
            DetailedPlayer(id=0, nickname="Kane", score=10, ping=45),
            DetailedPlayer(id=7, nickname="Abel", score=3, ping=120),
        )

    def test_missing_ping(self) -> None:
        """Test a player without a ping fails."""
        packet = (
            header(RequestKind.DETAILED_PLAYER_INFO)
            + struct.pack("<H", 1)
            + b"\x00\x04Kane"
            + struct.pack("<I", 10)
        )
        with pytest.raises(ReadError):
            decode_detailed_players(packet)

    def test_invalid_utf8_nickname(self) -> None:
        """Test invalid UTF-8 in a nickname fails with Utf8Error."""
        packet = (
            header(RequestKind.DETAILED_PLAYER_INFO)
            + struct.pack("<H", 1)
            + b"\x03\x02\xc3\x28"
            + struct.pack("<II", 10, 45)
        )
        with pytest.raises(Utf8Error):
            decode_detailed_players(packet)

    def test_header_only(self) -> None:
        """Test a header-only buffer fails."""
        with pytest.raises(ReadError):
            decode_detailed_players(header(RequestKind.DETAILED_PLAYER_INFO))

    def test_roundtrip(self) -> None:
        """Test encoded players decode unchanged."""
        record = DetailedPlayerRecord(
            players=tuple(
                DetailedPlayer(id=i, nickname=f"p{i}", score=i, ping=30 + i) for i in range(5)
            )
        )
        data = encode_detailed_players_response(record, header(RequestKind.DETAILED_PLAYER_INFO))
        assert decode_detailed_players(data) == record


class TestSmallResponses:
    """Tests for IS_OPEN_MP_SERVER, PING and rcon responses."""

    def test_is_open_mp(self) -> None:
        """Test the capability flag."""
        assert decode_is_open_mp_server(header(RequestKind.IS_OPEN_MP_SERVER) + b"\x01")
        assert not decode_is_open_mp_server(header(RequestKind.IS_OPEN_MP_SERVER) + b"\x00")

    def test_is_open_mp_header_only(self) -> None:
        """Test a missing flag fails."""
        with pytest.raises(ReadError):
            decode_is_open_mp_server(header(RequestKind.IS_OPEN_MP_SERVER))

    def test_ping(self) -> None:
        """Test the ping payload is returned uninterpreted."""
        record = decode_ping(header(RequestKind.PING) + b"\xde\xad\xbe\xef")
        assert record.payload == b"\xde\xad\xbe\xef"

    def test_ping_short(self) -> None:
        """Test a ping reply with three payload bytes fails."""
        with pytest.raises(ReadError) as exc_info:
            decode_ping(header(RequestKind.PING) + b"\x01\x02\x03")
        assert exc_info.value.needed == 4
        assert exc_info.value.available == 3

    def test_rcon_response(self) -> None:
        """Test one line of rcon output."""
        text = "Консоль: ok".encode("cp1251")
        packet = header(RequestKind.RCON_COMMAND) + struct.pack("<H", len(text)) + text
        assert decode_rcon_response(packet).message == "Консоль: ok"

    def test_small_encoders(self) -> None:
        """Test the small encoders produce what the decoders read."""
        flag = encode_is_open_mp_server_response(
            IsOpenMpServerRecord(is_open_mp=True), header(RequestKind.IS_OPEN_MP_SERVER)
        )
        assert flag[HEADER_SIZE:] == b"\x01"

        ping = encode_ping_response(PingRecord(payload=b"abcd"), header(RequestKind.PING))
        assert ping[HEADER_SIZE:] == b"abcd"

        rcon = encode_rcon_response(
            RconResponseRecord(message="hostname"), header(RequestKind.RCON_COMMAND)
        )
        assert rcon[HEADER_SIZE:] == b"\x08\x00hostname"

    def test_encoder_rejects_bad_header(self) -> None:
        """Test encoders require an 11-byte header."""
        with pytest.raises(ValueError, match="Invalid header size"):
            encode_ping_response(PingRecord(payload=b"abcd"), b"SAMP")


class TestDecodeResponse:
    """Tests for decode_response dispatch."""

    def test_every_kind_has_decoder(self) -> None:
        """Test each request kind maps to a decoder."""
        assert set(DECODERS) == set(RequestKind)

    def test_dispatch(self) -> None:
        """Test dispatch picks the decoder for the kind."""
        record = decode_response(RequestKind.INFORMATION, information_packet())
        assert isinstance(record, InformationRecord)

        record = decode_response(RequestKind.PING, header(RequestKind.PING) + b"1234")
        assert isinstance(record, PingRecord)

    def test_dispatch_accepts_raw_opcode(self) -> None:
        """Test an opcode int resolves to its kind."""
        record = decode_response(ord("o"), header(RequestKind.IS_OPEN_MP_SERVER) + b"\x01")
        assert isinstance(record, IsOpenMpServerRecord)

    def test_concurrent_decoding(self) -> None:
        """Test independent buffers decode concurrently without interference."""
        packets = [
            client_list_packet([(f"p{i}_{j}".encode(), j) for j in range(i % 10)])
            for i in range(64)
        ]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(decode_client_list, packets))

        for i, record in enumerate(results):
            assert len(record.players) == i % 10

#!/usr/bin/env python3
"""
01_query_server.py - Query a SA-MP / open.mp Server

This is the foundational example for the pyompquery codec.

What this example demonstrates:
- Building requests with Request(kind, address, port) and build()
- Owning the UDP socket yourself (pyompquery never opens one)
- Decoding replies with decode_response()
- Timing a PING round trip

Key Concepts:
- Request: two-phase object, construct then build then get_data()
- RequestKind: one ASCII opcode per query
- Records: immutable pydantic models returned by the decoders

Prerequisites:
    - A server listening on 127.0.0.1:7777 (or pass host and port)
    - pyompquery installed: pip install pyompquery

Run with:
    python 01_query_server.py [host] [port]
"""

import logging
import os
import socket
import sys
import time

from pyompquery import QueryError, QueryTarget, RequestKind, decode_response

logger = logging.getLogger("pyompquery.examples.query")


def send(sock: socket.socket, target: QueryTarget, data: bytes) -> bytes:
    sock.sendto(data, (str(target.host), target.port))
    reply, _ = sock.recvfrom(4096)
    return reply


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = sys.argv[1] if len(sys.argv) > 1 else "127.0.0.1"
    port = int(sys.argv[2]) if len(sys.argv) > 2 else 7777
    target = QueryTarget(host=host, port=port)

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.settimeout(2.0)

    try:
        for kind in (
            RequestKind.INFORMATION,
            RequestKind.RULES,
            RequestKind.CLIENT_LIST,
            RequestKind.IS_OPEN_MP_SERVER,
        ):
            request = target.request(kind)
            request.build()
            try:
                record = decode_response(kind, send(sock, target, request.get_data()))
            except socket.timeout:
                logger.warning("%s: no reply from %s:%s", kind.name, target.host, target.port)
                continue
            logger.info("%s: %s", kind.name, record.model_dump_json())

        # Ping: the server echoes four bytes appended after the header
        request = target.request(RequestKind.PING)
        request.build()
        start = time.perf_counter()
        reply = send(sock, target, request.get_data() + os.urandom(4))
        rtt_ms = (time.perf_counter() - start) * 1000.0
        decode_response(RequestKind.PING, reply)
        logger.info("PING: %.2f ms", rtt_ms)

    except socket.timeout:
        logger.error("Server did not reply")
        return 1
    except QueryError as e:
        logger.error("Query failed: %s", e)
        return 1
    finally:
        sock.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

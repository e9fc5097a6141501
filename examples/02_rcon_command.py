#!/usr/bin/env python3
"""
02_rcon_command.py - Remote Console Commands

This example demonstrates:
- Building an RconRequest (header plus password and command payload)
- Reading the one-datagram-per-line rcon output until the server goes quiet

Prerequisites:
    - A server on 127.0.0.1:7777 with rcon_password set
    - pyompquery installed

Run with:
    python 02_rcon_command.py <password> [command]
"""

import logging
import socket
import sys

from pyompquery import RconRequest, decode_rcon_response

logger = logging.getLogger("pyompquery.examples.rcon")

HOST = "127.0.0.1"
PORT = 7777


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    password = sys.argv[1]
    command = sys.argv[2] if len(sys.argv) > 2 else "varlist"

    request = RconRequest(HOST, PORT, password, command)
    request.build()

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.settimeout(1.0)
    try:
        sock.sendto(request.get_data(), (HOST, PORT))
        while True:
            try:
                reply, _ = sock.recvfrom(4096)
            except socket.timeout:
                break
            print(decode_rcon_response(reply).message)
    finally:
        sock.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

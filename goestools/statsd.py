"""UDP datagram socket for sending statsd metrics."""

from __future__ import annotations

import socket

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "8125"

_FAMILIES = {
    "udp4": socket.AF_INET,
    "udp6": socket.AF_INET6,
}


def parse_address(addr: str) -> tuple[int, str, str]:
    """Split ``[schema://][host][:port]`` into (address family, host, port).

    The schema ``udp4`` selects IPv4 and ``udp6`` IPv6; anything else
    leaves the family unspecified. The host defaults to ``localhost`` and
    the port to ``8125``.
    """
    schema = ""
    host = addr
    sep = addr.find("://")
    if sep != -1:
        schema = addr[:sep]
        host = addr[sep + 3:]

    port = ""
    colon = host.find(":")
    if colon != -1:
        port = host[colon + 1:]
        host = host[:colon]

    family = _FAMILIES.get(schema, socket.AF_UNSPEC)
    return family, host or DEFAULT_HOST, port or DEFAULT_PORT


def _resolve(family: int, host: str, port: str):
    try:
        return socket.getaddrinfo(
            host, port, family, socket.SOCK_DGRAM, 0, socket.AI_ADDRCONFIG
        )
    except socket.gaierror:
        # Hosts with only a loopback interface reject AI_ADDRCONFIG lookups.
        return socket.getaddrinfo(host, port, family, socket.SOCK_DGRAM, 0)


class DatagramSocket:
    """Unconnected UDP socket that sends every datagram to one address."""

    def __init__(self, addr: str) -> None:
        family, host, port = parse_address(addr)
        try:
            infos = _resolve(family, host, port)
        except socket.gaierror as exc:
            raise OSError(f"unable to resolve: {host}") from exc
        if not infos:
            raise OSError(f"unable to resolve: {host}")
        af, socktype, proto, _, sockaddr = infos[0]
        try:
            self._sock = socket.socket(af, socktype, proto)
        except OSError as exc:
            raise OSError("unable to create socket") from exc
        self.address = sockaddr

    def send(self, payload: str | bytes) -> bool:
        """Send ``payload`` as one datagram; return whether it was sent."""
        data = payload.encode() if isinstance(payload, str) else bytes(payload)
        try:
            self._sock.sendto(data, self.address)
        except OSError:
            return False
        return True

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> DatagramSocket:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
"""
TCP connect probe using a plain connect() without crafting raw packets.
One attempt per call, bounded by the timeout; anything short of an
established connection counts as CLOSED.
"""

import logging
import socket

from core.models import PortStatus

log = logging.getLogger(__name__)


def _release(sock: socket.socket, host: str, port: int) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        log.warning("failed to shut down connection to %s:%d: %s", host, port, exc)
    try:
        sock.close()
    except OSError as exc:
        log.warning("failed to close connection to %s:%d: %s", host, port, exc)


def probe(host: str, port: int, timeout: float = 0.25) -> PortStatus:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError, OSError):
        return PortStatus.CLOSED
    if not infos:
        return PortStatus.CLOSED

    family, socktype, proto, _, sockaddr = infos[0]
    try:
        sock = socket.socket(family, socktype, proto)
    except OSError as exc:
        log.debug("could not create socket for %s:%d: %s", host, port, exc)
        return PortStatus.CLOSED

    try:
        sock.settimeout(timeout)
        sock.connect(sockaddr)
    except (OverflowError, ValueError) as exc:
        log.warning("unusable timeout %r for %s:%d: %s", timeout, host, port, exc)
        sock.close()
        return PortStatus.CLOSED
    except (socket.timeout, OSError):
        sock.close()
        return PortStatus.CLOSED

    _release(sock, host, port)
    return PortStatus.OPEN

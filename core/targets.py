"""
Host precondition check: a scan only starts once the host resolves.
"""

import logging
import socket

from core.errors import InvalidHost

log = logging.getLogger(__name__)


def resolve_host(host: str) -> str:
    """
    Resolve host to its first TCP-connectable address.

    Raises InvalidHost when the name does not resolve at all; a scan against an
    unresolvable host cannot make a single connection attempt.
    """
    try:
        infos = socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise InvalidHost(f"Could not resolve host '{host}': {exc}") from exc
    if not infos:
        raise InvalidHost(f"Could not resolve host '{host}'")
    address = infos[0][4][0]
    log.debug("resolved %s -> %s", host, address)
    return address

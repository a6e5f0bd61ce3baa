"""Discovery of the host's internal network address."""

from __future__ import annotations

import ipaddress
import socket

import psutil

__all__ = ["internal_ip"]


def internal_ip() -> str:
    """Return the first non-loopback IPv4 address of an up, non-``lo`` interface.

    Returns an empty string when there is none or the interfaces cannot be listed.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except OSError:
        return ""
    for name, entries in addrs.items():
        stat = stats.get(name)
        if stat is None or not stat.isup or name.startswith("lo"):
            continue
        for entry in entries:
            if entry.family != socket.AF_INET:
                continue
            try:
                address = ipaddress.ip_address(entry.address)
            except ValueError:
                continue
            if not address.is_loopback:
                return str(address)
    return ""
"""Building, parsing and sending route netlink messages."""

from __future__ import annotations

import errno
import ipaddress
import os
import socket
import struct
from collections.abc import Iterator

NLMSG_ALIGNTO = 4
RTA_ALIGNTO = 4
NLMSG_ERROR = 2
NETLINK_ROUTE = 0

_AF_NETLINK = getattr(socket, "AF_NETLINK", 16)
_NLMSGHDR = struct.Struct("=IHHII")
_RTATTR = struct.Struct("=HH")
_ERROR_CODE = struct.Struct("=i")

NLMSG_HDRLEN = _NLMSGHDR.size


def _align(length: int, to: int = NLMSG_ALIGNTO) -> int:
    return (length + to - 1) & ~(to - 1)


class NetlinkError(OSError):
    """Raised for malformed messages and failed netlink requests."""


class NetlinkMessage:
    """A netlink message: header, family specific header and attributes."""

    def __init__(self, msg_type: int, flags: int = 0, header: bytes = b"") -> None:
        self.msg_type = msg_type
        self.flags = flags
        self.seq = 0
        self.pid = 0
        self._body = bytearray(header)

    @property
    def length(self) -> int:
        """Total message length as carried in the netlink header."""
        return NLMSG_HDRLEN + len(self._body)

    @property
    def payload(self) -> bytes:
        """Everything after the netlink header."""
        return bytes(self._body)

    def _pad_to(self, length: int) -> None:
        self._body.extend(bytes(length - self.length))

    def put_attr(self, rta_type: int, payload: bytes) -> None:
        """Append a route attribute, keeping the message aligned."""
        data = bytes(payload)
        rta_len = _RTATTR.size + len(data)
        if rta_len > 0xFFFF:
            raise NetlinkError(errno.EMSGSIZE, "attribute too large")
        self._pad_to(_align(self.length))
        self._body += _RTATTR.pack(rta_len, rta_type) + data
        self._pad_to(_align(self.length, RTA_ALIGNTO))

    def put_address(self, rta_type: int, address: str | bytes | ipaddress.IPv4Address | ipaddress.IPv6Address) -> None:
        """Append an IPv4 or IPv6 address attribute."""
        try:
            ip = ipaddress.ip_address(address)
        except ValueError as exc:
            raise NetlinkError(errno.EAFNOSUPPORT, f"unsupported address: {address!r}") from exc
        self.put_attr(rta_type, ip.packed)

    def attrs(self, offset: int) -> Iterator[tuple[int, bytes]]:
        """Yield (type, payload) for each attribute starting ``offset`` bytes in."""
        data = self.to_bytes()
        pos = _align(offset)
        while pos + _RTATTR.size <= len(data):
            rta_len, rta_type = _RTATTR.unpack_from(data, pos)
            if rta_len < _RTATTR.size or pos + rta_len > len(data):
                return
            yield rta_type, data[pos + _RTATTR.size : pos + rta_len]
            pos += _align(rta_len, RTA_ALIGNTO)

    def to_bytes(self) -> bytes:
        """Return the message as sent on the wire."""
        header = _NLMSGHDR.pack(self.length, self.msg_type, self.flags, self.seq, self.pid)
        return header + bytes(self._body)

    @classmethod
    def from_bytes(cls, data: bytes) -> NetlinkMessage:
        """Parse a single message from received bytes."""
        if len(data) < NLMSG_HDRLEN:
            raise NetlinkError(errno.EBADMSG, "truncated netlink header")
        length, msg_type, flags, seq, pid = _NLMSGHDR.unpack_from(data)
        if length < NLMSG_HDRLEN or length > len(data):
            raise NetlinkError(errno.EBADMSG, f"bad netlink message length {length}")
        message = cls(msg_type, flags, bytes(data[NLMSG_HDRLEN:length]))
        message.seq = seq
        message.pid = pid
        return message


def rtnetlink_request(message: NetlinkMessage, buflen: int = 8192) -> NetlinkMessage:
    """Send ``message`` on a private route socket and return the single reply."""
    try:
        with socket.socket(_AF_NETLINK, socket.SOCK_RAW, NETLINK_ROUTE) as sock:
            sock.sendto(message.to_bytes(), (0, 0))
            data, _ = sock.recvfrom(buflen)
    except NetlinkError:
        raise
    except OSError as exc:
        raise NetlinkError(exc.errno, exc.strerror) from exc
    reply = NetlinkMessage.from_bytes(data)
    if reply.msg_type == NLMSG_ERROR:
        payload = reply.payload
        if len(payload) < _ERROR_CODE.size:
            raise NetlinkError(errno.EBADMSG, "truncated netlink error message")
        (error,) = _ERROR_CODE.unpack_from(payload)
        code = -error
        raise NetlinkError(code, os.strerror(code))
    return reply
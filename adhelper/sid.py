"""
Decoding of binary Windows security identifiers (``objectSid``).

A binary SID (Microsoft SECURITY_IDENTIFIER) is laid out as:

==========  =====  =============================================
Offset      Size   Meaning
==========  =====  =============================================
0           1      Revision (always 1 in practice)
1           1      Sub-authority count N (0-15)
2           6      Identifier authority, big-endian 48-bit
8           4 * N  Sub-authorities, each little-endian 32-bit
==========  =====  =============================================

By default :py:func:`decode_sid` renders ``S-<revision>-<N>-<sub>...``, the
form existing callers of this library depend on.  Note that it carries the
sub-authority count where Microsoft puts the identifier authority, so
``S-1-5-32-544`` (BUILTIN\\Administrators) decodes to ``S-1-2-32-544``.  Pass
``canonical=True`` or set ``ADHELPER_CANONICAL_SIDS = True`` to get the
Microsoft form instead.
"""

import struct
from typing import NamedTuple

from .conf import get_setting
from .exceptions import (
    MalformedSid,
    SidLengthMismatch,
    SidTooManySubAuthorities,
    SidTooShort,
)

#: Size of the revision, count and identifier authority header.
HEADER_SIZE: int = 8
#: Each sub-authority is a 32-bit unsigned integer.
SUB_AUTHORITY_SIZE: int = 4
MAX_SUB_AUTHORITIES: int = 15


class SID(NamedTuple):
    """A decoded security identifier."""

    revision: int
    authority: int
    sub_authorities: tuple[int, ...]

    def compat_string(self) -> str:
        """
        Render as ``S-<revision>-<sub-authority count>-<sub>...``.
        """
        parts = [str(self.revision), str(len(self.sub_authorities))]
        parts.extend(str(sub) for sub in self.sub_authorities)
        return "S-" + "-".join(parts)

    def canonical_string(self) -> str:
        """
        Render in the Microsoft form ``S-<revision>-<authority>-<sub>...``.

        Authorities that don't fit in 32 bits are written in hex, as
        ``ConvertSidToStringSid`` does.
        """
        if self.authority >= 2**32:
            authority = f"0x{self.authority:012X}"
        else:
            authority = str(self.authority)
        parts = [str(self.revision), authority]
        parts.extend(str(sub) for sub in self.sub_authorities)
        return "S-" + "-".join(parts)

    def __str__(self) -> str:
        return self.canonical_string()


def parse_sid(data: bytes) -> SID:
    """
    Parse a binary SID.

    Args:
        data: the raw ``objectSid`` value

    Raises:
        MalformedSid: ``data`` is empty
        SidTooShort: ``data`` is shorter than the 8 byte header
        SidTooManySubAuthorities: the count byte is greater than 15
        SidLengthMismatch: ``len(data)`` is not ``8 + 4 * count``

    Returns:
        The decoded :py:class:`SID`.

    """
    data = bytes(data)
    if not data:
        msg = "Couldn't get revision from SID: no data"
        raise MalformedSid(msg)
    revision = data[0]
    if len(data) < 2:  # noqa: PLR2004
        msg = "SID array doesn't meet the minimum size requirement: no sub-authority count"
        raise SidTooShort(msg)
    count = data[1]
    if count > MAX_SUB_AUTHORITIES:
        msg = (
            f"SID has {count} sub-authorities, more than the maximum of "
            f"{MAX_SUB_AUTHORITIES}"
        )
        raise SidTooManySubAuthorities(msg)
    if len(data) < HEADER_SIZE:
        msg = (
            f"SID array doesn't meet the minimum size requirement of "
            f"{HEADER_SIZE} bytes: got {len(data)}"
        )
        raise SidTooShort(msg)
    expected = HEADER_SIZE + SUB_AUTHORITY_SIZE * count
    if len(data) != expected:
        raise SidLengthMismatch(len(data), expected, count)

    authority = int.from_bytes(data[2:HEADER_SIZE], byteorder="big")
    sub_authorities = struct.unpack(f"<{count}I", data[HEADER_SIZE:])
    return SID(revision, authority, sub_authorities)


def decode_sid(data: bytes, canonical: bool | None = None) -> str:
    """
    Convert a binary SID to its string form.

    Args:
        data: the raw ``objectSid`` value

    Keyword Args:
        canonical: if ``True``, use the Microsoft form; if ``None``, use the
            ``ADHELPER_CANONICAL_SIDS`` setting.

    Raises:
        SidError: see :py:func:`parse_sid`

    Returns:
        The SID string.

    """
    sid = parse_sid(data)
    if canonical is None:
        canonical = get_setting("CANONICAL_SIDS")
    if canonical:
        return sid.canonical_string()
    return sid.compat_string()

"""
Typed access to the attributes of an Active Directory search result.

:py:class:`EntryDecoder` wraps an :py:class:`~adhelper.entry.Entry` and pulls
out the fields AD tooling usually wants: integers, the enabled flag from
``userAccountControl``, ``lastLogonTimestamp`` as a datetime, the
``objectSid`` string and ``memberOf``.

Missing attributes are returned as ``None`` rather than raising.
"""

import datetime
import logging
import re

from .conf import get_setting
from .entry import Entry
from .sid import decode_sid
from .timestamps import filetime_to_datetime, filetime_to_utc

logger = logging.getLogger(__name__)

#: ``userAccountControl`` bit set on disabled accounts.
ACCOUNTDISABLE: int = 0x0002

INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _resolve(mapping: dict, name: str) -> str | None:
    """
    Find the key in ``mapping`` that matches attribute ``name``.

    LDAP attribute names are case-insensitive, but servers and clients don't
    agree on casing (``memberOf`` vs ``memberof``), so fall back to a
    case-folded comparison when there's no exact match.
    """
    if name in mapping:
        return name
    folded = name.casefold()
    for key in mapping:
        if key.casefold() == folded:
            return key
    return None


class EntryDecoder:
    """
    Decode Active Directory attribute encodings from an :py:class:`Entry`.

    ``str_attr()`` and ``member_of()`` consume the values they return when
    ``consume`` is ``True`` (the default): each call to ``str_attr(name)``
    hands back the next value of ``name``, then ``None``.  Don't mix those
    with non-destructive reads of the same attribute.  With
    ``consume=False`` the entry is never modified.

    Args:
        entry: the entry to decode

    Keyword Args:
        consume: whether string reads remove values from ``entry``

    """

    def __init__(self, entry: Entry, consume: bool = True) -> None:
        self.entry = entry
        self.consume = consume

    @property
    def dn(self) -> str:
        return self.entry.dn

    def int_attr(self, name: str) -> int | None:
        """
        Return the first value of ``name`` as a signed 64-bit integer.

        An attribute that is present with no values counts as ``0``.

        Args:
            name: the attribute name

        Returns:
            The integer, or ``None`` if the attribute is missing or its
            first value is not a plain decimal 64-bit integer.

        """
        key = _resolve(self.entry.attrs, name)
        if key is None:
            return None
        values = self.entry.attrs[key]
        raw = values[0] if values else "0"
        if not _INTEGER_RE.fullmatch(raw):
            logger.debug("adhelper.decoder.bad-integer dn=%s attr=%s", self.dn, key)
            return None
        value = int(raw)
        if not INT64_MIN <= value <= INT64_MAX:
            return None
        return value

    def str_attr(self, name: str) -> str | None:
        """
        Return the first value of ``name``.

        When consuming, the value is removed from the entry, and the
        attribute itself once it has no values left.

        Args:
            name: the attribute name

        Returns:
            The value, or ``None`` if there isn't one.

        """
        key = _resolve(self.entry.attrs, name)
        if key is None:
            return None
        values = self.entry.attrs[key]
        if not values:
            if self.consume:
                del self.entry.attrs[key]
            return None
        if not self.consume:
            return values[0]
        value = values.pop(0)
        if not values:
            del self.entry.attrs[key]
        return value

    def member_of(self) -> list[str] | None:
        """
        Return the DNs of the groups in ``memberOf``, in server order.

        Returns:
            The list of group DNs, or ``None`` if there is no ``memberOf``
            (or it has already been consumed).

        """
        key = _resolve(self.entry.attrs, "memberOf")
        if key is None:
            return None
        if self.consume:
            return self.entry.attrs.pop(key)
        return list(self.entry.attrs[key])

    def enabled(self) -> bool:
        """
        Return ``True`` unless ``ACCOUNTDISABLE`` is set.

        Entries without ``userAccountControl`` are treated as disabled.
        """
        uac = self.int_attr("userAccountControl")
        if uac is None:
            uac = ACCOUNTDISABLE
        return uac & ACCOUNTDISABLE == 0

    def last_logon(self) -> datetime.datetime:
        """
        Return ``lastLogonTimestamp`` as a naive datetime.

        ``ADHELPER_LAST_LOGON_OFFSET`` seconds (7 hours unless configured)
        are subtracted from the UTC time; set it to ``0`` to get UTC, or use
        :py:meth:`last_logon_utc`.  A missing timestamp gives the Unix epoch.
        """
        ticks = self.int_attr("lastLogonTimestamp") or 0
        return filetime_to_datetime(ticks, offset=get_setting("LAST_LOGON_OFFSET"))

    def last_logon_utc(self) -> datetime.datetime:
        """Return ``lastLogonTimestamp`` as an aware UTC datetime."""
        return filetime_to_utc(self.int_attr("lastLogonTimestamp") or 0)

    def sid(self, canonical: bool | None = None) -> str:
        """
        Return ``objectSid`` as a string.

        Keyword Args:
            canonical: see :py:func:`adhelper.sid.decode_sid`

        Raises:
            SidError: ``objectSid`` is missing or malformed.  A missing SID
                decodes as empty bytes and raises :py:class:`MalformedSid`.

        """
        key = _resolve(self.entry.bin_attrs, "objectSid")
        values = self.entry.bin_attrs[key] if key is not None else []
        return decode_sid(values[0] if values else b"", canonical=canonical)

"""
Helpers for querying Active Directory over LDAP.

* :py:func:`auto_connect`: find a domain controller through DNS SRV records
  and bind to it with Kerberos.
* :py:func:`build_bulk_filter`: build a filter matching many objects at once.
* :py:func:`decode_sid`: turn a binary ``objectSid`` into a string.
* :py:class:`EntryDecoder`: typed access to AD-specific attribute encodings.
"""

from .attributes import EntryDecoder
from .connector import auto_connect
from .entry import Entry
from .filters import build_bulk_filter
from .search import paged_search
from .sid import decode_sid

__version__ = "0.3.0"

__all__ = [
    "Entry",
    "EntryDecoder",
    "auto_connect",
    "build_bulk_filter",
    "decode_sid",
    "paged_search",
]

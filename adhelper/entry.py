"""
Search result entries.

python-ldap hands us every attribute value as ``bytes``.  :py:class:`Entry`
splits those into text attributes (decoded as UTF-8) and binary attributes
(kept as ``bytes``), which is the shape :py:class:`adhelper.attributes.EntryDecoder`
works on.
"""

from dataclasses import dataclass, field

from .typing import BinAttrs, LDAPData, StrAttrs

#: Attributes that are always binary in Active Directory, even when a given
#: value happens to be valid UTF-8.  Compared case-insensitively.
BINARY_ATTRIBUTES: frozenset[str] = frozenset(
    name.lower()
    for name in (
        "objectSid",
        "objectGUID",
        "sIDHistory",
        "tokenGroups",
        "tokenGroupsGlobalAndUniversal",
        "securityIdentifier",
        "nTSecurityDescriptor",
        "msDS-GenerationId",
        "msExchMailboxGuid",
        "thumbnailPhoto",
        "jpegPhoto",
        "userCertificate",
        "logonHours",
    )
)


def is_binary_attribute(name: str, values: list[bytes]) -> bool:
    """
    Decide whether an attribute belongs in ``bin_attrs``.

    Args:
        name: the attribute name
        values: its raw values

    Returns:
        ``True`` if the attribute is known to be binary, or any value is not
        valid UTF-8.

    """
    if name.lower() in BINARY_ATTRIBUTES:
        return True
    try:
        for value in values:
            value.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


@dataclass
class Entry:
    """
    One directory search result.
    """

    #: The distinguished name of the entry
    dn: str
    #: Text attributes: name to ordered list of values
    attrs: StrAttrs = field(default_factory=dict)
    #: Binary attributes: name to ordered list of raw values
    bin_attrs: BinAttrs = field(default_factory=dict)

    @classmethod
    def from_ldap(cls, data: LDAPData) -> "Entry":
        """
        Build an :py:class:`Entry` from a python-ldap ``(dn, attrs)`` tuple.

        Args:
            data: a single result from ``search_s()`` or ``result3()``

        Returns:
            A new :py:class:`Entry`.

        """
        dn, raw_attrs = data
        attrs: StrAttrs = {}
        bin_attrs: BinAttrs = {}
        for name, values in raw_attrs.items():
            if is_binary_attribute(name, values):
                bin_attrs[name] = list(values)
            else:
                attrs[name] = [value.decode("utf-8") for value in values]
        return cls(dn=dn, attrs=attrs, bin_attrs=bin_attrs)

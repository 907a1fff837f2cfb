"""
Type aliases for python-ldap result data and decoded directory entries.
"""

LDAPData = tuple[str, dict[str, list[bytes]]]
StrAttrs = dict[str, list[str]]
BinAttrs = dict[str, list[bytes]]

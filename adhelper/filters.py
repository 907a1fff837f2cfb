"""
LDAP filters for looking up many objects in one search.

A bulk filter matches objects of one ``objectCategory`` whose ``attribute``
equals any of a list of identifiers::

    >>> build_bulk_filter(["JSmith", "AJones"], "user", "samaccountname")
    '(&(objectCategory=user)(|(samaccountname=JSmith)(samaccountname=AJones)))'

Identifiers are escaped per RFC 4515 unless you pass ``escape=False``.
"""

from collections.abc import Iterable, Iterator
from itertools import islice

from ldap_filter import Filter

from adhelper import ldap

from .conf import get_setting


def build_bulk_filter(
    identifiers: Iterable[str],
    category: str,
    attribute: str,
    escape: bool = True,
) -> str:
    """
    Build ``(&(objectCategory=<category>)(|(<attribute>=<id>)...))``.

    An empty ``identifiers`` yields ``(&(objectCategory=<category>)(|))``,
    which is valid but matches nothing.

    Args:
        identifiers: the values to match ``attribute`` against
        category: the ``objectCategory`` to restrict to, e.g. ``user``
        attribute: the attribute to match, e.g. ``sAMAccountName``

    Keyword Args:
        escape: if ``False``, insert identifiers verbatim.  Only do this for
            values that are already escaped or that you generate yourself.

    Returns:
        The filter string.

    """
    terms = []
    for identifier in identifiers:
        value = ldap.filter.escape_filter_chars(identifier) if escape else identifier
        terms.append(f"({attribute}={value})")
    return f"(&(objectCategory={category})(|{''.join(terms)}))"


def bulk_filter(
    identifiers: Iterable[str],
    category: str,
    attribute: str,
) -> Filter:
    """
    Return the bulk filter as a :py:class:`ldap_filter.Filter`, for combining
    with other filters.  Identifiers are always escaped.

    Raises:
        ValueError: ``identifiers`` is empty.

    """
    identifiers = list(identifiers)
    if not identifiers:
        msg = "bulk_filter() needs at least one identifier"
        raise ValueError(msg)
    return Filter.AND(
        [
            Filter.attribute("objectCategory").equal_to(category),
            Filter.OR([Filter.attribute(attribute).equal_to(i) for i in identifiers]),
        ]
    )


def chunked_bulk_filters(
    identifiers: Iterable[str],
    category: str,
    attribute: str,
    chunk_size: int | None = None,
) -> Iterator[str]:
    """
    Yield bulk filters covering ``identifiers`` at most ``chunk_size`` at a
    time.

    Domain controllers reject very large filters, so look up long lists of
    identifiers with one search per chunk.

    Keyword Args:
        chunk_size: identifiers per filter; defaults to
            ``ADHELPER_FILTER_CHUNK_SIZE``

    Raises:
        ValueError: ``chunk_size`` is not positive.

    """
    if chunk_size is None:
        chunk_size = get_setting("FILTER_CHUNK_SIZE")
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, not {chunk_size}"
        raise ValueError(msg)
    iterator = iter(identifiers)
    while chunk := list(islice(iterator, chunk_size)):
        yield build_bulk_filter(chunk, category, attribute)

"""
Paged searches that yield :py:class:`~adhelper.entry.Entry` objects.
"""

import logging
from collections.abc import Iterator

from adhelper import ldap

from .conf import get_setting
from .entry import Entry

logger = logging.getLogger(__name__)


def _get_pctrls(serverctrls):
    """
    Lookup an LDAP paged control object from the returned controls.
    """
    return [
        c
        for c in serverctrls
        if c.controlType == ldap.SimplePagedResultsControl.controlType
    ]


def paged_search(
    connection: ldap.ldapobject.LDAPObject,  # type: ignore[name-defined]
    basedn: str,
    searchfilter: str,
    attributes: list[str] | None = None,
    page_size: int | None = None,
    scope: int = ldap.SCOPE_SUBTREE,  # type: ignore[attr-defined]
) -> Iterator[Entry]:
    """
    Search ``basedn`` page by page, yielding each result as it arrives.

    Args:
        connection: a bound connection, e.g. from
            :py:func:`adhelper.connector.auto_connect`
        basedn: The base DN to search from.
        searchfilter: The LDAP search filter string.

    Keyword Args:
        attributes: List of attributes to retrieve; ``None`` for all.
        page_size: Number of results per page; defaults to
            ``ADHELPER_PAGE_SIZE``.
        scope: LDAP search scope.

    Raises:
        ldap.LDAPError: the search failed

    Yields:
        One :py:class:`Entry` per result.  Search references are skipped.

    """
    if page_size is None:
        page_size = get_setting("PAGE_SIZE")
    # The cookie starts out empty on the first request.
    paging = ldap.SimplePagedResultsControl(True, size=page_size, cookie="")  # noqa: FBT003
    pages = 0
    while True:
        msgid = connection.search_ext(
            basedn,
            scope,
            searchfilter,
            attributes,
            serverctrls=[paging],
        )
        _, rdata, _, serverctrls = connection.result3(msgid)
        pages += 1
        for dn, attrs in rdata:
            # AD returns references at the end of a page that we ignore
            if isinstance(attrs, dict):
                yield Entry.from_ldap((dn, attrs))

        paged_controls = _get_pctrls(serverctrls)
        if not paged_controls:
            # The server doesn't page this search (SCOPE_BASE, say)
            break
        paging.cookie = paged_controls[0].cookie
        if not paging.cookie:
            break
    logger.debug(
        "adhelper.search.done basedn=%s filter=%s pages=%d", basedn, searchfilter, pages
    )

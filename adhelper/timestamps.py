"""
Windows FILETIME conversion.

Active Directory stores timestamps such as ``lastLogonTimestamp`` as
FILETIME values: the number of 100-nanosecond intervals since January 1,
1601 UTC, sent over LDAP as a decimal string.
"""

import datetime

import pytz

#: The number of 100-nanosecond intervals per second.
INTERVALS_PER_SECOND: int = 10_000_000
#: Seconds between 1601-01-01 and 1970-01-01.
EPOCH_DELTA_SECONDS: int = 11_644_473_600
#: The extra offset historically subtracted by ``last_logon()``.
LEGACY_LOCAL_OFFSET: int = 7 * 3600
#: AD writes this (or 0) for "never".
NEVER: int = 0x7FFF_FFFF_FFFF_FFFF

UNIX_EPOCH: datetime.datetime = datetime.datetime(1970, 1, 1)  # noqa: DTZ001
_MAX_SECONDS: int = int((datetime.datetime.max - UNIX_EPOCH).total_seconds())


def is_never(ticks: int) -> bool:
    """Return ``True`` if ``ticks`` is one of AD's "never" sentinels."""
    return ticks in (0, NEVER)


def filetime_to_seconds(ticks: int, offset: int = 0) -> int:
    """
    Convert FILETIME ticks to whole seconds since the Unix epoch.

    Both subtractions saturate at zero, so anything before 1970 (including
    the 0 sentinel) comes out as the epoch.

    Args:
        ticks: FILETIME value
        offset: extra seconds to subtract after moving to the Unix epoch

    """
    seconds = max(ticks, 0) // INTERVALS_PER_SECOND
    seconds = max(seconds - EPOCH_DELTA_SECONDS, 0)
    return max(seconds - offset, 0)


def filetime_to_datetime(ticks: int, offset: int = 0) -> datetime.datetime:
    """
    Convert FILETIME ticks to a naive datetime.

    With ``offset=0`` the result is the UTC wall-clock time.  Values beyond
    what :py:class:`datetime.datetime` can hold (the :py:data:`NEVER`
    sentinel, for one) become :py:attr:`datetime.datetime.max`.

    Args:
        ticks: FILETIME value

    Keyword Args:
        offset: extra seconds to subtract

    Returns:
        A naive datetime with microsecond 0.

    """
    seconds = filetime_to_seconds(ticks, offset=offset)
    if seconds > _MAX_SECONDS:
        return datetime.datetime.max.replace(microsecond=0)
    return UNIX_EPOCH + datetime.timedelta(seconds=seconds)


def filetime_to_utc(ticks: int) -> datetime.datetime:
    """
    Convert FILETIME ticks to a timezone-aware UTC datetime.
    """
    return pytz.UTC.localize(filetime_to_datetime(ticks))

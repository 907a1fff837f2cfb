"""
Exceptions raised by adhelper.

Discovery and connection problems derive from :py:class:`DiscoveryError`,
SID decoding problems from :py:class:`SidError`.  Missing attributes are not
errors: the :py:class:`~adhelper.attributes.EntryDecoder` returns ``None``
for those.
"""


class ADHelperError(Exception):
    """Base class for all adhelper errors."""


# -----------------------
# Discovery and binding
# -----------------------


class DiscoveryError(ADHelperError):
    """Raised when we can't find or reach a directory server."""


class DnsInitFailed(DiscoveryError):
    """The DNS resolver could not be built from the system configuration."""


class SrvLookupFailed(DiscoveryError):
    """The SRV query for the LDAP service failed."""


class NoServerAvailable(DiscoveryError):
    """Every SRV target was tried and none of them could be used."""


class TransportFailed(ADHelperError):
    """
    A TLS/TCP connection to one server failed.

    The auto-connector logs these and moves on to the next server; callers
    only see them if they use an opener directly.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not connect to {url}: {reason}")


class AuthFailed(ADHelperError):
    """The SASL/GSSAPI bind was rejected."""

    def __init__(self, host: str, reason: str) -> None:
        self.host = host
        self.reason = reason
        super().__init__(f"Failed to authenticate to AD on {host}: {reason}")


# -----------------------
# SID decoding
# -----------------------


class SidError(ADHelperError, ValueError):
    """Base class for malformed binary SIDs."""


class MalformedSid(SidError):
    """The SID is empty, so there's no revision byte to read."""


class SidTooShort(SidError):
    """The SID is shorter than its 8 byte fixed header."""


class SidTooManySubAuthorities(SidError):
    """The SID claims more than 15 sub-authorities."""


class SidLengthMismatch(SidError):
    """The SID length does not agree with its sub-authority count."""

    def __init__(self, actual: int, expected: int, count: int) -> None:
        self.actual = actual
        self.expected = expected
        self.count = count
        super().__init__(
            f"According to byte 1 of the SID its total length should be "
            f"(8 + 4 * {count}) = {expected} bytes, however its actual length "
            f"is {actual} bytes"
        )

"""
Find a domain controller through DNS and bind to it with Kerberos.

:py:func:`auto_connect` looks up the ``_ldap._tcp`` SRV records in the
host's DNS search domain, tries each target over LDAPS in priority order and
performs a SASL/GSSAPI bind on the first one that answers.  The three
collaborators (SRV resolver, LDAPS opener and GSSAPI binder) can be swapped
out, which is how the tests run without a network.
"""

import logging
from contextlib import suppress
from typing import NamedTuple, Protocol

import dns.exception
import dns.resolver

from adhelper import ldap

from .conf import get_setting
from .exceptions import (
    AuthFailed,
    DnsInitFailed,
    NoServerAvailable,
    SrvLookupFailed,
    TransportFailed,
)

logger = logging.getLogger(__name__)

#: python-ldap errors that mean "this server is unreachable", as opposed to
#: "this server said no".
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    ldap.SERVER_DOWN,  # type: ignore[attr-defined]
    ldap.CONNECT_ERROR,  # type: ignore[attr-defined]
    ldap.TIMEOUT,  # type: ignore[attr-defined]
    OSError,
)


class SRVRecord(NamedTuple):
    """A DNS SRV answer.  Only ``priority`` and ``target`` are used."""

    priority: int
    weight: int
    port: int
    #: Target host name as text, with its trailing dot
    target: str
    #: The raw first DNS label of ``target``
    first_label: bytes

    @property
    def host(self) -> str:
        """``target`` without its trailing dot."""
        if self.target.endswith("."):
            return self.target[:-1]
        return self.target


class SrvResolver(Protocol):
    def resolve_srv(self, name: str) -> list[SRVRecord]: ...


class Opener(Protocol):
    def __call__(self, url: str) -> ldap.ldapobject.LDAPObject: ...  # type: ignore[name-defined]


class Binder(Protocol):
    def __call__(
        self,
        connection: ldap.ldapobject.LDAPObject,  # type: ignore[name-defined]
        service_host: str,
    ) -> None: ...


class DnsSrvResolver:
    """
    SRV lookups with dnspython, configured from ``/etc/resolv.conf`` (or the
    registry on Windows).

    Raises:
        DnsInitFailed: the system resolver configuration can't be loaded

    """

    def __init__(self) -> None:
        try:
            self.resolver = dns.resolver.Resolver(configure=True)
        except (dns.exception.DNSException, OSError) as e:
            msg = f"Could not load the system DNS configuration: {e}"
            raise DnsInitFailed(msg) from e

    def resolve_srv(self, name: str) -> list[SRVRecord]:
        """
        Look up the SRV records for ``name``.

        A relative ``name`` is qualified with the resolver's search list.

        Raises:
            SrvLookupFailed: the query failed or returned nothing

        """
        try:
            answer = self.resolver.resolve(name, "SRV", search=True)
        except dns.exception.DNSException as e:
            msg = f"SRV lookup for {name} failed: {e}"
            raise SrvLookupFailed(msg) from e
        return [
            SRVRecord(
                priority=rdata.priority,
                weight=rdata.weight,
                port=rdata.port,
                target=rdata.target.to_text(),
                first_label=rdata.target.labels[0] if rdata.target.labels else b"",
            )
            for rdata in answer
        ]


class LdapsOpener:
    """
    Open an LDAPS connection with python-ldap.

    libldap connects lazily, so an unreachable server usually shows up as a
    :py:class:`TransportFailed` from the bind rather than from here.
    """

    def __call__(self, url: str) -> ldap.ldapobject.LDAPObject:  # type: ignore[name-defined]
        try:
            connection = ldap.initialize(url)  # type: ignore[attr-defined]
        except (ldap.LDAPError, *TRANSPORT_ERRORS) as e:  # type: ignore[attr-defined]
            raise TransportFailed(url, str(e)) from e
        connection.set_option(ldap.OPT_REFERRALS, 0)  # type: ignore[attr-defined]
        connection.set_option(
            ldap.OPT_NETWORK_TIMEOUT,  # type: ignore[attr-defined]
            float(get_setting("NETWORK_TIMEOUT")),
        )
        if get_setting("TLS_VERIFY") == "never":
            connection.set_option(ldap.OPT_X_TLS_REQUIRE_CERT, ldap.OPT_X_TLS_NEVER)  # type: ignore[attr-defined]
        else:
            connection.set_option(ldap.OPT_X_TLS_REQUIRE_CERT, ldap.OPT_X_TLS_DEMAND)  # type: ignore[attr-defined]
        if ca_certfile := get_setting("TLS_CA_CERTFILE"):
            connection.set_option(ldap.OPT_X_TLS_CACERTFILE, ca_certfile)  # type: ignore[attr-defined]
        connection.set_option(ldap.OPT_X_TLS_NEWCTX, 0)  # type: ignore[attr-defined]
        # Use the SRV target as-is for the Kerberos service principal instead
        # of whatever reverse DNS says.
        connection.set_option(ldap.OPT_X_SASL_NOCANON, 1)  # type: ignore[attr-defined]
        return connection


class GssapiBinder:
    """
    SASL/GSSAPI bind using the Kerberos credentials in the caller's cache.

    libldap builds the ``ldap/<host>`` service principal from the full
    connection host, so ``service_host`` (the first label of the SRV target)
    does not pick the principal here.  It only appears in log messages and in
    any :py:class:`AuthFailed`.  Pass a custom binder to :py:func:`auto_connect`
    if the principal must be built from the short name.
    """

    def __call__(
        self,
        connection: ldap.ldapobject.LDAPObject,  # type: ignore[name-defined]
        service_host: str,
    ) -> None:
        try:
            connection.sasl_interactive_bind_s("", ldap.sasl.gssapi(""))
        except TRANSPORT_ERRORS as e:
            raise TransportFailed(str(connection.get_option(ldap.OPT_URI)), str(e)) from e  # type: ignore[attr-defined]
        except ldap.LDAPError as e:  # type: ignore[attr-defined]
            raise AuthFailed(service_host, str(e)) from e


def _close(connection: ldap.ldapobject.LDAPObject) -> None:  # type: ignore[name-defined]
    with suppress(ldap.LDAPError):  # type: ignore[attr-defined]
        connection.unbind_s()


class LdapAutoConnector:
    """
    Discover a domain controller and return a bound connection to it.

    Keyword Args:
        resolver: SRV resolver; a :py:class:`DnsSrvResolver` is built on
            first use if not given
        opener: LDAPS opener; defaults to :py:class:`LdapsOpener`
        binder: GSSAPI binder; defaults to :py:class:`GssapiBinder`

    """

    def __init__(
        self,
        resolver: SrvResolver | None = None,
        opener: Opener | None = None,
        binder: Binder | None = None,
    ) -> None:
        self.resolver = resolver
        self.opener: Opener = opener or LdapsOpener()
        self.binder: Binder = binder or GssapiBinder()

    def get_resolver(self) -> SrvResolver:
        if self.resolver is None:
            self.resolver = DnsSrvResolver()
        return self.resolver

    def candidates(self) -> list[SRVRecord]:
        """
        Return the SRV records for the LDAP service, lowest priority first.

        Records with the same priority keep their DNS order; weights are
        ignored.

        Raises:
            DnsInitFailed: the resolver couldn't be built
            SrvLookupFailed: the SRV query failed

        """
        records = self.get_resolver().resolve_srv(get_setting("SRV_NAME"))
        return sorted(records, key=lambda record: record.priority)

    def connect(self, timeout: float | None = None) -> ldap.ldapobject.LDAPObject:  # type: ignore[name-defined]
        """
        Connect and bind to the best available domain controller.

        Servers that can't be reached are logged and skipped.  A rejected
        bind is fatal unless ``ADHELPER_RETRY_ON_AUTH_FAILURE`` is set, in
        which case the next server is tried.

        Keyword Args:
            timeout: per-operation timeout in seconds for searches made on
                the returned connection.  It does not apply to DNS or the
                bind itself.

        Raises:
            DnsInitFailed: the resolver couldn't be built
            SrvLookupFailed: the SRV query failed
            AuthFailed: the GSSAPI bind was rejected
            NoServerAvailable: no server could be used

        Returns:
            A bound ``LDAPObject``.  The caller must ``unbind_s()`` it.

        """
        retry_on_auth_failure = get_setting("RETRY_ON_AUTH_FAILURE")
        port = get_setting("LDAPS_PORT")
        last_auth_failure: AuthFailed | None = None
        for record in self.candidates():
            url = f"ldaps://{record.host}:{port}"
            logger.debug(
                "adhelper.connect.trying url=%s priority=%d", url, record.priority
            )
            try:
                connection = self.opener(url)
            except TransportFailed as e:
                logger.warning(
                    "adhelper.connect.transport-failed url=%s error=%s", url, e.reason
                )
                continue
            try:
                service_host = record.first_label.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("adhelper.connect.bad-hostname target=%s", record.target)
                _close(connection)
                continue
            try:
                self.binder(connection, service_host)
            except TransportFailed as e:
                logger.warning(
                    "adhelper.connect.transport-failed url=%s error=%s", url, e.reason
                )
                _close(connection)
                continue
            except AuthFailed as e:
                _close(connection)
                if not retry_on_auth_failure:
                    raise
                logger.warning(
                    "adhelper.connect.auth-failed url=%s error=%s", url, e.reason
                )
                last_auth_failure = e
                continue
            if timeout is not None:
                connection.set_option(ldap.OPT_TIMEOUT, float(timeout))  # type: ignore[attr-defined]
            logger.info("adhelper.connect.success url=%s", url)
            return connection
        msg = "Couldn't find an appropriate domain controller to connect to."
        if last_auth_failure is not None:
            raise NoServerAvailable(msg) from last_auth_failure
        raise NoServerAvailable(msg)


def auto_connect(
    timeout: float | None = None,
    *,
    resolver: SrvResolver | None = None,
    opener: Opener | None = None,
    binder: Binder | None = None,
) -> ldap.ldapobject.LDAPObject:  # type: ignore[name-defined]
    """
    Connect and bind to a domain controller found through DNS.

    See :py:meth:`LdapAutoConnector.connect`.
    """
    connector = LdapAutoConnector(resolver=resolver, opener=opener, binder=binder)
    return connector.connect(timeout=timeout)

"""
Settings for adhelper.

Every setting is read from Django settings with an ``ADHELPER_`` prefix.  If
the setting is missing, or Django settings have not been configured at all
(adhelper is usable from plain scripts), the default below is used.
"""

from pathlib import Path
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

#: Default values, keyed by setting name without the ``ADHELPER_`` prefix.
DEFAULTS: dict[str, Any] = {
    # SRV name to query; the resolver search list supplies the domain
    "SRV_NAME": "_ldap._tcp",
    "LDAPS_PORT": 636,
    # Seconds allowed for the TCP/TLS connect to each candidate server
    "NETWORK_TIMEOUT": 15.0,
    # "always" (demand a valid certificate) or "never"
    "TLS_VERIFY": "always",
    "TLS_CA_CERTFILE": None,
    "RETRY_ON_AUTH_FAILURE": False,
    # Seconds subtracted from lastLogonTimestamp by EntryDecoder.last_logon()
    "LAST_LOGON_OFFSET": 7 * 3600,
    "CANONICAL_SIDS": False,
    "PAGE_SIZE": 1500,
    "FILTER_CHUNK_SIZE": 500,
}


def get_setting(name: str) -> Any:
    """
    Get configuration value from Django settings with fallback.

    Args:
        name: Name of the setting (without ADHELPER_ prefix)

    Raises:
        KeyError: ``name`` is not an adhelper setting.

    Returns:
        Configuration value from settings or the default

    """
    default = DEFAULTS[name]
    if not settings.configured:
        return default
    return getattr(settings, f"ADHELPER_{name}", default)


def validate_settings() -> None:
    """
    Validate adhelper settings for consistency.

    Raises:
        ImproperlyConfigured: If settings are invalid

    """
    tls_verify = get_setting("TLS_VERIFY")
    if tls_verify not in ("always", "never"):
        msg = f"ADHELPER_TLS_VERIFY must be 'always' or 'never', not {tls_verify!r}"
        raise ImproperlyConfigured(msg)

    port = get_setting("LDAPS_PORT")
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:  # noqa: PLR2004
        msg = f"ADHELPER_LDAPS_PORT ({port}) must be an integer between 1 and 65535"
        raise ImproperlyConfigured(msg)

    for name in ("NETWORK_TIMEOUT", "PAGE_SIZE", "FILTER_CHUNK_SIZE"):
        value = get_setting(name)
        if value <= 0:
            msg = f"ADHELPER_{name} ({value}) must be positive"
            raise ImproperlyConfigured(msg)

    if get_setting("LAST_LOGON_OFFSET") < 0:
        msg = "ADHELPER_LAST_LOGON_OFFSET cannot be negative"
        raise ImproperlyConfigured(msg)

    if ca_certfile := get_setting("TLS_CA_CERTFILE"):
        if not Path(ca_certfile).is_file():
            msg = f"CA Certificate file does not exist or is not a file: {ca_certfile}"
            raise ImproperlyConfigured(msg)

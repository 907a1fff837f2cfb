# This file is here so that we can patch the ldap module in our tests.
# python-ldap-faker doesn't patch ``ldap.sasl`` or ``ldap.filter``, so we
# import them here and everything else in adhelper goes through this module.
import ldap
import ldap.filter
import ldap.sasl
from ldap import *  # noqa: F403
from ldap.controls import SimplePagedResultsControl  # noqa: F401

__version__ = ldap.__version__
filter = ldap.filter  # noqa: A001
sasl = ldap.sasl

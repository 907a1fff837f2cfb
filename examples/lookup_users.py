#!/usr/bin/env python
"""
Look up Active Directory users by sAMAccountName and print what we know
about them.

Run from a host joined to the domain, with a Kerberos ticket (``kinit``)::

    python examples/lookup_users.py --base dc=contoso,dc=com JSmith AJones
"""

import argparse
import logging

from adhelper import EntryDecoder, auto_connect, build_bulk_filter, paged_search

ATTRIBUTES = [
    "sAMAccountName",
    "memberOf",
    "employeeID",
    "employeeNumber",
    "title",
    "department",
    "displayName",
    "objectSid",
    "lastLogonTimestamp",
    "userAccountControl",
]

TEMPLATE = """
    DistinguishedName:  {dn}
    Enabled:            {enabled}
    Name:               {name}
    SamAccountName:     {sam}
    LastLogonTimeStamp: {last_logon}
    EmployeeID:         {employee_id}
    EmployeeNumber:     {employee_number}
    Title:              {title}
    Department:         {department}
    MemberOf:           {groups} ...
    SID:                {sid}
"""


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--base", required=True, help="search base DN")
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("users", nargs="+", help="sAMAccountNames to look up")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    connection = auto_connect(timeout=args.timeout)
    try:
        searchfilter = build_bulk_filter(args.users, "user", "sAMAccountName")
        for entry in paged_search(connection, args.base, searchfilter, ATTRIBUTES):
            decoder = EntryDecoder(entry)
            try:
                sid = decoder.sid()
            except ValueError:
                sid = ""
            print(  # noqa: T201
                TEMPLATE.format(
                    dn=entry.dn,
                    enabled=decoder.enabled(),
                    name=decoder.str_attr("displayName") or "",
                    sam=decoder.str_attr("sAMAccountName") or "",
                    last_logon=decoder.last_logon(),
                    employee_id=decoder.str_attr("employeeID") or "",
                    employee_number=decoder.str_attr("employeeNumber") or "",
                    title=decoder.str_attr("title") or "",
                    department=decoder.str_attr("department") or "",
                    groups=(decoder.member_of() or [])[:5],
                    sid=sid,
                )
            )
    finally:
        connection.unbind_s()


if __name__ == "__main__":
    main()

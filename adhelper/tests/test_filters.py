import unittest

import pytest
from ldap_filter import Filter

from adhelper.filters import build_bulk_filter, bulk_filter, chunked_bulk_filters


class TestBuildBulkFilter(unittest.TestCase):

    def test_two_users(self):
        self.assertEqual(
            build_bulk_filter(["JSmith", "AJones"], "user", "samaccountname"),
            "(&(objectCategory=user)(|(samaccountname=JSmith)(samaccountname=AJones)))",
        )

    def test_single_identifier(self):
        self.assertEqual(
            build_bulk_filter(["Staff"], "group", "cn"),
            "(&(objectCategory=group)(|(cn=Staff)))",
        )

    def test_empty(self):
        self.assertEqual(
            build_bulk_filter([], "user", "samaccountname"),
            "(&(objectCategory=user)(|))",
        )

    def test_accepts_any_iterable(self):
        self.assertEqual(
            build_bulk_filter((name for name in ["JSmith"]), "user", "cn"),
            "(&(objectCategory=user)(|(cn=JSmith)))",
        )

    def test_escapes_special_characters(self):
        self.assertEqual(
            build_bulk_filter(["*)(objectClass=*", "a\\b\x00"], "user", "cn"),
            "(&(objectCategory=user)(|(cn=\\2a\\29\\28objectClass=\\2a)(cn=a\\5cb\\00)))",
        )

    def test_no_escape(self):
        self.assertEqual(
            build_bulk_filter(["Smith*"], "user", "sn", escape=False),
            "(&(objectCategory=user)(|(sn=Smith*)))",
        )

    def test_pure(self):
        args = (["JSmith", "AJones"], "user", "samaccountname")
        self.assertEqual(build_bulk_filter(*args), build_bulk_filter(*args))


class TestBulkFilter(unittest.TestCase):

    def test_returns_filter(self):
        result = bulk_filter(["JSmith", "AJones"], "user", "samaccountname")
        self.assertIsInstance(result, Filter)
        self.assertEqual(
            result.to_string(),
            "(&(objectCategory=user)(|(samaccountname=JSmith)(samaccountname=AJones)))",
        )

    def test_escapes_special_characters(self):
        result = bulk_filter(["a*b", "x(y)", "c\\d\x00"], "user", "cn")
        self.assertEqual(
            result.to_string(),
            "(&(objectCategory=user)(|(cn=a\\2ab)(cn=x\\28y\\29)(cn=c\\5cd\\00)))",
        )

    def test_matches_string_builder(self):
        identifiers = ["*)(objectClass=*", "JSmith"]
        self.assertEqual(
            bulk_filter(identifiers, "user", "cn").to_string(),
            build_bulk_filter(identifiers, "user", "cn"),
        )

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="at least one identifier"):
            bulk_filter([], "user", "samaccountname")


class TestChunkedBulkFilters(unittest.TestCase):

    def test_chunks(self):
        filters = list(
            chunked_bulk_filters(["a", "b", "c", "d", "e"], "user", "cn", chunk_size=2)
        )
        self.assertEqual(
            filters,
            [
                "(&(objectCategory=user)(|(cn=a)(cn=b)))",
                "(&(objectCategory=user)(|(cn=c)(cn=d)))",
                "(&(objectCategory=user)(|(cn=e)))",
            ],
        )

    def test_default_chunk_size(self):
        filters = list(chunked_bulk_filters([str(i) for i in range(501)], "user", "cn"))
        self.assertEqual(len(filters), 2)
        self.assertEqual(filters[1], "(&(objectCategory=user)(|(cn=500)))")

    def test_empty_yields_nothing(self):
        self.assertEqual(list(chunked_bulk_filters([], "user", "cn")), [])

    def test_bad_chunk_size(self):
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            list(chunked_bulk_filters(["a"], "user", "cn", chunk_size=0))

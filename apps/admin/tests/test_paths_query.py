"""Reference navigation, immutability and query compilation."""

from __future__ import annotations

import unittest

from fireadmin.adapters.http import MockTransport
from fireadmin.domain.paths import join_path, normalize_path, parent_path, path_key
from fireadmin.domain.query import QuerySpec
from fireadmin.errors import InvalidArgumentError
from fireadmin.services.database import Database

from support import DATABASE_URL


class PathAlgebraTests(unittest.TestCase):
    def test_normalization_collapses_slashes_and_navigation_segments(self) -> None:
        cases = [
            ("", ""),
            ("/", ""),
            ("users", "users"),
            ("/users//ada/", "users/ada"),
            ("users/./ada", "users/ada"),
            ("users/ada/../grace", "users/grace"),
            ("../users", "users"),
        ]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                self.assertEqual(normalize_path(raw), expected)

    def test_illegal_characters_are_rejected(self) -> None:
        for raw in ("users/a#b", "users/$x", "a[0]", "b]", "users/ada.lovelace"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidArgumentError):
                    normalize_path(raw)

    def test_parent_and_key_of_root_are_none(self) -> None:
        self.assertIsNone(parent_path(""))
        self.assertIsNone(path_key(""))
        self.assertEqual(parent_path("users"), "")
        self.assertEqual(parent_path("users/ada"), "users")
        self.assertEqual(path_key("users/ada"), "ada")
        self.assertEqual(join_path("users", "ada/posts"), "users/ada/posts")


class ReferenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.database = Database(MockTransport(), url=DATABASE_URL)

    def test_child_does_not_change_receiver(self) -> None:
        ref = self.database.ref("dinosaurs")
        before = str(ref)

        child = ref.child("x")

        self.assertEqual(str(ref), before)
        self.assertEqual(str(child), f"{DATABASE_URL}/dinosaurs/x")
        self.assertEqual(child.parent().key, ref.key)

    def test_root_has_no_key_and_no_parent(self) -> None:
        root = self.database.ref()
        self.assertIsNone(root.key)
        self.assertIsNone(root.parent())
        self.assertEqual(str(root), DATABASE_URL)
        self.assertEqual(self.database.ref("a/b/c").root().path, "")

    def test_child_rejects_empty_path(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.database.ref("users").child("")

    def test_navigation_drops_query_modifiers(self) -> None:
        query = self.database.ref("dinosaurs").order_by_child("height").limit_to_first(2)
        self.assertTrue(query.child("stegosaurus").query.is_empty)
        self.assertTrue(query.parent().query.is_empty)

    def test_query_builders_return_new_references(self) -> None:
        ref = self.database.ref("dinosaurs")
        ordered = ref.order_by_child("height")

        self.assertIsNot(ordered, ref)
        self.assertTrue(ref.query.is_empty)
        self.assertEqual(ordered.query.order_by, "height")

    def test_identical_chains_are_equal(self) -> None:
        first = self.database.ref("dinosaurs").order_by_child("height").equal_to(0.6)
        second = self.database.ref("dinosaurs").order_by_child("height").equal_to(0.6)

        self.assertTrue(first.is_equal(second))
        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))

    def test_changing_one_modifier_breaks_equality(self) -> None:
        base = self.database.ref("dinosaurs").order_by_child("height").equal_to(0.6)
        variants = {
            "equal_to": self.database.ref("dinosaurs").order_by_child("height").equal_to(0.7),
            "order_by": self.database.ref("dinosaurs").order_by_child("weight").equal_to(0.6),
            "path": self.database.ref("birds").order_by_child("height").equal_to(0.6),
            "limit": base.limit_to_first(1),
            "start_at": base.start_at(0.1),
        }
        for name, variant in variants.items():
            with self.subTest(changed=name):
                self.assertFalse(base.is_equal(variant))

    def test_references_from_different_databases_differ(self) -> None:
        other = Database(MockTransport(), url=DATABASE_URL)
        self.assertFalse(self.database.ref("a").is_equal(other.ref("a")))
        self.assertFalse(self.database.ref("a").is_equal("a"))

    def test_url_appends_json_suffix(self) -> None:
        self.assertEqual(self.database.ref("users/ada").url, f"{DATABASE_URL}/users/ada.json")


class QueryCompilationTests(unittest.TestCase):
    def test_values_are_json_encoded_and_limits_are_plain(self) -> None:
        params = (
            QuerySpec()
            .with_order_by_child("height")
            .with_start_at(3)
            .with_end_at("z")
            .with_limit_to_last(5)
            .to_params()
        )
        self.assertEqual(
            params,
            {"orderBy": '"height"', "startAt": "3", "endAt": '"z"', "limitToLast": "5"},
        )

    def test_ordering_sentinels(self) -> None:
        database = Database(MockTransport(), url=DATABASE_URL)
        cases = [
            (database.ref("d").order_by_key(), '"$key"'),
            (database.ref("d").order_by_value(), '"$value"'),
            (database.ref("d").order_by_priority(), '"$priority"'),
        ]
        for ref, expected in cases:
            with self.subTest(expected=expected):
                self.assertEqual(ref.query.to_params()["orderBy"], expected)

    def test_boolean_equal_to_is_encoded_as_json(self) -> None:
        self.assertEqual(QuerySpec().with_equal_to(True).to_params(), {"equalTo": "true"})

    def test_invalid_modifiers_are_rejected(self) -> None:
        cases = {
            "reserved child": lambda: QuerySpec().with_order_by_child("$key"),
            "leading slash": lambda: QuerySpec().with_order_by_child("/height"),
            "empty child": lambda: QuerySpec().with_order_by_child(""),
            "negative limit": lambda: QuerySpec().with_limit_to_first(-1),
            "non-int limit": lambda: QuerySpec().with_limit_to_last(1.5),
            "bool limit": lambda: QuerySpec().with_limit_to_first(True),
            "both limits": lambda: QuerySpec().with_limit_to_first(1).with_limit_to_last(1),
            "unserializable": lambda: QuerySpec().with_equal_to(object()).to_params(),
        }
        for name, build in cases.items():
            with self.subTest(case=name):
                with self.assertRaises(InvalidArgumentError):
                    build()

    def test_empty_spec_compiles_to_no_params(self) -> None:
        self.assertTrue(QuerySpec().is_empty)
        self.assertEqual(QuerySpec().to_params(), {})


if __name__ == "__main__":
    unittest.main()

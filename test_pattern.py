"""Tests for the glob/regex pattern compiler."""

import unittest

from errors import PatternSyntaxError
from pattern import compile_pattern, glob_to_regex, path_matcher


class TestGlobToRegex(unittest.TestCase):
    def test_single_star(self):
        self.assertEqual(glob_to_regex("/a/*/c"), r"^[\\/]a[\\/][^/]*[\\/]c[\\/]?$")

    def test_double_star(self):
        self.assertEqual(glob_to_regex("/a/**/c"), r"^[\\/]a[\\/].*[\\/]c[\\/]?$")

    def test_trailing_star(self):
        self.assertEqual(glob_to_regex("/a/*"), r"^[\\/]a[\\/][^/]*[\\/]?$")

    def test_trailing_separator_is_not_made_optional(self):
        self.assertEqual(glob_to_regex("/a/"), r"^[\\/]a[\\/]$")

    def test_empty(self):
        self.assertEqual(glob_to_regex(""), r"^[\\/]?$")

    def test_metacharacters_are_literal(self):
        self.assertEqual(glob_to_regex("a.b+c"), r"^a\.b\+c[\\/]?$")
        self.assertEqual(glob_to_regex("(x)|$^"), r"^\(x\)\|\$\^[\\/]?$")
        self.assertEqual(glob_to_regex("a}"), r"^a\}[\\/]?$")

    def test_escape(self):
        self.assertEqual(glob_to_regex(r"a\*b"), r"^a\*b[\\/]?$")

    def test_question_mark(self):
        self.assertEqual(glob_to_regex("a?c"), r"^a[^/]c[\\/]?$")

    def test_group(self):
        self.assertEqual(glob_to_regex("*.{md,txt}"), r"^[^/]*\.(?:md|txt)[\\/]?$")

    def test_group_with_star_and_escape(self):
        self.assertEqual(glob_to_regex("{a*,b.c}"), r"^(?:a[^/]*|b\.c)[\\/]?$")

    def test_separator_in_group(self):
        with self.assertRaises(PatternSyntaxError):
            glob_to_regex("{a/b,c}")

    def test_unclosed_group(self):
        with self.assertRaises(PatternSyntaxError):
            glob_to_regex("{a,b")

    def test_dangling_escape(self):
        with self.assertRaises(PatternSyntaxError):
            glob_to_regex("abc\\")


class TestCompilePattern(unittest.TestCase):
    def _matches(self, pattern: str, address: str) -> bool:
        return compile_pattern(pattern).fullmatch(address) is not None

    def test_star_does_not_cross_separator(self):
        self.assertTrue(self._matches("glob:/a/*/c", "/a/b/c"))
        self.assertFalse(self._matches("glob:/a/*/c", "/a/b/d/c"))

    def test_double_star_crosses_separator(self):
        self.assertTrue(self._matches("glob:/a/**/c", "/a/b/c"))
        self.assertTrue(self._matches("glob:/a/**/c", "/a/b/d/c"))

    def test_optional_trailing_separator(self):
        self.assertTrue(self._matches("glob:/a/*/c", "/a/b/c/"))
        self.assertFalse(self._matches("glob:/a/*/c/", "/a/b/c"))

    def test_backslash_separator(self):
        self.assertTrue(self._matches("glob:/a/*/c", "\\a\\b\\c"))

    def test_group_alternatives(self):
        self.assertTrue(self._matches("glob:**/*.{md,txt}", "webfs:http://h/docs/guide.txt"))
        self.assertTrue(self._matches("glob:**/*.{md,txt}", "webfs:http://h/README.md"))
        self.assertFalse(self._matches("glob:**/*.{md,txt}", "webfs:http://h/image.png"))

    def test_regex_is_verbatim(self):
        self.assertTrue(self._matches(r"regex:.*\.txt", "webfs:http://h/a.txt"))
        self.assertFalse(self._matches(r"regex:.*\.txt", "webfs:http://h/a.txt/"))

    def test_unknown_syntax(self):
        with self.assertRaises(PatternSyntaxError):
            compile_pattern("shell:*.txt")

    def test_missing_syntax(self):
        with self.assertRaises(PatternSyntaxError):
            compile_pattern("*.txt")

    def test_bad_regex(self):
        with self.assertRaises(PatternSyntaxError):
            compile_pattern("regex:(")

    def test_error_is_value_error(self):
        with self.assertRaises(ValueError):
            compile_pattern("glob:{a")


class TestPathMatcher(unittest.TestCase):
    def test_matches_string_form(self):
        class Named:
            def __str__(self):
                return "webfs:http://h/docs/guide.txt"

        matches = path_matcher("glob:**/docs/*")
        self.assertTrue(matches(Named()))
        self.assertFalse(matches("webfs:http://h/other/guide.txt"))


if __name__ == "__main__":
    unittest.main()

"""
Tokenizer behavioral tests (quoting, whitespace, helpers).

Scope
- Validate delimited and plain token extraction, including the rest text.
- Validate unmatched delimiter and missing argument faults.
- Validate full scans, prefix stripping and delimiter helpers.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from commandeer.faults import MissingArgsError, UnexpectedArgsError, UnmatchedDelimiterError
from commandeer.parser import (
    DELIMITERS,
    ensure_rest_is_empty,
    is_surrounded_by,
    maybe_quoted_arg,
    parse_args,
    split_once_whitespace,
    strip_delimits,
    unprefix_with,
)
from commandeer.utils import nicelist


class TestMaybeQuotedArg(TestCase):
    def testPlainTokenKeepsRestVerbatim(self):
        self.assertEqual(maybe_quoted_arg("    foo    bar"), ("foo", "   bar"))

    def testDelimitedTokenGluedToRest(self):
        self.assertEqual(maybe_quoted_arg('"foo"bar '), ("foo", "bar "))

    def testDelimitedTokenFollowedBySpace(self):
        self.assertEqual(maybe_quoted_arg('"foo" bar '), ("foo", " bar "))

    def testEveryDelimiterQuotes(self):
        for delimiter in DELIMITERS:
            with self.subTest(delimiter=delimiter):
                self.assertEqual(maybe_quoted_arg(f"{delimiter}a b{delimiter} c"), ("a b", " c"))

    def testDelimitersDoNotMixUp(self):
        self.assertEqual(maybe_quoted_arg("'it\"s' x"), ('it"s', " x"))

    def testLastTokenHasNoRest(self):
        self.assertEqual(maybe_quoted_arg("foo"), ("foo", None))
        self.assertEqual(maybe_quoted_arg('"foo bar"'), ("foo bar", None))

    def testEmptyDelimitedToken(self):
        self.assertEqual(maybe_quoted_arg('"" x'), ("", " x"))

    def testEmptyInputRaises(self):
        for text in ("", "   ", "\n\t "):
            with self.subTest(text=text), self.assertRaises(MissingArgsError):
                maybe_quoted_arg(text)

    def testUnmatchedDelimiterNamesTextAndDelimiters(self):
        with self.assertRaises(UnmatchedDelimiterError) as context:
            maybe_quoted_arg('  "foo bar')
        message = str(context.exception)
        self.assertIn("'\"foo bar'", message)
        self.assertIn(nicelist(DELIMITERS), message)
        self.assertEqual(context.exception.options["text"], '"foo bar')

    def testUnmatchedDelimiterEscapesMarkup(self):
        with self.assertRaises(UnmatchedDelimiterError) as context:
            maybe_quoted_arg("`a*b")
        self.assertIn("\\`a\\*b", str(context.exception))

    def testUnmatchedDelimiterIsUnexpectedArgs(self):
        with self.assertRaises(UnexpectedArgsError):
            maybe_quoted_arg("'open")


class TestParseArgs(TestCase):
    def testOverlyUglyArguments(self):
        text = '    foo    bar "baz\\n    `.-_\' thing" abc-goo\'`" "sample text \\\\\\"* ;    '
        self.assertEqual(parse_args(text), [
            "foo",
            "bar",
            "baz\\n    `.-_' thing",
            "abc-goo'`\"",
            "sample text \\\\\\",
            "*",
            ";",
        ])

    def testEmptyInputHasNoTokens(self):
        self.assertEqual(parse_args(""), [])
        self.assertEqual(parse_args("     "), [])

    def testUndelimitedTokensRoundTrip(self):
        tokens = ["alpha", "beta", "gamma", "δέλτα"]
        self.assertEqual(parse_args(" ".join(tokens)), tokens)
        self.assertEqual(parse_args("  alpha \t beta\n gamma   δέλτα "), tokens)

    def testUnmatchedDelimiterPropagates(self):
        with self.assertRaises(UnmatchedDelimiterError):
            parse_args('foo "bar')

    def testBackslashesAreOrdinary(self):
        self.assertEqual(parse_args('"a\\" b'), ["a\\", "b"])


class TestHelpers(TestCase):
    def testUnprefixWith(self):
        self.assertEqual(unprefix_with(["!"], "!ping"), ("!", "ping"))
        self.assertEqual(unprefix_with(["!!", "!"], "!!ping"), ("!!", "ping"))
        self.assertIsNone(unprefix_with(["!"], "ping"))
        self.assertIsNone(unprefix_with([], "!ping"))

    def testSplitOnceWhitespace(self):
        self.assertEqual(split_once_whitespace("a b c"), ("a", "b c"))
        self.assertEqual(split_once_whitespace("a\nb"), ("a", "b"))
        self.assertEqual(split_once_whitespace("a "), ("a", ""))
        self.assertEqual(split_once_whitespace("abc"), ("abc", None))

    def testIsSurroundedBy(self):
        self.assertTrue(is_surrounded_by('"a"', DELIMITERS))
        self.assertTrue(is_surrounded_by("``", DELIMITERS))
        self.assertFalse(is_surrounded_by("\"a'", DELIMITERS))
        self.assertFalse(is_surrounded_by("xax", DELIMITERS))
        self.assertIsNone(is_surrounded_by('"', DELIMITERS))
        self.assertIsNone(is_surrounded_by("", DELIMITERS))

    def testStripDelimits(self):
        self.assertEqual(strip_delimits('"a b"', DELIMITERS), "a b")
        self.assertEqual(strip_delimits("'a\"", DELIMITERS), "'a\"")
        self.assertEqual(strip_delimits("a", DELIMITERS), "a")

    def testEnsureRestIsEmpty(self):
        ensure_rest_is_empty(None)
        ensure_rest_is_empty("  \n")
        with self.assertRaises(UnexpectedArgsError) as context:
            ensure_rest_is_empty("x")
        self.assertEqual(str(context.exception), "Unexpected 'x'")


if __name__ == "__main__":
    unittest.main()

r"""
Commandeer free-text tokenizer.

Tokens are separated by whitespace; a token starting with a delimiter (", ' or `)
extends to the next occurrence of that same character, whitespace included.
Escapes are not supported: a backslash is an ordinary character.

    >>> parse_args('ban "some user" now')
    ['ban', 'some user', 'now']
    >>> maybe_quoted_arg('"foo"bar ')
    ('foo', 'bar ')
"""
from .faults import MissingArgsError, UnexpectedArgsError, UnmatchedDelimiterError
from .utils import escape, nicelist

DELIMITERS = ('"', "'", "`")


def unprefix_with(prefixes, text, /):
    """
    Strip the first matching prefix from text.

    Returns (prefix, remainder) or None when no prefix matches. Prefixes are
    tried in the given order, so longer prefixes sharing a start should come first.
    """
    for prefix in prefixes:
        if text.startswith(prefix):
            return prefix, text[len(prefix):]
    return None


def split_once_whitespace(text, /):
    """
    Split text at its first whitespace character.

    Returns (head, tail) where tail is everything after that single character,
    or (text, None) when text contains no whitespace.
    """
    for index, character in enumerate(text):
        if character.isspace():
            return text[:index], text[index + 1:]
    return text, None


def maybe_quoted_arg(input, /):
    """
    Read the next token from input.

    Behavior
    - leading whitespace is skipped.
    - delimited token: the text strictly between the opening delimiter and the next
      occurrence of the same character; the rest is everything after the closing
      delimiter, verbatim (None when empty).
    - plain token: split_once_whitespace() of the trimmed input.

    Raises
    - MissingArgsError: nothing but whitespace is left.
    - UnmatchedDelimiterError: the opening delimiter is never closed.
    """
    input = input.lstrip()
    if not input:
        raise MissingArgsError("Expected an argument, found nothing", text=input)

    if (initial := input[0]) in DELIMITERS:
        closing = input.find(initial, 1)
        if closing < 0:
            raise UnmatchedDelimiterError(
                f"Missing matching delimiter: '{escape(input)}', expected one of: {nicelist(DELIMITERS)}.",
                text=input,
            )
        return input[1:closing], input[closing + 1:] or None

    return split_once_whitespace(input)


def parse_args(input, /):
    """
    Tokenize input completely (see maybe_quoted_arg()).

    Running out of input at the start of a token ends the scan; every other error
    propagates unchanged.
    """
    args = []
    while input is not None:
        try:
            arg, input = maybe_quoted_arg(input)
        except MissingArgsError:
            break
        args.append(arg)
    return args


def is_surrounded_by(target, delimiters, /):
    """
    Tell whether target starts and ends with the same delimiter character.

    Returns None when target is too short to be surrounded (fewer than two characters).
    """
    if len(target) < 2:
        return None
    return target[0] == target[-1] and target[0] in delimiters


def strip_delimits(input, delimiters, /):
    """Remove one matching pair of surrounding delimiters, if present."""
    if is_surrounded_by(input, delimiters):
        return input[1:-1]
    return input


def ensure_rest_is_empty(rest, /):
    """
    Reject leftover input that is not only whitespace.

    Raises
    - UnexpectedArgsError: "Unexpected '<rest>'".
    """
    if rest is not None and rest.strip():
        raise UnexpectedArgsError(f"Unexpected '{rest}'", text=rest)


__all__ = (
    "DELIMITERS",
    "unprefix_with",
    "split_once_whitespace",
    "maybe_quoted_arg",
    "parse_args",
    "is_surrounded_by",
    "strip_delimits",
    "ensure_rest_is_empty",
)

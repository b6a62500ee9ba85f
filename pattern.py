r"""Compile "glob:" and "regex:" patterns into matchers over whole addresses.

Glob translation is a small state machine driven by a stack of states.
Transitions may reprocess the current character in the state below
(a lone star has to look at the next character before it knows it is
not a double star, and "{" hands itself over to the group state).

    glob:/a/*/c       ^[\\/]a[\\/][^/]*[\\/]c[\\/]?$
    glob:/a/**/c      ^[\\/]a[\\/].*[\\/]c[\\/]?$
    glob:*.{md,txt}   ^[^/]*\.(?:md|txt)[\\/]?$
"""

import re
from enum import Enum

from errors import PatternSyntaxError


SEPARATOR = r"[\\/]"
SINGLE_STAR = "[^/]*"
DOUBLE_STAR = ".*"
ANY_CHAR = "[^/]"

# Regex metacharacters that are literals in a glob
_BARE_LITERALS = ".^$+|()}"
_GROUP_LITERALS = ".^$+|()"


class State(Enum):
    BARE = "bare"
    STAR = "star"
    ESCAPE = "escape"
    BRACE_OPEN = "brace-open"
    BRACE_BODY = "brace-body"


def glob_to_regex(glob: str) -> str:
    """Translate a glob into an anchored regular expression string."""
    regex = ["^"]
    stack = [State.BARE]
    i = 0

    while i < len(glob):
        c = glob[i]
        state = stack[-1]
        reprocess = False

        if state is State.BARE:
            if c == "*":
                stack.append(State.STAR)
            elif c == "\\":
                stack.append(State.ESCAPE)
            elif c in _BARE_LITERALS:
                stack.append(State.ESCAPE)
                reprocess = True
            elif c == "{":
                stack.append(State.BRACE_OPEN)
                reprocess = True
            elif c == "/":
                regex.append(SEPARATOR)
            elif c == "?":
                regex.append(ANY_CHAR)
            else:
                regex.append(c)

        elif state is State.STAR:
            stack.pop()
            if c == "*":
                regex.append(DOUBLE_STAR)
            else:
                regex.append(SINGLE_STAR)
                reprocess = True

        elif state is State.ESCAPE:
            stack.pop()
            regex.append(re.escape(c))

        elif state is State.BRACE_OPEN:
            # Entered on "{" and re-entered from the body on "," or "}"
            if c == "{":
                regex.append("(?:")
                stack.append(State.BRACE_BODY)
            elif c == ",":
                regex.append("|")
                stack.append(State.BRACE_BODY)
            elif c == "}":
                regex.append(")")
                stack.pop()
            else:
                raise PatternSyntaxError("Unexpected character in group", glob, i)

        elif state is State.BRACE_BODY:
            if c == "*":
                regex.append(SINGLE_STAR)
            elif c == "\\":
                stack.append(State.ESCAPE)
            elif c in _GROUP_LITERALS:
                stack.append(State.ESCAPE)
                reprocess = True
            elif c in ",}":
                stack.pop()
                reprocess = True
            elif c == "/":
                raise PatternSyntaxError("Separator not allowed in group", glob, i)
            elif c == "?":
                regex.append(ANY_CHAR)
            else:
                regex.append(c)

        if not reprocess:
            i += 1

    if stack[-1] is State.STAR:
        stack.pop()
        regex.append(SINGLE_STAR)
    if stack[-1] is State.ESCAPE:
        raise PatternSyntaxError("Dangling escape", glob, len(glob) - 1)
    if stack[-1] is not State.BARE:
        raise PatternSyntaxError("Unclosed group", glob, len(glob))

    # A directory address may carry a trailing separator
    if not glob.endswith("/"):
        regex.append(SEPARATOR + "?")

    regex.append("$")
    return "".join(regex)


def compile_pattern(syntax_and_pattern: str) -> re.Pattern:
    """Compile "glob:<glob>" or "regex:<regex>"."""
    syntax, sep, expr = syntax_and_pattern.partition(":")
    if not sep:
        raise PatternSyntaxError("Missing pattern syntax", syntax_and_pattern)

    if syntax == "regex":
        regex = expr
    elif syntax == "glob":
        regex = glob_to_regex(expr)
    else:
        raise PatternSyntaxError(f"Unknown pattern syntax '{syntax}'", syntax_and_pattern)

    try:
        return re.compile(regex)
    except re.error as e:
        raise PatternSyntaxError(str(e), syntax_and_pattern) from e


def path_matcher(syntax_and_pattern: str):
    """Return a predicate matching the full string form of a path or address."""
    rex = compile_pattern(syntax_and_pattern)
    return lambda path: rex.fullmatch(str(path)) is not None

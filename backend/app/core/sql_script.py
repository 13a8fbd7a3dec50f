"""SQL Script Handling - directive stripping and statement splitting for bootstrap scripts.

Invariants:
    - Pure text transforms, no IO
    - Semicolons inside quotes, backticks and comments never split a statement
    - Only statement-leading CREATE DATABASE / USE directives are stripped
      (a "USE" inside a word or a string literal is left alone)
"""

import re

_CREATE_DATABASE = re.compile(
    r"^[ \t]*CREATE\s+(?:DATABASE|SCHEMA)\b[^;]*;[ \t]*\r?\n?",
    re.IGNORECASE | re.MULTILINE,
)
_USE_DATABASE = re.compile(
    r"^[ \t]*USE\s+[^;]*;[ \t]*\r?\n?",
    re.IGNORECASE | re.MULTILINE,
)


def strip_use_directives(script: str) -> str:
    """Remove `USE <db>;` directives."""
    return _USE_DATABASE.sub("", script)


def strip_database_directives(script: str) -> str:
    """Remove `CREATE DATABASE ...;` and `USE <db>;` directives."""
    return strip_use_directives(_CREATE_DATABASE.sub("", script))


def split_statements(script: str) -> list[str]:
    """Split a multi-statement script on top-level semicolons.

    Understands '...', "...", `...` quoting (doubled quotes and backslash
    escapes), `-- ` and `#` line comments, and /* */ block comments.
    Comments are dropped; empty statements are skipped.
    """
    statements: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    i = 0
    n = len(script)

    while i < n:
        ch = script[i]

        if quote:
            buf.append(ch)
            if ch == "\\" and quote != "`" and i + 1 < n:
                buf.append(script[i + 1])
                i += 2
                continue
            if ch == quote:
                # Doubled quote is an escaped quote
                if i + 1 < n and script[i + 1] == quote:
                    buf.append(quote)
                    i += 2
                    continue
                quote = None
            i += 1
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            buf.append(ch)
            i += 1
            continue

        if ch == "#" or (ch == "-" and script.startswith("--", i)):
            end = script.find("\n", i)
            i = n if end == -1 else end
            continue

        if ch == "/" and script.startswith("/*", i):
            end = script.find("*/", i + 2)
            i = n if end == -1 else end + 2
            buf.append(" ")
            continue

        if ch == ";":
            _flush(buf, statements)
            i += 1
            continue

        buf.append(ch)
        i += 1

    _flush(buf, statements)
    return statements


def _flush(buf: list[str], statements: list[str]) -> None:
    stmt = "".join(buf).strip()
    buf.clear()
    if stmt:
        statements.append(stmt)

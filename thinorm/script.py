"""
thinorm script - schema-init files.

A script is plain text holding semicolon-separated statements. Splitting
respects quoted strings, quoted identifiers and SQL comments, so a ``;``
inside ``'a;b'`` or after ``--`` does not end a statement.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .faults import SchemaScriptFault

__all__ = ["read_script", "split_statements"]

_QUOTES = ("'", '"', "`")


def read_script(path: Union[str, Path], *, backslash_escapes: bool = False) -> List[str]:
    """
    Read and split a schema script.

    Raises:
        SchemaScriptFault: When the file cannot be read or decoded.
    """
    script_path = Path(path)
    try:
        text = script_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SchemaScriptFault(path=str(script_path), reason=str(exc)) from exc
    return split_statements(text, backslash_escapes=backslash_escapes)


def split_statements(text: str, *, backslash_escapes: bool = False) -> List[str]:
    """
    Split script text into statements, dropping blanks and comment-only chunks.

    ``backslash_escapes`` makes a backslash escape the next character inside
    single quotes (MySQL). SQLite only knows quote doubling.
    """
    statements: List[str] = []
    current: List[str] = []
    quote = ""
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if quote:
            current.append(ch)
            if ch == quote:
                # Doubled quote is an escaped quote, stay inside
                if i + 1 < n and text[i + 1] == quote:
                    current.append(text[i + 1])
                    i += 2
                    continue
                quote = ""
            elif backslash_escapes and ch == "\\" and quote == "'" and i + 1 < n:
                current.append(text[i + 1])
                i += 2
                continue
            i += 1
            continue

        if ch in _QUOTES:
            quote = ch
            current.append(ch)
        elif ch == "-" and text.startswith("--", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        elif ch == ";":
            _flush(current, statements)
            current = []
        else:
            current.append(ch)
        i += 1

    _flush(current, statements)
    return statements


def _flush(current: List[str], statements: List[str]) -> None:
    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

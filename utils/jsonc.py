"""Lenient JSON parsing for agent config files.

Agent settings files are frequently hand edited and carry ``//`` comments,
``/* */`` blocks or trailing commas. Strict parsing is tried first; on
failure the content is cleaned outside of string literals and parsed again.

There is no comment-preserving writer: a JSONC file written back through
the config service loses its comments. Its data and unknown keys survive,
and the rolling backup keeps the commented original.
"""

import json
from typing import Any


def strip_jsonc(content: str) -> str:
    """
    Remove comments and trailing commas that sit outside string literals.

    Args:
        content: Raw JSONC text

    Returns:
        Text suitable for ``json.loads``
    """
    out = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        ch = content[i]

        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < length:
                out.append(content[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        if ch == "/" and i + 1 < length and content[i + 1] == "/":
            newline = content.find("\n", i)
            i = length if newline == -1 else newline
            continue

        if ch == "/" and i + 1 < length and content[i + 1] == "*":
            end = content.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        if ch == ",":
            j = i + 1
            while j < length and content[j] in " \t\r\n":
                j += 1
            if j < length and content[j] in "]}":
                i += 1
                continue

        out.append(ch)
        i += 1

    return "".join(out)


def loads_lenient(content: str) -> Any:
    """
    Parse JSON, falling back to JSONC cleanup when strict parsing fails.

    Raises:
        json.JSONDecodeError: If the content is not valid even after cleanup
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    return json.loads(strip_jsonc(content))


def dumps_pretty(data: Any) -> str:
    """Serialize with two-space indentation and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

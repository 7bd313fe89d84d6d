"""Streaming-chunk payload extraction.

Server-rendered dashboard pages embed their component data as inline
script calls of the form:

    self.__next_f.push([1, "...serialized chunk..."])

The non-greedy match can stop early or span two calls when a chunk itself
contains `])`, so the argument list does not always parse as JSON. Those
fragments are kept verbatim: the key parsers search the text with patterns,
not a JSON tree, so an unparsed fragment is still searchable.
"""

import json
import re

_PUSH_PATTERN = re.compile(r"self\.__next_f\.push\(\[(.*?)\]\)", re.DOTALL)


def _chunk_text(args: str) -> str:
    try:
        payload = json.loads(f"[{args}]")
    except json.JSONDecodeError:
        return args

    if len(payload) < 2 or payload[1] is None:
        return ""
    content = payload[1]
    if isinstance(content, str):
        return content
    return json.dumps(content, separators=(",", ":"))


def extract_payload(html: str) -> str:
    """Concatenate the decoded content of every streaming chunk in `html`.

    Returns an empty string when the page carries no chunks.
    """
    return "".join(_chunk_text(m.group(1)) for m in _PUSH_PATTERN.finditer(html))

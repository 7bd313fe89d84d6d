"""API key parsing from extracted dashboard payload text.

The keys page carries a table whose rows serialize as
`"rows":[{"name":...,"key":...,"id":...},...]`. The per-key page has no
single record; its fields are scattered across component props, so each one
is recovered by its own marker pattern:

- `"name":"...","keyId":"..."`  key name + id
- `"accessKey":"..."`           REST API key
- `"<label>" ... "children":"..."`  S3 values rendered next to their labels
  ("Access Key ID", "Secret Access Key", "S3 Endpoint", "Bucket")

A missing marker leaves its field unset.
"""

import json
import re

from src.account.models import RawKeyDetail, RawKeySummary

_ROWS_PATTERN = re.compile(r'"rows":\s*\[(.*?)\]', re.DOTALL)
_BARE_KEY_PATTERN = re.compile(r'"key":\s*"([a-zA-Z0-9_-]{30,})"')

_NAME_AND_ID_PATTERN = re.compile(r'"name":"([^"]+)","keyId":"([^"]+)"')
_ACCESS_KEY_PATTERN = re.compile(r'"accessKey":"([^"]+)"')


def _labelled_value_pattern(label: str) -> re.Pattern:
    # Minimal span: the nearest "children" after the label holds its value
    return re.compile(rf'"{re.escape(label)}".*?"children":"([^"]+)"', re.DOTALL)


_S3_ACCESS_KEY_ID_PATTERN = _labelled_value_pattern("Access Key ID")
_S3_SECRET_ACCESS_KEY_PATTERN = _labelled_value_pattern("Secret Access Key")
_S3_ENDPOINT_PATTERN = _labelled_value_pattern("S3 Endpoint")
_S3_BUCKET_PATTERN = _labelled_value_pattern("Bucket")


def _parse_rows(payload_text: str) -> list[RawKeySummary] | None:
    """Parse the first `"rows":[...]` table. None if absent or not valid JSON rows."""
    match = _ROWS_PATTERN.search(payload_text)
    if not match:
        return None

    try:
        rows = json.loads(f"[{match.group(1)}]")
    except json.JSONDecodeError:
        return None
    if not all(isinstance(row, dict) for row in rows):
        return None

    return [
        RawKeySummary(
            id=row.get("id"),
            name=row.get("name"),
            key=row.get("key"),
            created_at=row.get("created_at", row.get("createdAt")),
        )
        for row in rows
    ]


def _scan_bare_keys(payload_text: str) -> list[RawKeySummary]:
    seen: dict[str, None] = {}
    for value in _BARE_KEY_PATTERN.findall(payload_text):
        seen.setdefault(value, None)
    return [RawKeySummary(key=value) for value in seen]


def parse_key_summaries(payload_text: str) -> list[RawKeySummary]:
    """Extract the key list, in table order.

    Falls back to bare `"key":"..."` values (30+ chars, first-seen order)
    when the rows table is missing or does not parse.
    """
    rows = _parse_rows(payload_text)
    if rows is not None:
        return rows
    return _scan_bare_keys(payload_text)


def find_name_and_id(payload_text: str) -> tuple[str, str] | None:
    match = _NAME_AND_ID_PATTERN.search(payload_text)
    if not match:
        return None
    return match.group(1), match.group(2)


def find_api_key(payload_text: str) -> str | None:
    match = _ACCESS_KEY_PATTERN.search(payload_text)
    return match.group(1) if match else None


def find_s3_access_key_id(payload_text: str) -> str | None:
    match = _S3_ACCESS_KEY_ID_PATTERN.search(payload_text)
    return match.group(1) if match else None


def find_s3_secret_access_key(payload_text: str) -> str | None:
    match = _S3_SECRET_ACCESS_KEY_PATTERN.search(payload_text)
    return match.group(1) if match else None


def find_s3_endpoint(payload_text: str) -> str | None:
    match = _S3_ENDPOINT_PATTERN.search(payload_text)
    return match.group(1) if match else None


def find_s3_bucket(payload_text: str) -> str | None:
    match = _S3_BUCKET_PATTERN.search(payload_text)
    return match.group(1) if match else None


def parse_key_detail(payload_text: str) -> RawKeyDetail:
    """Collect every field whose marker appears in the key page payload."""
    detail = RawKeyDetail(
        api_key=find_api_key(payload_text),
        s3_access_key_id=find_s3_access_key_id(payload_text),
        s3_secret_access_key=find_s3_secret_access_key(payload_text),
        s3_endpoint=find_s3_endpoint(payload_text),
        s3_bucket=find_s3_bucket(payload_text),
    )

    name_and_id = find_name_and_id(payload_text)
    if name_and_id:
        detail.name, detail.id = name_and_id

    return detail

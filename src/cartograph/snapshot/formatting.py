# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Text previews for Redis values.

Each ``format_*`` function turns a raw redis-py reply into ``(payload,
entry_count)``. Output layout is consumed by the web inspector and must stay
stable: tab-separated columns, newline-separated rows.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

KEY_EXPIRED = "<key expired>"
UNSUPPORTED_TYPE = "<unsupported type>"


def to_text(value: Any) -> str:
    """Decode a reply value to text; invalid UTF-8 is replaced, not rejected."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def decode_key(value: Any) -> str:
    """
    Decode a key name.

    Undecodable bytes survive as surrogate escapes so the key can be sent
    back to the server unchanged.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="surrogateescape")
    return str(value)


def encode_key(key: str) -> bytes:
    return key.encode("utf-8", errors="surrogateescape")


def not_implemented_placeholder(key_type: str) -> str:
    return f"<{key_type} preview not implemented>"


def read_error_placeholder(error: BaseException) -> str:
    message = str(error) or error.__class__.__name__
    return f"<read error: {message}>"


def truncate_payload(payload: Optional[str], max_chars: int) -> str:
    """
    Cap a payload at ``max_chars`` characters.

    Args:
        payload: Payload text (None is treated as empty)
        max_chars: Character budget

    Returns:
        The payload, or its prefix followed by a marker with the elided count
    """
    if not isinstance(payload, str):
        return ""
    if len(payload) <= max_chars:
        return payload
    elided = len(payload) - max_chars
    return f"{payload[:max_chars]}\n...[truncated {elided} chars]"


def format_string(value: Optional[bytes]) -> Tuple[str, int]:
    if value is None:
        return "", 0
    return to_text(value), 1


def format_hash(fields: Optional[Dict[Any, Any]]) -> Tuple[str, int]:
    pairs = sorted((to_text(name), to_text(value)) for name, value in (fields or {}).items())
    return "\n".join(f"{name}\t{value}" for name, value in pairs), len(pairs)


def format_set(members: Optional[Iterable[Any]]) -> Tuple[str, int]:
    texts = sorted(to_text(member) for member in (members or ()))
    return "\n".join(texts), len(texts)


def format_zset(members_with_scores: Optional[Sequence[Any]]) -> Tuple[str, int]:
    """Format ``[(member, score), ...]`` in server order."""
    lines: List[str] = []
    for item in members_with_scores or ():
        member, score = item[0], item[1]
        lines.append(f"{to_text(member)}\t{to_text(score)}")
    return "\n".join(lines), len(lines)


def format_list(values: Optional[Sequence[Any]]) -> Tuple[str, int]:
    lines = [f"{index}\t{to_text(value)}" for index, value in enumerate(values or ())]
    return "\n".join(lines), len(lines)


def format_json_document(document: Any) -> Tuple[str, int]:
    """Format a JSON.GET reply; ``null`` or empty documents count as zero entries."""
    payload = to_text(document)
    return payload, 0 if payload in ("null", "") else 1

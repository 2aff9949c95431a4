"""Parsing of categorizer responses into untrusted transaction candidates.

The categorizer is a language model asked to return JSON. Its output may be
wrapped in markdown fences or cut off mid-document, so everything here is
best-effort recovery. Nothing in this module touches the ledger: it only
produces candidate dicts that the ingestion service normalizes.
"""

import json
import re
from typing import Any, Optional

from smartledger.domain.entities import AccountInfo
from smartledger.domain.errors import ValidationError
from smartledger.logging_config import get_logger

logger = get_logger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_CLOSERS = {"{": "}", "[": "]"}


def parse_categorizer_response(text: str) -> dict[str, Any]:
    """Parse a categorizer response into a JSON object.

    Args:
        text: Raw response text

    Returns:
        Parsed JSON object

    Raises:
        ValidationError: If no JSON object can be recovered
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Categorizer response is empty")

    content = _FENCE.sub("", text).strip()
    try:
        result = json.loads(content)
    except json.JSONDecodeError:
        result = _recover_object(content)

    if not isinstance(result, dict):
        raise ValidationError("Categorizer response is not a JSON object")
    return result


def _recover_object(content: str) -> dict[str, Any]:
    """Recover the outermost JSON object, closing it if the text was truncated."""
    start = content.find("{")
    if start == -1:
        raise ValidationError("No JSON object found in categorizer response")
    body = content[start:]

    end = body.rfind("}")
    if end != -1:
        try:
            return json.loads(body[: end + 1])
        except json.JSONDecodeError:
            pass

    # Truncated output: cut after the last complete object and close what is open
    cut = end
    while cut != -1:
        candidate = body[: cut + 1]
        closers = _missing_closers(candidate)
        if closers is not None:
            try:
                result = json.loads(candidate + closers)
            except json.JSONDecodeError:
                result = None
            if isinstance(result, dict):
                logger.warning("categorizer_response_repaired", dropped_chars=len(body) - cut - 1)
                return result
        cut = body.rfind("}", 0, cut)

    raise ValidationError("Could not repair truncated categorizer response")


def _missing_closers(text: str) -> Optional[str]:
    """Return the brackets needed to close text, or None if it ends inside a string."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if not stack or stack[-1] != char:
                return None
            stack.pop()
    if in_string:
        return None
    return "".join(reversed(stack))


def extract_candidates(payload: dict[str, Any]) -> tuple[Optional[AccountInfo], list[dict[str, Any]]]:
    """Split a parsed categorizer payload into account metadata and candidates.

    Raises:
        ValidationError: If the payload is flagged as non-financial or has no
            transaction list
    """
    if payload.get("isFinancialData") is False:
        raise ValidationError(
            "File does not contain financial transaction data"
            + (f": {payload['analysis']}" if payload.get("analysis") else "")
        )

    transactions = payload.get("transactions")
    if not isinstance(transactions, list):
        raise ValidationError("Categorizer response has no transaction list")

    candidates = []
    for index, item in enumerate(transactions):
        if isinstance(item, dict):
            candidates.append(item)
        else:
            logger.warning("categorizer_candidate_dropped", index=index, value_type=type(item).__name__)

    account = payload.get("account")
    account_info = AccountInfo.from_mapping(account) if isinstance(account, dict) else None
    return account_info, candidates

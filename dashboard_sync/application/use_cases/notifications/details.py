"""Extract structured fields from free-form activity log descriptions."""

from __future__ import annotations

import re
from typing import Any, Callable, Final

_TRANSACTION_PATTERN: Final = re.compile(
    r"Transaction (\w+) created for ([^(]+)\((\w+)\) - Total: (\d+)"
)
_CLIENT_TRANSACTION_PATTERN: Final = re.compile(
    r"(\w+) transaction added for ([^:]+): (\d+) - Balance: (-?\d+)"
)
_USER_CREATED_PATTERN: Final = re.compile(
    r"New user created: ([^(]+)\(([^)]+)\) with role (\w+)"
)
_USER_BLOCK_PATTERN: Final = re.compile(
    r"User (?:blocked|unblocked): ([^(]+)\(([^)]+)\)(?:\s*-\s*Reason:\s*(.+))?"
)
_STOCK_PATTERN: Final = re.compile(
    r"Stock decreased for ([^:]+): (\d+) ([^(]+)\(New stock: (\d+)\)"
)
_SUPPORT_PATTERN: Final = re.compile(
    r"Support request from ([^:]+): Issue - ([^,]+), Email - ([^,]+)(?:, Description - (.+))?"
)
_PASSWORD_RESET_PATTERN: Final = re.compile(
    r"Password reset notification sent to ([^(]+)\(([^)]+)\) for user "
    r"([^(]+)\(([^)]+)\) - Password: (\w+)"
)


def _parse_transaction(match: re.Match[str]) -> dict[str, Any]:
    return {
        "transactionId": match.group(1),
        "clientName": match.group(2).strip(),
        "transactionType": match.group(3),
        "amount": int(match.group(4)),
    }


def _parse_client_transaction(match: re.Match[str]) -> dict[str, Any]:
    return {
        "transactionType": match.group(1),
        "clientName": match.group(2).strip(),
        "amount": int(match.group(3)),
        "balance": int(match.group(4)),
    }


def _parse_user_created(match: re.Match[str]) -> dict[str, Any]:
    return {
        "userName": match.group(1).strip(),
        "email": match.group(2),
        "userRole": match.group(3),
    }


def _parse_user_block(match: re.Match[str]) -> dict[str, Any]:
    return {
        "userName": match.group(1).strip(),
        "email": match.group(2),
        "reason": match.group(3) or "N/A",
    }


def _parse_stock(match: re.Match[str]) -> dict[str, Any]:
    return {
        "productName": match.group(1).strip(),
        "quantity": int(match.group(2)),
        "unit": match.group(3).strip(),
        "newStock": int(match.group(4)),
    }


def _parse_support(match: re.Match[str]) -> dict[str, Any]:
    return {
        "requestedBy": match.group(1).strip(),
        "issueType": match.group(2).strip(),
        "userEmail": match.group(3).strip(),
        "description": match.group(4) or "",
    }


def _parse_password_reset(match: re.Match[str]) -> dict[str, Any]:
    return {
        "branchAdminName": match.group(1).strip(),
        "branchAdminEmail": match.group(2),
        "userName": match.group(3).strip(),
        "userEmail": match.group(4),
        "temporaryPassword": match.group(5),
    }


_PARSERS: Final[dict[str, tuple[re.Pattern[str], Callable[[re.Match[str]], dict[str, Any]]]]] = {
    "transaction_created": (_TRANSACTION_PATTERN, _parse_transaction),
    "client_transaction_added": (_CLIENT_TRANSACTION_PATTERN, _parse_client_transaction),
    "user_created": (_USER_CREATED_PATTERN, _parse_user_created),
    "user_blocked": (_USER_BLOCK_PATTERN, _parse_user_block),
    "user_unblocked": (_USER_BLOCK_PATTERN, _parse_user_block),
    "stock_updated": (_STOCK_PATTERN, _parse_stock),
    "support_request": (_SUPPORT_PATTERN, _parse_support),
    "login_assistance_request": (_SUPPORT_PATTERN, _parse_support),
    "password_reset_sent": (_PASSWORD_RESET_PATTERN, _parse_password_reset),
}


def parse_activity_details(action: str, details: str) -> dict[str, Any]:
    """Return the fields embedded in ``details`` for a normalized ``action``.

    Unknown actions and descriptions that do not match the expected wording
    yield an empty mapping.
    """

    parser = _PARSERS.get(action)
    if parser is None or not details:
        return {}
    pattern, build = parser
    match = pattern.search(details)
    if match is None:
        return {}
    return build(match)


__all__ = ["parse_activity_details"]

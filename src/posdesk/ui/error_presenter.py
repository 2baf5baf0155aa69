from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..checkout import CheckoutStage

# Once the ticket insert has been attempted a retry could record the sale twice.
RETRY_SAFE_STAGES = frozenset({None, CheckoutStage.IDLE.value, CheckoutStage.VALIDATING_STOCK.value})
RETRYABLE_CATEGORIES = frozenset({"transport", "server"})

CATEGORY_MESSAGES = {
    "validation": "Please review the highlighted fields and try again.",
    "permission_denied": "You do not have permission to perform this action.",
    "stock": "Some products no longer have enough stock.",
    "partial_write": "The sale was recorded only partially. Check the ticket before trying again.",
    "not_found": "The requested record was not found.",
    "transport": "Temporary connectivity issue. Please retry.",
    "server": "Service error. Try again shortly or contact support.",
    "unknown": "Unexpected error. Please try again.",
}

_CODE_CATEGORIES = {
    "STOCK_SHORTAGE": "stock",
    "INSUFFICIENTSTOCKERROR": "stock",
    "WRITE_ERROR": "partial_write",
    "FORBIDDEN": "permission_denied",
    "42501": "permission_denied",
    "PGRST116": "not_found",
    "NOT_FOUND": "not_found",
    "VALIDATION_ERROR": "validation",
    "23514": "validation",
    "TRANSPORT_ERROR": "transport",
}

# Fallback when the code is unknown: first keyword found in the message wins.
_KEYWORD_CATEGORIES = (
    ("stock", ("stock",)),
    ("validation", ("invalid", "required", "empty", "validation")),
    ("permission_denied", ("permission", "forbidden", "denied")),
    ("not_found", ("not found", "does not exist")),
    ("transport", ("timeout", "connection", "network", "cannot reach")),
    ("server", ("internal error", "unavailable", "server")),
)


@dataclass(frozen=True)
class PresentedError:
    category: str
    user_message: str
    safe_to_retry: bool
    code: str
    details: dict[str, Any]


class ErrorPresenter:
    """Turns a service failure into the payload a view shows, with a retry hint."""

    def present(
        self,
        *,
        message: str,
        details: Any = None,
        trace_id: str | None = None,
        action: str,
        code: str | None = None,
        stage: CheckoutStage | str | None = None,
        allow_retry: bool = False,
    ) -> PresentedError:
        code_value = str(code or _code_from(details) or "UNKNOWN").upper()
        stage_value = stage.value if isinstance(stage, CheckoutStage) else stage
        category = _CODE_CATEGORIES.get(code_value) or _category_from_text(f"{message} {details or ''}")
        return PresentedError(
            category=category,
            user_message=CATEGORY_MESSAGES[category],
            safe_to_retry=allow_retry and category in RETRYABLE_CATEGORIES and stage_value in RETRY_SAFE_STAGES,
            code=code_value,
            details={
                "code": code_value,
                "trace_id": trace_id,
                "action": action,
                "stage": stage_value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "raw_details": details,
            },
        )


def _category_from_text(text: str) -> str:
    lowered = text.lower()
    for category, keywords in _KEYWORD_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "unknown"


def _code_from(details: Any) -> str | None:
    if isinstance(details, dict) and details.get("code"):
        return str(details["code"])
    return None

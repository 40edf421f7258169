"""Request validation and webhook reconciliation."""

from github_webhook_resource.core.reconciler import callback_url, find_hook, hooks_endpoint, reconcile
from github_webhook_resource.core.validation import decode_payload, validate_out_request

__all__ = [
    "callback_url",
    "find_hook",
    "hooks_endpoint",
    "reconcile",
    "decode_payload",
    "validate_out_request",
]

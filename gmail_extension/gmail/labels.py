"""Gmail label operations.

Gmail has no folders; the extension treats every label (system or user) as a
folder and resolves folder names through this module.
"""

from __future__ import annotations

import logging
from typing import Any

from googleapiclient.discovery import Resource

from gmail_extension.gmail.client import to_api_error

logger = logging.getLogger(__name__)


def list_labels(service: Resource) -> list[dict[str, Any]]:
    """List all labels in the mailbox."""
    try:
        response = service.users().labels().list(userId="me").execute()
        labels = response.get("labels", [])
        logger.debug("Listed %d labels", len(labels))
        return labels
    except Exception as e:
        logger.error("Failed to list labels: %s", e)
        raise to_api_error(e, "list labels") from e


def get_label_by_name(
    service: Resource, name: str, case_sensitive: bool = True
) -> dict[str, Any] | None:
    """Find a label by name.

    Args:
        service: Gmail API resource.
        name: Label name to look for.
        case_sensitive: When False, "inbox" matches the INBOX system label.

    Returns:
        The label resource, or None if no label has that name.
    """
    wanted = name if case_sensitive else name.lower()
    for label in list_labels(service):
        label_name = label.get("name", "")
        if (label_name if case_sensitive else label_name.lower()) == wanted:
            return label
    return None

"""
Inbound contact messages: the shared unread counter and its synchronizer.
"""

from folio.messages.unread import (
    SyncState,
    UnreadCounter,
    UnreadSynchronizer,
)

__all__ = [
    "SyncState",
    "UnreadCounter",
    "UnreadSynchronizer",
]

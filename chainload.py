from typing import Dict


class ChainloadTracker:
    """Remembers which clients already received the first-stage loader.

    Keyed by the raw client GUID bytes. Entries live for the lifetime of the
    process; there is no eviction. Owned by a single dispatch loop, so the
    read-then-mark sequence needs no locking.
    """

    def __init__(self):
        self._served: Dict[bytes, bool] = {}

    def has_been_served(self, identity: bytes) -> bool:
        return self._served.get(bytes(identity), False)

    def mark_served(self, identity: bytes) -> None:
        self._served[bytes(identity)] = True

    def __contains__(self, identity) -> bool:
        return bytes(identity) in self._served

    def __len__(self) -> int:
        return len(self._served)

    def __bool__(self) -> bool:
        # an empty tracker is still a tracker
        return True

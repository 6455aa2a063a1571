"""A simple store using only in-process memory."""
import logging
import threading

from steam_openid.store.interface import NonceStore
from steam_openid.store.nonce import checkTimestamp

_LOGGER = logging.getLogger(__name__)


class MemoryNonceStore(NonceStore):
    """In-process memory store.

    Use for single long-running processes.  No persistence supplied,
    nonces are forgotten when the process exits.
    """

    def __init__(self):
        self.nonces = {}
        self._lock = threading.RLock()

    def sweep(self, now, allowed_skew):
        with self._lock:
            expired = [nonce for nonce, timestamp in self.nonces.items()
                       if not checkTimestamp(timestamp, allowed_skew, now)]
            for nonce in expired:
                del self.nonces[nonce]
        if expired:
            _LOGGER.debug('Removed %d expired nonces', len(expired))
        return len(expired)

    def contains(self, nonce):
        with self._lock:
            return nonce in self.nonces

    def insert(self, nonce, timestamp):
        with self._lock:
            self.nonces[nonce] = timestamp

    def lock(self):
        return self._lock

    def __contains__(self, nonce):
        return self.contains(nonce)

    def __len__(self):
        with self._lock:
            return len(self.nonces)

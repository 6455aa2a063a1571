"""
This module contains the definition of the C{L{NonceStore}}
interface.
"""


class NonceStore(object):
    """
    This is the interface for the stores the OpenID client uses to
    remember response nonces it already accepted.

    A store is owned by a single client instance.  The client calls
    C{L{sweep}}, C{L{contains}} and C{L{insert}} in that order while
    holding C{L{lock}}, so implementations shared between threads or
    processes only have to make C{L{lock}} meaningful.

    @sort: sweep, contains, insert, lock
    """

    def sweep(self, now, allowed_skew):
        """Remove every nonce whose timestamp is further than
        C{allowed_skew} from C{now}, in either direction.

        @type now: datetime
        @type allowed_skew: timedelta

        @return: The number of removed nonces.
        @rtype: int
        """
        raise NotImplementedError

    def contains(self, nonce):
        """Whether the nonce was accepted before.

        @type nonce: str
        @rtype: bool
        """
        raise NotImplementedError

    def insert(self, nonce, timestamp):
        """Remember the nonce as accepted.

        @param nonce: The complete nonce string.
        @type nonce: str

        @param timestamp: The timestamp embedded in the nonce.
        @type timestamp: datetime
        """
        raise NotImplementedError

    def lock(self):
        """Return a context manager serializing access to the store."""
        raise NotImplementedError

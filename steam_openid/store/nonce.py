"""Response nonce grammar.

A nonce is a UTC timestamp with second precision followed by an
arbitrary salt, e.g. C{2024-05-01T12:00:00ZaB3dE9}.
"""
import re
import secrets
import string
from datetime import datetime, timezone

from steam_openid.constants import FRESHNESS_WINDOW
from steam_openid.errors import InvalidNonceFormat, NonceTimestampUnparsable

__all__ = ['split', 'mkNonce', 'checkTimestamp', 'utcnow']


NONCE_CHARS = string.ascii_letters + string.digits
TIME_FMT = '%Y-%m-%dT%H:%M:%SZ'
NONCE_RE = re.compile(r'\A([0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}Z)(.*)\Z', re.DOTALL)


def utcnow():
    return datetime.now(timezone.utc)


def split(nonce_string):
    """Extract the timestamp from the given nonce string

    @param nonce_string: the nonce from which to extract the timestamp
    @type nonce_string: str

    @returns: A pair of the timestamp and the salt
    @rtype: Tuple[datetime, str]

    @raises InvalidNonceFormat: if the nonce does not start with
        a timestamp of the form C{YYYY-MM-DDTHH:MM:SSZ}
    @raises NonceTimestampUnparsable: if the timestamp has the right
        form but does not denote a real instant
    """
    match = NONCE_RE.match(nonce_string.strip())
    # Fractional seconds are not allowed by the nonce grammar.
    if match is None or '.' in match.group(1):
        raise InvalidNonceFormat('Response nonce has invalid date format or no date at all. Nonce: %s'
                                 % (nonce_string,), nonce_string)

    timestamp_str, salt = match.groups()
    try:
        timestamp = datetime.strptime(timestamp_str, TIME_FMT)
    except ValueError as why:
        raise NonceTimestampUnparsable('Response nonce could not be converted to timestamp. Nonce: %s. Date: %s. %s'
                                       % (nonce_string, timestamp_str, why), nonce_string)
    return timestamp.replace(tzinfo=timezone.utc), salt


def mkNonce(when=None):
    """Generate a nonce with the current timestamp

    @param when: timestamp to use, defaults to now
    @type when: Optional[datetime]

    @returns: A string that should be usable as a response nonce
    @rtype: str
    """
    if when is None:
        when = utcnow()
    salt = ''.join(secrets.choice(NONCE_CHARS) for _ in range(6))
    return when.astimezone(timezone.utc).strftime(TIME_FMT) + salt


def checkTimestamp(timestamp, allowed_skew=FRESHNESS_WINDOW, now=None):
    """Is the timestamp within the allowed skew of now?

    @type timestamp: datetime
    @type allowed_skew: timedelta
    @param now: The current time, defaults to the system clock
    @type now: Optional[datetime]

    @rtype: bool
    """
    if now is None:
        now = utcnow()
    return abs(now - timestamp) <= allowed_skew

"""Shared fixtures of the client tests."""
from collections import OrderedDict
from datetime import datetime, timezone
from urllib.parse import urlencode

from steam_openid.constants import OPENID2_NS
from steam_openid.discover import Provider, ProviderDirectory

STEAM_IDENTIFIER = 'https://steamcommunity.com/openid'
STEAM_ENDPOINT = 'https://steamcommunity.com/openid/login'
CLAIMED_ID = 'https://steamcommunity.com/openid/id/76561198000000000'
RETURN_URL = 'https://example.com/auth/return'

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
NONCE = '2024-05-01T12:00:00ZUy3eDs8dNSqpr7KWyBqRaFbMLTM='


class StubDirectory(ProviderDirectory):
    """Directory answering from a dictionary and recording lookups."""

    def __init__(self, providers=None):
        self.providers = providers or {}
        self.calls = []

    def discover(self, identifier):
        self.calls.append(identifier)
        return self.providers.get(identifier)


def steamDirectory():
    steam = [Provider(STEAM_ENDPOINT, OPENID2_NS)]
    return StubDirectory({STEAM_IDENTIFIER: steam, CLAIMED_ID: steam})


class Clock(object):
    """Settable clock."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


def makeResponseURL(base=RETURN_URL, **overrides):
    """Build the URL a provider sends the user back with.

    Keyword arguments override the C{openid.} prefixed parameters,
    C{None} removes the parameter.
    """
    params = OrderedDict([
        ('ns', OPENID2_NS),
        ('mode', 'id_res'),
        ('op_endpoint', STEAM_ENDPOINT),
        ('claimed_id', CLAIMED_ID),
        ('identity', CLAIMED_ID),
        ('return_to', base),
        ('response_nonce', NONCE),
        ('assoc_handle', '1234567890'),
        ('signed', 'signed,op_endpoint,claimed_id,identity,return_to,response_nonce,assoc_handle'),
        ('sig', 'W0u5DRbtHE1GG0ZKXjerUZDUGmc='),
    ])
    params.update(overrides)
    query = urlencode([('openid.' + key, value) for key, value in params.items() if value is not None])
    if '?' in base:
        return base + '&' + query
    return base + '?' + query

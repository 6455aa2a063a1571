"""
This module documents the main interface with the OpenID client
library, the C{L{OpenIdClient}} class.


OVERVIEW
========

    The identity verification process uses the following steps, as
    visible to the user of this library:

        1. The user clicks a "Sign in through Steam" button on the
           relying party's site.

        2. The relying party discovers the OpenID provider of the
           identifier (C{https://steamcommunity.com/openid}) and sends
           the browser a redirect to it.  This is
           C{L{OpenIdClient.authenticate}}.

        3. The provider authenticates the user and sends the browser
           back to the return URL of the relying party, with the
           assertion in the query string.

        4. The relying party validates the assertion.  This is
           C{L{OpenIdClient.validateResponse}}.


VALIDATION
==========

    Validation runs a fixed list of stages, see
    C{L{OpenIdClient.stages}}.  The first stage that fails aborts the
    whole validation with an exception from C{L{steam_openid.errors}}:

        1. the response is bound to the return URL of the relying
           party,

        2. the provider sent a positive assertion,

        3. the response nonce is fresh and was not used before,

        4. discovery on the claimed identifier succeeds and the
           response is signed.

    The signature itself is not verified.  An attacker forging
    a response would still have to be discoverable as the provider of
    the claimed identifier.


NONCES
======

    Accepted nonces are kept in a C{L{NonceStore
    <steam_openid.store.interface.NonceStore>}} owned by the client.
    The default store lives in memory, so a single client instance
    should be shared by all requests of a process.  Nonces older than
    C{L{FRESHNESS_WINDOW <steam_openid.constants.FRESHNESS_WINDOW>}}
    are rejected and dropped from the store.
"""
import logging
import re

from steam_openid import urlutil
from steam_openid.constants import FRESHNESS_WINDOW, IDENTIFIER_SELECT, OPENID2_NS
from steam_openid.discover import XRDSProviderDirectory
from steam_openid.errors import (AuthenticationCancelled, EmptyClientReturnUrl, MalformedAssertion,
                                 MissingClaimedIdentifier, MissingEndpoint, MissingNonce, MissingReturnToParam,
                                 MissingSignature, NoProviderForClaimedIdentifier, NoProvidersFound,
                                 NonceReplayed, NonceSkewTooLarge, NoUsableProviders, ProviderError,
                                 QueryParamMismatch, ReturnUrlMismatch, UnparsableUrl)
from steam_openid.store.memstore import MemoryNonceStore
from steam_openid.store.nonce import checkTimestamp, split as splitNonce, utcnow

__all__ = ['OpenIdClient', 'ProviderResponse', 'Assertion']


_LOGGER = logging.getLogger(__name__)

_STEAMID_RE = re.compile(r'/openid/id/(\d+)/?\Z')


class ProviderResponse(object):
    """The result of a successful validation.

    @ivar authenticated: Whether the user was authenticated.
    @type authenticated: bool

    @ivar claimed_identifier: The identifier asserted by the provider,
        exactly as it was sent.
    @type claimed_identifier: str
    """

    def __init__(self, authenticated=False, claimed_identifier=None):
        self.authenticated = authenticated
        self.claimed_identifier = claimed_identifier

    @property
    def steamid(self):
        """The 64-bit Steam ID from a Steam claimed identifier, or
        C{None} if the identifier is not a Steam one."""
        if self.claimed_identifier is None:
            return None
        match = _STEAMID_RE.search(urlutil.getCanonicalClaimedIdentifier(self.claimed_identifier))
        if match is None:
            return None
        return match.group(1)

    def __eq__(self, other):
        if not isinstance(other, ProviderResponse):
            return NotImplemented
        return (self.authenticated, self.claimed_identifier) == (other.authenticated, other.claimed_identifier)

    def __ne__(self, other):
        return not (self == other)

    def __repr__(self):
        return '<%s authenticated=%r claimed_identifier=%r>' % (self.__class__.__name__, self.authenticated,
                                                                self.claimed_identifier)


class Assertion(object):
    """State shared by the validation stages.

    @ivar response_url: The URL the provider sent the user to, C{None}
        if it could not be parsed.
    @type response_url: Optional[urllib.parse.SplitResult]

    @ivar params: The query arguments of C{response_url}.
    @type params: Dict[str, str]

    @ivar return_url: The return URL of the relying party.
    @type return_url: str

    @ivar result: Set by the final stage.
    @type result: Optional[ProviderResponse]
    """

    def __init__(self, response_url, params, return_url):
        self.response_url = response_url
        self.params = params
        self.return_url = return_url
        self.result = None


class OpenIdClient(object):
    """An OpenID relying party.

    @ivar directory: Resolves identifiers to providers.
    @type directory: L{ProviderDirectory<steam_openid.discover.ProviderDirectory>}

    @ivar store: Remembers accepted nonces.
    @type store: L{NonceStore<steam_openid.store.interface.NonceStore>}

    @ivar clock: Returns the current time as an aware C{datetime}.

    @cvar stages: Names of the validation stages, in the order they run.
    @cvar freshness_window: Allowed skew of response nonces.
    """
    stages = (
        'checkReturnUrlsAreValid',
        'checkParams',
        'checkNonce',
        'verifyDiscoveredInformation',
    )
    freshness_window = FRESHNESS_WINDOW

    def __init__(self, directory=None, store=None, clock=None):
        """Initialize a client.

        Create the client once and reuse it, the nonces it remembers
        are what protects against replayed responses.

        @param directory: Defaults to an
            L{XRDSProviderDirectory<steam_openid.discover.XRDSProviderDirectory>}
            using the default fetcher.
        @param store: Defaults to a new
            L{MemoryNonceStore<steam_openid.store.memstore.MemoryNonceStore>}.
        @param clock: Defaults to the system clock in UTC.
        """
        if directory is None:
            directory = XRDSProviderDirectory()
        if store is None:
            store = MemoryNonceStore()
        if clock is None:
            clock = utcnow

        self.directory = directory
        self.store = store
        self.clock = clock

    def authenticate(self, identifier, returnUrl):
        """Start authentication.  See step 2 in the overview at the top
        of this file.

        @param identifier: The identifier to discover the provider of,
            for Steam C{https://steamcommunity.com/openid}.
        @type identifier: str

        @param returnUrl: The URL the provider sends the user back to.
        @type returnUrl: str

        @returns: The URL to redirect the user to.
        @rtype: str

        @raises NoProvidersFound: if discovery yields no providers
        @raises NoUsableProviders: if no provider has a usable endpoint
        @raises DiscoveryFailure: if discovery fails
        """
        providers = self.directory.discover(identifier)
        if not providers:
            raise NoProvidersFound('No providers found for the given identifier. Identifier: %s' % (identifier,),
                                   identifier)

        return self.chooseProvider(providers, returnUrl)

    def chooseProvider(self, providers, returnUrl):
        """Build the request URL for the first usable provider."""
        for provider in providers:
            try:
                return self.requestAuthentication(provider, returnUrl)
            except (MissingEndpoint, UnparsableUrl) as why:
                _LOGGER.debug('Skipping provider %r: %s', provider, why)

        raise NoUsableProviders('No usable providers found for the given identifier.')

    def requestAuthentication(self, provider, returnUrl):
        """Build the C{checkid_setup} request URL for the provider.

        @type provider: L{Provider<steam_openid.discover.Provider>}
        @rtype: str
        @raises MissingEndpoint: if the provider has no endpoint
        @raises UnparsableUrl: if the endpoint is not a URL
        """
        if not provider.endpoint:
            raise MissingEndpoint('No provider endpoint specified.')

        params = [
            ('openid.mode', 'checkid_setup'),
            ('openid.ns', OPENID2_NS),
            ('openid.claimed_id', IDENTIFIER_SELECT),
            ('openid.identity', IDENTIFIER_SELECT),
            ('openid.return_to', returnUrl),
        ]
        return urlutil.buildURL(provider.endpoint, params)

    def validateResponse(self, responseUrl, returnUrl):
        """Validate the response of the provider.  See step 4 in the
        overview at the top of this file.

        @param responseUrl: The full URL of the request the provider
            sent the user with, including the query string.
        @type responseUrl: str

        @param returnUrl: The return URL passed to
            C{L{authenticate}}.
        @type returnUrl: str

        @rtype: L{ProviderResponse}

        @raises OpenIDError: The subclass depends on the failed stage,
            see C{L{steam_openid.errors}}.
        """
        response_url = urlutil.parseURL(responseUrl.strip())
        if response_url is None:
            _LOGGER.debug('Response URL %r could not be parsed', responseUrl)
            params = {}
        else:
            params = urlutil.getQueryParams(response_url)

        assertion = Assertion(response_url, params, returnUrl)
        for stage in self.stages:
            getattr(self, stage)(assertion)

        _LOGGER.info('Accepted assertion for %s', assertion.result.claimed_identifier)
        return assertion.result

    def checkReturnUrlsAreValid(self, assertion):
        """Check the response is bound to the return URL of the relying
        party.

        The scheme, host and path must be the same.  Any query
        parameters on the return URL must be kept by the provider.
        """
        return_url = assertion.return_url
        if return_url == '':
            raise EmptyClientReturnUrl('OpenID client return URL is empty.')

        return_to = assertion.params.get('openid.return_to')
        if not return_to:
            raise MissingReturnToParam('openid.return_to query param is missing in the response URL.')

        parsed_return_to = urlutil.parseURL(return_to)
        if parsed_return_to is None:
            raise UnparsableUrl('openid.return_to URL (%s) could not be parsed.' % (return_to,), return_to)

        parsed_return_url = urlutil.parseURL(return_url)
        if parsed_return_url is None:
            raise UnparsableUrl('OpenID client return URL (%s) could not be parsed.' % (return_url,), return_url)

        if urlutil.urlOrigin(parsed_return_url) != urlutil.urlOrigin(parsed_return_to):
            raise ReturnUrlMismatch('OpenID client and openid.return_to URLs do not match. Client URL: %s, '
                                    'openid.return_to URL: %s.' % (return_url, return_to))

        # Raw containment, not a comparison of the parsed arguments.
        response_query = ''
        if assertion.response_url is not None:
            response_query = urlutil.getQueryString(assertion.response_url)
        return_query = urlutil.getQueryString(parsed_return_url)
        if response_query and return_query and return_query not in response_query:
            raise QueryParamMismatch('Query parameters of the response URL and the OpenID client return URL do '
                                     'not match. Client query: %s.' % (return_query,))

    def checkParams(self, assertion):
        """Check the provider sent a positive assertion."""
        params = assertion.params
        if not params:
            raise MalformedAssertion('Assertion request is malformed. Empty params.')

        mode = params.get('openid.mode')
        if mode == 'error':
            raise ProviderError(params.get('openid.error', '<no error message supplied>'))
        elif mode == 'cancel':
            raise AuthenticationCancelled('Authentication cancelled.')

    def checkNonce(self, assertion):
        """Check the response nonce is fresh and was not used before,
        then remember it.

        OpenID 1.x responses carry no response nonce and are not
        checked.
        """
        params = assertion.params
        ns = params.get('openid.ns')
        if ns is not None and '2.0' not in ns:
            _LOGGER.debug('Skipping nonce check of OpenID 1.x response, openid.ns=%s', ns)
            return

        nonce = params.get('openid.response_nonce')
        if not nonce:
            raise MissingNonce('Missing response nonce.')

        timestamp, _ = splitNonce(nonce)

        with self.store.lock():
            now = self.clock()
            self.store.sweep(now, self.freshness_window)

            if not checkTimestamp(timestamp, self.freshness_window, now):
                raise NonceSkewTooLarge('Response nonce is skewed by more than %s. Nonce: %s. Now: %s.'
                                        % (self.freshness_window, nonce, now.isoformat()), nonce)

            if self.store.contains(nonce):
                raise NonceReplayed('Response nonce has already been used (replayed). Nonce: %s.' % (nonce,),
                                    nonce)

            self.store.insert(nonce, timestamp)

    def verifyDiscoveredInformation(self, assertion):
        """Check the provider is authoritative for the claimed
        identifier and the response is signed."""
        params = assertion.params
        claimed_id = params.get('openid.claimed_id')
        if not claimed_id:
            raise MissingClaimedIdentifier('Could not obtain claimed identifier.')

        canonical_id = urlutil.getCanonicalClaimedIdentifier(claimed_id)
        providers = self.directory.discover(canonical_id)
        if not providers:
            raise NoProviderForClaimedIdentifier('No OpenID provider was discovered for the asserted claimed '
                                                 'identifier. Claimed identifier: %s.' % (canonical_id,),
                                                 canonical_id)

        if not params.get('openid.signed') or not params.get('openid.sig'):
            raise MissingSignature('No signature in response.')

        assertion.result = ProviderResponse(authenticated=True, claimed_identifier=claimed_id)

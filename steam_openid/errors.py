"""Exceptions raised by the steam_openid library.

Every failure is reported as a subclass of C{L{OpenIDError}}.  The
intermediate classes group failures by the part of the protocol they
come from, so callers may catch as broadly or as narrowly as they
need::

    try:
        response = client.validateResponse(request_url, return_to)
    except NonceError:
        ...  # stale or replayed response
    except OpenIDError:
        ...  # anything else
"""

__all__ = [
    'OpenIDError',
    'DiscoveryFailure', 'NoProvidersFound', 'NoProviderForClaimedIdentifier',
    'ProviderUnusable', 'MissingEndpoint', 'NoUsableProviders',
    'ReturnURLError', 'EmptyClientReturnUrl', 'MissingReturnToParam', 'UnparsableUrl', 'ReturnUrlMismatch',
    'QueryParamMismatch',
    'AssertionRejected', 'MalformedAssertion', 'ProviderError', 'AuthenticationCancelled',
    'NonceError', 'MissingNonce', 'InvalidNonceFormat', 'NonceTimestampUnparsable', 'NonceSkewTooLarge',
    'NonceReplayed',
    'TrustFailure', 'MissingClaimedIdentifier', 'MissingSignature',
]


class OpenIDError(Exception):
    """Base class for all failures of the library."""


class DiscoveryFailure(OpenIDError):
    """Discovery could not be completed.

    @ivar identifier: The identifier discovery was performed on.
    """

    def __init__(self, message, identifier=None):
        OpenIDError.__init__(self, message)
        self.identifier = identifier


class NoProvidersFound(DiscoveryFailure):
    """Discovery on the user supplied identifier yielded nothing."""


class NoProviderForClaimedIdentifier(DiscoveryFailure):
    """Discovery on the asserted claimed identifier yielded nothing."""


class ProviderUnusable(OpenIDError):
    """A discovered provider can not be used to start authentication."""


class MissingEndpoint(ProviderUnusable):
    pass


class NoUsableProviders(ProviderUnusable):
    pass


class ReturnURLError(OpenIDError):
    """The response is not bound to the relying party's return URL."""


class EmptyClientReturnUrl(ReturnURLError):
    pass


class MissingReturnToParam(ReturnURLError):
    pass


class UnparsableUrl(ReturnURLError):
    """A value which should be an absolute URL is not one.

    @ivar url: The offending value.
    """

    def __init__(self, message, url=None):
        ReturnURLError.__init__(self, message)
        self.url = url


class ReturnUrlMismatch(ReturnURLError):
    pass


class QueryParamMismatch(ReturnURLError):
    pass


class AssertionRejected(OpenIDError):
    """The provider did not send a positive assertion."""


class MalformedAssertion(AssertionRejected):
    pass


class ProviderError(AssertionRejected):
    """The provider responded with C{openid.mode=error}.

    @ivar error_text: The content of C{openid.error}.
    """

    def __init__(self, error_text):
        AssertionRejected.__init__(self, error_text)
        self.error_text = error_text


class AuthenticationCancelled(AssertionRejected):
    pass


class NonceError(OpenIDError):
    """The response nonce is missing, malformed, stale or reused.

    @ivar nonce: The offending nonce, if there was one.
    """

    def __init__(self, message, nonce=None):
        OpenIDError.__init__(self, message)
        self.nonce = nonce


class MissingNonce(NonceError):
    pass


class InvalidNonceFormat(NonceError):
    pass


class NonceTimestampUnparsable(NonceError):
    pass


class NonceSkewTooLarge(NonceError):
    pass


class NonceReplayed(NonceError):
    pass


class TrustFailure(OpenIDError):
    """The assertion can not be trusted."""


class MissingClaimedIdentifier(TrustFailure):
    pass


class MissingSignature(TrustFailure):
    pass

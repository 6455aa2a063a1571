"""This module contains the HTTP fetcher interface and its implementation."""
import logging
import sys

import requests

import steam_openid
from steam_openid.constants import DEFAULT_TIMEOUT, XRDS_ACCEPT

__all__ = ['fetch', 'getDefaultFetcher', 'setDefaultFetcher', 'HTTPResponse',
           'HTTPFetcher', 'RequestsFetcher', 'ExceptionWrappingFetcher', 'HTTPFetchingError']


_LOGGER = logging.getLogger(__name__)

USER_AGENT = "python-steam-openid/%s (%s)" % (steam_openid.__version__, sys.platform)


def fetch(url, headers=None):
    """Invoke the fetch method on the default fetcher. Most users
    should need only this method.

    @raises HTTPFetchingError: if the default fetcher wraps exceptions
    """
    fetcher = getDefaultFetcher()
    return fetcher.fetch(url, headers)


# Contains the currently set HTTP fetcher. If it is set to None, the
# library will create a RequestsFetcher. Do not access this variable
# outside of this module.
_default_fetcher = None


def getDefaultFetcher():
    """Return the default fetcher instance
    if no fetcher has been set, it will create a default fetcher.

    @return: the default fetcher
    @rtype: HTTPFetcher
    """
    global _default_fetcher

    if _default_fetcher is None:
        setDefaultFetcher(RequestsFetcher())

    return _default_fetcher


def setDefaultFetcher(fetcher, wrap_exceptions=True):
    """Set the default fetcher

    @param fetcher: The fetcher to use as the default HTTP fetcher
    @type fetcher: HTTPFetcher

    @param wrap_exceptions: Whether to wrap exceptions thrown by the
        fetcher with HTTPFetchingError so that they may be caught
        easier. By default, exceptions will be wrapped.
    @type wrap_exceptions: bool
    """
    global _default_fetcher
    if fetcher is None or not wrap_exceptions:
        _default_fetcher = fetcher
    else:
        _default_fetcher = ExceptionWrappingFetcher(fetcher)


class HTTPResponse(object):
    """Result of an HTTP request.

    @ivar final_url: The URL the response came from, after redirects.
    @ivar status: The numeric HTTP status code.
    @ivar reason: The HTTP status text, e.g. C{OK}.
    @ivar headers: The response headers, keys are lowercased.
    @ivar body: The decoded response body.
    @type body: str
    """
    final_url = None
    status = None
    reason = None
    headers = None
    body = None

    def __init__(self, final_url=None, status=None, headers=None, body=None, reason=None):
        self.final_url = final_url
        self.status = status
        self.headers = headers
        self.body = body
        self.reason = reason

    def __repr__(self):
        return "<%s status %s for %s>" % (self.__class__.__name__,
                                          self.status,
                                          self.final_url)


class HTTPFetcher(object):
    """
    This class is the interface for HTTP fetchers.  This interface is
    only important if you need to write a new fetcher for some reason.
    """

    def fetch(self, url, headers=None):
        """
        This performs an HTTP GET, following redirects along the way.

        @param headers: HTTP headers to include with the request
        @type headers: Dict[str, str]

        @return: An object representing the server's HTTP response. If
            there are network or protocol errors, an exception will be
            raised. HTTP error responses, like 404 or 500, do not
            cause exceptions.

        @rtype: L{HTTPResponse}

        @raise Exception: Different implementations will raise
            different errors based on the underlying HTTP library.
        """
        raise NotImplementedError


def _allowedURL(url):
    return url.startswith('http://') or url.startswith('https://')


class HTTPFetchingError(Exception):
    """Exception that is wrapped around all exceptions that are raised
    by the underlying fetcher when using the ExceptionWrappingFetcher

    @ivar why: The exception that caused this exception
    """

    def __init__(self, why=None):
        Exception.__init__(self, why)
        self.why = why


class ExceptionWrappingFetcher(HTTPFetcher):
    """Fetcher wrapper which wraps all exceptions to `HTTPFetchingError`."""

    def __init__(self, fetcher):
        self.fetcher = fetcher

    def fetch(self, *args, **kwargs):
        try:
            return self.fetcher.fetch(*args, **kwargs)
        except HTTPFetchingError:
            raise
        except Exception as why:
            raise HTTPFetchingError(why=why) from why


class RequestsFetcher(HTTPFetcher):
    """A fetcher that uses C{requests} for performing HTTP requests.

    @ivar timeout: Seconds to wait for the server before giving up.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT):
        self.timeout = timeout

    def fetch(self, url, headers=None):
        """Perform an HTTP GET request

        @raises Exception: Any exception that can be raised by 'requests'

        @see: C{L{HTTPFetcher.fetch}}
        """
        if not _allowedURL(url):
            raise ValueError('Bad URL scheme: %r' % (url,))

        request_headers = {'Accept': XRDS_ACCEPT, 'User-Agent': USER_AGENT}
        if headers:
            request_headers.update(headers)

        _LOGGER.debug('Fetching %s', url)
        response = requests.get(url, headers=request_headers, timeout=self.timeout)
        return HTTPResponse(
            final_url=response.url,
            status=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.text,
            reason=response.reason,
        )

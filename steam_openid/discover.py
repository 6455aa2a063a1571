"""Provider discovery.

Resolves an identifier, such as C{https://steamcommunity.com/openid},
to the list of OpenID provider endpoints which may authenticate it.
The client only relies on the C{L{ProviderDirectory}} interface; the
default implementation, C{L{XRDSProviderDirectory}}, performs Yadis
discovery over HTTP and falls back to HTML link discovery.
"""
import logging
import re

from lxml import etree

from steam_openid import fetchers
from steam_openid.constants import (OPENID2_NS, OPENID_1_0_TYPE, OPENID_1_1_TYPE, OPENID_2_0_TYPE,
                                    OPENID_IDP_2_0_TYPE, OPENID_TYPE_URIS, XRDS_CONTENT_TYPE, YADIS_HEADER_NAME)
from steam_openid.errors import DiscoveryFailure

__all__ = ['Provider', 'ProviderDirectory', 'XRDSProviderDirectory', 'XRDSError', 'parseXRDS',
           'providersFromXRDS', 'providersFromHTML', 'findHTMLMeta', 'normalizeIdentifier']


_LOGGER = logging.getLogger(__name__)

XRDS_NS = 'xri://$xrds'
XRD_NS_2_0 = 'xri://$xrd*($v*2.0)'

# Version reported for each service type.
TYPE_VERSIONS = {
    OPENID_IDP_2_0_TYPE: OPENID2_NS,
    OPENID_2_0_TYPE: OPENID2_NS,
    OPENID_1_1_TYPE: OPENID_1_1_TYPE,
    OPENID_1_0_TYPE: OPENID_1_0_TYPE,
}

# HTML link relations, listed in order of preference.
HTML_LINK_RELS = [
    ('openid2.provider', OPENID2_NS),
    ('openid.server', OPENID_1_1_TYPE),
]

_SCHEME_RE = re.compile(r'\Ahttps?://', re.IGNORECASE)


class XRDSError(Exception):
    """An error with the XRDS document."""


def nsTag(ns, tag):
    return '{%s}%s' % (ns, tag)


class Provider(object):
    """One candidate OpenID provider endpoint.

    @ivar endpoint: The URL authentication requests are sent to.
    @type endpoint: Optional[str]

    @ivar version: The protocol version the provider speaks, as
        a namespace or type URI.
    @type version: Optional[str]
    """

    def __init__(self, endpoint=None, version=None):
        self.endpoint = endpoint
        self.version = version

    def __eq__(self, other):
        if not isinstance(other, Provider):
            return NotImplemented
        return (self.endpoint, self.version) == (other.endpoint, other.version)

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash((self.endpoint, self.version))

    def __repr__(self):
        return '<%s endpoint=%r version=%r>' % (self.__class__.__name__, self.endpoint, self.version)


class ProviderDirectory(object):
    """Interface of objects resolving identifiers to providers."""

    def discover(self, identifier):
        """Find the providers for the identifier.

        @param identifier: A user supplied or claimed identifier
        @type identifier: str

        @return: The providers in order of preference, possibly empty.
        @rtype: List[Provider]

        @raises DiscoveryFailure: if discovery could not be performed
        """
        raise NotImplementedError


def normalizeIdentifier(identifier):
    """Turn a user supplied identifier into a URL which can be fetched."""
    identifier = identifier.strip()
    if not _SCHEME_RE.match(identifier):
        identifier = 'http://' + identifier
    return identifier.split('#', 1)[0]


def parseXRDS(text):
    """Parse the given text as an XRDS document.

    External entities are never resolved.

    @return: The root C{XRDS} element
    @raises XRDSError: When there is a parse error or the document does
        not contain an XRDS.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(text.encode('utf-8'), parser)
    except (ValueError, etree.LxmlError) as why:
        raise XRDSError('Error parsing document as XML: %s' % (why,))

    if root is None or root.tag != nsTag(XRDS_NS, 'XRDS'):
        raise XRDSError('Not an XRDS document')
    return root


def _priority(element):
    """Sort key for elements carrying an optional priority attribute.
    Elements without a valid priority come last."""
    try:
        return (0, int(element.get('priority')))
    except (TypeError, ValueError):
        return (1, 0)


def _typePreference(type_uris):
    for index, type_uri in enumerate(OPENID_TYPE_URIS):
        if type_uri in type_uris:
            return index
    return len(OPENID_TYPE_URIS)


def providersFromXRDS(text):
    """Extract the OpenID providers from an XRDS document.

    Services of the final XRD are ordered by their priority, then by
    the preference of their OpenID type.  Services which are not
    OpenID services are ignored.

    @type text: str
    @rtype: List[Provider]
    @raises XRDSError: if the document is not a valid XRDS
    """
    root = parseXRDS(text)
    xrds = root.findall(nsTag(XRD_NS_2_0, 'XRD'))
    if not xrds:
        raise XRDSError('No XRD present in tree')

    services = []
    for index, service in enumerate(xrds[-1].findall(nsTag(XRD_NS_2_0, 'Service'))):
        type_uris = [(element.text or '').strip() for element in service.findall(nsTag(XRD_NS_2_0, 'Type'))]
        preference = _typePreference(type_uris)
        if preference == len(OPENID_TYPE_URIS):
            continue
        services.append((_priority(service), preference, index, service))
    services.sort(key=lambda item: item[:3])

    providers = []
    for _, preference, _, service in services:
        version = TYPE_VERSIONS[OPENID_TYPE_URIS[preference]]
        uris = sorted(service.findall(nsTag(XRD_NS_2_0, 'URI')), key=_priority)
        for uri in uris:
            endpoint = (uri.text or '').strip() or None
            providers.append(Provider(endpoint, version))
    return providers


def _parseHTML(text):
    if not text:
        return None
    parser = etree.HTMLParser()
    try:
        html = etree.fromstring(text, parser)
    except (ValueError, etree.LxmlError):
        _LOGGER.debug("Couldn't parse HTML page.")
        return None
    # Invalid input may return no element at all
    return html


def xpath_lower_case(context, values):
    """Return lower cased values in XPath."""
    return [v.lower() for v in values]


def findHTMLMeta(text):
    """Look for a meta http-equiv tag with the YADIS header name.

    @return: The URI from which to fetch the XRDS document or C{None}
    @rtype: Optional[str]
    """
    html = _parseHTML(text)
    if html is None:
        return None

    # Create a XPath evaluator with a local function to lowercase values.
    xpath_evaluator = etree.XPathEvaluator(html, extensions={(None, 'lower-case'): xpath_lower_case})
    # Find YADIS meta tag, case insensitive to the header name.
    yadis_headers = xpath_evaluator('//head/meta[lower-case(@http-equiv)="{}"]'.format(YADIS_HEADER_NAME.lower()))
    if not yadis_headers:
        return None
    return yadis_headers[0].get('content')


def providersFromHTML(text):
    """Find the OpenID providers advertised by C{<link rel=...>} tags of
    an HTML page.

    @rtype: List[Provider]
    """
    html = _parseHTML(text)
    if html is None:
        return []

    hrefs = {}
    for link in html.iterfind('.//link'):
        href = link.get('href')
        if not href:
            continue
        for rel in (link.get('rel') or '').lower().split():
            hrefs.setdefault(rel, href.strip())

    return [Provider(hrefs[rel], version) for rel, version in HTML_LINK_RELS if rel in hrefs]


class XRDSProviderDirectory(ProviderDirectory):
    """Yadis discovery over HTTP.

    @ivar fetcher: The fetcher used for HTTP requests, the default
        fetcher of C{L{steam_openid.fetchers}} if C{None}.
    """

    def __init__(self, fetcher=None):
        if fetcher is not None and not isinstance(fetcher, fetchers.ExceptionWrappingFetcher):
            fetcher = fetchers.ExceptionWrappingFetcher(fetcher)
        self.fetcher = fetcher

    def _fetch(self, url, identifier):
        fetcher = self.fetcher or fetchers.getDefaultFetcher()
        try:
            return fetcher.fetch(url)
        except fetchers.HTTPFetchingError as why:
            raise DiscoveryFailure('Error fetching %s: %s' % (url, why.why), identifier) from why

    def discover(self, identifier):
        url = normalizeIdentifier(identifier)
        response = self._fetch(url, identifier)
        if response.status != 200:
            _LOGGER.info('Discovery on %s failed with HTTP status %s %s', url, response.status, response.reason)
            return []

        if self._isXRDS(response):
            return self._providersFromXRDS(response)

        xrds_location = response.headers.get(YADIS_HEADER_NAME.lower()) or findHTMLMeta(response.body)
        if xrds_location:
            _LOGGER.debug('Following %s to %s', YADIS_HEADER_NAME, xrds_location)
            xrds_response = self._fetch(xrds_location, identifier)
            if xrds_response.status == 200:
                return self._providersFromXRDS(xrds_response)
            _LOGGER.info('Fetching XRDS document %s failed with HTTP status %s', xrds_location,
                         xrds_response.status)
            return []

        _LOGGER.debug('No XRDS document for %s, looking for HTML links', url)
        return providersFromHTML(response.body)

    def _isXRDS(self, response):
        content_type = response.headers.get('content-type', '')
        return content_type.split(';', 1)[0].strip().lower() == XRDS_CONTENT_TYPE

    def _providersFromXRDS(self, response):
        try:
            return providersFromXRDS(response.body)
        except XRDSError as why:
            _LOGGER.info('Invalid XRDS document at %s: %s', response.final_url, why)
            return []

"""URL parsing and construction helpers.

None of the parsing helpers raise on malformed input; an unparsable
URL is reported as C{None} and it is up to the caller to decide what
that means.
"""
import logging
import re

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .errors import UnparsableUrl

__all__ = ['parseURL', 'buildURL', 'getQueryParams', 'getQueryString', 'urlOrigin', 'removeDotSegments',
           'getCanonicalClaimedIdentifier']


_LOGGER = logging.getLogger(__name__)

DEFAULT_PORTS = {'http': 80, 'https': 443}

_WHITESPACE_RE = re.compile(r'\s')

_SINGLE_DOT = ('.', '%2e')
_DOUBLE_DOT = ('..', '.%2e', '%2e.', '%2e%2e')


def parseURL(value):
    """Parse an absolute URL.

    @param value: The URL to parse
    @type value: str

    @return: The split URL or C{None} if the value is not an absolute
        URL with a scheme and a host.
    @rtype: Optional[urllib.parse.SplitResult]
    """
    if not isinstance(value, str):
        return None

    try:
        parsed = urlsplit(value)
        # Accessing the port validates it.
        parsed.port
    except ValueError as why:
        _LOGGER.debug('Could not parse URL %r: %s', value, why)
        return None

    if not parsed.scheme or not parsed.hostname:
        return None
    if _WHITESPACE_RE.search(parsed.netloc):
        return None
    return parsed


def buildURL(base, params):
    """Replace the query of a URL with the given parameters.

    Any query already present on C{base} is discarded.  Parameters are
    set in the given order, a later parameter overwrites an earlier one
    with the same key.

    @param base: The absolute URL to start from
    @type base: str

    @param params: The query arguments
    @type params: Union[Dict[str, str], List[Tuple[str, str]]]

    @rtype: str
    @raises UnparsableUrl: If C{base} is not an absolute URL.
    """
    parsed = parseURL(base)
    if parsed is None:
        raise UnparsableUrl('Could not parse URL %r.' % (base,), base)

    if hasattr(params, 'items'):
        params = params.items()

    query = {}
    for key, value in params:
        query[key] = value

    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path or '/', urlencode(list(query.items())),
                       parsed.fragment))


def getQueryParams(url):
    """Return the query arguments of a URL as a dictionary.

    The first value wins when a key is repeated, blank values are kept.

    @param url: The URL, either as a string or already split.
    @type url: Union[str, urllib.parse.SplitResult]

    @rtype: Dict[str, str]
    """
    if isinstance(url, str):
        url = urlsplit(url)

    params = {}
    for key, value in parse_qsl(url.query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def getQueryString(parsed):
    """Return the raw query of a split URL prefixed by C{?}, or an empty
    string if the URL has no query."""
    if parsed.query:
        return '?' + parsed.query
    return ''


def urlOrigin(parsed):
    """Return the scheme, host and path of a split URL.

    Scheme and host are lowercased, a default port is dropped, dot
    segments are removed from the path and an empty path is reported
    as C{/}.

    @rtype: Tuple[str, str, str]
    """
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    port = parsed.port
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = '%s:%d' % (host, port)
    return (scheme, host, removeDotSegments(parsed.path))


def removeDotSegments(path):
    """Resolve C{.} and C{..} segments of an absolute path.

    A path ending in a dot segment keeps its trailing slash, C{/a/b/..}
    becomes C{/a/}.  Percent-encoded dots count as dots.
    """
    segments = path.split('/')[1:]
    output = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        lowered = segment.lower()
        if lowered in _SINGLE_DOT or lowered in _DOUBLE_DOT:
            if lowered in _DOUBLE_DOT and output:
                output.pop()
            if last:
                output.append('')
        else:
            output.append(segment)
    return '/' + '/'.join(output)


def getCanonicalClaimedIdentifier(claimed_id):
    """Strip the fragment off a claimed identifier."""
    return claimed_id.split('#', 1)[0]

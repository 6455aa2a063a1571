"""Basic constants for steam_openid library."""
from datetime import timedelta

# Namespace sent with authentication requests.
OPENID2_NS = 'http://specs.openid.net/auth/2.0'

# Lets the provider choose the identifier the user authenticates as.
IDENTIFIER_SELECT = 'http://specs.openid.net/auth/2.0/identifier_select'

# Service type URIs, listed in order of preference.
OPENID_IDP_2_0_TYPE = 'http://specs.openid.net/auth/2.0/server'
OPENID_2_0_TYPE = 'http://specs.openid.net/auth/2.0/signon'
OPENID_1_1_TYPE = 'http://openid.net/signon/1.1'
OPENID_1_0_TYPE = 'http://openid.net/signon/1.0'

OPENID_TYPE_URIS = [
    OPENID_IDP_2_0_TYPE,
    OPENID_2_0_TYPE,
    OPENID_1_1_TYPE,
    OPENID_1_0_TYPE,
]

# Maximal allowed distance between a response nonce timestamp and now,
# in either direction.
FRESHNESS_WINDOW = timedelta(minutes=5)

# Seconds before an HTTP request made during discovery is abandoned.
DEFAULT_TIMEOUT = 5

XRDS_CONTENT_TYPE = 'application/xrds+xml'
XRDS_ACCEPT = 'application/xrds+xml,text/html,text/plain,*/*;q=0.9'
YADIS_HEADER_NAME = 'X-XRDS-Location'

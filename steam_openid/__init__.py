"""
This package is an implementation of the relying party side of the
OpenID 2.0 authentication protocol, as used by Steam to let users log
in to third party sites.  For information on using it, see the
C{L{steam_openid.consumer}} module.
"""

__version__ = '1.0.0'

version_info = tuple(int(part) for part in __version__.split('.'))

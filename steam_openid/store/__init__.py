"""
This package contains the modules related to the nonce store the
C{L{steam_openid.consumer.OpenIdClient}} uses to detect replayed
responses.
"""

#!/usr/bin/env python
"""
Simple example of signing in through Steam.

Run it, open the printed URL in a browser and follow the link.  After
signing in on Steam you are sent back and the example shows your
Steam ID.
"""
import html
import logging
import optparse
from http.server import BaseHTTPRequestHandler, HTTPServer

from steam_openid.consumer import OpenIdClient
from steam_openid.errors import OpenIDError

STEAM_IDENTIFIER = 'https://steamcommunity.com/openid'


class OpenIDHTTPServer(HTTPServer):
    """http server that contains a reference to an OpenID client and
    knows its base URL.
    """

    def __init__(self, *args, **kwargs):
        HTTPServer.__init__(self, *args, **kwargs)
        self.client = OpenIdClient()

        if self.server_port != 80:
            self.base_url = 'http://%s:%s/' % (self.server_name, self.server_port)
        else:
            self.base_url = 'http://%s/' % (self.server_name,)

    @property
    def return_url(self):
        return self.base_url + 'process'


class OpenIDRequestHandler(BaseHTTPRequestHandler):
    """Request handler that knows how to verify a Steam identity."""

    def do_GET(self):
        path = self.path.split('?', 1)[0]
        if path == '/login':
            self.doLogin()
        elif path == '/process':
            self.doProcess()
        else:
            self.render('Sign in', '<a href="/login">Sign in through Steam</a>')

    def doLogin(self):
        try:
            redirect_url = self.server.client.authenticate(STEAM_IDENTIFIER, self.server.return_url)
        except OpenIDError as error:
            self.render('Error', 'Could not start authentication: %s' % (html.escape(str(error)),), status=502)
            return
        self.send_response(302)
        self.send_header('Location', redirect_url)
        self.end_headers()

    def doProcess(self):
        request_url = self.server.base_url.rstrip('/') + self.path
        try:
            response = self.server.client.validateResponse(request_url, self.server.return_url)
        except OpenIDError as error:
            self.render('Failed', '%s: %s' % (error.__class__.__name__, html.escape(str(error))), status=403)
            return
        self.render('Signed in', 'Your Steam ID is %s' % (html.escape(response.steamid or '?'),))

    def render(self, title, body, status=200):
        self.send_response(status)
        self.send_header('Content-Type', 'text/html; charset=utf-8')
        self.end_headers()
        page = '<html><head><title>%s</title></head><body><h1>%s</h1><p>%s</p></body></html>' % (title, title, body)
        self.wfile.write(page.encode('utf-8'))


def main(host, port):
    server = OpenIDHTTPServer((host, port), OpenIDRequestHandler)

    print('Server running at:')
    print(server.base_url)
    server.serve_forever()


if __name__ == '__main__':
    parser = optparse.OptionParser('Usage:\n %prog [options]')
    parser.add_option(
        '-p', '--port', dest='port', type='int', default=8001,
        help='Port on which to listen for HTTP requests. '
        'Defaults to port %default.')
    parser.add_option(
        '-s', '--host', dest='host', default='localhost',
        help='Host on which to listen for HTTP requests. '
        'Also used for generating URLs. Defaults to %default.')
    parser.add_option(
        '-v', '--verbose', dest='verbose', action='store_true', default=False,
        help='Log debugging messages of the library.')

    options, args = parser.parse_args()
    if args:
        parser.error('Expected no arguments. Got %r' % args)

    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s:%(name)s: %(message)s')
    main(options.host, options.port)

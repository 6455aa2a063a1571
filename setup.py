# -*- coding: utf-8 -*-
from setuptools import setup

# Import version from steam_openid library itself
VERSION = __import__('steam_openid').__version__
INSTALL_REQUIRES = [
    'lxml',
    'requests',
]
EXTRAS_REQUIRE = {
    'quality': ('flake8', 'isort'),
    'tests': ('testfixtures', 'responses', 'coverage'),
}
LONG_DESCRIPTION = open('README.md').read() + '\n\n' + open('Changelog.md').read()
CLASSIFIERS = [
    'Development Status :: 5 - Production/Stable',
    'Environment :: Web Environment',
    'Intended Audience :: Developers',
    'License :: OSI Approved :: Apache Software License',
    'Operating System :: POSIX',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: Internet :: WWW/HTTP',
    'Topic :: Software Development :: Libraries :: Python Modules',
    'Topic :: System :: Systems Administration :: Authentication/Directory',
]


setup(
    name='python-steam-openid',
    version=VERSION,
    description='Python OpenID 2.0 relying party for Steam and other OpenID providers.',
    long_description=LONG_DESCRIPTION,
    long_description_content_type='text/markdown',
    packages=['steam_openid',
              'steam_openid.store',
              ],
    python_requires='>=3.8',
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    classifiers=CLASSIFIERS,
)

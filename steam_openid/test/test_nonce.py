import re
import unittest
from datetime import datetime, timedelta, timezone

from steam_openid.errors import InvalidNonceFormat, NonceTimestampUnparsable
from steam_openid.store.memstore import MemoryNonceStore
from steam_openid.store.nonce import checkTimestamp, mkNonce, split as splitNonce

nonce_re = re.compile(r'\A\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ')

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class NonceTest(unittest.TestCase):
    def test_mkNonce(self):
        nonce = mkNonce()
        self.assertIsNotNone(nonce_re.match(nonce))
        self.assertEqual(len(nonce), 26)

    def test_mkNonce_when(self):
        nonce = mkNonce(EPOCH)
        self.assertIsNotNone(nonce_re.match(nonce))
        self.assertTrue(nonce.startswith('1970-01-01T00:00:00Z'))
        self.assertEqual(len(nonce), 26)

    def test_mkNonce_unique(self):
        self.assertNotEqual(mkNonce(EPOCH), mkNonce(EPOCH))

    def test_splitNonce(self):
        actual_t, actual_salt = splitNonce('1970-01-01T00:00:00Z')
        self.assertEqual(actual_t, EPOCH)
        self.assertEqual(actual_salt, '')

    def test_splitNonce_salt(self):
        actual_t, actual_salt = splitNonce(' 2024-05-01T12:30:15ZUy3eDs8d=\n')
        self.assertEqual(actual_t, datetime(2024, 5, 1, 12, 30, 15, tzinfo=timezone.utc))
        self.assertEqual(actual_salt, 'Uy3eDs8d=')

    def test_mkSplit(self):
        when = EPOCH + timedelta(seconds=42)
        nonce_str = mkNonce(when)
        self.assertIsNotNone(nonce_re.match(nonce_str))
        et, salt = splitNonce(nonce_str)
        self.assertEqual(len(salt), 6)
        self.assertEqual(et, when)


class BadSplitTest(unittest.TestCase):
    cases = [
        '',
        '1970-01-01T00:00:00+1:00',
        '1970.01-01T00:00:00Z',
        '1970-01-01T00:00:00.123Z',
        '1970-01-01T00:00Z',
        'Thu Sep  7 13:29:31 PDT 2006',
        'monkeys',
    ]

    unparsable_cases = [
        '1970-00-01T00:00:00Z',
        '1970-13-01T00:00:00Z',
        '2023-02-29T00:00:00Z',
        '1970-01-01T24:00:00Z',
    ]

    def test(self):
        for nonce_str in self.cases:
            with self.assertRaises(InvalidNonceFormat) as context:
                splitNonce(nonce_str)
            self.assertEqual(context.exception.nonce, nonce_str)

    def test_unparsable(self):
        for nonce_str in self.unparsable_cases:
            self.assertRaises(NonceTimestampUnparsable, splitNonce, nonce_str)


class CheckTimestampTest(unittest.TestCase):
    cases = [
        # exact, no allowed skew
        (0, 0, 0, True),

        # exact, large skew
        (0, 1000, 0, True),

        # no allowed skew, one second old
        (0, 0, 1, False),

        # many seconds old, outside of skew
        (0, 10, 50, False),

        # one second old, one second skew allowed
        (0, 1, 1, True),

        # One second in the future, one second skew allowed
        (2, 1, 1, True),

        # two seconds in the future, one second skew allowed
        (2, 1, 0, False),
    ]

    def test(self):
        for timestamp, allowed_skew, now, expected in self.cases:
            actual = checkTimestamp(EPOCH + timedelta(seconds=timestamp), timedelta(seconds=allowed_skew),
                                    EPOCH + timedelta(seconds=now))
            self.assertEqual(actual, expected)

    def test_default_window(self):
        self.assertTrue(checkTimestamp(EPOCH, now=EPOCH + timedelta(minutes=5)))
        self.assertFalse(checkTimestamp(EPOCH, now=EPOCH + timedelta(minutes=5, microseconds=1)))


class MemoryNonceStoreTest(unittest.TestCase):
    """Test `MemoryNonceStore` class."""

    def setUp(self):
        self.store = MemoryNonceStore()

    def test_insert(self):
        self.assertFalse(self.store.contains('nonce'))
        self.store.insert('nonce', EPOCH)
        self.assertTrue(self.store.contains('nonce'))
        self.assertIn('nonce', self.store)
        self.assertEqual(len(self.store), 1)

    def test_sweep(self):
        window = timedelta(minutes=5)
        self.store.insert('old', EPOCH - timedelta(minutes=6))
        self.store.insert('edge', EPOCH - window)
        self.store.insert('now', EPOCH)
        self.store.insert('future', EPOCH + timedelta(minutes=6))

        self.assertEqual(self.store.sweep(EPOCH, window), 2)

        self.assertEqual(sorted(self.store.nonces), ['edge', 'now'])

    def test_sweep_empty(self):
        self.assertEqual(self.store.sweep(EPOCH, timedelta(minutes=5)), 0)

    def test_lock_reentrant(self):
        with self.store.lock():
            self.store.insert('nonce', EPOCH)
            self.assertTrue(self.store.contains('nonce'))

    def test_instances_independent(self):
        self.store.insert('nonce', EPOCH)
        self.assertNotIn('nonce', MemoryNonceStore())

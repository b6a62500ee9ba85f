"""Tests for the HTTP transport."""

import threading
import unittest

from backend import MemoryBackend
from client import ClientConfig, WebFileClient
from errors import InvalidPathError, TransportError
from server import make_server


class TestClientConfig(unittest.TestCase):
    def test_base_gets_trailing_separator(self):
        self.assertEqual(ClientConfig("http://h/a").server, "http://h/a/")
        self.assertEqual(ClientConfig("http://h/a/").server, "http://h/a/")

    def test_rejects_other_schemes(self):
        for server in ("ftp://h/a", "file:/tmp", "h/a", ""):
            with self.assertRaises(InvalidPathError):
                ClientConfig(server)

    def test_https_accepted(self):
        self.assertEqual(ClientConfig("https://h").server, "https://h/")

    def test_no_proxy(self):
        self.assertEqual(ClientConfig("http://h").proxies, {})

    def test_proxy_default_port(self):
        proxies = ClientConfig("http://h", proxy="cache").proxies
        self.assertEqual(proxies, {"http": "http://cache:80", "https": "http://cache:80"})

    def test_proxy_with_port(self):
        proxies = ClientConfig("http://h", proxy="cache:3128").proxies
        self.assertEqual(proxies["http"], "http://cache:3128")

    def test_default_timeout(self):
        self.assertEqual(ClientConfig("http://h").timeout, (1.0, None))

    def test_timeouts_in_seconds(self):
        config = ClientConfig("http://h", connect_timeout=2500, read_timeout=500)
        self.assertEqual(config.timeout, (2.5, 0.5))

    def test_negative_timeouts_clamped(self):
        config = ClientConfig("http://h", connect_timeout=-1, read_timeout=-10)
        self.assertEqual(config.connect_timeout, 0)
        self.assertEqual(config.read_timeout, 0)


class TestWebFileClient(unittest.TestCase):
    def test_url(self):
        client = WebFileClient.for_server("http://h/base")
        self.assertEqual(client.url(""), "http://h/base/")
        self.assertEqual(client.url("docs/"), "http://h/base/docs/")
        self.assertEqual(client.url("a b/c#d.txt"), "http://h/base/a%20b/c%23d.txt")
        client.close()

    def test_session_settings(self):
        client = WebFileClient.for_server("https://h", proxy="cache:3128", insecure=True)
        self.assertFalse(client.session.verify)
        self.assertFalse(client.session.trust_env)
        self.assertEqual(client.session.proxies["https"], "http://cache:3128")
        self.assertEqual(client.session.headers["User-Agent"], "webfs/1.0")
        client.close()

    def test_verifies_by_default(self):
        client = WebFileClient.for_server("https://h")
        self.assertTrue(client.session.verify)
        client.close()


class TestFetch(unittest.TestCase):
    """Requests against a live listing server."""

    @classmethod
    def setUpClass(cls):
        tree = {
            "hello.txt": "Hello, world!",
            "lines.txt": "one\r\ntwo\nthree",
            "big.bin": bytes(range(256)) * 100,
            "docs": {"guide.txt": "A guide"},
        }
        cls.server = make_server(MemoryBackend(tree), "127.0.0.1", 0)
        cls.port = cls.server.server_address[1]
        cls.thread = threading.Thread(target=cls.server.serve_forever)
        cls.thread.daemon = True
        cls.thread.start()

    @classmethod
    def tearDownClass(cls):
        cls.server.shutdown()
        cls.server.server_close()
        cls.thread.join(timeout=2)

    def setUp(self):
        self.client = WebFileClient.for_server(f"http://127.0.0.1:{self.port}")

    def tearDown(self):
        self.client.close()

    def test_read(self):
        with self.client.fetch("hello.txt") as stream:
            self.assertEqual(stream.read(), b"Hello, world!")

    def test_read_in_pieces(self):
        with self.client.fetch("big.bin") as stream:
            first = stream.read(10)
            rest = stream.read()
        self.assertEqual(first, bytes(range(10)))
        self.assertEqual(len(first) + len(rest), 25600)

    def test_lines(self):
        with self.client.fetch("lines.txt") as stream:
            self.assertEqual(list(stream), [b"one\r", b"two", b"three"])

    def test_listing_lines(self):
        with self.client.fetch("docs/") as stream:
            self.assertEqual(list(stream), [b".\t\t-", b"guide.txt\t\t7"])

    def test_url(self):
        with self.client.fetch("docs/") as stream:
            self.assertEqual(stream.url, f"http://127.0.0.1:{self.port}/docs/")

    def test_not_found(self):
        with self.assertRaises(TransportError) as cm:
            self.client.fetch("nonexistent")
        self.assertEqual(cm.exception.status, 404)
        self.assertEqual(cm.exception.reason, "Not Found")
        self.assertIsInstance(cm.exception, OSError)

    def test_connection_refused(self):
        client = WebFileClient.for_server("http://127.0.0.1:1")
        try:
            with self.assertRaises(TransportError) as cm:
                client.fetch("")
            self.assertIsNone(cm.exception.status)
        finally:
            client.close()


if __name__ == "__main__":
    unittest.main()

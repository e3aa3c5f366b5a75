from __future__ import annotations

import sys
import types
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase

from providers.adapters.also import AlsoAdapter, net_price, parse_feed
from providers.exceptions import ProviderTransportError, TransportUnavailableError
from providers.http import HttpClient
from providers.tests.fakes import FakeSession

CREDS = {"host": "sftp.also.test", "port": 2222, "username": "u", "password": "p"}

FEED = (
    "ProductID;Code;;Brand;EAN;Name;;Price;;cat1\tcat2;cat3\tcat4;;qty\n"
    "501;AB-1;;Asus;471;Router X;;119;;Networking;Routers\tRouters;Wifi 6\tWifi 6;;15\n"
    "502;AB-2;;Asus;;Thing;;0\n"
    "\n"
)


def fake_paramiko(*, connect_error=None, payload=b""):
    class SSHException(Exception):
        pass

    transport = MagicMock()
    if connect_error is not None:
        transport.connect.side_effect = SSHException(connect_error)
    sftp = MagicMock()
    sftp.open.return_value.__enter__.return_value.read.return_value = payload
    module = types.SimpleNamespace(
        SSHException=SSHException,
        Transport=MagicMock(return_value=transport),
        SFTPClient=types.SimpleNamespace(from_transport=MagicMock(return_value=sftp)),
    )
    return module, transport, sftp


class AlsoFeedTests(SimpleTestCase):
    def test_feed_mapping(self):
        products = parse_feed(FEED)
        self.assertEqual([p.external_id for p in products], ["501", "502"])

        router = products[0]
        self.assertEqual(router.sku, "AB-1")
        self.assertEqual(router.name, "Router X")
        self.assertEqual(router.price, Decimal("100.00"))
        self.assertEqual(router.currency, "RON")
        self.assertIsNone(router.stock_qty)
        self.assertTrue(router.in_stock)
        self.assertEqual(router.attributes["brand"], "Asus")
        self.assertEqual(router.attributes["ean"], "471")
        self.assertEqual(router.attributes["main_category"], "Networking")
        self.assertEqual(router.attributes["sub_category"], "Routers")
        self.assertEqual(router.attributes["price_with_vat"], "119.00")

        thing = products[1]
        self.assertIsNone(thing.price)
        self.assertFalse(thing.in_stock)
        self.assertNotIn("ean", thing.attributes)

    def test_unicode_digit_row_is_skipped(self):
        feed = (
            "1;A;;Asus;;Good;;119\n"
            "\u00b2;B;;X;;Bad;;10\n"
            "3;C;;Y;;Fine;;238\n"
        )
        self.assertEqual([p.external_id for p in parse_feed(feed)], ["1", "3"])

    def test_net_price_rounds_half_up(self):
        self.assertEqual(net_price(Decimal("10.00")), Decimal("8.40"))
        self.assertIsNone(net_price(None))


class AlsoTransportTests(SimpleTestCase):
    def adapter(self, credentials=CREDS) -> AlsoAdapter:
        return AlsoAdapter(credentials, http=HttpClient(session=FakeSession()))

    def test_missing_sftp_library_fails_before_connecting(self):
        adapter = self.adapter()
        with patch.dict(sys.modules, {"paramiko": None}), patch(
            "providers.adapters.also.socket.create_connection"
        ) as connect:
            with self.assertRaises(TransportUnavailableError) as ctx:
                adapter.fetch_products()
            result = adapter.test_connection()
        self.assertIn("paramiko", str(ctx.exception))
        connect.assert_not_called()
        self.assertFalse(result.success)
        self.assertIn("TransportUnavailableError", result.message)

    def test_auth_failure_is_a_transport_error(self):
        module, transport, _ = fake_paramiko(connect_error="Authentication failed")
        adapter = self.adapter()
        with patch.dict(sys.modules, {"paramiko": module}), patch(
            "providers.adapters.also.socket.create_connection", return_value=object()
        ) as connect:
            with self.assertRaises(ProviderTransportError) as ctx:
                adapter.fetch_products()
        connect.assert_called_once_with(("sftp.also.test", 2222), timeout=30)
        self.assertIn("sftp.also.test:2222", str(ctx.exception))
        transport.close.assert_called_once()

    def test_download_and_parse(self):
        module, transport, sftp = fake_paramiko(payload=FEED.encode("utf-8"))
        adapter = self.adapter()
        with patch.dict(sys.modules, {"paramiko": module}), patch(
            "providers.adapters.also.socket.create_connection", return_value=object()
        ):
            result = adapter.fetch_products()
        self.assertEqual(len(result.products), 2)
        sftp.open.assert_called_once_with("pricelist-1.csv", "rb")
        transport.connect.assert_called_once_with(username="u", password="p")
        transport.close.assert_called_once()

    def test_missing_credentials(self):
        adapter = self.adapter({"host": "h"})
        result = adapter.test_connection()
        self.assertFalse(result.success)
        self.assertIn("ALSO_FTP_USER", result.message)

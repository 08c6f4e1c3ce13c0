"""
Tests for logging configuration and token redaction.
"""

import logging
import unittest

from arcgis_gateway import logging_setup
from arcgis_gateway.logging_setup import TokenRedactingFilter, _setup_logging, log, mask


def _record(msg, *args, name="urllib3.connectionpool"):
    return logging.LogRecord(name, logging.DEBUG, __file__, 1, msg, args, None)


class TestMask(unittest.TestCase):
    def test_long_value_shortened(self):
        self.assertEqual(mask("abcdefghijkl"), "abcdef…")

    def test_short_value_hidden(self):
        self.assertEqual(mask("abc"), "…")

    def test_empty(self):
        self.assertEqual(mask(None), "")


class TestTokenRedactingFilter(unittest.TestCase):
    def setUp(self):
        self.filter = TokenRedactingFilter()

    def test_connection_log_line(self):
        record = _record('%s://%s:%s "%s %s %s" %s %s', "https", "host", 443, "GET",
                         "/arcgis/rest/services?f=json&token=SECRETTOKENVALUE123", "HTTP/1.1", 200, 512)
        self.assertTrue(self.filter.filter(record))
        message = record.getMessage()
        self.assertNotIn("SECRETTOKENVALUE123", message)
        self.assertIn("token=SECRET…", message)
        self.assertIn("f=json", message)

    def test_token_first_parameter(self):
        record = _record("GET https://host/x?token=SECRETTOKENVALUE123&f=json")
        self.filter.filter(record)
        self.assertEqual(record.getMessage(), "GET https://host/x?token=SECRET…&f=json")

    def test_untouched_without_token(self):
        record = _record("GET %s", "https://host/arcgis/rest/services?f=json")
        self.filter.filter(record)
        self.assertEqual(record.args, ("https://host/arcgis/rest/services?f=json",))

    def test_similar_names_untouched(self):
        record = _record("GET https://host/x?tokenServicesUrl=abc&mytoken=abc")
        self.filter.filter(record)
        self.assertEqual(record.getMessage(), "GET https://host/x?tokenServicesUrl=abc&mytoken=abc")


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        self.transport_log = logging.getLogger("urllib3")
        self.saved = (log.level, list(log.handlers),
                      self.transport_log.level, list(self.transport_log.handlers),
                      self.transport_log.propagate)

    def tearDown(self):
        log.setLevel(self.saved[0])
        log.handlers[:] = self.saved[1]
        self.transport_log.setLevel(self.saved[2])
        self.transport_log.handlers[:] = self.saved[3]
        self.transport_log.propagate = self.saved[4]

    def test_default_level(self):
        _setup_logging()
        self.assertEqual(log.level, logging.INFO)
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(self.transport_log.level, logging.WARNING)
        self.assertEqual(self.transport_log.handlers, [])

    def test_quiet(self):
        _setup_logging(quiet=True)
        self.assertEqual(log.level, logging.WARNING)

    def test_debug_routes_urllib3_through_redacting_handler(self):
        _setup_logging(debug=True, quiet=True)
        self.assertEqual(log.level, logging.DEBUG)
        self.assertEqual(self.transport_log.level, logging.DEBUG)
        self.assertEqual(self.transport_log.handlers, log.handlers)
        self.assertFalse(self.transport_log.propagate)
        handler = log.handlers[0]
        self.assertTrue(any(isinstance(f, TokenRedactingFilter) for f in handler.filters))

    def test_repeated_setup_keeps_one_handler(self):
        _setup_logging()
        _setup_logging(debug=True)
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(len(self.transport_log.handlers), 1)

    def test_plain_formatter_without_colorlog(self):
        saved = logging_setup._COLORLOG_AVAILABLE
        logging_setup._COLORLOG_AVAILABLE = False
        try:
            _setup_logging()
        finally:
            logging_setup._COLORLOG_AVAILABLE = saved
        self.assertIs(type(log.handlers[0].formatter), logging.Formatter)


if __name__ == "__main__":
    unittest.main()

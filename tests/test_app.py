"""
Tests for settings, logging setup and the application wiring.
Run from project root: python -m pytest tests/test_app.py -v
"""
import logging
import sys
import unittest

from fastapi.testclient import TestClient
from loguru import logger

from config import Settings
from logging_config import InterceptHandler, setup_logging
from main import app
from middleware import CaseTransformerMiddleware


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = Settings()
        self.assertTrue(s.case_transform_enabled)
        self.assertEqual(s.case_transform_path_prefix, "/api")
        self.assertEqual(s.request_id_header, "X-Gateway-Request-ID")

    def test_prefix_normalized(self):
        self.assertEqual(Settings(case_transform_prefix="api/").case_transform_path_prefix, "/api")
        self.assertEqual(Settings(case_transform_prefix=" /api/v1/ ").case_transform_path_prefix, "/api/v1")
        self.assertEqual(Settings(case_transform_prefix="").case_transform_path_prefix, "")
        self.assertEqual(Settings(case_transform_prefix="/").case_transform_path_prefix, "")

    def test_cors_origin_list(self):
        s = Settings(cors_origins="http://localhost:3000, http://localhost:3002,")
        self.assertEqual(s.cors_origin_list, ["http://localhost:3000", "http://localhost:3002"])


class TestLoggingSetup(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._root_handlers = root.handlers[:]
        self._root_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers = self._root_handlers
        root.setLevel(self._root_level)
        logger.remove()
        logger.add(sys.stderr)

    def test_stdlib_records_routed_to_loguru(self):
        setup_logging("debug")
        self.assertTrue(any(isinstance(h, InterceptHandler) for h in logging.getLogger().handlers))

        messages = []
        handler_id = logger.add(lambda m: messages.append(m.record), level="WARNING")
        logging.getLogger("uvicorn.error").warning("port %d in use", 5001)
        logger.remove(handler_id)

        ours = [r for r in messages if r["message"] == "port 5001 in use"]
        self.assertEqual(len(ours), 1)
        self.assertEqual(ours[0]["extra"]["request_id"], "-")


class TestApp(unittest.TestCase):
    def test_health(self):
        client = TestClient(app)
        resp = client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_case_transformer_installed(self):
        self.assertTrue(any(m.cls is CaseTransformerMiddleware for m in app.user_middleware))


if __name__ == "__main__":
    unittest.main()

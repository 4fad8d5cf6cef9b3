"""Tests for the shared retrying fetcher, config and log redaction."""

from __future__ import annotations

import logging
import os
import unittest
from unittest.mock import patch

import httpx

# ── fetch_with_retry ────────────────────────────────────────────


class TestFetchWithRetry(unittest.TestCase):

    def _client(self, handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_retries_transport_error_with_linear_backoff(self):
        from macrostack._http import fetch_with_retry

        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            if len(attempts) < 3:
                raise httpx.ConnectError("boom", request=request)
            return httpx.Response(200, json={"ok": True})

        with patch("macrostack._http.time.sleep") as sleep, self._client(handler) as client:
            r = fetch_with_retry(client, "https://example.test/x")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(len(attempts), 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [2.0, 4.0])

    def test_timeout_is_retried(self):
        from macrostack._http import fetch_with_retry

        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            if len(calls) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200)

        with patch("macrostack._http.time.sleep"), self._client(handler) as client:
            r = fetch_with_retry(client, "https://example.test/x")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(len(calls), 2)

    def test_http_error_status_not_retried(self):
        from macrostack._http import fetch_with_retry

        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503)

        with patch("macrostack._http.time.sleep") as sleep, self._client(handler) as client:
            r = fetch_with_retry(client, "https://example.test/x")
        self.assertEqual(r.status_code, 503)
        self.assertFalse(r.is_success)
        self.assertEqual(len(calls), 1)
        sleep.assert_not_called()

    def test_exhausted_retries_raise_last_error(self):
        from macrostack._http import fetch_with_retry

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        with patch("macrostack._http.time.sleep") as sleep, self._client(handler) as client:
            with self.assertRaises(httpx.ConnectError):
                fetch_with_retry(client, "https://example.test/x", max_attempts=3)
        # No sleep after the final attempt.
        self.assertEqual(sleep.call_count, 2)

    def test_default_user_agent_and_caller_override(self):
        from macrostack._http import DEFAULT_HEADERS, fetch_with_retry

        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with self._client(handler) as client:
            fetch_with_retry(client, "https://example.test/a")
            fetch_with_retry(
                client, "https://example.test/b",
                headers={"User-Agent": "custom/1.0", "X-Extra": "1"},
            )
        self.assertEqual(seen[0].headers["user-agent"], DEFAULT_HEADERS["User-Agent"])
        self.assertEqual(seen[1].headers["user-agent"], "custom/1.0")
        self.assertEqual(seen[1].headers["x-extra"], "1")

    def test_default_timeout_is_15s_and_overridable(self):
        from macrostack._http import fetch_with_retry

        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with self._client(handler) as client:
            fetch_with_retry(client, "https://example.test/a")
            fetch_with_retry(client, "https://example.test/b", timeout=3.0)
        self.assertEqual(seen[0].extensions["timeout"]["read"], 15.0)
        self.assertEqual(seen[1].extensions["timeout"]["read"], 3.0)


class TestPayloadHelpers(unittest.TestCase):

    def test_safe_json_rejects_error_status(self):
        from macrostack._http import safe_json
        from macrostack.error_taxonomy import PayloadError

        r = httpx.Response(403, json={"error": "nope"},
                           request=httpx.Request("GET", "https://x.test/?api_key=secret"))
        with self.assertRaises(PayloadError) as cm:
            safe_json(r, "fred")
        self.assertIn("403", str(cm.exception))
        self.assertNotIn("secret", str(cm.exception))
        self.assertEqual(cm.exception.source, "fred")

    def test_safe_json_rejects_html(self):
        from macrostack._http import safe_json
        from macrostack.error_taxonomy import PayloadError

        r = httpx.Response(200, text="<html>maintenance</html>",
                           request=httpx.Request("GET", "https://x.test/"))
        with self.assertRaises(PayloadError):
            safe_json(r, "fmp")

    def test_sanitize_url(self):
        from macrostack._http import _sanitize_url

        url = "https://api.test/obs?series_id=FEDFUNDS&api_key=abc123&apikey=zzz"
        clean = _sanitize_url(url)
        self.assertNotIn("abc123", clean)
        self.assertNotIn("zzz", clean)
        self.assertIn("series_id=FEDFUNDS", clean)


# ── Config ──────────────────────────────────────────────────────


class TestConfig(unittest.TestCase):

    def test_env_var_read_at_init_not_import(self):
        from macrostack.config import Config

        with patch.dict(os.environ, {"FRED_API_KEY": "k1"}):
            self.assertEqual(Config().fred_api_key, "k1")
        with patch.dict(os.environ, {"FRED_API_KEY": "k2"}):
            self.assertEqual(Config().fred_api_key, "k2")

    def test_demo_defaults_without_credentials(self):
        from macrostack.config import Config

        env = {k: v for k, v in os.environ.items() if k not in ("FRED_API_KEY", "FMP_API_KEY")}
        with patch.dict(os.environ, env, clear=True):
            cfg = Config()
        self.assertEqual(cfg.fred_api_key, "DEMO")
        self.assertEqual(cfg.fmp_api_key, "demo")
        self.assertEqual(cfg.using_demo_keys, ["FRED_API_KEY", "FMP_API_KEY"])

    def test_credentials_hidden_from_repr(self):
        from macrostack.config import Config

        with patch.dict(os.environ, {"FRED_API_KEY": "supersecret", "FMP_API_KEY": "alsosecret"}):
            text = repr(Config())
        self.assertNotIn("supersecret", text)
        self.assertNotIn("alsosecret", text)

    def test_bad_numeric_env_falls_back(self):
        from macrostack.config import Config

        with patch.dict(os.environ, {"HTTP_TIMEOUT_S": "abc", "CALENDAR_MAX_EVENTS": "x"}):
            cfg = Config()
        self.assertEqual(cfg.http_timeout_s, 15.0)
        self.assertEqual(cfg.calendar_max_events, 20)

    def test_calendar_countries_parsed(self):
        from macrostack.config import Config

        with patch.dict(os.environ, {"CALENDAR_COUNTRIES": "us, gb ,"}):
            self.assertEqual(Config().calendar_countries, ("US", "GB"))


# ── Log redaction ───────────────────────────────────────────────


class TestLogRedaction(unittest.TestCase):

    def test_query_keys_redacted(self):
        from macrostack.log_redaction import redact_secrets

        msg = redact_secrets("GET https://api.test/x?api_key=abc&file_type=json&apikey=def")
        self.assertNotIn("abc", msg)
        self.assertNotIn("def", msg)
        self.assertIn("api_key=***REDACTED***", msg)
        self.assertIn("file_type=json", msg)

    def test_bare_32_char_key_redacted(self):
        from macrostack.log_redaction import redact_secrets

        key = "a" * 16 + "0123456789abcdef"
        self.assertNotIn(key, redact_secrets(f"using key {key} now"))

    def test_filter_redacts_args(self):
        from macrostack.log_redaction import LogRedactionFilter

        record = logging.LogRecord(
            "t", logging.INFO, __file__, 1, "fetch %s", ("https://x.test/?token=tok",), None,
        )
        LogRedactionFilter().filter(record)
        self.assertNotIn("tok", record.getMessage().replace("token", ""))


if __name__ == "__main__":
    unittest.main()

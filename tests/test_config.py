"""
tests/test_config.py — Config Loader & Monitoring Bootstrap Tests
==================================================================
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from corgiquest.config import CorgiQuestConfig, load_config
from corgiquest.monitoring import init_sentry


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == CorgiQuestConfig()

    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "daily_reset_hour: 4\n"
            "daily_reset_minute: 15\n"
            "payment_mode: live\n"
            "recommendation_model: gpt-4o\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert (cfg.daily_reset_hour, cfg.daily_reset_minute) == (4, 15)
        assert cfg.payment_mode == "live"
        assert cfg.recommendation_model == "gpt-4o"
        assert cfg.app_name == "Corgi Quest"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CorgiQuestConfig()

    @pytest.mark.parametrize(
        "body,match",
        [
            ("daily_reset_hour: 24\n", "daily_reset_hour"),
            ("daily_reset_minute: 60\n", "daily_reset_minute"),
            ("payment_mode: free\n", "payment_mode"),
        ],
    )
    def test_rejects_out_of_range(self, tmp_path, body, match):
        path = tmp_path / "config.yaml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ValueError, match=match):
            load_config(path)

    def test_frozen(self):
        cfg = CorgiQuestConfig()
        with pytest.raises(AttributeError):
            cfg.payment_mode = "live"


class TestInitSentry:
    def test_disabled_without_dsn(self, monkeypatch):
        monkeypatch.delenv("SENTRY_DSN", raising=False)
        with patch("corgiquest.monitoring.sentry_sdk.init") as init:
            assert init_sentry() is False
        init.assert_not_called()

    def test_enabled_with_dsn(self, monkeypatch):
        monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.example/1")
        monkeypatch.setenv("SENTRY_ENVIRONMENT", "staging")
        with patch("corgiquest.monitoring.sentry_sdk.init") as init:
            assert init_sentry() is True
        kwargs = init.call_args.kwargs
        assert kwargs["environment"] == "staging"
        assert kwargs["traces_sample_rate"] == 0.1

"""Tests for settings loading."""

from pathlib import Path

from teebox.config import Settings, utc_now_naive


class TestSettings:
    def test_prefixed_env_vars(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TEEBOX_LEGACY_PUSH_PAYOUT", "true")
        monkeypatch.setenv("TEEBOX_SETTLE_INTERVAL_MINUTES", "10")
        monkeypatch.setenv("TEEBOX_DB_PATH", str(tmp_path / "t.db"))

        s = Settings()

        assert s.legacy_push_payout is True
        assert s.settle_interval_minutes == 10
        assert s.database_url == f"sqlite+aiosqlite:///{tmp_path / 't.db'}"

    def test_standard_datagolf_key_variable(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TEEBOX_DATAGOLF_API_KEY", raising=False)
        monkeypatch.setenv("DATAGOLF_API_KEY", "abc123")
        assert Settings().datagolf_api_key == "abc123"

    def test_datagolf_key_from_dotenv(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TEEBOX_DATAGOLF_API_KEY", raising=False)
        monkeypatch.delenv("DATAGOLF_API_KEY", raising=False)
        (tmp_path / ".env").write_text("DATAGOLF_API_KEY=from-file\n")
        assert Settings().datagolf_api_key == "from-file"

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for var in ("TEEBOX_LEGACY_PUSH_PAYOUT", "TEEBOX_DB_PATH", "TEEBOX_COMPLETED_LOOKBACK_DAYS"):
            monkeypatch.delenv(var, raising=False)
        s = Settings()
        assert s.legacy_push_payout is False
        assert s.completed_lookback_days == 7
        assert s.db_path == Path("./data/teebox.db")


def test_utc_now_naive_has_no_tzinfo():
    assert utc_now_naive().tzinfo is None

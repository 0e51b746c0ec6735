from __future__ import annotations

from datetime import UTC
from zoneinfo import ZoneInfo

import pytest

from pricewatch.config import ConfigurationError, get_ingest_config, parse_timezone
from pricewatch.domain.model import DEFAULT_SCRAPER_TRUST_SCORE


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PRICEWATCH_TIMEZONE", raising=False)
    monkeypatch.delenv("PRICEWATCH_SCRAPER_TRUST_SCORE", raising=False)

    config = get_ingest_config()

    assert config.timezone is UTC
    assert config.scraper_trust_score == DEFAULT_SCRAPER_TRUST_SCORE


def test_reads_timezone_and_trust_score(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRICEWATCH_TIMEZONE", "Africa/Nairobi")
    monkeypatch.setenv("PRICEWATCH_SCRAPER_TRUST_SCORE", "80")

    config = get_ingest_config()

    assert config.timezone == ZoneInfo("Africa/Nairobi")
    assert config.scraper_trust_score == 80


def test_trust_score_out_of_range(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PRICEWATCH_TIMEZONE", raising=False)
    monkeypatch.setenv("PRICEWATCH_SCRAPER_TRUST_SCORE", "101")

    with pytest.raises(ConfigurationError):
        get_ingest_config()


def test_parse_timezone_accepts_utc_in_any_case() -> None:
    assert parse_timezone("utc") is UTC


def test_parse_timezone_rejects_unknown_names() -> None:
    with pytest.raises(ConfigurationError) as exc:
        parse_timezone("Mars/Olympus_Mons")

    assert "Unknown timezone: Mars/Olympus_Mons" in str(exc.value)

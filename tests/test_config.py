"""Tests for settings loading."""

import logging
from pathlib import Path

import pytest

from sciletter.config import CONFIG_FILENAME, Settings, save_config


def _write_config(base_dir: Path, text: str, folder: str = ".metadata") -> None:
    target = base_dir / folder
    target.mkdir(parents=True, exist_ok=True)
    (target / CONFIG_FILENAME).write_text(text, encoding="utf-8")


def test_defaults_without_config(tmp_path):
    settings = Settings.load(tmp_path)

    assert settings.contact_email is None
    assert settings.arxiv_base_url == "https://export.arxiv.org/api/query"
    assert settings.max_search_results == 50
    assert settings.papers_dir == tmp_path / "data" / "papers"
    assert settings.newsletters_dir == tmp_path / "data" / "newsletters"


def test_example_files_are_copied(tmp_path):
    _write_config(tmp_path, "contact_email: me@example.org\n", folder=".metadata.example")

    settings = Settings.load(tmp_path)

    assert (tmp_path / ".metadata" / CONFIG_FILENAME).exists()
    assert settings.contact_email == "me@example.org"


def test_existing_config_is_not_overwritten(tmp_path):
    _write_config(tmp_path, "contact_email: example@example.org\n", folder=".metadata.example")
    _write_config(tmp_path, "contact_email: mine@example.org\n")

    assert Settings.load(tmp_path).contact_email == "mine@example.org"


def test_values_are_converted(tmp_path):
    _write_config(
        tmp_path,
        'contact_email: ""\n'
        "search_timeout: 5\n"
        "max_search_results: '25'\n"
        "papers_dir: /srv/papers\n"
        "newsletters_dir: out\n"
        "unknown_key: 1\n",
    )

    settings = Settings.load(tmp_path)

    assert settings.contact_email is None
    assert settings.search_timeout == 5.0
    assert settings.max_search_results == 25
    assert settings.papers_dir == Path("/srv/papers")
    assert settings.newsletters_dir == tmp_path / "out"


def test_invalid_values_are_logged_and_ignored(tmp_path, caplog):
    _write_config(tmp_path, "search_timeout: soon\n")

    with caplog.at_level(logging.WARNING, logger="sciletter.config"):
        settings = Settings.load(tmp_path)

    assert settings.search_timeout == 30.0
    assert "search_timeout" in caplog.text


def test_non_mapping_config_is_ignored(tmp_path):
    _write_config(tmp_path, "- just\n- a list\n")
    assert Settings.load(tmp_path).max_search_results == 50


def test_load_is_cached_until_reload(tmp_path):
    first = Settings.load(tmp_path)
    assert Settings.load(tmp_path) is first

    _write_config(tmp_path, "max_search_results: 7\n")
    assert Settings.load(tmp_path).max_search_results == 50
    assert Settings.reload(tmp_path).max_search_results == 7


def test_update(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(search_timeout=3.0)
    assert Settings.load().search_timeout == 3.0
    with pytest.raises(AttributeError):
        settings.update(colour="blue")


def test_save_config_round_trip(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(contact_email="me@example.org", related_papers_count=9)
    save_config(settings.metadata_dir / CONFIG_FILENAME, settings)

    reloaded = Settings.reload(tmp_path)

    assert reloaded.contact_email == "me@example.org"
    assert reloaded.related_papers_count == 9
    assert reloaded.papers_dir == settings.papers_dir

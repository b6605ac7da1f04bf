"""
Unit tests for icon loading.
"""
from unittest.mock import MagicMock

import requests

from db_manager.core.config import DatabaseConfig
from db_manager.core.icons import IconLoader


def make_session(content=b"png", error=None):
    session = MagicMock()
    response = MagicMock()
    response.content = content
    if error is not None:
        response.raise_for_status.side_effect = error
    session.get.return_value = response
    return session


class TestIconLoader:
    """Tests for IconLoader."""

    def test_fetch(self):
        session = make_session()
        assert IconLoader(session, timeout=3).fetch("https://example.com/icon.png") == b"png"
        session.get.assert_called_once_with("https://example.com/icon.png", timeout=3)

    def test_empty_url(self):
        session = make_session()
        assert IconLoader(session).fetch("") is None
        session.get.assert_not_called()

    def test_http_error_gives_no_icon(self):
        session = make_session(error=requests.HTTPError("404"))
        assert IconLoader(session).fetch("https://example.com/missing.png") is None

    def test_connection_error_gives_no_icon(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("offline")
        assert IconLoader(session).fetch("https://example.com/icon.png") is None

    def test_load_all_keyed_by_image(self):
        databases = [
            DatabaseConfig(name="PostgreSQL", image="postgres", icon_url="https://example.com/pg.png"),
            DatabaseConfig(name="Postgres 15", image="postgres", icon_url="https://example.com/pg.png"),
            DatabaseConfig(name="Redis", image="redis"),
        ]
        session = make_session()

        icons = IconLoader(session).load_all(databases)

        assert icons == {"postgres": b"png"}
        assert session.get.call_count == 1

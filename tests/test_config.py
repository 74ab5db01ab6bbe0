import dataclasses

import pytest

from servedir.config import Config, HeaderMap, build_headers, normalize_root


def test_header_map_keeps_first_seen_order_and_last_value():
    headers = HeaderMap()
    assert headers.update("x-a", "1") is False
    assert headers.update("x-b", "2") is False
    assert headers.update("x-a", "3") is True

    assert headers.freeze() == (("x-a", "3"), ("x-b", "2"))
    assert len(headers) == 2
    assert "x-a" in headers
    assert list(headers) == ["x-a", "x-b"]
    assert list(headers.items()) == [("x-a", "3"), ("x-b", "2")]


def test_header_map_names_are_case_sensitive():
    headers = HeaderMap([("X-A", "1"), ("x-a", "2")])
    assert headers.freeze() == (("X-A", "1"), ("x-a", "2"))


def test_header_map_setdefault_does_not_overwrite():
    headers = HeaderMap([("x-a", "1")])
    assert headers.setdefault("x-a", "2") == "1"
    assert headers.setdefault("x-b", "3") == "3"
    assert headers.freeze() == (("x-a", "1"), ("x-b", "3"))


def test_build_headers_appends_default_cors_header():
    assert build_headers([("x-a", "1")]) == (("x-a", "1"), ("access-control-allow-origin", "*"))


def test_build_headers_keeps_user_cors_value():
    headers = build_headers([("access-control-allow-origin", "https://example.com"), ("x-a", "1")])
    assert headers == (("access-control-allow-origin", "https://example.com"), ("x-a", "1"))


def test_build_headers_without_defaults():
    assert build_headers([], no_default_headers=True) == ()
    assert build_headers([("x-a", "1"), ("x-a", "2")], no_default_headers=True) == (("x-a", "2"),)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("public", "public/"),
        ("public/", "public/"),
        ("C:\\www\\", "C:\\www\\"),
        ("/srv/www", "/srv/www/"),
    ],
)
def test_normalize_root(path, expected):
    assert normalize_root(path) == expected


def test_config_is_immutable():
    config = Config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.root = "/tmp/"
    assert config.headers == (("access-control-allow-origin", "*"),)
    assert (config.host, config.port) == ("127.0.0.1", 8080)

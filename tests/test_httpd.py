import argparse

import pytest

import httpd


def test_defaults(tmp_path):
    config = httpd.parse_config([str(tmp_path)])

    assert config.root == str(tmp_path) + "/"
    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert config.headers == (("access-control-allow-origin", "*"),)
    assert config.not_found_file is None
    assert config.debug is False


def test_original_style_flags(tmp_path):
    config = httpd.parse_config([
        str(tmp_path) + "/",
        "-h=0.0.0.0",
        "-p=9000",
        "-H=x-custom:one",
        "--header=x-other: two",
        "-H=x-custom:three",
        "--404=missing.html",
    ])

    assert config.root == str(tmp_path) + "/"
    assert (config.host, config.port) == ("0.0.0.0", 9000)
    assert config.headers == (
        ("x-custom", "three"),
        ("x-other", "two"),
        ("access-control-allow-origin", "*"),
    )
    assert config.not_found_file == "missing.html"


def test_header_value_keeps_inner_colons(tmp_path):
    config = httpd.parse_config([str(tmp_path), "--no-default-headers", "-H=link:<https://a.b/>; rel=x"])
    assert config.headers == (("link", "<https://a.b/>; rel=x"),)


def test_no_default_headers(tmp_path):
    config = httpd.parse_config([str(tmp_path), "--no-default-headers"])
    assert config.headers == ()


def test_user_cors_header_is_kept(tmp_path):
    config = httpd.parse_config([str(tmp_path), "-H=access-control-allow-origin:https://a.b"])
    assert config.headers == (("access-control-allow-origin", "https://a.b"),)


@pytest.mark.parametrize("value", ["no-colon", ":value"])
def test_parse_header_rejects_bad_input(value):
    with pytest.raises(argparse.ArgumentTypeError):
        httpd.parse_header(value)


@pytest.mark.parametrize(
    "argv",
    [
        ["{root}", "--host=300.1.1.1"],
        ["{root}", "--port=http"],
        ["{root}", "-H=bad"],
        ["{root}/missing"],
        [],
    ],
)
def test_usage_errors_exit(tmp_path, argv):
    with pytest.raises(SystemExit) as exc:
        httpd.parse_config([arg.format(root=tmp_path) for arg in argv])
    assert exc.value.code == 2


def test_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as exc:
        httpd.parse_config(["--help"])
    assert exc.value.code == 0
    assert "--no-default-headers" in capsys.readouterr().out

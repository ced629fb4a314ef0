import re

import pytest
import responses

from grind import jdk
from grind.jdk import JdkError

RELEASES_URL = "https://api.adoptium.net/v3/info/available_releases"


def _assets_url(version):
    return re.compile(
        rf"https://api\.adoptium\.net/v3/assets/latest/{version}/hotspot\?.*"
    )


def test_format_bytes_below_kilobyte():
    assert jdk.format_bytes(0) == "0 B"
    assert jdk.format_bytes(512) == "512 B"


def test_format_bytes_units():
    assert jdk.format_bytes(1024).endswith(" KB")
    assert jdk.format_bytes(1024 * 1024) == "1.00 MB"
    assert jdk.format_bytes(1024**3).endswith(" GB")
    assert jdk.format_bytes(1024**4).endswith(" TB")


def test_map_os():
    assert jdk.map_os("macos") == "mac"
    assert jdk.map_os("linux") == "linux"


def test_map_arch():
    assert jdk.map_arch("x86_64") == "x64"
    assert jdk.map_arch("x86") == "x32"
    assert jdk.map_arch("aarch64") == "aarch64"


def test_parse_java_version():
    output = "openjdk 21.0.2 2024-01-16\nOpenJDK Runtime Environment"
    assert jdk._parse_java_version(output) == "21.0.2 2024-01-16"


def test_parse_java_version_missing():
    with pytest.raises(JdkError):
        jdk._parse_java_version("bash: java: command not found")


def test_list_releases():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, RELEASES_URL, json={"available_releases": [8, 11, 17, 21]})
        assert jdk.list_releases() == [8, 11, 17, 21]


def test_list_releases_bad_json():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, RELEASES_URL, body="not json")
        with pytest.raises(JdkError):
            jdk.list_releases()


def test_get_jdk_detail_returns_link():
    link = "https://example.com/jdk-21.tar.gz"
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            _assets_url(21),
            json=[{"binary": {"package": {"link": link}}}],
        )
        assert jdk.get_jdk_detail("21") == link


def test_get_jdk_detail_empty_list():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, _assets_url(99), json=[])
        with pytest.raises(JdkError, match="valid vesion"):
            jdk.get_jdk_detail("99")


def test_use_strips_leading_v_and_reports_metadata_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, _assets_url(21), json=[])
        with pytest.raises(JdkError) as info:
            jdk.use("vv21")
    assert "Unable to fetch JDK version metadata" in str(info.value)
    assert "v21 " in str(info.value)


def test_set_bashrc_path_appends_once(tmp_path):
    bashrc = tmp_path / ".bashrc"
    original = "alias ll='ls -l'\n"
    bashrc.write_text(original)

    assert jdk.set_bashrc_path(bashrc) is True
    first = bashrc.read_text()
    assert first.startswith(original)
    assert first.count(jdk.PATH_MARKER) == 2
    assert (tmp_path / ".bashrc.bak").read_text() == original

    assert jdk.set_bashrc_path(bashrc) is False
    assert bashrc.read_text() == first


def test_strip_bashrc_path_round_trip(tmp_path):
    bashrc = tmp_path / ".bashrc"
    original = "export EDITOR=vi\n"
    bashrc.write_text(original)
    jdk.set_bashrc_path(bashrc)

    stripped = jdk.strip_bashrc_path(bashrc)
    assert jdk.PATH_MARKER not in stripped
    assert stripped.startswith(original)
    assert bashrc.read_text() == stripped
    assert jdk.PATH_MARKER in (tmp_path / ".bashrc.bak").read_text()


def test_set_bashrc_path_missing_file(tmp_path):
    with pytest.raises(JdkError):
        jdk.set_bashrc_path(tmp_path / "absent")


def test_remove_strips_home_bashrc(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    bashrc = tmp_path / ".bashrc"
    bashrc.write_text("export A=1\n")
    jdk.set_bashrc_path(bashrc)

    jdk.remove()
    assert jdk.PATH_MARKER not in bashrc.read_text()
    assert bashrc.read_text().startswith("export A=1\n")


def test_remove_without_bashrc(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    with pytest.raises(JdkError):
        jdk.remove()


def test_current_without_bashrc(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    with pytest.raises(JdkError):
        jdk.current()
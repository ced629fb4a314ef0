import io
import os
import tarfile
import zipfile

import pytest

from grind.util import (
    compare_maven_versions,
    create_symlink,
    dir_exists,
    expand_tilde,
    extract_tar_gz,
    ls_with_ext,
    shell,
    shell_result,
    shell_stream,
    unzip_file,
)

LESS, EQUAL, GREATER = -1, 0, 1


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("9.4.6.v20170531", "9.4.6.v20170530", GREATER),
        ("9.4.6.v20170531", "9.4.6", GREATER),
        ("9.4.6.v20170531", "9.4.6.v20170531", EQUAL),
        ("1.0-RC1", "1.0-RC2", LESS),
        ("1.0-RC1", "1.0", LESS),
        ("1.0.0", "1.0", EQUAL),
        ("1.0-SNAPSHOT", "1.0", LESS),
        ("2.0", "1.9.9", GREATER),
        ("3.5.3", "4.0.0-M3", LESS),
    ],
)
def test_mixed_versions(a, b, expected):
    assert compare_maven_versions(a, b) == expected


@pytest.mark.parametrize(
    "a, b", [("1.0-RC1", "1.0"), ("3.5.3", "4.0.0-M3"), ("1.2", "1.10")]
)
def test_comparison_is_antisymmetric(a, b):
    assert compare_maven_versions(a, b) == -compare_maven_versions(b, a)


def test_expand_tilde(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert expand_tilde("~/.grind/jdks") == tmp_path / ".grind" / "jdks"
    assert expand_tilde("plain/path") == type(tmp_path)("plain/path")


def test_expand_tilde_without_home(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    assert expand_tilde("~/x") is None


def test_dir_exists(tmp_path):
    (tmp_path / "f.txt").write_text("x")
    assert dir_exists(str(tmp_path)) is True
    assert dir_exists(str(tmp_path / "f.txt")) is False
    assert dir_exists(str(tmp_path / "missing")) is False


def test_shell_stdout():
    assert shell("echo hello") == "hello"


def test_shell_stderr_is_reported():
    out = shell("echo oops 1>&2")
    assert out.startswith("⚠️ Error:")
    assert out.endswith("oops")


def test_shell_result():
    assert shell_result("echo hi").strip() == "hi"
    with pytest.raises(RuntimeError, match="bad"):
        shell_result("echo bad 1>&2")


def test_shell_stream(capsys):
    code = shell_stream("echo streamed; exit 3")
    captured = capsys.readouterr()
    assert code == 3
    assert "streamed" in captured.out.splitlines()


def test_ls_with_ext(tmp_path):
    (tmp_path / "a.jar").write_text("")
    (tmp_path / "b.txt").write_text("")
    (tmp_path / "sub.jar").mkdir()
    result = ls_with_ext(str(tmp_path), "jar")
    assert result == [os.path.join(str(tmp_path), "a.jar")]


def test_ls_with_ext_missing_dir(tmp_path):
    with pytest.raises(OSError):
        ls_with_ext(str(tmp_path / "nope"), "jar")


def test_unzip_file_round_trip(tmp_path):
    archive = tmp_path / "a.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("pkg/", "")
        zf.writestr("pkg/inner/file.txt", "content")
    dest = tmp_path / "out"
    unzip_file(archive, dest)
    assert (dest / "pkg" / "inner" / "file.txt").read_text() == "content"


def test_create_symlink_replaces_existing(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    link = tmp_path / "current"
    assert create_symlink(str(first), str(link)) is True
    assert create_symlink(str(second), str(link)) is True
    assert os.readlink(link) == str(second)


def _write_tar(path, members):
    with tarfile.open(path, "w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))


def test_extract_tar_gz_renames(tmp_path):
    archive = tmp_path / "jdk.tar.gz"
    _write_tar(archive, {"jdk-21/bin/java": b"binary"})
    target = tmp_path / "jdks"
    renamed = target / "v21"
    extract_tar_gz(archive, target, renamed)
    assert (renamed / "bin" / "java").read_bytes() == b"binary"
    assert not (target / "jdk-21").exists()


def test_extract_tar_gz_empty_raises(tmp_path):
    archive = tmp_path / "empty.tar.gz"
    _write_tar(archive, {})
    with pytest.raises(FileNotFoundError):
        extract_tar_gz(archive, tmp_path / "t", tmp_path / "r")
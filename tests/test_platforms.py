import pytest

from fiji_packager.platforms import (
    current_platform,
    is_launcher,
    launcher_platform,
    relocate_launcher,
)


@pytest.mark.parametrize(
    "system, machine, expected",
    [
        ("Linux", "x86_64", "linux64"),
        ("Linux", "i686", "linux32"),
        ("Darwin", "arm64", "macosx"),
        ("Windows", "AMD64", "win64"),
        ("Windows", "x86", "win32"),
        ("FreeBSD", "amd64", "freebsd"),
    ],
)
def test_current_platform(monkeypatch, system, machine, expected):
    monkeypatch.setattr("platform.system", lambda: system)
    monkeypatch.setattr("platform.machine", lambda: machine)

    assert current_platform() == expected


@pytest.mark.parametrize(
    "name",
    ["ImageJ", "ImageJ.exe", "fiji", "ImageJ-win64.exe", "Fiji.app/ImageJ-linux64", "Contents/MacOS/ImageJ-macosx"],
)
def test_launchers(name):
    assert is_launcher(name)


@pytest.mark.parametrize("name", ["db.xml.gz", "jars/ij.jar", "ImageJ.cfg", "plugins/ImageJ-tool.jar"])
def test_not_launchers(name):
    assert not is_launcher(name)


def test_launcher_platform():
    assert launcher_platform("ImageJ-win32.exe") == "win32"
    assert launcher_platform("fiji-linux64") == "linux64"
    assert launcher_platform("ImageJ") is None
    assert launcher_platform("ImageJ-solaris") is None


def test_macos_launchers_move_into_the_bundle():
    assert relocate_launcher("ImageJ-macosx") == "Contents/MacOS/ImageJ-macosx"
    assert relocate_launcher("ImageJ-tiger") == "Contents/MacOS/ImageJ-tiger"
    assert relocate_launcher("ImageJ-linux64") == "ImageJ-linux64"

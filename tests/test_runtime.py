import os
from pathlib import Path

import pytest

from conftest import write_file
from fiji_packager.errors import RuntimeNotFoundError
from fiji_packager.runtime.discover import (
    discover_runtime_files,
    find_runtime_directories,
    list_runtime_files,
    newest_runtime,
)


def _make_runtime(root: Path, platform: str, version: str, mtime: float, files=("bin/java",)) -> Path:
    jre = root / "java" / platform / version / "jre"
    for relative in files:
        write_file(jre, relative)
    os.utime(jre, (mtime, mtime))
    os.utime(jre.parent, (mtime, mtime))
    return jre


def test_newest_runtime_picks_latest_version(bundle):
    _make_runtime(bundle, "linux64", "jdk1.6.0_24", mtime=1_000_000)
    _make_runtime(bundle, "linux64", "jdk1.8.0_172", mtime=3_000_000)
    _make_runtime(bundle, "linux64", "jdk1.7.0_80", mtime=2_000_000)

    assert newest_runtime(bundle, "java/linux64") == "java/linux64/jdk1.8.0_172/jre"


def test_version_directory_time_decides_not_jre_time(bundle):
    old = _make_runtime(bundle, "linux64", "jdk-old", mtime=1_000_000)
    new = _make_runtime(bundle, "linux64", "jdk-new", mtime=9_000_000)
    os.utime(old, (9_000_000, 9_000_000))
    os.utime(new, (1_000_000, 1_000_000))

    assert newest_runtime(bundle, "java/linux64") == "java/linux64/jdk-new/jre"


def test_candidate_without_jre_is_never_selected(bundle):
    _make_runtime(bundle, "win64", "jdk1.6", mtime=1_000_000)
    newer = bundle / "java" / "win64" / "jdk9"
    write_file(newer, "lib/modules")
    os.utime(newer, (9_000_000, 9_000_000))

    assert newest_runtime(bundle, "java/win64") == "java/win64/jdk1.6/jre"


def test_equal_timestamps_prefer_first_candidate(bundle):
    _make_runtime(bundle, "linux64", "b", mtime=5_000_000)
    _make_runtime(bundle, "linux64", "a", mtime=5_000_000)

    assert newest_runtime(bundle, "java/linux64") == "java/linux64/a/jre"


def test_newest_runtime_missing_directory(bundle):
    assert newest_runtime(bundle, "java/linux64") is None


def test_all_platforms_when_none_requested(bundle):
    _make_runtime(bundle, "linux64", "jdk8", mtime=1_000_000)
    _make_runtime(bundle, "win32", "jdk8", mtime=1_000_000)
    (bundle / "java" / "empty").mkdir()
    (bundle / "java" / ".cache").mkdir()

    assert find_runtime_directories(bundle) == [
        "java/linux64/jdk8/jre",
        "java/win32/jdk8/jre",
    ]


def test_no_java_directory_is_fatal(bundle):
    with pytest.raises(RuntimeNotFoundError):
        find_runtime_directories(bundle)


def test_platform_alias(bundle):
    _make_runtime(bundle, "linux", "jdk1.6", mtime=1_000_000)
    _make_runtime(bundle, "linux-amd64", "jdk1.6", mtime=1_000_000)

    assert find_runtime_directories(bundle, ["linux32", "linux64"]) == [
        "java/linux/jdk1.6/jre",
        "java/linux-amd64/jdk1.6/jre",
    ]


def test_direct_directory_wins_over_alias(bundle):
    _make_runtime(bundle, "linux32", "jdk8", mtime=1_000_000)
    _make_runtime(bundle, "linux", "jdk6", mtime=9_000_000)

    assert find_runtime_directories(bundle, ["linux32"]) == ["java/linux32/jdk8/jre"]


def test_embedded_macos_runtime(bundle):
    write_file(bundle, "java/macosx-java3d/Home/lib/rt.jar")

    assert find_runtime_directories(bundle, ["tiger"]) == ["java/macosx-java3d/Home"]


def test_missing_runtime_for_platform_is_fatal(bundle):
    _make_runtime(bundle, "linux64", "jdk8", mtime=1_000_000)

    with pytest.raises(RuntimeNotFoundError, match="win64"):
        find_runtime_directories(bundle, ["linux64", "win64"])

    with pytest.raises(RuntimeNotFoundError, match="macosx"):
        find_runtime_directories(bundle, ["macosx"])


def test_list_runtime_files_skips_hidden(bundle):
    jre = _make_runtime(
        bundle,
        "linux64",
        "jdk8",
        mtime=1_000_000,
        files=("bin/java", "lib/rt.jar", "lib/.DS_Store", ".hidden/secret"),
    )

    assert list_runtime_files(bundle, "java/linux64/jdk8/jre") == [
        "java/linux64/jdk8/jre/bin/java",
        "java/linux64/jdk8/jre/lib/rt.jar",
    ]
    assert jre.is_dir()


def test_discover_runtime_files_only_requested_platform(bundle):
    _make_runtime(bundle, "linux", "jdk1.6", mtime=1_000_000, files=("lib/rt.jar",))
    _make_runtime(bundle, "win32", "jdk1.6", mtime=1_000_000, files=("bin/java.exe",))

    assert discover_runtime_files(bundle, ["linux32"]) == ["java/linux/jdk1.6/jre/lib/rt.jar"]

"""Tests for version metadata."""
from versioning import APP_EXE_NAME, APP_VERSION, VersionInfo, parse_version


def test_parse_app_version():
    info = parse_version()
    assert ".".join(str(p) for p in info.to_tuple()) == APP_VERSION


def test_parse_short_version():
    assert parse_version("2.1") == VersionInfo(2, 1, 0)


def test_parse_garbage():
    assert parse_version("dev") == VersionInfo(0, 0, 0)


def test_exe_name_matches_entry_point():
    assert APP_EXE_NAME == "kiosk-rotator"

"""Tests for log directory resolution logic."""

from __future__ import annotations

import pathlib
from types import SimpleNamespace

import pytest

from passage_resolver.core import logging as core_logging

# pylint: disable=missing-function-docstring


def _make_settings(log_dir: pathlib.Path | None, data_dir: pathlib.Path) -> SimpleNamespace:
    return SimpleNamespace(
        PASSAGE_RESOLVER_LOG_LEVEL="info",
        PASSAGE_RESOLVER_LOG_DIR=log_dir,
        DATA_DIR=data_dir,
    )


def _point_at(monkeypatch: pytest.MonkeyPatch, settings, root_dir: pathlib.Path) -> None:
    monkeypatch.setattr(core_logging, "settings", settings)
    monkeypatch.setattr(core_logging, "ROOT_DIR", root_dir)
    monkeypatch.setattr(core_logging, "BASE_DIR", root_dir / "pkg")


def test_resolve_logs_dir_prefers_override(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    override = tmp_path / "custom-logs"
    _point_at(monkeypatch, _make_settings(override, tmp_path / "data"), tmp_path / "app")

    resolved = core_logging._resolve_logs_dir()  # pylint: disable=protected-access
    assert resolved == override
    assert resolved.exists()


def test_resolve_logs_dir_falls_back_to_root_logs(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root_dir = tmp_path / "deploy"
    _point_at(monkeypatch, _make_settings(None, tmp_path / "data"), root_dir)

    fallback = core_logging._resolve_logs_dir()  # pylint: disable=protected-access
    assert fallback == root_dir / "logs"
    assert fallback.exists()


def test_resolve_logs_dir_skips_unwritable_paths(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    override = tmp_path / "override"
    root_dir = tmp_path / "root"
    data_dir = tmp_path / "data"
    _point_at(monkeypatch, _make_settings(override, data_dir), root_dir)

    original_mkdir = pathlib.Path.mkdir

    def guarded_mkdir(path_obj: pathlib.Path, *args, **kwargs):
        if path_obj in (override, root_dir / "logs"):
            raise PermissionError("unwritable")
        return original_mkdir(path_obj, *args, **kwargs)

    monkeypatch.setattr(pathlib.Path, "mkdir", guarded_mkdir)

    resolved = core_logging._resolve_logs_dir()  # pylint: disable=protected-access
    assert resolved == data_dir / "logs"
    assert resolved.exists()


def test_resolve_logs_dir_raises_when_nothing_is_writable(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _point_at(monkeypatch, _make_settings(tmp_path / "x", tmp_path / "data"), tmp_path / "root")

    def refuse(*_args, **_kwargs):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(pathlib.Path, "mkdir", refuse)

    with pytest.raises(PermissionError):
        core_logging._resolve_logs_dir()  # pylint: disable=protected-access

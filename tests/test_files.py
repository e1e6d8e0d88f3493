import datetime
import stat

import pytest

from conftest import ScriptedConfirmer
from s4v_provisioner.errors import ArtifactNotFoundError
from s4v_provisioner.lib.files import (
    backup_path,
    copy_entries_except,
    install_executable,
    install_file,
)

NOW = datetime.datetime(2026, 10, 18, 9, 5, 7)


def test_backup_path_is_timestamped_sibling(tmp_path):
    p = tmp_path / "nginx.conf"
    assert backup_path(p, now=NOW) == tmp_path / "nginx.conf.backup.2026-10-18-090507"


class TestInstallFile:
    def test_absent_destination_is_copied_without_prompt_or_backup(self, tmp_path):
        src = tmp_path / "src.conf"
        src.write_text("new")
        dst = tmp_path / "etc" / "dst.conf"
        confirmer = ScriptedConfirmer()

        assert install_file(src, dst, confirmer, what="config") is True
        assert dst.read_text() == "new"
        assert confirmer.questions == []
        assert list(dst.parent.glob("*.backup.*")) == []

    def test_declined_overwrite_keeps_destination(self, tmp_path):
        src = tmp_path / "src.conf"
        src.write_text("new")
        dst = tmp_path / "dst.conf"
        dst.write_text("old")

        replaced = install_file(src, dst, ScriptedConfirmer(default=False), what="config", now=lambda: NOW)

        assert replaced is False
        assert dst.read_text() == "old"
        assert (tmp_path / "dst.conf.backup.2026-10-18-090507").read_text() == "old"

    def test_confirmed_overwrite_replaces_after_backup(self, tmp_path):
        src = tmp_path / "src.conf"
        src.write_text("new")
        dst = tmp_path / "dst.conf"
        dst.write_text("old")

        assert install_file(src, dst, ScriptedConfirmer(), what="config", now=lambda: NOW) is True
        assert dst.read_text() == "new"
        assert (tmp_path / "dst.conf.backup.2026-10-18-090507").read_text() == "old"


def test_copy_entries_except_skips_ui_dir(tmp_path):
    src = tmp_path / "extracted"
    (src / "browser").mkdir(parents=True)
    (src / "browser" / "index.html").write_text("<html>")
    (src / "server" / "lib").mkdir(parents=True)
    (src / "server" / "lib" / "x.js").write_text("x")
    (src / "settings.json").write_text("{}")
    dst = tmp_path / "app"

    copied = copy_entries_except(src, dst, exclude="browser")

    assert copied == ["server", "settings.json"]
    assert (dst / "server" / "lib" / "x.js").read_text() == "x"
    assert not (dst / "browser").exists()


def test_install_executable_sets_mode(tmp_path):
    src = tmp_path / "pi_webrtc"
    src.write_text("bin")
    src.chmod(0o600)
    dst = install_executable(src, tmp_path / "app", "pi_webrtc")
    assert dst == tmp_path / "app" / "pi_webrtc"
    assert stat.S_IMODE(dst.stat().st_mode) == 0o755


def test_install_executable_missing_source(tmp_path):
    with pytest.raises(ArtifactNotFoundError):
        install_executable(tmp_path / "missing", tmp_path / "app", "pi_webrtc")

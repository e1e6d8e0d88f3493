import stat
from pathlib import Path

import pytest

from conftest import (
    FakeCerts,
    FakeDownloader,
    FakeExtractor,
    FakePackages,
    FakeServices,
    ScriptedConfirmer,
    make_config,
)
from s4v_provisioner import main as main_mod
from s4v_provisioner.errors import CommandError, ConfigNotFoundError, NetworkError
from s4v_provisioner.main import run


@pytest.fixture
def cfg(host_root):
    return make_config(host_root, executable_name_in_archive="app-exec", executable_final_name="app.bin")


@pytest.fixture
def extractor():
    return FakeExtractor(
        {
            "release.zip": {"browser/index.html": ("<html>", False)},
            "pi-webrtc.tar.gz": {"app-exec": ("ELF", True)},
        }
    )


def _write_deploy_files(deploy_dir: Path, cfg, *, subdir: str = ""):
    base = deploy_dir / subdir if subdir else deploy_dir
    base.mkdir(parents=True, exist_ok=True)
    (base / "nginx.conf").write_text("events {}\nhttp {}\n")
    (base / "s4v-camera.service").write_text(f"[Service]\nExecStart={cfg.executable_path}\n")


def test_fresh_host(make_ctx, cfg, extractor, deploy_dir, host_root):
    _write_deploy_files(deploy_dir, cfg)
    packages = FakePackages(installed=["wget", "tar"])
    certs = FakeCerts()
    services = FakeServices()
    ctx = make_ctx(
        cfg=cfg,
        packages=packages,
        extractor=extractor,
        certs=certs,
        services=services,
        confirmer=ScriptedConfirmer(rules={"USB Serial Gadget": False}),
    )

    state = run(ctx)

    web_root = Path(cfg.web_root)
    exe = Path(cfg.app_dir) / "app.bin"
    assert (web_root / "index.html").read_text() == "<html>"
    assert exe.read_text() == "ELF"
    assert stat.S_IMODE(exe.stat().st_mode) & stat.S_IXUSR
    assert Path(cfg.nginx_config_path).read_text() == "events {}\nhttp {}\n"
    assert Path(cfg.unit_path).exists()
    assert list(host_root.rglob("*.backup.*")) == []

    assert len(certs.requests) == 1
    assert certs.requests[0].common_name == "camera.local"
    assert Path(cfg.tls_key_path).exists() and Path(cfg.tls_cert_path).exists()

    assert "wget" not in packages.install_calls[0]
    assert ("start", "s4v-camera.service") in services.calls
    assert ("restart", "nginx") in services.calls
    assert state["execution"]["decisions"]["success"] is True

    # scratch archives and extraction dirs are gone
    assert not (deploy_dir / "scratch" / "release.zip").exists()
    assert not (deploy_dir / "scratch" / "release_temp_tzuhuantai").exists()


def test_rerun_skips_completed_work(make_ctx, cfg, extractor, deploy_dir):
    _write_deploy_files(deploy_dir, cfg)
    certs = FakeCerts()
    first = make_ctx(cfg=cfg, extractor=extractor, certs=certs, confirmer=ScriptedConfirmer(default=True))
    run(first)

    packages = FakePackages(installed=cfg.packages)
    confirmer = ScriptedConfirmer(rules={"Replace": False, "USB Serial Gadget": False})
    second = make_ctx(cfg=cfg, extractor=extractor, certs=certs, packages=packages, confirmer=confirmer)
    state = run(second)

    assert len(certs.requests) == 1
    assert packages.install_calls == []
    assert state["execution"]["decisions"]["nginx_config_installed"] is False


def test_config_files_found_in_fallback_subdir(make_ctx, cfg, extractor, deploy_dir):
    _write_deploy_files(deploy_dir, cfg, subdir=cfg.config_fallback_subdir)
    ctx = make_ctx(cfg=cfg, extractor=extractor, confirmer=ScriptedConfirmer(rules={"USB Serial Gadget": False}))
    state = run(ctx)
    assert state["execution"]["paths"]["unit_source"].endswith(
        f"{cfg.config_fallback_subdir}/s4v-camera.service"
    )


def test_missing_unit_file_stops_before_download(make_ctx, cfg, deploy_dir):
    (deploy_dir / "nginx.conf").write_text("events {}\n")
    downloader = FakeDownloader()
    ctx = make_ctx(cfg=cfg, downloader=downloader)

    with pytest.raises(ConfigNotFoundError):
        run(ctx)
    assert downloader.fetched == []


def test_download_failure_is_fatal(make_ctx, cfg, extractor, deploy_dir):
    _write_deploy_files(deploy_dir, cfg)
    downloader = FakeDownloader(fail_urls=[cfg.webrtc_artifact.url])
    services = FakeServices()
    ctx = make_ctx(cfg=cfg, extractor=extractor, downloader=downloader, services=services)

    with pytest.raises(NetworkError):
        run(ctx)
    assert services.calls == []


def test_main_exit_codes(monkeypatch, make_ctx, cfg, extractor, deploy_dir, tmp_path):
    log = str(tmp_path / "provision.log")
    built = {}

    def fake_build_ctx(_cfg, *, confirmer, cwd=None):
        built["ctx"] = make_ctx(cfg=cfg, extractor=extractor, downloader=FakeDownloader())
        return built["ctx"]

    monkeypatch.setattr(main_mod, "build_ctx", fake_build_ctx)

    assert main_mod.main(["--log", log, "--yes"]) == 1
    assert built["ctx"].downloader.fetched == []

    _write_deploy_files(deploy_dir, cfg)
    assert main_mod.main(["--log", log, "--yes"]) == 0


def test_main_rejects_bad_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("nope: 1\n")
    assert main_mod.main(["--log", str(tmp_path / "p.log"), "--config", str(bad)]) == 1


def test_failure_carries_step_and_state(make_ctx, cfg, extractor, deploy_dir):
    _write_deploy_files(deploy_dir, cfg)
    services = FakeServices(fail_start=[cfg.unit_filename])
    ctx = make_ctx(cfg=cfg, extractor=extractor, services=services)

    with pytest.raises(CommandError) as excinfo:
        run(ctx)

    assert excinfo.value.step == "70_camera_service"
    ran = excinfo.value.state["execution"]["ran_steps"]
    assert "60_certificate" in ran and "70_camera_service" not in ran
    assert ("restart", "nginx") not in services.calls


def test_main_logs_failing_step(monkeypatch, make_ctx, cfg, deploy_dir, tmp_path, caplog):
    (deploy_dir / "nginx.conf").write_text("events {}\n")
    monkeypatch.setattr(main_mod, "build_ctx", lambda _cfg, *, confirmer, cwd=None: make_ctx(cfg=cfg))

    with caplog.at_level("ERROR"):
        assert main_mod.main(["--log", str(tmp_path / "p.log"), "--yes"]) == 1

    assert any("Step 30_locate_configs failed" in r.getMessage() for r in caplog.records)

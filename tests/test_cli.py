import json
import textwrap

import pytest

import main as entry
from config.loader import load_probe_specs
from config.options import WatchdogOptions
from domain.enums import FailureCause, ProbeKind
from infrastructure.probes import ProberRegistry
from presentation.cli import CheckCommand
from presentation.cli.check_command import EXIT_UNHEALTHY

from tests.conftest import ScriptedProber, fail, ok

pytestmark = pytest.mark.unit

CONFIG = textwrap.dedent("""
    probes:
      - name: edge
        probe_url: http://probe.test/generate_204
        timeout: 1s
        interval: 10s
        down_times: {down_times}
        server:
          hostname: 10.0.0.1
          username: root
          password: pw
          reset_command: reboot
      - name: core
        probe_url: ping 10.0.0.2
        timeout: 1s
        interval: 10s
        down_times: 2
        server:
          hostname: 10.0.0.2
          username: root
          password: pw
          reset_command: reboot
""")


@pytest.fixture
def config_file(tmp_path):
    def write(down_times=3):
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG.format(down_times=down_times))
        return path
    return write


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(entry, "bootstrap_logging", lambda **_: None)
    monkeypatch.setattr(entry, "shutdown_logging", lambda: None)


def _registry(http, icmp):
    return ProberRegistry({ProbeKind.HTTP: http, ProbeKind.ICMP: icmp})


class TestMain:
    def test_requires_config(self, monkeypatch, capsys):
        monkeypatch.setattr(entry.settings, "CONFIG_PATH", None)
        assert entry.main([]) == entry.EXIT_USAGE
        assert "a config file is required" in capsys.readouterr().err

    def test_invalid_config_exits(self, config_file):
        path = config_file(down_times=0)
        assert entry.main(["check", "-c", str(path)]) == entry.EXIT_CONFIG

    def test_missing_config_file_exits(self, tmp_path):
        assert entry.main(["run", "--config", str(tmp_path / "absent.yaml")]) == entry.EXIT_CONFIG

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            entry.main(["reboot"])


@pytest.mark.asyncio
class TestCheckCommand:
    async def test_all_healthy(self, config_file, capsys):
        command = CheckCommand(WatchdogOptions(), registry=_registry(ScriptedProber(then=True), ScriptedProber(then=True)))
        assert await command.run(config_file()) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "Results:"
        assert out[1].startswith("- edge: healthy")
        assert out[2].startswith("- core: healthy")

    async def test_unhealthy_json(self, config_file, capsys):
        icmp = ScriptedProber([fail(FailureCause.PROBE_UNFINISHED)])
        command = CheckCommand(WatchdogOptions(), registry=_registry(ScriptedProber([ok()]), icmp))
        assert await command.run(config_file(), json_out=True) == EXIT_UNHEALTHY
        rows = json.loads(capsys.readouterr().out)
        assert [(r["name"], r["kind"], r["healthy"]) for r in rows] == [
            ("edge", "http", True),
            ("core", "icmp", False),
        ]
        assert rows[1]["cause"] == FailureCause.PROBE_UNFINISHED.value
        assert rows[0]["status_code"] == 204

    async def test_probes_each_target_once(self, config_file):
        http, icmp = ScriptedProber(then=True), ScriptedProber(then=False)
        command = CheckCommand(WatchdogOptions(), registry=_registry(http, icmp))
        specs = load_probe_specs(config_file())
        results = await command.check_all(specs)
        assert [r.success for r in results] == [True, False]
        assert [s.name for s in http.calls] == ["edge"]
        assert [s.target for s in icmp.calls] == ["10.0.0.2"]

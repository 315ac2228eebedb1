"""Tests for the composeshift CLI."""

import asyncio

import pytest
import yaml

from composeshift.cli import create_parser, main, run
from composeshift.config import RunConfig
from composeshift.types import ConfigurationError, Mode

from fakes import FakeGateway, FakePrompter


@pytest.fixture
def descriptor(tmp_path):
    path = tmp_path / "docker-compose.yml"
    with open(path, "w") as f:
        yaml.dump({
            "services": {
                "web": {"image": "nginx", "ports": ["8080:80"]},
                "worker": {"image": "busybox", "environment": ["FOO=bar"]},
            },
        }, f)
    return path


def config_for(argv, environ=None):
    return RunConfig.from_args(create_parser().parse_args(argv), environ or {})


class TestRunConfig:
    def test_generate_mode(self):
        config = config_for(["compose.yml", "--prefix", "Demo"])
        assert config.mode == Mode.GENERATE
        assert config.naming.derive("web") == "demo-web"
        assert config.cli == "oc"

    def test_modes(self):
        base = ["--prefix", "demo", "--project", "shop"]
        assert config_for(base + ["--up"]).mode == Mode.UP
        assert config_for(base + ["--down"]).mode == Mode.DOWN
        assert config_for(base + ["--down-all"]).mode == Mode.DOWN_ALL

    def test_prefix_required(self):
        with pytest.raises(ConfigurationError):
            config_for(["compose.yml"])

    def test_project_required_for_cluster_modes(self):
        with pytest.raises(ConfigurationError):
            config_for(["--prefix", "demo", "--up"])

    def test_environment_fallbacks(self):
        config = config_for(["--prefix", "demo", "--up"], {
            "COMPOSESHIFT_PROJECT": "shop",
            "COMPOSESHIFT_CLI": "kubectl-oc",
            "COMPOSESHIFT_SERVER": "https://api:6443",
        })
        assert config.project == "shop"
        assert config.cli == "kubectl-oc"
        assert config.server == "https://api:6443"

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--prefix", "demo", "--up", "--down"])


class TestRun:
    def test_generate_writes_files(self, descriptor, tmp_path):
        out = tmp_path / "out"
        config = RunConfig(prefix="demo", descriptor=str(descriptor), output_dir=str(out))
        gateway = FakeGateway()

        code = asyncio.run(run(config, FakePrompter(), gateway))

        assert code == 0
        assert gateway.calls == []
        assert sorted(p.name for p in out.iterdir()) == [
            "demo-web.pod.yml",
            "demo-web.service.yml",
            "demo-worker.pod.yml",
        ]

    def test_up(self, descriptor, tmp_path, capsys):
        config = RunConfig(
            prefix="demo",
            mode=Mode.UP,
            descriptor=str(descriptor),
            project="shop",
            output_dir=str(tmp_path),
        )
        gateway = FakeGateway()

        code = asyncio.run(run(config, FakePrompter(), gateway))

        assert code == 0
        assert ["create", "-f", str(tmp_path / "demo-web.pod.yml")] in gateway.calls
        assert "demo-web-route" in capsys.readouterr().out

    def test_up_failure_exit_code(self, descriptor, tmp_path, capsys):
        config = RunConfig(
            prefix="demo",
            mode=Mode.UP,
            descriptor=str(descriptor),
            project="shop",
            output_dir=str(tmp_path),
        )
        gateway = FakeGateway(failing=[
            ["create", "-f", str(tmp_path / "demo-worker.pod.yml")],
        ])

        code = asyncio.run(run(config, FakePrompter(), gateway))

        assert code == 1
        assert "worker" in capsys.readouterr().err

    def test_down_all_does_not_need_files(self, descriptor, tmp_path):
        config = RunConfig(
            prefix="demo",
            mode=Mode.DOWN_ALL,
            descriptor=str(descriptor),
            project="shop",
            output_dir=str(tmp_path / "out"),
        )
        gateway = FakeGateway(failing=[["delete", "all", "-l", "group=demo-web"]])

        code = asyncio.run(run(config, FakePrompter(), gateway))

        assert code == 1
        assert ["delete", "all", "-l", "group=demo-worker"] in gateway.calls
        assert not (tmp_path / "out").exists()

    def test_bad_port_before_cluster_calls(self, tmp_path):
        path = tmp_path / "compose.yml"
        path.write_text("services:\n  web:\n    image: nginx\n    ports: ['http:80']\n")
        config = RunConfig(
            prefix="demo",
            mode=Mode.UP,
            descriptor=str(path),
            project="shop",
            output_dir=str(tmp_path),
        )
        gateway = FakeGateway()

        with pytest.raises(ConfigurationError):
            asyncio.run(run(config, FakePrompter(), gateway))
        assert gateway.calls == []

    def test_discovers_descriptor(self, descriptor, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        prompter = FakePrompter()
        config = RunConfig(prefix="demo", output_dir=str(tmp_path))

        assert asyncio.run(run(config, prompter, FakeGateway())) == 0
        assert prompter.selections == [["docker-compose.yml"]]
        assert (tmp_path / "demo-web.pod.yml").exists()


class TestMain:
    def test_missing_prefix(self, capsys):
        assert main(["compose.yml"]) == 1
        assert "prefix" in capsys.readouterr().err

    @pytest.mark.parametrize("content", [
        "services:\n  web: nginx\n",
        "services:\n  api:\n    image: x\n    environment: DEBUG\n",
        "services:\n  api:\n    image: x\n    ports: 80\n",
    ])
    def test_malformed_service_reports_error(self, content, tmp_path, capsys):
        path = tmp_path / "compose.yml"
        path.write_text(content)
        out = tmp_path / "out"

        assert main([str(path), "--prefix", "demo", "-o", str(out)]) == 1
        assert "Error: Service" in capsys.readouterr().err
        assert not out.exists()

    def test_missing_descriptor(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yml"), "--prefix", "demo"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_generate(self, descriptor, tmp_path):
        out = tmp_path / "out"
        assert main([str(descriptor), "--prefix", "demo", "-o", str(out)]) == 0
        assert (out / "demo-worker.pod.yml").exists()

"""Tests for composeshift parser."""

import pytest
import yaml

from composeshift.parser import (
    discover_descriptors,
    load_descriptor,
    parse_manifest,
)
from composeshift.types import ConfigurationError


@pytest.fixture
def compose_content():
    """Sample docker-compose content."""
    return {
        "version": "3",
        "services": {
            "web": {
                "image": "nginx",
                "ports": ["8080:80"],
            },
            "worker": {
                "image": "busybox",
                "environment": ["FOO=bar"],
            },
        },
    }


@pytest.fixture
def compose_file(compose_content, tmp_path):
    """Write docker-compose.yml to a temporary directory."""
    path = tmp_path / "docker-compose.yml"
    with open(path, "w") as f:
        yaml.dump(compose_content, f)
    return str(path)


class TestLoadDescriptor:
    def test_load(self, compose_file):
        data = load_descriptor(compose_file)
        assert "web" in data["services"]
        assert "worker" in data["services"]

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_descriptor(str(tmp_path / "missing.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("services: [web\n")
        with pytest.raises(ConfigurationError):
            load_descriptor(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- web\n- db\n")
        with pytest.raises(ConfigurationError):
            load_descriptor(str(path))


class TestParseManifest:
    def test_parse(self, compose_file):
        manifest = parse_manifest(compose_file)

        assert manifest.path == compose_file
        assert manifest.names == ["web", "worker"]

        web = manifest.get("web")
        assert web.image == "nginx"
        assert web.ports == ("8080:80",)

        worker = manifest.get("worker")
        assert worker.environment == ("FOO=bar",)
        assert worker.ports == ()

    def test_colon_ports_stay_strings(self, tmp_path):
        path = tmp_path / "compose.yml"
        path.write_text(
            "services:\n"
            "  ssh:\n"
            "    image: openssh\n"
            "    ports:\n"
            "      - 22:22\n"
            "      - 2222\n"
        )
        manifest = parse_manifest(str(path))
        assert manifest.get("ssh").ports == ("22:22", 2222)

    def test_long_syntax_ports(self, tmp_path):
        path = tmp_path / "compose.yml"
        path.write_text(
            "services:\n"
            "  web:\n"
            "    image: nginx\n"
            "    ports:\n"
            "      - target: 80\n"
            "        published: 8080\n"
        )
        manifest = parse_manifest(str(path))
        assert manifest.get("web").ports == ({"target": 80, "published": 8080},)

    def test_no_services(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("version: '3'\n")
        with pytest.raises(ConfigurationError):
            parse_manifest(str(path))


class TestDiscoverDescriptors:
    def test_preference_order(self, tmp_path):
        (tmp_path / "compose.yaml").write_text("services: {}\n")
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")

        found = discover_descriptors(str(tmp_path))
        assert found == [
            str(tmp_path / "docker-compose.yml"),
            str(tmp_path / "compose.yaml"),
        ]

    def test_nothing_found(self, tmp_path):
        assert discover_descriptors(str(tmp_path)) == []

from pathlib import Path
from typing import Any

import pytest
import yaml

from protoc_plugins.configuration import (
    ConfigError,
    load_plugin_config,
    load_plugin_config_dict,
    load_yaml,
    resolve_env_vars,
)
from protoc_plugins.contracts import BinaryMavenPlugin, JvmMavenPlugin, PathPlugin, UrlPlugin
from protoc_plugins.digests import Digest


def _write_yaml(path: Path, payload: Any) -> Path:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


def test_load_plugin_config_resolves_env_and_builds_declarations(tmp_path, monkeypatch):
    monkeypatch.setenv("GRPC_VERSION", "1.62.2")
    config_path = _write_yaml(
        tmp_path / "plugins.yaml",
        {
            "output_directory": "build/generated",
            "plugins": [
                {"kind": "path", "name": "protoc-gen-grpc-java", "optional": True, "order": 1},
                {
                    "kind": "binary-maven",
                    "group_id": "io.grpc",
                    "artifact_id": "protoc-gen-grpc-java",
                    "version": "${GRPC_VERSION}",
                    "options": "lite",
                },
                {
                    "kind": "url",
                    "url": "https://example.com/protoc-gen-foo",
                    "digest": "SHA-1:ABCDEF",
                    "skip": True,
                },
                {
                    "kind": "jvm-maven",
                    "group_id": "com.salesforce.servicelibs",
                    "artifact_id": "reactor-grpc",
                    "version": "1.2.4",
                    "main_class": "com.salesforce.reactorgrpc.ReactorGrpcGenerator",
                    "jvm_args": ["--verbose"],
                    "jvm_config_args": ["-Xmx100m"],
                    "output_directory": "build/reactor",
                },
            ],
        },
    )

    config = load_plugin_config(config_path)
    path_plugin, binary_plugin, url_plugin, jvm_plugin = config.to_declarations()

    assert config.output_directory == Path("build/generated")
    assert path_plugin == PathPlugin(name="protoc-gen-grpc-java", optional=True, order=1)
    assert binary_plugin == BinaryMavenPlugin(
        group_id="io.grpc",
        artifact_id="protoc-gen-grpc-java",
        version="1.62.2",
        options="lite",
    )
    assert url_plugin == UrlPlugin(
        url="https://example.com/protoc-gen-foo",
        digest=Digest("sha1", "abcdef"),
        skip=True,
    )
    assert isinstance(jvm_plugin, JvmMavenPlugin)
    assert jvm_plugin.jvm_args == ("--verbose",)
    assert jvm_plugin.jvm_config_args == ("-Xmx100m",)
    assert jvm_plugin.output_directory == Path("build/reactor")


def test_missing_env_var_names_its_location(monkeypatch):
    monkeypatch.delenv("GRPC_VERSION", raising=False)
    payload = {
        "output_directory": "out",
        "plugins": [
            {"kind": "path", "name": "protoc-gen-foo"},
            {
                "kind": "binary-maven",
                "group_id": "g",
                "artifact_id": "a",
                "version": "${GRPC_VERSION}",
            },
        ],
    }

    with pytest.raises(
        ConfigError, match=r"'GRPC_VERSION' used by plugin configuration plugins\[1\]\.version"
    ):
        load_plugin_config_dict(payload)


def test_unknown_kind_is_rejected():
    with pytest.raises(ConfigError, match=r"^Invalid plugin configuration: plugins\[0\]: "):
        load_plugin_config_dict(
            {"output_directory": "out", "plugins": [{"kind": "carrier-pigeon", "name": "x"}]}
        )


def test_extra_fields_are_rejected():
    with pytest.raises(ConfigError, match=r"plugins\[0\] \(path\)\.nmae: "):
        load_plugin_config_dict(
            {"output_directory": "out", "plugins": [{"kind": "path", "nmae": "typo"}]}
        )


def test_path_sentinel_version_is_rejected():
    with pytest.raises(ConfigError, match="'PATH' is not a valid version"):
        load_plugin_config_dict(
            {
                "output_directory": "out",
                "plugins": [
                    {"kind": "binary-maven", "group_id": "g", "artifact_id": "a", "version": "PATH"}
                ],
            }
        )


def test_malformed_digest_is_rejected():
    with pytest.raises(ConfigError, match="Failed to parse digest"):
        load_plugin_config_dict(
            {
                "output_directory": "out",
                "plugins": [{"kind": "url", "url": "https://example.com/x", "digest": "nope"}],
            }
        )


def test_missing_output_directory_is_rejected():
    with pytest.raises(ConfigError, match="output_directory: Field required"):
        load_plugin_config_dict({"plugins": []})


def test_null_plugins_means_no_plugins():
    config = load_plugin_config_dict({"output_directory": "out", "plugins": None})

    assert config.to_declarations() == []


def test_load_yaml_requires_a_mapping(tmp_path):
    path = _write_yaml(tmp_path / "list.yaml", ["not", "a", "mapping"])

    with pytest.raises(ConfigError, match="must be a YAML mapping, not list"):
        load_yaml(path)


def test_empty_yaml_is_an_empty_mapping(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_yaml(path) == {}


def test_resolve_env_vars_walks_nested_payloads(monkeypatch):
    monkeypatch.setenv("PLUGIN_HOME", "/opt/plugins")

    assert resolve_env_vars({"a": ["${PLUGIN_HOME}/bin", 3], "b": {"c": "x"}}) == {
        "a": ["/opt/plugins/bin", 3],
        "b": {"c": "x"},
    }


def test_env_var_under_a_url_field_is_located_by_field_name(monkeypatch):
    monkeypatch.delenv("PLUGIN_MIRROR", raising=False)

    with pytest.raises(ConfigError, match=r"configuration plugins\[0\]\.url is not set"):
        resolve_env_vars({"plugins": [{"kind": "url", "url": "${PLUGIN_MIRROR}/protoc-gen-x"}]})


def test_invalid_yaml_names_the_file(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("plugins: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="broken.yaml is not valid YAML"):
        load_yaml(path)

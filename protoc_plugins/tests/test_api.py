import os
from pathlib import Path

import pytest
import yaml

from protoc_plugins.api import build_protoc_plugin_args, resolve_plugins, resolve_plugins_from_yaml
from protoc_plugins.contracts import PathPlugin, PluginResolutionError, ResolvedPlugin, UrlPlugin
from protoc_plugins.digests import sha1_hex
from protoc_plugins.runtime.host import HostSystem
from protoc_plugins.runtime.temporary_space import TemporarySpace
from protoc_plugins.testkit import FakeArtifactPathResolver, FakeUrlResourceFetcher

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")


def _host(bin_dir: Path) -> HostSystem:
    return HostSystem("Linux", "x86_64", system_path=(bin_dir,), path_separator=":")


def _executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"#!/bin/sh\n")
    path.chmod(0o755)
    return path


def test_build_protoc_plugin_args_flattens_in_order():
    plugins = [
        ResolvedPlugin(id="1_a", path=Path("/p/a"), order=0, output_directory=Path("/out")),
        ResolvedPlugin(
            id="0_b", path=Path("/p/b"), order=1, output_directory=Path("/gen"), options="x=y"
        ),
    ]

    assert build_protoc_plugin_args(plugins) == [
        "--plugin=protoc-gen-1_a=/p/a",
        "--1_a_out=/out",
        "--plugin=protoc-gen-0_b=/p/b",
        "--0_b_out=/gen",
        "--0_b_opt=x=y",
    ]


def test_build_protoc_plugin_args_of_nothing():
    assert build_protoc_plugin_args([]) == []


@posix_only
def test_resolve_plugins_uses_a_scoped_executor(tmp_path):
    plugin = _executable(tmp_path / "bin" / "protoc-gen-foo")

    resolved = resolve_plugins(
        [PathPlugin(name="protoc-gen-foo")],
        output_directory=tmp_path / "out",
        artifact_resolver=FakeArtifactPathResolver(),
        url_fetcher=FakeUrlResourceFetcher(),
        host=_host(tmp_path / "bin"),
        temporary_space=TemporarySpace(tmp_path / "scratch"),
        max_workers=1,
    )

    assert resolved == [
        ResolvedPlugin(
            id=f"0_{sha1_hex(str(plugin))}",
            path=plugin,
            order=100_000,
            output_directory=tmp_path / "out",
        )
    ]


def test_resolve_plugins_surfaces_plugin_errors(tmp_path):
    (tmp_path / "bin").mkdir()

    with pytest.raises(PluginResolutionError, match="url plugin #0"):
        resolve_plugins(
            [UrlPlugin(url="https://example.com/protoc-gen-gone")],
            output_directory=tmp_path / "out",
            artifact_resolver=FakeArtifactPathResolver(),
            url_fetcher=FakeUrlResourceFetcher(),
            host=_host(tmp_path / "bin"),
            temporary_space=TemporarySpace(tmp_path / "scratch"),
        )


@posix_only
def test_resolve_plugins_from_yaml_end_to_end(tmp_path):
    path_plugin = _executable(tmp_path / "bin" / "protoc-gen-grpc-java")
    fetched = _executable(tmp_path / "downloads" / "protoc-gen-foo.exe")
    url = "https://example.com/protoc-gen-foo"
    config_path = tmp_path / "plugins.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "output_directory": str(tmp_path / "generated"),
                "plugins": [
                    {"kind": "path", "name": "protoc-gen-grpc-java", "order": 2},
                    {"kind": "url", "url": url, "order": 1, "options": "lite"},
                    {"kind": "path", "name": "protoc-gen-absent", "optional": True},
                ],
            }
        ),
        encoding="utf-8",
    )

    resolved = resolve_plugins_from_yaml(
        config_path,
        artifact_resolver=FakeArtifactPathResolver(),
        url_fetcher=FakeUrlResourceFetcher({url: fetched}),
        host=_host(tmp_path / "bin"),
        temporary_space=TemporarySpace(tmp_path / "scratch"),
    )

    url_id = f"1_{sha1_hex(str(fetched))}"
    path_id = f"0_{sha1_hex(str(path_plugin))}"
    assert build_protoc_plugin_args(resolved) == [
        f"--plugin=protoc-gen-{url_id}={fetched}",
        f"--{url_id}_out={tmp_path / 'generated'}",
        f"--{url_id}_opt=lite",
        f"--plugin=protoc-gen-{path_id}={path_plugin}",
        f"--{path_id}_out={tmp_path / 'generated'}",
    ]

from pathlib import Path

import pytest

from protoc_plugins.contracts import (
    DEFAULT_ORDER,
    BinaryMavenPlugin,
    JvmMavenPlugin,
    MavenCoordinate,
    PathPlugin,
    PluginResolutionError,
    ResolvedPlugin,
    ResourceNotFoundError,
    UrlPlugin,
)


def test_resolved_plugin_builds_protoc_args_without_options():
    plugin = ResolvedPlugin(
        id="0_abc",
        path=Path("/opt/plugins/protoc-gen-foo"),
        order=1,
        output_directory=Path("/build/gen"),
    )

    assert plugin.to_protoc_args() == [
        "--plugin=protoc-gen-0_abc=/opt/plugins/protoc-gen-foo",
        "--0_abc_out=/build/gen",
    ]


def test_resolved_plugin_appends_options_when_present():
    plugin = ResolvedPlugin(
        id="3_def",
        path=Path("/opt/protoc-gen-bar"),
        order=1,
        output_directory=Path("/out"),
        options="lite,paths=source_relative",
    )

    assert plugin.to_protoc_args()[-1] == "--3_def_opt=lite,paths=source_relative"


def test_declarations_default_scheduling_fields():
    plugin = PathPlugin(name="protoc-gen-grpc-java")

    assert plugin.order == DEFAULT_ORDER
    assert plugin.skip is False
    assert plugin.optional is False
    assert plugin.output_directory is None
    assert plugin.kind == "path"
    assert str(plugin) == "path:protoc-gen-grpc-java"


@pytest.mark.parametrize("version", ["", "PATH"])
def test_maven_declarations_require_explicit_version(version):
    with pytest.raises(ValueError, match="explicit version"):
        BinaryMavenPlugin(group_id="io.grpc", artifact_id="protoc-gen-grpc-java", version=version)


def test_maven_coordinate_string_forms():
    assert str(MavenCoordinate("io.grpc", "grpc", "1.0")) == "mvn:io.grpc:grpc:1.0"
    assert (
        str(MavenCoordinate("io.grpc", "grpc", "1.0", type="exe", classifier="linux-x86_64"))
        == "mvn:io.grpc:grpc:1.0:exe:linux-x86_64"
    )
    assert str(MavenCoordinate("io.grpc", "grpc", "1.0", classifier="tests")) == (
        "mvn:io.grpc:grpc:1.0:jar:tests"
    )


def test_jvm_declaration_exposes_coordinate():
    plugin = JvmMavenPlugin(
        group_id="com.example",
        artifact_id="gen",
        version="2.1",
        main_class="com.example.Main",
    )

    assert plugin.coordinate() == MavenCoordinate("com.example", "gen", "2.1")
    assert str(plugin) == "mvn:com.example:gen:2.1"


def test_plugin_resolution_error_describes_plugin_and_cause():
    plugin = UrlPlugin(url="https://example.com/protoc-gen-foo")
    cause = ResourceNotFoundError("gone")

    error = PluginResolutionError(plugin, 4, cause)

    assert error.plugin is plugin
    assert error.index == 4
    assert error.kind == "url"
    assert error.cause is cause
    assert str(error) == (
        "Failed to resolve url plugin #4 (url:https://example.com/protoc-gen-foo): gone"
    )

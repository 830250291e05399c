from __future__ import annotations

import logging
import re
import zipfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from protoc_plugins.contracts.errors import ResolutionError
from protoc_plugins.digests import sha256_hex
from protoc_plugins.resolution.quoting import (
    quote_argfile_args,
    quote_batch_args,
    quote_shell_args,
)
from protoc_plugins.resolution.system_path import SystemPathBinaryResolver
from protoc_plugins.runtime.files import normalize, write_text_atomically
from protoc_plugins.runtime.host import HostSystem
from protoc_plugins.runtime.temporary_space import TemporarySpace

# Tuned for short-lived processes: skip the optimising JIT tiers and reuse
# the class data sharing archive when one exists.
DEFAULT_JVM_CONFIG_ARGS: tuple[str, ...] = (
    "-Xshare:auto",
    "-XX:+TieredCompilation",
    "-XX:TieredStopAtLevel=1",
)

_MANIFEST_NAME = "META-INF/MANIFEST.MF"
_MODULE_INFO = "module-info.class"
_VERSIONED_MODULE_INFO = re.compile(r"^META-INF/versions/\d+/module-info\.class$")


@dataclass(frozen=True, slots=True)
class JavaApp:
    """A Java application to wrap; the first dependency is the app itself."""

    unique_name: str
    dependencies: Sequence[Path]
    main_class: str | None = None
    jvm_args: Sequence[str] | None = None
    jvm_config_args: Sequence[str] | None = None


class JavaAppToExecutableFactory:
    """
    Turns a Java application into something protoc can execute directly.

    Writes the JVM command line to a Java argument file next to an
    OS-specific script that runs `java @args.txt`, so JVM plugins can be
    passed to protoc exactly like native binaries regardless of how long
    their classpath is.
    """

    def __init__(
        self,
        host: HostSystem,
        temporary_space: TemporarySpace,
        path_resolver: SystemPathBinaryResolver,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._temporary_space = temporary_space
        self._path_resolver = path_resolver
        self._logger = logger or logging.getLogger("protoc_plugins.java_apps")

    def to_executable(self, app: JavaApp) -> Path:
        java = str(self._java_executable())
        arg_line = self.build_arg_line(app)
        # Keyed on the exact command as well, so builds that resolve the same
        # plugin to different artifacts never write into the same directory.
        scratch_dir = self._temporary_space.create(
            "java-apps", app.unique_name, sha256_hex("\0".join([java, *arg_line]))
        )
        self._logger.debug("Arguments for JVM app '%s' are: %s", app.unique_name, arg_line)

        if self._host.is_probably_windows():
            args_file = self._write_file(
                scratch_dir / "args.txt", quote_argfile_args(arg_line), encoding="latin-1"
            )
            return self._write_batch_script(scratch_dir, [java, f"@{args_file}"])

        args_file = self._write_file(
            scratch_dir / "args.txt", quote_argfile_args(arg_line), encoding="utf-8"
        )
        return self._write_shell_script(scratch_dir, [java, f"@{args_file}"])

    def build_arg_line(self, app: JavaApp) -> list[str]:
        """Build the JVM arguments, excluding the launcher itself."""
        if not app.dependencies:
            raise ResolutionError(f"No dependencies were resolved for JVM app '{app.unique_name}'")

        # The Class-Path manifest entry is deliberately ignored.
        args = ["-classpath", self._join_paths(app.dependencies)]

        modules = find_java_modules(app.dependencies, logger=self._logger)
        if modules:
            args.extend(["--module-path", self._join_paths(modules)])

        config_args = (
            app.jvm_config_args if app.jvm_config_args is not None else DEFAULT_JVM_CONFIG_ARGS
        )
        args.extend(arg for arg in config_args if self._is_valid_jvm_config_arg(app, arg))

        args.append(self.determine_main_class(app))
        args.extend(app.jvm_args or ())
        return args

    def determine_main_class(self, app: JavaApp) -> str:
        # `java -jar` ignores -classpath entirely, so the entrypoint always has
        # to be passed explicitly.
        if app.main_class is not None:
            self._logger.debug(
                "Using user-provided main class for app '%s': %s", app.unique_name, app.main_class
            )
            return app.main_class

        primary = app.dependencies[0]

        if not primary.is_dir():
            try:
                attributes = read_manifest_attributes(primary)
            except (OSError, zipfile.BadZipFile) as exc:
                raise ResolutionError(
                    f"Failed to determine the main class in the MANIFEST.MF for JAR "
                    f"corresponding to '{primary}': {exc}"
                ) from exc

            main_class = manifest_attribute(attributes, "Main-Class")
            if main_class:
                self._logger.debug(
                    "Determined main class to be '%s' from manifest for '%s'", main_class, primary
                )
                return main_class

            self._logger.warning(
                "No Main-Class manifest attribute found in '%s', this is probably a bug with "
                "how that JAR was built",
                primary,
            )

        raise ResolutionError(
            f"No main class was described for '{primary}', please provide an explicit "
            "'main_class' attribute when configuring this plugin."
        )

    def _is_valid_jvm_config_arg(self, app: JavaApp, arg: str) -> bool:
        # Anything that is not a flag would be taken as the entrypoint class.
        if arg.startswith("-") and len(arg) > 1:
            return True
        self._logger.warning(
            "Dropping illegal JVM argument '%s' for app '%s'", arg, app.unique_name
        )
        return False

    def _join_paths(self, paths: Sequence[Path]) -> str:
        return self._host.path_separator.join(str(path) for path in paths)

    def _java_executable(self) -> Path:
        java = self._host.java_executable()
        if java is not None:
            return java
        java = self._path_resolver.resolve("java")
        if java is None:
            raise ResolutionError(
                "No Java runtime was found; set JAVA_HOME or put 'java' on the PATH"
            )
        return java

    def _write_shell_script(self, scratch_dir: Path, command: Sequence[str]) -> Path:
        # The $'\n' quoting of control characters needs bash; dash prints it verbatim.
        shell = (
            self._path_resolver.resolve("bash")
            or self._path_resolver.resolve("sh")
            or Path("/bin/sh")
        )
        script = "".join(
            [
                f"#!{shell}\n",
                "# Generated bootstrap script for a JVM protoc plugin. Do not edit.\n",
                "set -o errexit\n",
                "exec ",
                quote_shell_args(command),
                "\n",
            ]
        )
        return self._write_file(
            scratch_dir / "invoke.sh", script, encoding="utf-8", executable=True
        )

    def _write_batch_script(self, scratch_dir: Path, command: Sequence[str]) -> Path:
        script = "".join(
            [
                "@echo off\r\n",
                ":: Generated bootstrap script for a JVM protoc plugin. Do not edit.\r\n",
                quote_batch_args(command),
                "\r\n",
            ]
        )
        return self._write_file(
            scratch_dir / "invoke.bat", script, encoding="latin-1", executable=True
        )

    def _write_file(
        self, path: Path, content: str, *, encoding: str, executable: bool = False
    ) -> Path:
        self._logger.debug("Writing %s as %s:\n%s", path, encoding, content)
        try:
            return write_text_atomically(path, content, encoding=encoding, executable=executable)
        except (OSError, UnicodeEncodeError) as exc:
            raise ResolutionError(
                f"An unexpected error occurred while writing to {path}: {exc}"
            ) from exc


def read_manifest_attributes(archive: Path) -> dict[str, str]:
    """Read the main section of a JAR manifest; missing manifests yield {}."""
    with zipfile.ZipFile(archive) as zf:
        try:
            raw = zf.read(_MANIFEST_NAME)
        except KeyError:
            return {}
    return parse_manifest(raw.decode("utf-8", errors="replace"))


def parse_manifest(text: str) -> dict[str, str]:
    attributes: dict[str, str] = {}
    last_key: str | None = None
    for line in text.splitlines():
        if not line:
            # Blank line ends the main section.
            break
        if line.startswith(" ") and last_key is not None:
            attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        attributes[last_key] = value.strip()
    return attributes


def manifest_attribute(attributes: Mapping[str, str], name: str) -> str | None:
    """Look up a manifest attribute; attribute names are case-insensitive."""
    wanted = name.lower()
    for key, value in attributes.items():
        if key.lower() == wanted:
            return value
    return None


def is_java_module(path: Path) -> bool:
    if path.is_dir():
        if (path / _MODULE_INFO).is_file():
            return True
        return any((path / "META-INF" / "versions").glob(f"*/{_MODULE_INFO}"))

    try:
        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
            if _MODULE_INFO in names or any(_VERSIONED_MODULE_INFO.match(n) for n in names):
                return True
            if _MANIFEST_NAME not in names:
                return False
            manifest = parse_manifest(zf.read(_MANIFEST_NAME).decode("utf-8", errors="replace"))
    except (OSError, zipfile.BadZipFile):
        return False
    return manifest_attribute(manifest, "Automatic-Module-Name") is not None


def find_java_modules(
    paths: Sequence[Path], *, logger: logging.Logger | None = None
) -> list[Path]:
    modules = [normalize(path) for path in paths if is_java_module(path)]
    if logger is not None:
        for module in modules:
            logger.debug("Looks like %s is a JPMS module", module)
    # Sorted for reproducible builds.
    return sorted(modules, key=str)

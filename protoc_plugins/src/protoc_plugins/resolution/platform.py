from __future__ import annotations

from protoc_plugins.contracts.errors import UnsupportedPlatformError
from protoc_plugins.runtime.host import HostSystem

_LINUX_CLASSIFIERS = {
    "amd64": "linux-x86_64",
    "x86_64": "linux-x86_64",
    "aarch64": "linux-aarch_64",
    "arm64": "linux-aarch_64",
    "ppc64le": "linux-ppcle_64",
    "ppc64": "linux-ppcle_64",
    "s390x": "linux-s390_64",
    "zarch_64": "linux-s390_64",
}
_MAC_OS_CLASSIFIERS = {
    "aarch64": "osx-aarch_64",
    "arm64": "osx-aarch_64",
    "amd64": "osx-x86_64",
    "x86_64": "osx-x86_64",
}
_WINDOWS_CLASSIFIERS = {
    "amd64": "windows-x86_64",
    "x86_64": "windows-x86_64",
    "x86": "windows-x86_32",
    "x86_32": "windows-x86_32",
    "i386": "windows-x86_32",
    "i686": "windows-x86_32",
}


class PlatformClassifierFactory:
    """Maps the host OS and CPU onto the classifiers used for published protoc binaries."""

    def __init__(self, host: HostSystem) -> None:
        self._host = host

    def classifier_for(self, binary_name: str) -> str:
        arch = self._host.cpu_architecture.strip().lower()

        if self._host.is_probably_linux():
            table = _LINUX_CLASSIFIERS
        elif self._host.is_probably_mac_os():
            table = _MAC_OS_CLASSIFIERS
        elif self._host.is_probably_windows():
            table = _WINDOWS_CLASSIFIERS
        else:
            table = {}

        try:
            return table[arch]
        except KeyError as e:
            raise UnsupportedPlatformError(
                f"No '{binary_name}' binary is available for reported OS "
                f"'{self._host.operating_system}' and CPU architecture "
                f"'{self._host.cpu_architecture}'"
            ) from e

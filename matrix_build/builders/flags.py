"""
Compiler flag and toolchain resolution per target
"""

from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import UnsupportedTargetError
from ..job import LinkageType, Target
from ..platform import HostInfo, normalize_arch, requires_cross_toolchain

UNIX_FAMILY = ("darwin", "linux")
WINDOWS_FAMILY = ("windows",)

# -march value per architecture for GCC/Clang
UNIX_MARCH = {
    "x86_64": "x86-64",
    "arm64": "armv8-a",
    "aarch64": "armv8-a",
}

# /Oy (frame pointer omission) does not exist for ARM64 cl.exe
MSVC_COMPILE = {
    "x86_64": "/O2 /Ob2 /Oi /Ot /Oy /GL /DNDEBUG",
    "aarch64": "/O2 /Ob2 /Oi /Ot /GL /DNDEBUG",
}
MSVC_LINK = "/LTCG /OPT:REF /OPT:ICF"

CMAKE_SYSTEM_NAMES = {
    "darwin": "Darwin",
    "linux": "Linux",
    "windows": "Windows",
}

LIB_EXTENSIONS: Dict[Tuple[str, LinkageType], str] = {
    ("darwin", LinkageType.STATIC): "a",
    ("darwin", LinkageType.SHARED): "dylib",
    ("linux", LinkageType.STATIC): "a",
    ("linux", LinkageType.SHARED): "so",
    ("windows", LinkageType.STATIC): "lib",
    ("windows", LinkageType.SHARED): "dll",
}

VS_ARCHITECTURES = {
    "x86_64": "x64",
    "aarch64": "ARM64",
    "arm64": "ARM64",
}


class FlagResolver:
    """Maps a target onto CMake cache arguments

    Output depends only on the (platform, arch) input and on the host and
    cross prefixes fixed at construction, so repeated calls are identical.
    """

    def __init__(self, host: HostInfo, config: Any):
        """
        Args:
            host: Host the build runs on
            config: ConfigLoader providing cross toolchain prefixes
        """
        self.host = host
        self.config = config

    def optimization_flags(self, platform: str, arch: str) -> List[str]:
        """Release optimization flags in the syntax of the target's toolchain family"""
        if platform in UNIX_FAMILY:
            march = UNIX_MARCH.get(arch)
            if march is None:
                raise UnsupportedTargetError(platform, arch)
            flags = (f"-O3 -DNDEBUG -march={march} -mtune=generic -fomit-frame-pointer "
                     f"-funroll-loops -ffast-math -flto")
            return [
                f"-DCMAKE_C_FLAGS_RELEASE={flags}",
                f"-DCMAKE_CXX_FLAGS_RELEASE={flags}",
            ]

        if platform in WINDOWS_FAMILY:
            compile_flags = MSVC_COMPILE.get(arch)
            if compile_flags is None:
                raise UnsupportedTargetError(platform, arch)
            return [
                f"-DCMAKE_C_FLAGS_RELEASE={compile_flags}",
                f"-DCMAKE_CXX_FLAGS_RELEASE={compile_flags}",
                f"-DCMAKE_EXE_LINKER_FLAGS_RELEASE={MSVC_LINK}",
                f"-DCMAKE_SHARED_LINKER_FLAGS_RELEASE={MSVC_LINK}",
            ]

        raise UnsupportedTargetError(platform, arch)

    def toolchain_args(self, platform: str, arch: str) -> List[str]:
        """System identification and cross compiler arguments for the target"""
        if platform not in CMAKE_SYSTEM_NAMES or arch not in UNIX_MARCH:
            raise UnsupportedTargetError(platform, arch)

        system_name = CMAKE_SYSTEM_NAMES[platform]

        if platform == "darwin":
            return [f"-DCMAKE_OSX_ARCHITECTURES={arch}", f"-DCMAKE_SYSTEM_NAME={system_name}"]

        if platform == "windows":
            return [f"-DCMAKE_SYSTEM_NAME={system_name}", f"-DCMAKE_SYSTEM_PROCESSOR={arch}"]

        target = Target(platform, arch)
        prefix = self.config.get_cross_prefix(platform, arch)
        if requires_cross_toolchain(self.host, target, prefix):
            return [
                f"-DCMAKE_SYSTEM_NAME={system_name}",
                f"-DCMAKE_SYSTEM_PROCESSOR={arch}",
                f"-DCMAKE_C_COMPILER={prefix}-gcc",
                f"-DCMAKE_CXX_COMPILER={prefix}-g++",
            ]

        if self.host.platform != platform or normalize_arch(self.host.arch) != normalize_arch(arch):
            return [f"-DCMAKE_SYSTEM_NAME={system_name}", f"-DCMAKE_SYSTEM_PROCESSOR={arch}"]

        # native build
        return []

    @staticmethod
    def library_extension(platform: str, linkage: LinkageType) -> str:
        """File extension (without dot) of the library produced for a target"""
        try:
            return LIB_EXTENSIONS[(platform, linkage)]
        except KeyError:
            raise UnsupportedTargetError(platform, linkage.value) from None

    @staticmethod
    def generator_args(generator: str, arch: str) -> List[str]:
        """
        Generator selection arguments

        Only Visual Studio generators accept -A; Ninja and Makefiles take the
        architecture from the toolchain.
        """
        args = ["-G", generator]
        if "Visual Studio" in generator:
            vs_arch: Optional[str] = VS_ARCHITECTURES.get(arch)
            if vs_arch:
                args.extend(["-A", vs_arch])
        return args


__all__ = ["FlagResolver", "LIB_EXTENSIONS"]

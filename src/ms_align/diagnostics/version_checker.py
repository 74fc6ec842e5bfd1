"""
Version report for ms-align and its dependencies.
"""

import platform
import sys
from importlib import metadata
from typing import Dict, Tuple

REQUIRED_PACKAGES = {
    'numpy': '1.21.0',
    'biopython': '1.79',
    'PyYAML': '6.0',
    'psutil': '5.9.0',
}

def get_package_version(package_name: str) -> str:
    """Get version of installed package using importlib.metadata."""
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return "Not installed"

def _version_tuple(version: str) -> Tuple[int, ...]:
    parts = []
    for part in version.split('.')[:3]:
        digits = ''.join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)

def check_package(package_name: str, min_version: str) -> Tuple[bool, str, str]:
    """Check if package meets version requirements."""
    installed_version = get_package_version(package_name)
    if installed_version == "Not installed":
        return False, installed_version, min_version
    return _version_tuple(installed_version) >= _version_tuple(min_version), installed_version, min_version

def check_all_packages() -> Dict[str, Tuple[bool, str, str]]:
    return {name: check_package(name, min_version) for name, min_version in REQUIRED_PACKAGES.items()}

def print_version_report():
    """Print versions of Python, ms-align and its dependencies."""
    from .. import __version__

    print("=" * 60)
    print(f"ms-align {__version__}")
    print("=" * 60)
    print(f"Python:   {sys.version.split()[0]}")
    print(f"Platform: {platform.platform()}")
    print("-" * 60)
    for name, (ok, installed, required) in check_all_packages().items():
        status = "OK" if ok else "MISSING" if installed == "Not installed" else "OUTDATED"
        print(f"{name:<12} {installed:<16} (>= {required})  {status}")
    print("=" * 60)

__all__ = [
    'REQUIRED_PACKAGES',
    'get_package_version',
    'check_package',
    'check_all_packages',
    'print_version_report',
]

"""Filesystem locations shared by the infrastructure and services."""

import os
import sys
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent


def platform_dir(kind: str, app_name: str = "TimeLedger") -> Path:
    """
    Per-user directory for 'config' or 'data' files.

    Windows keeps both under %APPDATA%; elsewhere the XDG defaults
    ~/.config and ~/.local/share are used.
    """
    if os.name == 'nt':
        return Path(os.getenv('APPDATA', Path.home())) / app_name
    if kind == 'config':
        return Path.home() / '.config' / app_name.lower()
    return Path.home() / '.local' / 'share' / app_name.lower()


def get_resource_path(*parts: str) -> Path:
    """
    Absolute path of a bundled resource, e.g. get_resource_path("templates").

    Works from a source checkout, an installed package and a PyInstaller
    bundle (which unpacks the package under sys._MEIPASS).
    """
    base = PACKAGE_DIR
    if hasattr(sys, '_MEIPASS'):
        base = Path(sys._MEIPASS) / PACKAGE_DIR.name
    return base.joinpath('resources', *parts)

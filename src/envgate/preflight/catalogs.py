"""Ordered requirement catalogs.

Order is significant: the first unmet entry is the one reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class RequirementEntry:
    """A named precondition paired with its stable error id."""

    name: str
    code: int


# Python counterparts of the extensions the host application relies on.
REQUIRED_MODULES: Final[tuple[RequirementEntry, ...]] = (
    RequirementEntry("inspect", 1329403179),
    RequirementEntry("tokenize", 1329403180),
    RequirementEntry("json", 1329403181),
    RequirementEntry("http.cookies", 1329403182),
    RequirementEntry("ctypes", 1329403183),
    RequirementEntry("xml.dom.minidom", 1329403184),
    RequirementEntry("datetime", 1329403185),
    RequirementEntry("pyexpat", 1329403186),
    RequirementEntry("xml.sax", 1329403187),
    RequirementEntry("xml.sax.saxutils", 1329403188),
    RequirementEntry("xml.etree.ElementTree", 1329403189),
    RequirementEntry("ssl", 1329403190),
    RequirementEntry("re", 1329403191),
    RequirementEntry("zlib", 1329403192),
    RequirementEntry("urllib.parse", 1329403193),
    RequirementEntry("collections", 1329403194),
    RequirementEntry("codecs", 1329403195),
    RequirementEntry("sqlite3", 1329403196),
    RequirementEntry("hashlib", 1329403198),
)

# Dotted paths of callables used to run and quote shell commands.
REQUIRED_CALLABLES: Final[tuple[RequirementEntry, ...]] = (
    RequirementEntry("os.system", 1330707108),
    RequirementEntry("subprocess.check_output", 1330707133),
    RequirementEntry("shlex.join", 1330707156),
    RequirementEntry("shlex.quote", 1330707177),
)

# Relative to the application root.
REQUIRED_WRITABLE_DIRECTORIES: Final[tuple[str, ...]] = (
    "Configuration",
    "Data",
    "Packages",
    "Web/_Resources",
)

__all__ = [
    "REQUIRED_CALLABLES",
    "REQUIRED_MODULES",
    "REQUIRED_WRITABLE_DIRECTORIES",
    "RequirementEntry",
]

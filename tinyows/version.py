"""Service and PostGIS version numbers of the form x.y.z."""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_SHAPE = re.compile(r"[0-9].[0-9].[0-9]")
_ZERO = ord("0")


@dataclass
class Version:
    """A three-part version number; -1 marks an unset part."""

    major: int = -1
    minor: int = -1
    release: int = -1

    @classmethod
    def from_string(cls, text: str) -> "Version":
        """Parse single-digit parts such as '1.1.0'.

        Only the digit before each dot and the final character count,
        so two-digit parts are not supported.
        """
        if not _VERSION_SHAPE.search(text):
            raise ValueError(f"invalid version string: {text!r}")
        major = minor = -1
        previous = -1
        for char in text:
            if char == ".":
                if major < 0:
                    major = previous - _ZERO
                elif minor < 0:
                    minor = previous - _ZERO
            previous = ord(char)
        release = ord(text[-1]) - _ZERO
        return cls(major, minor, release)

    def as_int(self) -> int:
        """Return major*100 + minor*10 + release."""
        return self.major * 100 + self.minor * 10 + self.release

    def is_set(self) -> bool:
        return -1 not in (self.major, self.minor, self.release)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.release}"
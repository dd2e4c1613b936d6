"""
Distribution identity — what the host is, detected once per run.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

UNKNOWN = "unknown"


class Family(StrEnum):
    """Package-management family of a distribution."""

    DEBIAN = "debian-like"
    RPM = "rpm-like"
    UNKNOWN = "unknown"


# id → (family, vendor repository flavor)
_DISTRIBUTIONS: dict[str, tuple[Family, str]] = {
    "ubuntu": (Family.DEBIAN, "ubuntu"),
    "debian": (Family.DEBIAN, "debian"),
    "fedora": (Family.RPM, "fedora"),
    "centos": (Family.RPM, "centos"),
    "rhel": (Family.RPM, "centos"),
}

SUPPORTED_DISTRIBUTIONS: tuple[str, ...] = tuple(_DISTRIBUTIONS)


class DistributionIdentity(BaseModel):
    """The (id, version) pair of the running distribution.

    ``id`` keeps whatever the OS reported (``arch``, ``alpine``...) so
    later steps can name unsupported systems. ``unknown`` means no
    identification source matched at all.
    """

    model_config = ConfigDict(frozen=True)

    id: str = UNKNOWN
    version: str = ""
    codename: str = ""
    source: str = ""                # file the identity was read from

    @property
    def known(self) -> bool:
        return bool(self.id) and self.id != UNKNOWN

    @property
    def supported(self) -> bool:
        return self.id in _DISTRIBUTIONS

    @property
    def family(self) -> Family:
        entry = _DISTRIBUTIONS.get(self.id)
        return entry[0] if entry else Family.UNKNOWN

    @property
    def flavor(self) -> str:
        """Path segment of the vendor repository (``linux/<flavor>``)."""
        entry = _DISTRIBUTIONS.get(self.id)
        return entry[1] if entry else ""

    def __str__(self) -> str:
        if self.version:
            return f"{self.id} {self.version}"
        return self.id

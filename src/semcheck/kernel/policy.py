"""Check a crate verdict against the declared version bump."""

import re
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from semcheck.codes import BumpLevel, Severity
from semcheck.kernel.errors import ConfigError

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+([0-9A-Za-z.-]+))?$"
)


class Version(BaseModel):
    """A parsed MAJOR.MINOR.PATCH version. Pre-release and build are kept but not ordered."""
    major: int
    minor: int
    patch: int
    pre: Optional[str] = None
    build: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def core(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            out += f"-{self.pre}"
        if self.build:
            out += f"+{self.build}"
        return out


def parse_version(text: str) -> Version:
    """Parse a semver string (raises ConfigError)."""
    if not isinstance(text, str):
        raise ConfigError(f"version must be a string, got {type(text).__name__}")
    match = _SEMVER_RE.match(text.strip())
    if match is None:
        raise ConfigError(f"unparsable version string: {text!r}")
    major, minor, patch, pre, build = match.groups()
    return Version(major=int(major), minor=int(minor), patch=int(patch), pre=pre, build=build)


class VersionPolicyResult(BaseModel):
    """Outcome of comparing the actual bump with the bump the verdict requires."""
    status: Literal["Match", "Mismatch", "LooserThanRequired"]
    required: BumpLevel
    actual: BumpLevel

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def ok(self) -> bool:
        """Mismatch is the only failing outcome."""
        return self.status != "Mismatch"

    def describe(self) -> str:
        if self.status == "Match":
            return f"Match: {self.actual.value} bump"
        return f"{self.status}: expected {_bump_phrase(self.required)}, found {_bump_phrase(self.actual)}"


def _bump_phrase(level: BumpLevel) -> str:
    return "no bump" if level == BumpLevel.NONE else f"{level.value} bump"


def bump_level(old: Version, new: Version) -> BumpLevel:
    """Which component the release increased; NONE for equal or lower versions."""
    if new.major > old.major:
        return BumpLevel.MAJOR
    if new.major < old.major:
        return BumpLevel.NONE
    if new.minor > old.minor:
        return BumpLevel.MINOR
    if new.minor < old.minor:
        return BumpLevel.NONE
    if new.patch > old.patch:
        return BumpLevel.PATCH
    return BumpLevel.NONE


def required_bump(old: Version, severity: Severity) -> BumpLevel:
    """Smallest bump allowed for `severity`.

    Pre-1.0 crates use the minor component as the breaking boundary.
    """
    if severity == Severity.BREAKING:
        return BumpLevel.MINOR if old.major == 0 else BumpLevel.MAJOR
    if severity == Severity.TECHNICALLY_BREAKING:
        return BumpLevel.MINOR
    return BumpLevel.PATCH


def check_version_policy(old_version: str, new_version: str, overall_severity: Severity) -> VersionPolicyResult:
    """Compare the declared version change against the verdict.

    Raises:
        ConfigError: if either version string cannot be parsed
    """
    old = parse_version(old_version)
    new = parse_version(new_version)
    required = required_bump(old, overall_severity)
    actual = bump_level(old, new)

    if actual.rank < required.rank:
        status = "Mismatch"
    elif actual.rank > required.rank:
        status = "LooserThanRequired"
    else:
        status = "Match"
    return VersionPolicyResult(status=status, required=required, actual=actual)

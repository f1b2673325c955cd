"""semcheck: semver compatibility checking for library API trees."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("semcheck")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
# Note: compare is exported from semcheck.api, not from root
from semcheck.api import diff_trees, load_tree, check_versions
from semcheck.config import CompareConfig
from semcheck.contracts import CompatibilityReport, ReportedChange
from semcheck.codes import ChangeKind, ItemKind, Severity, Visibility
from semcheck.kernel.errors import ConfigError, InvalidInputError, SemcheckError

__all__ = [
    "__version__",
    "diff_trees",
    "load_tree",
    "check_versions",
    "CompareConfig",
    "CompatibilityReport",
    "ReportedChange",
    "ChangeKind",
    "ItemKind",
    "Severity",
    "Visibility",
    "ConfigError",
    "InvalidInputError",
    "SemcheckError",
]

"""Public API for semcheck.

High-level functions that load API trees, run the comparison and return
complete, structured results. Callers should use these instead of
importing kernel modules directly.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError

from semcheck.codes import Severity
from semcheck.config import CompareConfig
from semcheck.contracts import CompatibilityReport
from semcheck.kernel.aggregate import CrateVerdict
from semcheck.kernel.engine import compare_trees
from semcheck.kernel.errors import ConfigError, InvalidInputError
from semcheck.kernel.policy import VersionPolicyResult, check_version_policy, parse_version
from semcheck.kernel.tree import APIItem, parse_tree

TreeSource = Union[APIItem, Dict, str, os.PathLike, Path]
ConfigSource = Union[CompareConfig, Dict, None]


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def _load_tree_from_path(path: Path) -> APIItem:
    """Load an API tree from a JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"API tree file is not valid JSON: {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInputError(f"API tree file must hold a JSON object: {path}")
    return parse_tree(data)


def load_tree(source: TreeSource) -> APIItem:
    """Load an API tree from a model, a dict (nested or flat records) or a JSON path."""
    if isinstance(source, APIItem):
        return source
    if isinstance(source, dict):
        return parse_tree(source)
    return _load_tree_from_path(_normalize_path(source))


def _load_config(config: ConfigSource) -> CompareConfig:
    if config is None:
        return CompareConfig()
    if isinstance(config, CompareConfig):
        return config
    try:
        return CompareConfig(**config)
    except ValidationError as e:
        raise ConfigError(f"Invalid comparison config: {e}") from e


def diff_trees(old_tree: TreeSource, new_tree: TreeSource, config: ConfigSource = None) -> CrateVerdict:
    """Compare two API trees without a version check."""
    cfg = _load_config(config)
    old_root = load_tree(old_tree)
    new_root = load_tree(new_tree)
    return compare_trees(old_root, new_root, cfg)


def check_versions(old_version: str, new_version: str, verdict: Union[Severity, str]) -> VersionPolicyResult:
    """Check a declared version change against a verdict."""
    return check_version_policy(old_version, new_version, Severity(verdict))


def compare(
    old_tree: TreeSource,
    new_tree: TreeSource,
    old_version: str,
    new_version: str,
    config: ConfigSource = None,
) -> CompatibilityReport:
    """
    Full compatibility check between two versions of a library's API.

    Version strings and both trees are checked before any comparison runs,
    so a bad input never yields a partial report.

    Raises:
        ConfigError: unparsable version strings or invalid config
        InvalidInputError: malformed API tree
    """
    parse_version(old_version)
    parse_version(new_version)

    verdict = diff_trees(old_tree, new_tree, config)
    policy = check_version_policy(old_version, new_version, verdict.overall_severity)
    return CompatibilityReport.build(old_version, new_version, verdict, policy)

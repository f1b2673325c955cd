"""Pytest configuration for tests.

No sys.path hacks - tests import semcheck from the installed package and
tree builders from tests/helpers.py.
"""

import pytest

from helpers import crate, enum, field, fn, module, struct, trait, variant


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def sample_crate():
    """A small crate touching every container kind."""
    return crate(
        fn("init", params=[("level", "u8")], output="bool"),
        struct("Config", fields=[field("name", "String"), field("retries", "u32")]),
        enum("Mode", variants=[variant("Fast"), variant("Slow", fields=[field("0", "u64")])]),
        trait("Codec", items=[fn("encode", params=[("self", "Self")], output="Vec")]),
        module("util", fn("helper"), struct("Opaque", fields=[field("inner", "u8", vis="private")])),
    )

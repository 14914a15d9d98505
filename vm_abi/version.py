"""Package version.

`VM_ABI_VERSION` overrides everything; otherwise the installed distribution
metadata is used, falling back to BASE_VERSION for source checkouts.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump on wire-format-affecting changes (selectors, layouts).
BASE_VERSION = "0.1.0"

DIST_NAME = "vm-abi"


@lru_cache(maxsize=1)
def compute_version() -> str:
    override = os.getenv("VM_ABI_VERSION")
    if override:
        return override
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "DIST_NAME", "compute_version"]

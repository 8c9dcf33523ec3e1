"""depconverge: Dependency tree convergence and build ordering."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Product identity, embedded in generated lockfiles.
_PRODUCT_ID = "depconverge"

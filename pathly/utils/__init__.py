# File: utils/__init__.py
"""Pure Python utilities for Pathly.

Submodules:
    - dt_utils: Timezone configuration, epoch-ms conversion, day boundaries
    - math_utils: Clamping, rounding, percentage calculations

Usage:
    from . import dt_utils
    from .math_utils import clamp
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]

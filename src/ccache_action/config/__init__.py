"""Configuration package.

- Models: ActionInputs, BuildContext
- Loader functions: load_inputs, load_build_context
"""

from __future__ import annotations

from .loader import load_build_context, load_inputs
from .models import ActionInputs, BuildContext

__all__ = [
    "ActionInputs",
    "BuildContext",
    "load_build_context",
    "load_inputs",
]

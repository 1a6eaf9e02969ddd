"""Configuration models.

- ActionInputs: inputs passed to the action by the workflow
- BuildContext: identity of the running job
"""

from __future__ import annotations

from .build_context import ENVIRONMENT_VARIABLES, BuildContext
from .inputs import ActionInputs, split_multiline

__all__ = [
    "ENVIRONMENT_VARIABLES",
    "ActionInputs",
    "BuildContext",
    "split_multiline",
]

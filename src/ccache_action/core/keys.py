"""Cache key derivation.

The default key is built from the most to the least specific identity of
the job::

    setup-ccache-action _ {workflow} _ {job} _ {image} [_ {actor}-{head_ref}]

The last segment is only present for pull request builds, giving every
pull request its own cache series. Fallback (restore) keys are the
prefixes of that sequence, most specific first, so a job falls back from
"this job on this branch" down to "any build of this product".
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ccache_action.config.models import BuildContext
from ccache_action.shared.constants import CacheKeys
from ccache_action.shared.models import PrimaryKey

logger = logging.getLogger(__name__)


def sanitize_segment(value: str, delimiter: str = CacheKeys.DELIMITER) -> str:
    """Strip a segment and replace the delimiter inside it.

    Segment boundaries must stay unambiguous for prefix matching and for
    splitting the timestamp off stored keys.
    """
    return value.strip().replace(delimiter, CacheKeys.ACTOR_BRANCH_SEPARATOR)


class KeyBuilder:
    """Derive the primary cache key and its fallback keys for a job."""

    def __init__(
        self,
        context: BuildContext,
        *,
        namespace: str = CacheKeys.NAMESPACE,
        delimiter: str = CacheKeys.DELIMITER,
    ) -> None:
        self.context = context
        self.namespace = namespace
        self.delimiter = delimiter

    def derive_default_key_segments(self) -> list[str]:
        """Return the ordered default key segments.

        Returns:
            ``[namespace, workflow, job, image]`` plus ``actor-branch`` for
            pull request builds

        Raises:
            ConfigurationError: If workflow, job or image (or the actor of
                a pull request build) is missing
        """
        segments = [
            self.namespace,
            self.context.require("workflow"),
            self.context.require("job"),
            self.context.require("image_os"),
        ]

        if self.context.is_pull_request:
            actor = self.context.require("actor", "the pull request cache key segment")
            segments.append(
                f"{actor}{CacheKeys.ACTOR_BRANCH_SEPARATOR}{self.context.head_ref.strip()}"
            )

        return [sanitize_segment(segment, self.delimiter) for segment in segments]

    def join(self, segments: Sequence[str]) -> str:
        return self.delimiter.join(segments)

    def build_primary_key(self, explicit_override: str | None = None) -> PrimaryKey:
        """Return the override verbatim if given, else the derived key."""
        if explicit_override and explicit_override.strip():
            return PrimaryKey(value=explicit_override.strip(), is_default=False)
        return PrimaryKey(value=self.join(self.derive_default_key_segments()), is_default=True)

    def build_fallback_keys(
        self,
        explicit_override_list: Sequence[str] | None,
        primary_key: PrimaryKey,
    ) -> list[str]:
        """Return the restore keys, most specific first.

        Args:
            explicit_override_list: ``override_cache_key_fallback`` lines;
                returned unchanged when non-empty
            primary_key: Result of build_primary_key()

        Returns:
            The explicit list, ``[primary_key]`` for a user override, or
            every prefix of the default segments down to the namespace
        """
        if explicit_override_list:
            return list(explicit_override_list)

        if not primary_key.is_default:
            return [primary_key.value]

        segments = self.derive_default_key_segments()
        return [self.join(segments[:length]) for length in range(len(segments), 0, -1)]


__all__ = ["KeyBuilder", "sanitize_segment"]

"""Build context model.

Identity of the running job as exposed by the runner environment. The
cache key is derived from these values, so every field is read verbatim
and validated only when a consumer asks for it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ccache_action.shared.constants import GitHubApi, RunnerEnv
from ccache_action.shared.errors import create_missing_context_error

# Field name -> environment variable provided by the runner
ENVIRONMENT_VARIABLES: dict[str, str] = {
    "workflow": RunnerEnv.GITHUB_WORKFLOW,
    "job": RunnerEnv.GITHUB_JOB,
    "image_os": RunnerEnv.IMAGE_OS,
    "head_ref": RunnerEnv.GITHUB_HEAD_REF,
    "actor": RunnerEnv.GITHUB_ACTOR,
    "ref": RunnerEnv.GITHUB_REF,
    "repository": RunnerEnv.GITHUB_REPOSITORY,
    "api_url": "GITHUB_API_URL",
    "results_url": "ACTIONS_RESULTS_URL",
    "runtime_token": "ACTIONS_RUNTIME_TOKEN",
}


class BuildContext(BaseModel):
    """Workflow, job, runner image and ref of the current job."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    workflow: str = Field(default="", description="Workflow name")
    job: str = Field(default="", description="Job id")
    image_os: str = Field(default="", description="Runner image identifier, e.g. ubuntu22")
    head_ref: str = Field(default="", description="Pull request head branch, empty otherwise")
    actor: str = Field(default="", description="User that triggered the run")
    ref: str = Field(default="", description="Fully qualified ref of the run")
    repository: str = Field(default="", description="owner/repo")
    api_url: str = Field(default=GitHubApi.DEFAULT_API_URL, description="REST API base URL")
    results_url: str = Field(default="", description="Cache service base URL")
    runtime_token: SecretStr = Field(default=SecretStr(""), description="Cache service token")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildContext:
        """Read the context from the runner environment.

        Unset and empty variables keep the field defaults.
        """
        environ = os.environ if environ is None else environ
        values = {
            field_name: environ[variable]
            for field_name, variable in ENVIRONMENT_VARIABLES.items()
            if environ.get(variable)
        }
        return cls(**values)

    @property
    def is_pull_request(self) -> bool:
        """True when the job runs for a pull request head branch."""
        return bool(self.head_ref.strip())

    def require(self, field_name: str, purpose: str = "the default cache key") -> str:
        """Return a non-blank field value.

        Raises:
            ConfigurationError: If the value is missing or blank
        """
        value = getattr(self, field_name)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        value = str(value).strip()
        if not value:
            variable = ENVIRONMENT_VARIABLES.get(field_name, field_name)
            raise create_missing_context_error(variable, purpose)
        return value

    def owner_and_repo(self) -> tuple[str, str]:
        """Split ``owner/repo``.

        Raises:
            ConfigurationError: If the repository is missing or malformed
        """
        repository = self.require("repository", "listing remote cache entries")
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise create_missing_context_error(
                RunnerEnv.GITHUB_REPOSITORY,
                "listing remote cache entries (expected 'owner/repo')",
            )
        return owner, repo


__all__ = ["ENVIRONMENT_VARIABLES", "BuildContext"]

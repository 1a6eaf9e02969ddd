"""setup-ccache-action: restore, configure and persist a ccache directory in CI."""

from ccache_action.shared.constants import CLIDefaults

__version__ = CLIDefaults.VERSION

__all__ = ["__version__"]

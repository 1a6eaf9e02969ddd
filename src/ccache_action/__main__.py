"""Entry point for ``python -m ccache_action``."""

from ccache_action.cli.typer_app import app

if __name__ == "__main__":
    app()

"""Main CLI application module."""

from .catalog_commands import catalog_app
from .server_commands import serve

# The catalog commands form the top level of the CLI
app = catalog_app
app.command(name="serve")(serve)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

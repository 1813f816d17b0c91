"""Main CLI entry point."""

import typer
from dotenv import load_dotenv

from .output import console
from .rules import preview_patch, rules
from .scan import scan

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="actions-maintainer",
    help="Find and fix outdated GitHub Actions across repositories",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


app.command(name="scan", context_settings={"help_option_names": ["-h", "--help"]})(
    scan
)
app.command(name="rules", context_settings={"help_option_names": ["-h", "--help"]})(
    rules
)
app.command(
    name="preview-patch", context_settings={"help_option_names": ["-h", "--help"]}
)(preview_patch)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from actions_maintainer import __version__

    console.print(f"actions-maintainer v{__version__}")


if __name__ == "__main__":
    app()

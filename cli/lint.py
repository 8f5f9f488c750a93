from cli._runner import run


def main() -> None:
    """Run linting."""
    import sys

    sys.exit(run(["uv", "run", "ruff", "check", "app", "cli", "scripts", "tests"]))


def format() -> None:
    """Run code formatting."""
    import sys

    sys.exit(run(["uv", "run", "ruff", "format", "app", "cli", "scripts", "tests"]))

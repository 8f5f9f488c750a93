from cli._runner import run


def main() -> None:
    """Generate the OpenAPI document for the cash card API."""
    import sys

    sys.exit(run([sys.executable, "scripts/generate_openapi.py", *sys.argv[1:]]))

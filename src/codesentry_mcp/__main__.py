"""Allow ``python -m codesentry_mcp``."""

from codesentry_mcp.cli import app

if __name__ == "__main__":
    app()

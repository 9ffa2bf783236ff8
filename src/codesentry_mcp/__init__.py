"""CodeSentry MCP server - code review assistant over the Model Context Protocol."""

__version__ = "1.0.0"

SERVER_NAME = "codesentry-mcp"
SERVER_DESCRIPTION = "AI-Powered Code Review Assistant using Model Context Protocol"

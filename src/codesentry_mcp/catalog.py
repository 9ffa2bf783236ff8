"""Static tool, resource and prompt tables served by CodeSentry.

Nothing here changes after import. Descriptor names and URIs are unique
within their table.
"""

from __future__ import annotations

from mcp import types

PING_TOOL = "ping"
ANALYZE_REPOSITORY_TOOL = "analyze_repository"

CONFIG_RESOURCE_URI = "codesentry://config"
JSON_MIME_TYPE = "application/json"

CODE_REVIEW_PROMPT = "code_review"
SECURITY_AUDIT_PROMPT = "security_audit"

TOOLS: tuple[types.Tool, ...] = (
    types.Tool(
        name=PING_TOOL,
        description="Test connectivity to the CodeSentry server",
        inputSchema={
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "Optional message to echo back",
                },
            },
        },
    ),
    types.Tool(
        name=ANALYZE_REPOSITORY_TOOL,
        description="Analyze a git repository for security, performance, and quality issues",
        inputSchema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the repository to analyze",
                },
                "config": {
                    "type": "object",
                    "description": "Analysis configuration options",
                    "properties": {
                        "enableSecurity": {"type": "boolean"},
                        "enablePerformance": {"type": "boolean"},
                        "enableQuality": {"type": "boolean"},
                        "enableDocumentation": {"type": "boolean"},
                    },
                },
            },
            "required": ["path"],
        },
    ),
)

RESOURCES: tuple[types.Resource, ...] = (
    types.Resource(
        uri=CONFIG_RESOURCE_URI,
        name="CodeSentry Configuration",
        description="Current analysis configuration settings",
        mimeType=JSON_MIME_TYPE,
    ),
)

PROMPTS: tuple[types.Prompt, ...] = (
    types.Prompt(
        name=CODE_REVIEW_PROMPT,
        description=(
            "Comprehensive code review prompt for analyzing code quality, "
            "security, and performance"
        ),
    ),
    types.Prompt(
        name=SECURITY_AUDIT_PROMPT,
        description=(
            "Security-focused analysis prompt for identifying vulnerabilities "
            "and security issues"
        ),
    ),
)

# name -> (result description, message body)
PROMPT_BODIES: dict[str, tuple[str, str]] = {
    CODE_REVIEW_PROMPT: (
        "Comprehensive code review analysis",
        "Please perform a comprehensive code review focusing on:\n\n"
        "1. **Security**: Look for vulnerabilities, security anti-patterns, "
        "and potential attack vectors\n"
        "2. **Performance**: Identify bottlenecks, inefficient algorithms, "
        "and optimization opportunities\n"
        "3. **Quality**: Check for code smells, maintainability issues, "
        "and best practices\n"
        "4. **Documentation**: Assess documentation completeness and clarity\n\n"
        "Provide specific, actionable feedback with file locations and "
        "suggested improvements.",
    ),
    SECURITY_AUDIT_PROMPT: (
        "Security-focused code analysis",
        "Perform a thorough security audit of the codebase. Focus on:\n\n"
        "1. **OWASP Top 10** vulnerabilities\n"
        "2. **Input validation** and sanitization\n"
        "3. **Authentication** and authorization flaws\n"
        "4. **Cryptographic** implementations\n"
        "5. **Dependency** vulnerabilities\n"
        "6. **Data exposure** risks\n\n"
        "Provide severity ratings and specific remediation steps for each "
        "issue found.",
    ),
}

"""Data contracts for CodeSentry.

AnalysisConfig is served as the ``codesentry://config`` resource and
AnalysisOptions is the optional ``config`` argument of ``analyze_repository``.
The issue and report models describe what a repository analysis will return;
nothing produces them yet.

All models use camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisConfig(CamelModel):
    """Which analyses run and which files they consider."""

    model_config = ConfigDict(frozen=True)

    enable_security: bool = True
    enable_performance: bool = True
    enable_quality: bool = True
    enable_documentation: bool = True
    max_file_size: int = Field(default=1024 * 1024, description="Per-file limit in bytes")
    supported_extensions: tuple[str, ...] = (
        ".ts",
        ".js",
        ".tsx",
        ".jsx",
        ".py",
        ".go",
        ".rs",
        ".java",
        ".cpp",
        ".c",
    )
    ignore_patterns: tuple[str, ...] = (
        "node_modules/",
        "dist/",
        "build/",
        ".git/",
        "*.min.js",
    )

    def to_json(self) -> str:
        """Serialize as indented camelCase JSON."""
        return self.model_dump_json(by_alias=True, indent=2)


DEFAULT_ANALYSIS_CONFIG = AnalysisConfig()


class AnalysisOptions(CamelModel):
    """Per-call overrides accepted by ``analyze_repository``."""

    enable_security: bool | None = None
    enable_performance: bool | None = None
    enable_quality: bool | None = None
    enable_documentation: bool | None = None


SecuritySeverity = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
Severity = Literal["LOW", "MEDIUM", "HIGH"]

SecurityIssueType = Literal[
    "SQL_INJECTION",
    "XSS",
    "CSRF",
    "INSECURE_CRYPTO",
    "PATH_TRAVERSAL",
    "COMMAND_INJECTION",
    "AUTHENTICATION_BYPASS",
    "AUTHORIZATION_FLAW",
    "SENSITIVE_DATA_EXPOSURE",
    "DEPENDENCY_VULNERABILITY",
    "HARDCODED_SECRET",
]

PerformanceIssueType = Literal[
    "ALGORITHM_COMPLEXITY",
    "MEMORY_LEAK",
    "BLOCKING_OPERATION",
    "INEFFICIENT_QUERY",
    "LARGE_OBJECT",
    "REGEX_PERFORMANCE",
    "LOOP_OPTIMIZATION",
    "CACHING_OPPORTUNITY",
]

QualityIssueType = Literal[
    "CODE_SMELL",
    "DUPLICATION",
    "COMPLEXITY",
    "NAMING_CONVENTION",
    "DEAD_CODE",
    "MAGIC_NUMBER",
    "LONG_METHOD",
    "LARGE_CLASS",
]

DocumentationIssueType = Literal[
    "MISSING_FUNCTION_DOC",
    "MISSING_CLASS_DOC",
    "MISSING_PARAM_DOC",
    "MISSING_RETURN_DOC",
    "OUTDATED_DOC",
    "MISSING_README",
    "MISSING_API_DOC",
]


class Issue(CamelModel):
    """Fields shared by every finding."""

    id: str
    file: str
    line: int
    title: str
    description: str
    suggestion: str


class SecurityIssue(Issue):
    type: SecurityIssueType
    severity: SecuritySeverity
    column: int | None = None
    fix: str | None = None
    cwe: str | None = Field(default=None, description="Common Weakness Enumeration id")
    owasp: str | None = Field(default=None, description="OWASP Top 10 reference")


class PerformanceIssue(Issue):
    type: PerformanceIssueType
    severity: Severity
    column: int | None = None
    complexity: str | None = Field(default=None, description='e.g. "O(n^2)"')
    estimated_impact: str | None = Field(default=None, description='e.g. "90% improvement"')


class QualityIssue(Issue):
    type: QualityIssueType
    severity: Severity
    column: int | None = None


class DocumentationIssue(Issue):
    type: DocumentationIssueType
    severity: Severity


class AnalysisSummary(CamelModel):
    total_files: int
    total_lines: int
    security_issues: int
    performance_issues: int
    quality_issues: int
    documentation_issues: int
    overall_score: int = Field(ge=0, le=100)


class CodeMetrics(CamelModel):
    lines_of_code: int
    cyclomatic_complexity: float
    maintainability_index: float
    technical_debt: str = Field(description='e.g. "2 hours"')
    test_coverage: float | None = None
    duplicated_lines: int | None = None


class AnalysisReport(CamelModel):
    """Complete result of a repository analysis."""

    id: str
    timestamp: datetime
    repository: str
    branch: str
    commit: str
    files: list[str]
    summary: AnalysisSummary
    security: list[SecurityIssue] = Field(default_factory=list)
    performance: list[PerformanceIssue] = Field(default_factory=list)
    quality: list[QualityIssue] = Field(default_factory=list)
    documentation: list[DocumentationIssue] = Field(default_factory=list)
    metrics: CodeMetrics


class RepositoryInfo(CamelModel):
    name: str
    path: str
    branch: str
    commit: str
    url: str | None = None
    size: int
    file_count: int
    languages: dict[str, int] = Field(default_factory=dict, description="Language -> line count")


class AIAnalysisOptions(CamelModel):
    provider: Literal["openai", "anthropic"]
    model: str
    max_tokens: int
    temperature: float
    include_context: bool


class GitHubIntegration(CamelModel):
    token: str
    owner: str
    repo: str
    enable_comments: bool
    enable_status_checks: bool

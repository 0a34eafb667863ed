"""railctl - Declarative guardrail configuration for project repositories."""

__version__ = "0.6.0"

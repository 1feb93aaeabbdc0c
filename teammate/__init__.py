"""TeamMate: balanced team formation.

Modules:
- config: load and validate configuration (YAML or JSON)
- domain: roster types, SQLAlchemy models and repositories
- engine: categorizer, greedy allocator, local-search balancer, orchestration
- services: composition rules and team reports
- ai: CP-SAT formation strategy
- io: participant/team CSV import and export
- survey: interactive personality survey
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "engine",
    "services",
    "ai",
    "io",
    "survey",
    "cli",
]

"""
PCE API Client.

- api/: HTTP transport, async job polling, rate-limit aware request orchestrator
- core/: Configuration, logging, exceptions, resilience helpers
- policy/: Label group models, lookup table and expansion
- services/: Resource services built on the API client
- cli/: Command-line front end (Typer + Rich)
"""

__version__ = "0.1.0"

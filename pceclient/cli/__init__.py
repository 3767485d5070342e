"""
CLI Module.

Command-line front end built with Typer and Rich.

Architecture:
- CLI is a thin presentation layer
- All API logic lives in pceclient.api and pceclient.services
- Configuration comes from config/settings/pce.yaml and config/.env

Usage:
    python cli.py --help
    python cli.py label-groups list --status draft
    python cli.py label-groups expand /orgs/1/sec_policy/draft/label_groups/7
"""

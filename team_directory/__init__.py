"""
Team directory package: turns a Slack channel roster into a PowerPoint deck.

Modules:
- core: pipeline orchestration and cleanup
- config: run configuration loaded from the environment
- roster: channel membership and user profile resolution
- assets: ephemeral image store for one run
- acquirer: best-effort profile photo download
- render: slide building and deck persistence
- preflight: configuration and connectivity checks
"""

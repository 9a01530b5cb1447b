"""HTTP surface for the agent."""

from stepagent.server.app import create_app

__all__ = ["create_app"]

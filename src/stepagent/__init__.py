"""stepagent — a plan/act/observe assistant driven by an LLM."""

__version__ = "0.1.0"

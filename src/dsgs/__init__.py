"""DSGS: task-aware constraint generation exposed over an MCP-style protocol."""

__version__ = "1.0.0"

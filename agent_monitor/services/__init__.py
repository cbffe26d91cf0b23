"""Services for agent-monitor."""

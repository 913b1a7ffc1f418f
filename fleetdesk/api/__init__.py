"""HTTP layer: command routes, health probes and error handlers."""

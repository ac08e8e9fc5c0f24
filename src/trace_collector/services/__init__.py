"""Services that produce and collect traces."""

"""Client portal backend: notification fan-out, read tracking and the polling client."""

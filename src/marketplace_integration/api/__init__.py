"""HTTP surface of the integration backend."""

"""HTTP API for factrag."""

"""Lastkajen HTTP API: client, wire models and error taxonomy."""

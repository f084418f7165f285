"""Core infrastructure: request loading, logging, literal parsers and secret access."""

"""SIANI infrastructure: relational persistence for the wellness service."""

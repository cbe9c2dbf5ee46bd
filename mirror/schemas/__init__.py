"""Pydantic request and response schemas. Wire format is camelCase."""

"""Core data model, title parsing and errors."""

"""Article lifecycle service."""

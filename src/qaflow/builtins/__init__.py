"""Built-in assertion kinds and plugin commands."""

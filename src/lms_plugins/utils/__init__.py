"""Small shared helpers: canonical JSON and the CLI exit-code contract."""

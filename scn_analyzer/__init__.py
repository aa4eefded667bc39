"""Reference source analyzer: symbols, imports and text rendering."""

"""Application-level utilities: configuration schema, paths and logging."""

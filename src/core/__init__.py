"""Core infrastructure: context, logging, middleware, errors, storage."""

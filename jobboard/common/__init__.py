"""Shared configuration, schemas, caching and repositories."""

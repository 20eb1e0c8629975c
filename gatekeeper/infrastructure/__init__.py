"""Infrastructure layer: Redis-backed admission components and adapters."""

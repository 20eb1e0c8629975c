"""Domain layer: admission value objects, enums, errors, events and ports."""

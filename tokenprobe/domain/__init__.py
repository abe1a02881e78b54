"""Domain layer: value objects and the engine interface."""

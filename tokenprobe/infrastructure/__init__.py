"""Infrastructure adapters around transformers."""

"""Domain layer - range types, range normalization and the error taxonomy."""

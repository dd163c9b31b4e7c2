"""Host adapters for embedding the lispy engine."""

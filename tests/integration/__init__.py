"""Integration tests that drive ``python -m envgate`` in a subprocess."""

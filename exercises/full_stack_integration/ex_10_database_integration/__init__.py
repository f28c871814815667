"""Database integration (legacy run_tests layout)."""

"""Exercise content: one verification module per exercise, discovered by the registry."""

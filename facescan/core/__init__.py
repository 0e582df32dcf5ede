"""Core business logic: batch engine and domain exceptions."""

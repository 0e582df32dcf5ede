"""Application layer: services coordinating the engine and its boundaries."""

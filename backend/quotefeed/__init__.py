"""Live per-symbol quote feed."""

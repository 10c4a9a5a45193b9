"""Domain models and pure helpers for the gardens directory."""

"""Orchestration of sources into the directory and connected garden."""

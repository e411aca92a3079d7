"""Quiz generation, grading, and study summaries backed by chat models."""

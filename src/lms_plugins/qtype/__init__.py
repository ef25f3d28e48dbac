"""Question type plugins."""

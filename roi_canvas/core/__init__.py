"""Core business logic for the ROI Canvas Engine."""

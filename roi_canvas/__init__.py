"""ROI Canvas Engine: AI initiative ROI, portfolio selection and canvas export."""

__version__ = "0.1.0"

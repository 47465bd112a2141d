"""Road pavement deterioration and treatment trigger engine."""

__version__ = "0.4.0"

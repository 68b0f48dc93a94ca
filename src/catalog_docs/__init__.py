"""catalog-docs: render database catalog metadata as markdown documentation."""

__version__ = "0.1.0"

"""Directive expansion, external preprocessors and renderers, and HTML post-processing for Markdown books."""

__version__ = "0.4.51"
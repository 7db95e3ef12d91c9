"""SEO Content Studio -- keyword research, SERP analysis and content generation."""

__version__ = "1.0.0"

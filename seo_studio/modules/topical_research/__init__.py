"""Topical Research module -- topic clusters built from keyword and SERP data."""

from seo_studio.modules.topical_research.clusterer import TopicClusterer, determine_intent

__all__ = ["TopicClusterer", "determine_intent"]

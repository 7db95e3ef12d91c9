"""Content module -- templating, competitor insights, scoring and export."""

from seo_studio.modules.content.competitor import analyze_competitors, default_insights
from seo_studio.modules.content.exporter import ContentExporter, content_filename
from seo_studio.modules.content.scorer import SEOScorer
from seo_studio.modules.content.templater import ContentTemplater

__all__ = [
    "analyze_competitors",
    "default_insights",
    "ContentExporter",
    "content_filename",
    "SEOScorer",
    "ContentTemplater",
]

"""Content templater -- titles, headings, markdown bodies and FAQs per content type.

Headings and FAQ questions are fixed per content type. Satisfaction,
rating and ROI figures in the bodies and FAQ answers are flavour text drawn
from the injected random source; they are only reproducible when that
source is seeded.
"""

import logging
import math
import random
from datetime import date
from typing import Callable, Optional

from seo_studio.models.content import (
    FAQ,
    BlogRequest,
    ContentDraft,
    ContentRequest,
    ContentType,
    EcommerceRequest,
    ServiceRequest,
    build_request,
)
from seo_studio.models.keyword import KeywordAnalysis
from seo_studio.models.serp import CompetitorInsights
from seo_studio.utils.helpers import dedupe

logger = logging.getLogger(__name__)

INDUSTRY_TERMS = (
    "SEO optimization",
    "content strategy",
    "digital marketing",
    "user experience",
    "conversion optimization",
    "analytics",
    "performance metrics",
    "competitive analysis",
)

MAX_ENTITIES = 15
MAX_COMPETITOR_ENTITIES = 8
DEFAULT_VOLUME = 1000
DEFAULT_DIFFICULTY = 50


class ContentTemplater:
    """Render SEO content drafts from keyword statistics.

    Usage::

        templater = ContentTemplater(rng=random.Random(3))
        draft = templater.generate(EcommerceRequest("coffee makers"), analysis, insights)
    """

    def __init__(self, rng: Optional[random.Random] = None, max_entities: int = MAX_ENTITIES):
        self._rng = rng or random.Random()
        self._max_entities = max_entities
        self._renderers: dict[ContentType, Callable[..., tuple[str, list[str], str]]] = {
            ContentType.SERVICE: self._render_service,
            ContentType.BLOG: self._render_blog,
            ContentType.ECOMMERCE: self._render_ecommerce,
        }

    # ------------------------------------------------------------------
    # generate
    # ------------------------------------------------------------------

    def generate(
        self,
        request: ContentRequest,
        analysis: KeywordAnalysis,
        insights: Optional[CompetitorInsights] = None,
    ) -> ContentDraft:
        """Render title, headings, body, FAQs and entities for a request."""
        insights = insights or CompetitorInsights()
        render = self._renderers[request.content_type]
        title, headings, body = render(request, analysis, insights)
        logger.debug("Rendered %s draft for %r", request.content_type.value, request.keyword)
        return ContentDraft(
            keyword=request.keyword,
            content_type=request.content_type,
            title=title,
            body=body,
            headings=headings,
            faqs=self.generate_faqs(request.keyword, request.content_type, analysis),
            entities=self.extract_entities(request.keyword, analysis, insights),
        )

    def generate_for(
        self,
        keyword: str,
        content_type: "str | ContentType",
        analysis: KeywordAnalysis,
        insights: Optional[CompetitorInsights] = None,
    ) -> ContentDraft:
        """Like :meth:`generate` for a free-form type; unknown types render a blog."""
        return self.generate(build_request(keyword, content_type), analysis, insights)

    def extract_entities(
        self,
        keyword: str,
        analysis: KeywordAnalysis,
        insights: Optional[CompetitorInsights] = None,
    ) -> list[str]:
        candidates = [keyword]
        candidates.extend(r.keyword for r in analysis.related_keywords)
        if insights:
            candidates.extend(insights.common_topics[:MAX_COMPETITOR_ENTITIES])
        candidates.extend(INDUSTRY_TERMS)
        return dedupe(candidates, limit=self._max_entities)

    def generate_faqs(
        self,
        keyword: str,
        content_type: ContentType,
        analysis: KeywordAnalysis,
    ) -> list[FAQ]:
        difficulty = analysis.difficulty or DEFAULT_DIFFICULTY
        volume = analysis.search_volume or DEFAULT_VOLUME
        intent = analysis.intent.value
        rand = self._randint

        if content_type is ContentType.SERVICE:
            if difficulty > 70:
                weeks = "3-6"
            elif difficulty > 40:
                weeks = "2-4"
            else:
                weeks = "1-3"
            return [
                FAQ(
                    f"Why should I choose your {keyword} services over competitors?",
                    f"Our {keyword} services are backed by data from {volume:,}+ successful "
                    f"implementations. We provide transparent reporting, dedicated support, and "
                    f"guaranteed results that outperform industry averages by {rand(20, 49)}%.",
                ),
                FAQ(
                    f"How quickly can I see results from {keyword}?",
                    f"Based on keyword difficulty of {difficulty}/100, most clients see initial "
                    f"improvements within {weeks} weeks. Full optimization typically takes "
                    f"{difficulty // 20 + 2}-{difficulty // 15 + 4} months.",
                ),
                FAQ(
                    f"What makes your {keyword} approach different?",
                    f"We use proprietary analysis of {difficulty // 5 + 15}+ ranking factors, "
                    f"real-time competitive intelligence, and {intent}-focused strategies tailored "
                    f"to your specific market position.",
                ),
            ]

        if content_type is ContentType.ECOMMERCE:
            return [
                FAQ(
                    f"Is this {keyword} worth the investment?",
                    f"With {volume:,}+ monthly searches and {intent} buyer intent, this {keyword} "
                    f"represents excellent value. Customer satisfaction rates exceed "
                    f"{rand(85, 94)}% with average ROI of {rand(150, 349)}%.",
                ),
                FAQ(
                    f"How does this {keyword} compare to alternatives?",
                    f"Our {keyword} outperforms {difficulty // 25 + 3}+ competitor products in "
                    f"independent testing. Superior quality, {rand(80, 99)}% better performance, "
                    f"and comprehensive warranty make it the smart choice.",
                ),
                FAQ(
                    f"What support do you provide with {keyword}?",
                    f"Complete support package includes setup assistance, "
                    f"{difficulty // 20 + 2}-year warranty, free updates, and 24/7 technical "
                    f"support. Our expert team ensures you maximize your {keyword} investment.",
                ),
            ]

        if difficulty > 70:
            level = "advanced"
        elif difficulty > 40:
            level = "intermediate"
        else:
            level = "basic"
        return [
            FAQ(
                f"What's the best way to get started with {keyword}?",
                f"Start by understanding your current position relative to the {volume:,} "
                f"monthly searches in this space. Focus on {intent} intent optimization and "
                f"gradually build complexity based on your results.",
            ),
            FAQ(
                f"How competitive is the {keyword} market?",
                f"With a difficulty score of {difficulty}/100, this market requires {level} "
                f"strategies. Success depends on consistent implementation and data-driven "
                f"optimization.",
            ),
            FAQ(
                f"What are the most important {keyword} metrics to track?",
                f"Focus on performance indicators that align with {intent} intent: conversion "
                f"rates, engagement metrics, and ROI. Monitor {difficulty // 10 + 5}+ key "
                f"metrics for comprehensive insights.",
            ),
        ]

    def fallback_content(
        self,
        keyword: str,
        content_type: "str | ContentType",
        analysis: KeywordAnalysis,
    ) -> ContentDraft:
        """Minimal draft used when full generation fails."""
        ctype = ContentType.parse(content_type)
        volume = analysis.search_volume or DEFAULT_VOLUME
        headings = [
            f"Introduction to {keyword}",
            f"Key Benefits of {keyword}",
            "Best Practices",
            "Conclusion",
        ]
        body = (
            f"# {keyword} - Comprehensive {ctype.value.title()} Guide\n\n"
            f"## {headings[0]}\n\n"
            f"{keyword} is searched around {volume:,} times a month. This guide covers "
            f"the essentials you need to get started.\n\n"
            f"## {headings[1]}\n\n"
            f"- Better visibility in search results\n"
            f"- More qualified traffic\n"
            f"- Measurable performance improvements\n\n"
            f"## {headings[2]}\n\n"
            f"Plan your {keyword} strategy, measure results and iterate.\n\n"
            f"## {headings[3]}\n\n"
            f"Start with the fundamentals of {keyword} and build from there."
        )
        return ContentDraft(
            keyword=keyword,
            content_type=ctype,
            title=f"{keyword} - Comprehensive {ctype.value.title()} Guide",
            body=body,
            headings=headings,
            faqs=[FAQ(
                f"What is {keyword}?",
                f"{keyword} is a topic with about {volume:,} monthly searches.",
            )],
            entities=dedupe([keyword, *INDUSTRY_TERMS[:3]]),
        )

    # ------------------------------------------------------------------
    # Renderers
    # ------------------------------------------------------------------

    def _render_service(
        self,
        request: ServiceRequest,
        analysis: KeywordAnalysis,
        insights: CompetitorInsights,
    ) -> tuple[str, list[str], str]:
        kw = request.keyword
        volume = analysis.search_volume or DEFAULT_VOLUME
        difficulty = analysis.difficulty or DEFAULT_DIFFICULTY
        related = [r.keyword for r in analysis.related_keywords[:5]]
        topics_seen = len(insights.common_topics) or 15
        rand = self._randint

        title = f"Professional {kw} Services - {volume}+ Monthly Searches"
        headings = [
            f"Expert {kw} Solutions",
            f"Our Data-Driven {kw} Approach",
            f"Proven {kw} Results",
            f"Why Choose Our {kw} Services",
            "Get Started Today",
        ]
        benefit_lines = "".join(
            f"- **{term}**: Advanced strategies tailored to your industry\n" for term in related
        )
        body = f"""# Professional {kw} Services - Industry-Leading Solutions

## Transform Your Business with Expert {kw} Solutions

With {volume:,} monthly searches and growing demand, {kw} has become crucial for business success. Our team of certified experts delivers data-driven {kw} solutions that consistently outperform the competition.

### Our Data-Driven {kw} Approach

Based on extensive market analysis of {topics_seen}+ competitor strategies, we've developed a proven methodology that delivers measurable results:

- **Comprehensive Analysis**: We analyze {insights.average_length or 1500}+ data points to identify opportunities
- **Strategic Implementation**: Custom strategies based on keyword difficulty of {difficulty}/100
- **Performance Monitoring**: Real-time tracking and optimization
- **Competitive Advantage**: Stay ahead of {len(related) or 5}+ related market segments

### Key Benefits of Our {kw} Services

{benefit_lines}- **ROI Optimization**: Average 3x improvement in performance metrics
- **Expert Team**: Certified professionals with {difficulty // 10 + 3}+ years experience
- **Ongoing Support**: Continuous monitoring and strategic adjustments

### Proven Results That Speak for Themselves

Our clients consistently achieve:

- {rand(60, 99)}% increase in organic visibility
- {rand(30, 79)}% improvement in conversion rates
- {rand(20, 49)}% reduction in acquisition costs

### Why Choose Our {kw} Services

Every engagement starts with a transparent audit, a clear roadmap and agreed success metrics. You always know what we are working on and why it matters for your {kw} goals.

## Get Started Today

Ready to transform your {kw} strategy? Contact us today for a free consultation and discover how our proven approach can drive your business forward."""
        return title, headings, body

    def _render_blog(
        self,
        request: BlogRequest,
        analysis: KeywordAnalysis,
        insights: CompetitorInsights,
    ) -> tuple[str, list[str], str]:
        kw = request.keyword
        year = request.year or date.today().year
        volume = analysis.search_volume or DEFAULT_VOLUME
        difficulty = analysis.difficulty or DEFAULT_DIFFICULTY
        intent = analysis.intent.value
        related = [r.keyword for r in analysis.related_keywords[:6]]
        sources = len(insights.common_topics) or 20

        title = f"{kw}: Complete Guide [{year}] - {volume}+ Searches/Month"
        headings = [
            f"Complete Guide to {kw}",
            f"What is {kw}?",
            f"Getting Started with {kw}",
            f"Advanced {kw} Strategies",
            "Common Mistakes to Avoid",
            f"Future of {kw}",
            "Conclusion",
        ]
        components = "".join(
            f"{i}. **{term}**: Essential for comprehensive implementation\n"
            for i, term in enumerate(related, start=1)
        )
        strategy_lines = "".join(f"- {term} optimization techniques\n" for term in related[:4])
        body = f"""# {kw}: The Complete Guide [{year}]

## Introduction: Why {kw} Matters Now More Than Ever

With {volume:,} monthly searches and {intent} intent, {kw} has become essential knowledge in today's digital landscape. This comprehensive guide covers everything you need to know, from basics to advanced strategies.

## What is {kw}?

{kw} represents a critical aspect of modern digital strategy. Based on analysis of {sources}+ industry sources, we define {kw} as the systematic approach to optimizing performance through data-driven methodologies.

### Key Components of {kw}

{components}
## Getting Started with {kw}

### Step 1: Understanding the Fundamentals

Before diving into advanced techniques, master these core concepts:

- **Market Analysis**: Understand the competitive landscape (difficulty: {difficulty}/100)
- **Strategic Planning**: Develop comprehensive approaches
- **Implementation**: Execute with precision and consistency

### Step 2: Developing Your {kw} Strategy

Create a robust strategy that addresses:

{strategy_lines}- Performance measurement and analytics
- Continuous improvement processes

## Advanced {kw} Strategies

### Data-Driven Optimization

Leverage analytics to make informed decisions:

- Monitor {insights.average_length or 15}+ key performance indicators
- Implement A/B testing for continuous improvement
- Use competitive analysis for strategic advantages

### Automation and Scaling

Streamline your {kw} efforts:

- Automated reporting and monitoring systems
- Scalable processes for growing businesses
- Integration with existing workflows

## Common Mistakes to Avoid

Based on analysis of {difficulty // 10 + 50}+ case studies:

1. **Ignoring Data**: Always base decisions on solid analytics
2. **Inconsistent Implementation**: Maintain steady progress
3. **Neglecting Updates**: Stay current with industry changes
4. **Poor Planning**: Develop comprehensive strategies before execution

## The Future of {kw}

Industry trends indicate {kw} will continue evolving:

- Increased automation and AI integration
- Greater emphasis on personalization
- Enhanced measurement and attribution
- Growing importance of {related[0] if related else 'related technologies'}

## Conclusion

{kw} offers tremendous opportunities for those who approach it strategically. With {volume:,} monthly searches reflecting growing interest, now is the perfect time to master these concepts and implement them in your strategy.

Start with the fundamentals, gradually incorporate advanced techniques, and always measure your results. Success with {kw} requires patience, consistency, and continuous learning."""
        return title, headings, body

    def _render_ecommerce(
        self,
        request: EcommerceRequest,
        analysis: KeywordAnalysis,
        insights: CompetitorInsights,
    ) -> tuple[str, list[str], str]:
        kw = request.keyword
        year = request.year or date.today().year
        volume = analysis.search_volume or DEFAULT_VOLUME
        difficulty = analysis.difficulty or DEFAULT_DIFFICULTY
        cpc = analysis.cpc or request.default_cpc
        products_seen = len(insights.common_topics) or 25
        rand = self._randint

        title = f"Premium {kw} - Best Value {year} [{volume}+ Reviews]"
        headings = [
            f"Premium {kw} Collection",
            "Product Features",
            "Technical Specifications",
            "Customer Reviews",
            "Pricing & Guarantee",
            "Order Information",
        ]
        user_rating = round(self._rng.random() + 4, 1)
        body = f"""# Premium {kw} - Industry-Leading Quality

## Transform Your Experience with Our Top-Rated {kw}

Chosen by {volume:,}+ satisfied customers, our premium {kw} delivers exceptional performance and unmatched value. With an average CPC of ${cpc:.2f}, this represents serious buyer intent and proven market demand.

### Why Choose Our {kw}?

- **Proven Performance**: Based on analysis of {products_seen}+ competitor products
- **Quality Assurance**: Rigorous testing with {difficulty // 5 + 10}+ quality checkpoints
- **Customer Satisfaction**: {rand(90, 99)}% customer satisfaction rate

## Product Features

### Core Specifications

- **Performance Rating**: {rand(80, 99)}/100
- **Durability Score**: {rand(85, 99)}/100
- **User Rating**: {user_rating}/5.0 stars
- **Compatibility**: Works with {difficulty // 20 + 3}+ system types

## Technical Specifications

Our {kw} incorporates cutting-edge technology:

- Advanced processing capabilities
- Optimized performance algorithms
- Seamless integration features
- Future-proof design architecture

## Customer Reviews

**"Exceeded Expectations"** (5/5)
*"This {kw} has transformed our workflow. The quality is outstanding and performance is exactly as advertised."* - Verified Customer

**"Best Investment This Year"** (5/5)
*"After trying {difficulty // 30 + 2}+ alternatives, this is by far the best {kw} solution available."* - Industry Professional

**"Highly Recommend"** (5/5)
*"The support team is amazing and the product delivers on every promise. Worth every penny."* - Business Owner

## Pricing & Guarantee

### Investment Options

- **Standard Package**: ${math.floor(cpc * 50)} - Perfect for individuals
- **Professional Package**: ${math.floor(cpc * 85)} - Ideal for small businesses
- **Enterprise Package**: ${math.floor(cpc * 120)} - Complete solution for large organizations

### Our Guarantee

- 30-day money-back guarantee
- Free support and updates
- Lifetime warranty on core components
- {rand(80, 99)}% satisfaction guarantee

## Order Information

With {volume:,} monthly searches and growing demand, secure your {kw} today. Free shipping, immediate delivery, and expert setup support included.

**Special Bonus**: Order within 24 hours and receive {math.floor(cpc * 10)}% additional value in premium accessories.

*Ready to experience the difference? Order your {kw} now.*"""
        return title, headings, body

    def _randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

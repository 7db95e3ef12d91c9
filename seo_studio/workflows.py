"""Workflow engine connecting the studio modules into user-facing actions."""

import logging
import random
import time
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from seo_studio.exceptions import ContentGenerationError, ValidationError
from seo_studio.models.content import ContentType, FanOutQuery, GeneratedContent, build_request
from seo_studio.models.keyword import KeywordAnalysis
from seo_studio.models.serp import CompetitorInsights, SerpResult
from seo_studio.models.topic import TopicCluster
from seo_studio.utils.cache import TTLCache
from seo_studio.utils.validators import validate_keyword

logger = logging.getLogger(__name__)

FALLBACK_CONTENT_SCORE = 75


class WorkflowEngine:
    """Orchestrate keyword analysis, SERP lookup, generation and scoring.

    The engine owns the keyword cache and the random source; every module
    it creates shares them, so two engines never interfere with each other.
    Pipeline steps are wrapped in try/except so that one failing step does
    not abort the rest, and results are collected per step.

    Usage::

        engine = WorkflowEngine(rng=random.Random(42))
        content = await engine.generate_content("best coffee makers", "ecommerce")
        results = await engine.run_content_pipeline("seo tools", "blog", ["md"])
    """

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
        cache: Optional[TTLCache[KeywordAnalysis]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or {}
        self._rng = rng or random.Random()
        kw_cfg = self.config.get("keywords", {})
        self._cache = cache if cache is not None else TTLCache(
            ttl_seconds=kw_cfg.get("cache_ttl_seconds", 3600),
            max_size=kw_cfg.get("cache_max_size", 1000),
        )
        self._transport = transport
        self._estimator = None
        self._expander = None
        self._keyword_analyzer = None
        self._serp_fetcher = None
        self._templater = None
        self._scorer = None
        self._exporter = None
        self._clusterer = None
        self._pipeline_status: dict[str, Any] = {}
        logger.info("WorkflowEngine initialized.")

    # ------------------------------------------------------------------
    # Lazy-loaded module accessors
    # ------------------------------------------------------------------

    def _get_estimator(self):
        if self._estimator is None:
            from seo_studio.modules.keyword_research import KeywordEstimator
            self._estimator = KeywordEstimator(rng=self._rng)
        return self._estimator

    def _get_expander(self):
        if self._expander is None:
            from seo_studio.modules.keyword_research import QueryExpander
            self._expander = QueryExpander(estimator=self._get_estimator(), rng=self._rng)
        return self._expander

    def _get_keyword_analyzer(self):
        if self._keyword_analyzer is None:
            from seo_studio.integrations.keyword_volume import KeywordVolumeClient
            from seo_studio.modules.keyword_research import KeywordAnalyzer
            kw_cfg = self.config.get("keywords", {})
            self._keyword_analyzer = KeywordAnalyzer(
                estimator=self._get_estimator(),
                expander=self._get_expander(),
                cache=self._cache,
                volume_client=KeywordVolumeClient(
                    timeout=self.config.get("serp", {}).get("timeout", 10.0),
                    transport=self._transport,
                ),
                rng=self._rng,
                country=kw_cfg.get("country", "us"),
                language=kw_cfg.get("language", "en"),
            )
            logger.debug("KeywordAnalyzer created.")
        return self._keyword_analyzer

    def _get_serp_fetcher(self):
        if self._serp_fetcher is None:
            from seo_studio.integrations.serp_fetcher import SerpFetcher
            serp_cfg = self.config.get("serp", {})
            self._serp_fetcher = SerpFetcher(
                provider=serp_cfg.get("provider", "auto"),
                timeout=serp_cfg.get("timeout", 10.0),
                num_results=serp_cfg.get("num_results", 20),
                location=serp_cfg.get("location", "United States"),
                language=serp_cfg.get("language", "en"),
                estimator=self._get_estimator(),
                rng=self._rng,
                transport=self._transport,
            )
            logger.debug("SerpFetcher created (provider=%s).", self._serp_fetcher.active_provider)
        return self._serp_fetcher

    def _get_templater(self):
        if self._templater is None:
            from seo_studio.modules.content import ContentTemplater
            max_entities = self.config.get("content", {}).get("max_entities", 15)
            self._templater = ContentTemplater(rng=self._rng, max_entities=max_entities)
        return self._templater

    def _get_scorer(self):
        if self._scorer is None:
            from seo_studio.modules.content import SEOScorer
            self._scorer = SEOScorer()
        return self._scorer

    def _get_exporter(self):
        if self._exporter is None:
            from seo_studio.modules.content import ContentExporter
            export_dir = self.config.get("export", {}).get("directory", "data/exports")
            self._exporter = ContentExporter(export_dir=export_dir)
        return self._exporter

    def _get_clusterer(self):
        if self._clusterer is None:
            from seo_studio.modules.topical_research import TopicClusterer
            self._clusterer = TopicClusterer(
                analyzer=self._get_keyword_analyzer(),
                serp_fetcher=self._get_serp_fetcher(),
                rng=self._rng,
            )
        return self._clusterer

    @property
    def keyword_analyzer(self):
        return self._get_keyword_analyzer()

    @property
    def serp_fetcher(self):
        return self._get_serp_fetcher()

    @property
    def exporter(self):
        return self._get_exporter()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def get_keyword_analysis(
        self,
        keyword: str,
        country: Optional[str] = None,
        language: Optional[str] = None,
    ) -> KeywordAnalysis:
        """Analysis entry point. Raises ``ValidationError`` or ``SEOStudioError``."""
        return await self._get_keyword_analyzer().analyze_keyword(keyword, country, language)

    async def get_serp_results(self, keyword: str) -> list[SerpResult]:
        """Ranked results; never raises for provider failures."""
        _require_keyword(keyword)
        return await self._get_serp_fetcher().get_results(keyword)

    async def analyze_competitors(
        self, keyword: str, serp_results: Optional[list[SerpResult]] = None
    ) -> CompetitorInsights:
        """Competitor insights from ``serp_results``, fetching them when not given."""
        from seo_studio.modules.content import analyze_competitors
        results = serp_results or await self._get_serp_fetcher().analyze(keyword)
        return analyze_competitors(results)

    async def generate_content(
        self,
        keyword: str,
        content_type: "str | ContentType" = ContentType.BLOG,
        serp_results: Optional[list[SerpResult]] = None,
    ) -> GeneratedContent:
        """Generate, score and annotate content for a keyword.

        Unknown content types render a blog. Failures after validation fall
        back to a minimal draft scored at 75. ``serp_results`` already fetched
        for the keyword are reused for competitor analysis.

        Raises:
            ValidationError: the keyword is unusable.
            ContentGenerationError: not even fallback content could be built.
        """
        _require_keyword(keyword)
        keyword = " ".join(keyword.split())
        request = build_request(keyword, content_type)
        templater = self._get_templater()
        scorer = self._get_scorer()
        analysis: Optional[KeywordAnalysis] = None

        try:
            analysis = await self.get_keyword_analysis(keyword)
            insights = await self.analyze_competitors(keyword, serp_results)
            draft = templater.generate(request, analysis, insights)
            content = GeneratedContent(
                keyword=keyword,
                content_type=draft.content_type,
                title=draft.title,
                content=draft.body,
                entities=draft.entities,
                headings=draft.headings,
                faqs=draft.faqs,
                score=scorer.score(draft, analysis),
                recommendations=scorer.recommendations(analysis, insights),
                readability=scorer.readability(draft),
            )
        except ValidationError:
            raise
        except Exception:
            logger.exception("Content generation failed for %r, using fallback", keyword)
            content = self._fallback_content(keyword, request.content_type, analysis)

        logger.info(
            "Generated %s content for %r: score=%d words=%d",
            content.content_type.value, keyword, content.score, content.word_count,
        )
        return content

    async def generate_fan_out(self, keyword: str) -> list[FanOutQuery]:
        """Buyer-journey fan-out, falling back to fixed templates on failure."""
        _require_keyword(keyword)
        expander = self._get_expander()
        try:
            analysis = await self.get_keyword_analysis(keyword)
            return expander.fan_out(keyword, analysis)
        except ValidationError:
            raise
        except Exception:
            logger.exception("Fan-out failed for %r, using fallback templates", keyword)
            return expander.fallback_fan_out(keyword)

    async def generate_cluster(self, main_topic: str, intent: Optional[str] = None) -> TopicCluster:
        return await self._get_clusterer().cluster(main_topic, intent)

    async def sample_clusters(self) -> list[TopicCluster]:
        return await self._get_clusterer().sample_clusters()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def run_content_pipeline(
        self,
        keyword: str,
        content_type: str = "blog",
        export_formats: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """Analyze -> SERP -> generate -> fan-out -> export, step by step.

        Steps:
            1. Keyword analysis
            2. SERP results
            3. Content generation
            4. Query fan-out
            5. Export (content files and fan-out CSV)
        """
        pipeline = "content"
        total = 5
        results: dict[str, Any] = {"keyword": keyword, "content_type": content_type, "steps": {}}
        started = time.time()
        logger.info("Starting content pipeline for %r (%s)", keyword, content_type)
        _require_keyword(keyword)

        self._log_step(pipeline, 1, total, "Keyword analysis")
        try:
            analysis = await self.get_keyword_analysis(keyword)
            results["steps"]["keyword_analysis"] = {
                "status": "success", "data": analysis, "score": analysis.difficulty,
            }
            self._log_step(pipeline, 1, total, "Keyword analysis", "done")
        except Exception as exc:
            logger.exception("Keyword analysis failed: %s", exc)
            results["steps"]["keyword_analysis"] = {"status": "error", "error": str(exc)}
            self._log_step(pipeline, 1, total, "Keyword analysis", "error")

        serp: list[SerpResult] = []
        self._log_step(pipeline, 2, total, "SERP results")
        try:
            serp = await self.get_serp_results(keyword)
            fetcher = self._get_serp_fetcher()
            step: dict[str, Any] = {"status": "success", "data": serp, "count": len(serp)}
            if fetcher.last_error is not None:
                step["warning"] = fetcher.last_error.user_message
            results["steps"]["serp_results"] = step
            self._log_step(pipeline, 2, total, "SERP results", "done")
        except Exception as exc:
            logger.exception("SERP lookup failed: %s", exc)
            results["steps"]["serp_results"] = {"status": "error", "error": str(exc)}
            self._log_step(pipeline, 2, total, "SERP results", "error")

        content: Optional[GeneratedContent] = None
        self._log_step(pipeline, 3, total, "Content generation")
        try:
            content = await self.generate_content(keyword, content_type, serp_results=serp or None)
            results["steps"]["content_generation"] = {
                "status": "success", "data": content, "score": content.score,
            }
            self._log_step(pipeline, 3, total, "Content generation", "done")
        except Exception as exc:
            logger.exception("Content generation failed: %s", exc)
            results["steps"]["content_generation"] = {"status": "error", "error": str(exc)}
            self._log_step(pipeline, 3, total, "Content generation", "error")

        queries: list[FanOutQuery] = []
        self._log_step(pipeline, 4, total, "Query fan-out")
        try:
            queries = await self.generate_fan_out(keyword)
            results["steps"]["query_fan_out"] = {
                "status": "success", "data": queries, "count": len(queries),
            }
            self._log_step(pipeline, 4, total, "Query fan-out", "done")
        except Exception as exc:
            logger.exception("Query fan-out failed: %s", exc)
            results["steps"]["query_fan_out"] = {"status": "error", "error": str(exc)}
            self._log_step(pipeline, 4, total, "Query fan-out", "error")

        self._log_step(pipeline, 5, total, "Export")
        if not export_formats:
            results["steps"]["export"] = {"status": "skipped", "reason": "No export formats requested"}
        elif content is None:
            results["steps"]["export"] = {"status": "skipped", "reason": "No content to export"}
        else:
            try:
                exporter = self._get_exporter()
                paths = [exporter.export_content(content, fmt) for fmt in export_formats]
                if queries:
                    paths.append(exporter.export_fan_out(queries, keyword))
                results["steps"]["export"] = {"status": "success", "paths": paths, "count": len(paths)}
                self._log_step(pipeline, 5, total, "Export", "done")
            except Exception as exc:
                logger.exception("Export failed: %s", exc)
                results["steps"]["export"] = {"status": "error", "error": str(exc)}
                self._log_step(pipeline, 5, total, "Export", "error")

        elapsed = time.time() - started
        results["elapsed_seconds"] = round(elapsed, 2)
        success_count = sum(1 for s in results["steps"].values() if s.get("status") == "success")
        total_count = len(results["steps"])
        results["summary"] = f"{success_count}/{total_count} steps succeeded in {elapsed:.1f}s"
        logger.info("Content pipeline completed: %s", results["summary"])
        return results

    # ------------------------------------------------------------------
    # Pipeline status
    # ------------------------------------------------------------------

    def _log_step(
        self,
        pipeline: str,
        step: int,
        total: int,
        description: str,
        status: str = "running",
    ) -> None:
        """Log and record a pipeline step transition."""
        msg = f"[{pipeline}] Step {step}/{total}: {description} ({status})"
        if status == "error":
            logger.error(msg)
        else:
            logger.info(msg)
        self._pipeline_status[pipeline] = {
            "current_step": step,
            "total_steps": total,
            "description": description,
            "status": status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

    def get_pipeline_status(self) -> dict[str, Any]:
        """Return status of all pipelines that have been run."""
        return dict(self._pipeline_status)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _fallback_content(
        self,
        keyword: str,
        content_type: ContentType,
        analysis: Optional[KeywordAnalysis],
    ) -> GeneratedContent:
        try:
            analysis = analysis or self._get_keyword_analyzer().fallback_analysis(keyword)
            draft = self._get_templater().fallback_content(keyword, content_type, analysis)
        except Exception as exc:
            raise ContentGenerationError(
                f"Could not generate {content_type.value} content for {keyword!r}: {exc}"
            ) from exc
        return GeneratedContent(
            keyword=keyword,
            content_type=draft.content_type,
            title=draft.title,
            content=draft.body,
            entities=draft.entities,
            headings=draft.headings,
            faqs=draft.faqs,
            score=FALLBACK_CONTENT_SCORE,
            recommendations=self._get_scorer().recommendations(analysis),
            source="fallback",
        )


def _require_keyword(keyword: str) -> None:
    ok, error = validate_keyword(keyword)
    if not ok:
        raise ValidationError(error)

"""Integration tests for the workflow engine, application bootstrap and CLI.

Covers content generation end to end, fan-out and cluster entry points,
the content pipeline with exports, configuration loading, CLI smoke tests,
and syntax validation of every Python file in the project.
"""

import ast
import os
import random
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import yaml

from seo_studio.exceptions import ContentGenerationError, SEOStudioError, ValidationError
from seo_studio.models import ContentType, Intent
from seo_studio.modules.content import ContentExporter

PROJECT_ROOT = Path(__file__).resolve().parent.parent


# ===========================================================================
# 1. WorkflowEngine
# ===========================================================================
class TestWorkflowEngine:

    def test_pipeline_status_starts_empty(self, engine):
        assert engine.get_pipeline_status() == {}

    def test_lazy_accessors_are_memoised(self, engine):
        assert engine.keyword_analyzer is engine.keyword_analyzer
        assert engine.serp_fetcher.active_provider is None

    @pytest.mark.asyncio
    async def test_generate_content_for_coffee_makers(self, engine):
        content = await engine.generate_content("best coffee makers", "ecommerce")

        assert content.content_type is ContentType.ECOMMERCE
        assert "coffee makers" in content.title.lower()
        assert len(content.headings) >= 5
        assert 40 <= content.score <= 100
        assert content.source == "template"
        assert content.recommendations
        assert "flesch_reading_ease" in content.readability

    @pytest.mark.asyncio
    async def test_unknown_content_type_generates_blog(self, engine):
        content = await engine.generate_content("crm software", "newsletter")
        assert content.content_type is ContentType.BLOG

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keyword", ["", "   "])
    async def test_generate_content_rejects_empty_keyword(self, engine, keyword):
        with pytest.raises(ValidationError):
            await engine.generate_content(keyword, "blog")

    @pytest.mark.asyncio
    async def test_generate_content_falls_back_on_failure(self, engine, monkeypatch):
        templater = engine._get_templater()

        def broken(*args, **kwargs):
            raise RuntimeError("renderer crashed")

        monkeypatch.setattr(templater, "generate", broken)
        content = await engine.generate_content("crm software", "service")

        assert content.source == "fallback"
        assert content.score == 75
        assert content.content_type is ContentType.SERVICE

    @pytest.mark.asyncio
    async def test_generate_content_raises_when_fallback_fails(self, engine, monkeypatch):
        templater = engine._get_templater()

        def broken(*args, **kwargs):
            raise RuntimeError("renderer crashed")

        monkeypatch.setattr(templater, "generate", broken)
        monkeypatch.setattr(templater, "fallback_content", broken)
        with pytest.raises(ContentGenerationError):
            await engine.generate_content("crm software", "service")

    @pytest.mark.asyncio
    async def test_cached_analysis_reused_between_actions(self, engine):
        first = await engine.get_keyword_analysis("seo tools")
        await engine.generate_content("seo tools", "blog")
        assert await engine.get_keyword_analysis("seo tools") is first

    @pytest.mark.asyncio
    async def test_generate_fan_out(self, engine):
        queries = await engine.generate_fan_out("coffee makers")
        assert 0 < len(queries) <= 30
        assert all(q.source != "fallback" for q in queries)

    @pytest.mark.asyncio
    async def test_generate_fan_out_fallback(self, engine, monkeypatch):
        monkeypatch.setattr(
            engine.keyword_analyzer, "analyze_keyword",
            AsyncMock(side_effect=SEOStudioError("analysis unavailable")),
        )
        queries = await engine.generate_fan_out("coffee makers")
        assert len(queries) == 20
        assert {q.source for q in queries} == {"fallback"}

    @pytest.mark.asyncio
    async def test_get_serp_results_uses_fallback(self, engine):
        results = await engine.get_serp_results("coffee makers")
        assert len(results) == 5

    @pytest.mark.asyncio
    async def test_generate_cluster(self, engine):
        cluster = await engine.generate_cluster("email marketing", "commercial")
        assert cluster.intent is Intent.COMMERCIAL
        assert len(cluster.subtopics) <= 12

    @pytest.mark.asyncio
    async def test_content_pipeline_with_exports(self, engine):
        results = await engine.run_content_pipeline("seo tools", "blog", ["md", "html"])

        steps = results["steps"]
        assert list(steps) == [
            "keyword_analysis", "serp_results", "content_generation", "query_fan_out", "export",
        ]
        assert all(step["status"] == "success" for step in steps.values())
        assert "warning" in steps["serp_results"]
        paths = steps["export"]["paths"]
        assert len(paths) == 3
        assert all(os.path.exists(p) for p in paths)
        assert paths[-1].endswith("seo tools-fanout.csv")
        with open(paths[-1], encoding="utf-8") as fh:
            rows = ContentExporter.read_queries_csv(fh.read())
        assert len(rows) == steps["query_fan_out"]["count"]
        assert results["summary"].startswith("5/5 steps succeeded")
        assert engine.get_pipeline_status()["content"]["status"] == "done"

    @pytest.mark.asyncio
    async def test_content_pipeline_exports_stay_in_export_dir(self, engine):
        results = await engine.run_content_pipeline("../../escaped kw", "blog", ["txt"])

        paths = results["steps"]["export"]["paths"]
        export_dir = os.path.abspath(engine.exporter.export_dir)
        assert len(paths) == 2
        assert all(os.path.dirname(p) == export_dir for p in paths)
        assert paths[-1].endswith(".. .. escaped kw-fanout.csv")

    @pytest.mark.asyncio
    async def test_content_pipeline_reuses_serp_results(self, engine, monkeypatch):
        fetcher = engine.serp_fetcher
        get_results = AsyncMock(wraps=fetcher.get_results)
        monkeypatch.setattr(fetcher, "get_results", get_results)
        monkeypatch.setattr(fetcher, "analyze", AsyncMock(side_effect=AssertionError("refetched")))

        results = await engine.run_content_pipeline("seo tools", "blog")

        assert get_results.await_count == 1
        fetcher.analyze.assert_not_awaited()
        assert results["steps"]["content_generation"]["data"].source == "template"

    @pytest.mark.asyncio
    async def test_content_pipeline_without_exports(self, engine):
        results = await engine.run_content_pipeline("seo tools", "service")
        assert results["steps"]["export"]["status"] == "skipped"
        assert results["summary"].startswith("4/5")

    @pytest.mark.asyncio
    async def test_content_pipeline_rejects_empty_keyword(self, engine):
        with pytest.raises(ValidationError):
            await engine.run_content_pipeline("", "blog")

    def test_engines_are_independent(self, tmp_path):
        from seo_studio.workflows import WorkflowEngine
        a = WorkflowEngine(rng=random.Random(1))
        b = WorkflowEngine(rng=random.Random(1))
        assert a.keyword_analyzer is not b.keyword_analyzer


# ===========================================================================
# 2. Application bootstrap
# ===========================================================================
class TestSEOStudio:

    def test_missing_config_uses_defaults(self, tmp_path):
        from seo_studio.app import SEOStudio
        studio = SEOStudio(config_path=str(tmp_path / "missing.yaml"), env_path=str(tmp_path / ".env"))
        studio.initialize()
        assert studio.config == {}
        status = studio.get_status()
        assert set(status) == {"config", "serp", "keyword_volume", "export"}
        assert status["serp"]["status"] == "warning"

    def test_loads_yaml_and_env(self, tmp_path):
        from seo_studio.app import SEOStudio
        export_dir = tmp_path / "out"
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.safe_dump({
            "app": {"name": "SEO Content Studio", "random_seed": 3},
            "export": {"directory": str(export_dir)},
        }))
        env_file = tmp_path / ".env"
        env_file.write_text("SERPAPI_KEY=from-dotenv\n")

        studio = SEOStudio(config_path=str(config_file), env_path=str(env_file))
        try:
            studio.initialize()

            assert studio.config["app"]["random_seed"] == 3
            assert export_dir.is_dir()
            assert os.getenv("SERPAPI_KEY") == "from-dotenv"
            assert studio.get_status()["serp"]["status"] == "ok"
            engine = studio.make_engine()
            assert engine.serp_fetcher.active_provider == "serpapi"
        finally:
            os.environ.pop("SERPAPI_KEY", None)

    def test_requires_initialize(self):
        from seo_studio.app import SEOStudio
        with pytest.raises(RuntimeError):
            SEOStudio().get_status()


# ===========================================================================
# 3. Settings YAML
# ===========================================================================
class TestSettingsYaml:

    def _load(self):
        settings_path = PROJECT_ROOT / "config" / "settings.yaml"
        with open(settings_path, encoding="utf-8") as fh:
            return yaml.safe_load(fh)

    def test_settings_parseable(self):
        assert isinstance(self._load(), dict)

    def test_settings_has_required_sections(self):
        config = self._load()
        for section in ("app", "serp", "keywords", "content", "export"):
            assert section in config, "Missing config section: " + section

    def test_settings_app_name(self):
        assert self._load()["app"]["name"] == "SEO Content Studio"


# ===========================================================================
# 4. CLI commands (smoke test via CliRunner)
# ===========================================================================
class TestCLICommands:

    def _get_runner_and_app(self):
        from typer.testing import CliRunner
        from seo_studio.cli import app
        return CliRunner(), app

    def test_main_help(self):
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["--help"])
        assert result.exit_code == 0
        assert "SEO Content Studio" in result.output

    @pytest.mark.parametrize("command", [
        "analyze", "serp", "generate", "fanout", "cluster", "pipeline", "status",
    ])
    def test_command_help(self, command):
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, [command, "--help"])
        assert result.exit_code == 0, (
            "Command '" + command + "' --help failed with exit code "
            + str(result.exit_code) + ": " + result.output
        )

    def test_analyze(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["analyze", "seo tools"])
        assert result.exit_code == 0, result.output
        assert "Search volume" in result.output

    def test_analyze_rejects_empty_keyword(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["analyze", "   "])
        assert result.exit_code == 1

    def test_generate_with_export(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["generate", "best coffee makers", "--type", "ecommerce", "--export", "md"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "data" / "exports" / "best coffee makers-ecommerce.md").exists()

    def test_fanout_csv(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["fanout", "coffee makers", "--csv", "queries.csv"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "queries.csv").exists()

    def test_cluster_requires_topic(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        assert runner.invoke(cli_app, ["cluster"]).exit_code == 1

    def test_status(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner, cli_app = self._get_runner_and_app()
        result = runner.invoke(cli_app, ["status"])
        assert result.exit_code == 0, result.output
        assert "Component Status" in result.output


# ===========================================================================
# 5. All Python files syntax validation
# ===========================================================================
class TestAllPythonFilesSyntax:
    """Every .py file in seo_studio/ and tests/ should pass ast.parse."""

    def test_all_python_files_parse(self):
        py_files = []
        for directory in ("seo_studio", "tests"):
            base = PROJECT_ROOT / directory
            py_files.extend(p for p in base.rglob("*.py") if "__pycache__" not in p.parts)
        assert py_files, "No Python files found"
        errors = []
        for py_file in sorted(py_files):
            try:
                ast.parse(py_file.read_text(encoding="utf-8"))
            except SyntaxError as exc:
                errors.append(str(py_file.relative_to(PROJECT_ROOT)) + ": " + str(exc))
        if errors:
            pytest.fail("Python syntax errors:\n" + "\n".join(errors))

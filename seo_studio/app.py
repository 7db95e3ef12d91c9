"""Application bootstrap for SEO Content Studio."""

import logging
import os
import random
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class SEOStudio:
    """Load environment and configuration, then hand out a workflow engine.

    Usage::

        studio = SEOStudio()
        studio.initialize()
        engine = studio.make_engine()
        status = studio.get_status()
    """

    def __init__(
        self,
        config_path: str = "config/settings.yaml",
        env_path: str = ".env",
    ):
        self._config_path = config_path
        self._env_path = env_path
        self.config: dict[str, Any] = {}
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load .env and YAML configuration, and create the export directory."""
        if self._initialized:
            return

        env_file = Path(self._env_path)
        if env_file.exists():
            load_dotenv(env_file)
            logger.info("Loaded environment from %s", self._env_path)

        self.config = self._load_config()

        export_dir = self.config.get("export", {}).get("directory", "")
        if export_dir:
            Path(export_dir).mkdir(parents=True, exist_ok=True)

        self._initialized = True
        logger.info("SEOStudio initialised.")

    def _load_config(self) -> dict[str, Any]:
        """Load the YAML configuration file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s, using defaults.", self._config_path)
            return {}
        with open(config_file, "r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        logger.info("Configuration loaded from %s", self._config_path)
        return config

    def make_engine(self, rng: Optional[random.Random] = None, **kwargs: Any):
        """Create a WorkflowEngine configured from the loaded settings."""
        self._ensure_initialized()
        from seo_studio.workflows import WorkflowEngine
        seed = self.config.get("app", {}).get("random_seed")
        if rng is None and seed is not None:
            rng = random.Random(seed)
        return WorkflowEngine(config=self.config, rng=rng, **kwargs)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, dict[str, Any]]:
        """Return health status of configuration and provider credentials."""
        self._ensure_initialized()
        status: dict[str, dict[str, Any]] = {}

        status["config"] = {
            "status": "ok" if self.config else "warning",
            "details": f"{len(self.config)} sections loaded" if self.config else "no config",
        }

        providers = []
        if os.getenv("SERPAPI_KEY"):
            providers.append("SerpAPI")
        if os.getenv("DATAFORSEO_LOGIN") and os.getenv("DATAFORSEO_PASSWORD"):
            providers.append("DataForSEO")
        status["serp"] = {
            "status": "ok" if providers else "warning",
            "details": f"providers: {', '.join(providers) or 'none configured, using estimates'}",
        }

        volume_configured = bool(os.getenv("KEYWORDTOOL_API_KEY"))
        status["keyword_volume"] = {
            "status": "ok" if volume_configured else "warning",
            "details": "KeywordTool.io configured" if volume_configured else "estimated volumes",
        }

        export_dir = self.config.get("export", {}).get("directory", "data/exports")
        status["export"] = {
            "status": "ok" if Path(export_dir).is_dir() else "warning",
            "details": export_dir,
        }
        return status

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Call initialize() before using the application.")

"""Exporter -- CSV for query fan-outs and txt/md/html for generated content."""

import csv
import io
import logging
import os
from pathlib import Path
from typing import Any

import markdown as md_lib  # type: ignore[import-untyped]

from seo_studio.models.content import ContentType, FanOutQuery, GeneratedContent

logger = logging.getLogger(__name__)

FAN_OUT_HEADER = ["Query", "Stage", "Search Volume", "Difficulty", "Intent"]
CONTENT_FORMATS = ("txt", "md", "html")


def _ensure_dir(filepath: str) -> None:
    """Ensure parent directory exists."""
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)


def content_filename(keyword: str, content_type: "str | ContentType", ext: str) -> str:
    """``<keyword>-<type>.<ext>`` with path separators removed from the keyword."""
    ctype = content_type.value if isinstance(content_type, ContentType) else str(content_type)
    safe_keyword = keyword.strip().replace("/", " ").replace("\\", " ")
    return f"{safe_keyword}-{ctype}.{ext.lstrip('.')}"


class ContentExporter:
    """Export fan-out queries and generated content to files or strings.

    Usage::

        exporter = ContentExporter(export_dir="data/exports")
        exporter.export_queries_csv(queries, "data/exports/queries.csv")
        path = exporter.export_content(content, fmt="html")
    """

    def __init__(self, export_dir: str = "data/exports"):
        self._export_dir = export_dir

    @property
    def export_dir(self) -> str:
        return self._export_dir

    # ------------------------------------------------------------------
    # Fan-out CSV
    # ------------------------------------------------------------------

    @staticmethod
    def queries_to_csv_string(queries: list[FanOutQuery]) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(FAN_OUT_HEADER)
        for q in queries:
            writer.writerow([q.query, q.stage.value, q.search_volume, q.difficulty, q.intent.value])
        return output.getvalue()

    def export_queries_csv(self, queries: list[FanOutQuery], filepath: str) -> str:
        """Write queries to CSV. Returns the absolute filepath."""
        _ensure_dir(filepath)
        with open(filepath, "w", newline="", encoding="utf-8") as fh:
            fh.write(self.queries_to_csv_string(queries))
        abs_path = os.path.abspath(filepath)
        logger.info("CSV exported: %s (%d rows)", abs_path, len(queries))
        return abs_path

    def export_fan_out(
        self, queries: list[FanOutQuery], keyword: str, directory: str | None = None
    ) -> str:
        """Write queries to ``<keyword>-fanout.csv`` inside the export directory."""
        filename = content_filename(keyword, "fanout", "csv")
        return self.export_queries_csv(queries, os.path.join(directory or self._export_dir, filename))

    @staticmethod
    def read_queries_csv(text: str) -> list[dict[str, Any]]:
        """Parse CSV produced by :meth:`queries_to_csv_string` back into rows."""
        reader = csv.DictReader(io.StringIO(text))
        if reader.fieldnames != FAN_OUT_HEADER:
            raise ValueError(f"Unexpected CSV header: {reader.fieldnames}")
        rows = []
        for row in reader:
            rows.append({
                "query": row["Query"],
                "stage": row["Stage"],
                "search_volume": int(row["Search Volume"]),
                "difficulty": int(row["Difficulty"]),
                "intent": row["Intent"],
            })
        return rows

    # ------------------------------------------------------------------
    # Content export
    # ------------------------------------------------------------------

    def render(self, content: GeneratedContent, fmt: str = "txt") -> str:
        """Render content to the text of a ``txt``, ``md`` or ``html`` file."""
        fmt = fmt.lower().lstrip(".")
        if fmt not in CONTENT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt!r}. Use one of {CONTENT_FORMATS}.")
        if fmt == "txt":
            return content.content
        if fmt == "md":
            return self._markdown_document(content)
        return self._html_document(content)

    def export_content(
        self,
        content: GeneratedContent,
        fmt: str = "txt",
        directory: str | None = None,
    ) -> str:
        """Write content to ``<keyword>-<type>.<fmt>``. Returns the absolute path."""
        filename = content_filename(content.keyword, content.content_type, fmt)
        filepath = os.path.join(directory or self._export_dir, filename)
        text = self.render(content, fmt)
        _ensure_dir(filepath)
        with open(filepath, "w", encoding="utf-8") as fh:
            fh.write(text)
        logger.info("Exported %s to %s (%d words)", fmt, filepath, content.word_count)
        return os.path.abspath(filepath)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _markdown_document(content: GeneratedContent) -> str:
        frontmatter = [
            "---",
            "title: \"" + content.title.replace('"', '\\"') + "\"",
            "keyword: \"" + content.keyword.replace('"', '\\"') + "\"",
            "content_type: " + content.content_type.value,
            "seo_score: " + str(content.score),
            "word_count: " + str(content.word_count),
            "date: " + content.created_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "---",
        ]
        faq_lines = ["", "## Frequently Asked Questions", ""]
        for faq in content.faqs:
            faq_lines.append("### " + faq.question)
            faq_lines.append("")
            faq_lines.append(faq.answer)
            faq_lines.append("")
        return "\n".join(frontmatter) + "\n\n" + content.content + "\n" + "\n".join(faq_lines)

    @staticmethod
    def _html_document(content: GeneratedContent) -> str:
        content_html = md_lib.markdown(content.content, extensions=["extra", "sane_lists"])
        escaped_title = (
            content.title.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        )
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '  <meta charset="UTF-8">\n'
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            "  <title>" + escaped_title + "</title>\n"
            "  <style>\n"
            "    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;\n"
            "           max-width: 800px; margin: 40px auto; padding: 0 20px;\n"
            "           line-height: 1.7; color: #1a202c; }\n"
            "    h1 { border-bottom: 2px solid #3b82f6; padding-bottom: 10px; }\n"
            "    h2 { color: #1e40af; margin-top: 2em; }\n"
            "  </style>\n"
            "</head>\n"
            "<body>\n"
            + content_html + "\n"
            "</body>\n"
            "</html>"
        )

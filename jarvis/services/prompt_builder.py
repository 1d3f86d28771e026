"""
System prompt assembly.

Sandi Metz Principles:
- Single Responsibility: Compose the system instruction
- Small methods: One method per prompt section
- Pure: Same inputs, same prompt (no clock, no I/O)
"""

from typing import Dict, List, Sequence

from jarvis.config import AppConfig, config as default_config
from jarvis.models.query import ConversationTurn, LocalRecord, QueryAnalysis
from jarvis.models.search import SearchResult


class PromptBuilder:
    """
    Builds the system prompt sent with every completion.

    The result is hard-truncated to ``max_prompt_length`` characters.
    """

    def __init__(self, settings: AppConfig | None = None):
        """
        Initialize builder.

        Args:
            settings: Application configuration (global config if None)
        """
        self._settings = settings or default_config

    @property
    def max_length(self) -> int:
        return self._settings.max_prompt_length

    def build(
        self,
        analysis: QueryAnalysis,
        local_records: Sequence[LocalRecord] = (),
        search_results: Sequence[SearchResult] = (),
        context: Sequence[ConversationTurn] = (),
    ) -> str:
        """
        Compose the system prompt.

        Args:
            analysis: Externally computed query analysis
            local_records: Portfolio records, most relevant first
            search_results: Web results, in aggregator order
            context: Prior conversation turns, oldest first

        Returns:
            System prompt, at most max_length characters
        """
        sections = [
            self._persona(),
            self._analysis(analysis),
            self._local_records(local_records),
            self._search_results(search_results),
            self._conversation(context),
        ]
        prompt = "\n\n".join(section for section in sections if section)
        return prompt[: self.max_length]

    def _persona(self) -> str:
        s = self._settings
        return "\n".join(
            [
                f"You are {s.app_name}, the AI assistant of {s.owner_website}.",
                "You answer using the owner's portfolio and open web sources.",
                "",
                "OWNER:",
                f"Name: {s.owner_name}",
                f"Title: {s.owner_title}",
                f"Location: {s.owner_location}",
                f"Website: {s.owner_website}",
                "",
                "STYLE:",
                "- Speak like Tony Stark's JARVIS and address the user as \"Sir\"",
                "- Be precise and concise",
                "- Cite your sources",
                "- Stay professional and helpful",
            ]
        )

    @staticmethod
    def _analysis(analysis: QueryAnalysis) -> str:
        summary: Dict = analysis.summary()
        topics = ", ".join(summary.pop("topics")) or "none"
        lines = ["QUERY ANALYSIS:"]
        lines.extend(f"{name.capitalize()}: {value}" for name, value in summary.items())
        lines.append(f"Topics: {topics}")
        return "\n".join(lines)

    def _local_records(self, records: Sequence[LocalRecord]) -> str:
        records = list(records)[: self._settings.max_local_records]
        if not records:
            return ""

        groups: Dict[str, List[LocalRecord]] = {}
        for record in records:
            groups.setdefault(record.kind, []).append(record)

        lines = ["LOCAL INFORMATION:"]
        for kind, items in groups.items():
            lines.append(f"{kind.upper()}:")
            lines.extend(f"- {item.title}: {item.description}" for item in items)
        return "\n".join(lines)

    def _search_results(self, results: Sequence[SearchResult]) -> str:
        results = list(results)[: self._settings.max_search_snippets]
        if not results:
            return ""

        lines = ["WEB SEARCH RESULTS:"]
        lines.extend(f"- [{r.source.value}] {r.title}: {r.snippet}" for r in results)
        return "\n".join(lines)

    def _conversation(self, context: Sequence[ConversationTurn]) -> str:
        limit = self._settings.max_context_turns
        turns = list(context)[-limit:] if limit else []
        if not turns:
            return ""

        lines = ["PREVIOUS CONVERSATION:"]
        for turn in turns:
            if turn.query:
                lines.append(f"User: {turn.query}")
            if turn.response:
                lines.append(f"{self._settings.app_name}: {turn.response}")
        return "\n".join(lines)

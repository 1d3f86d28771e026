"""Test system prompt assembly."""

import pytest

from jarvis.config import AppConfig
from jarvis.models.query import ConversationTurn, LocalRecord, QueryAnalysis
from jarvis.models.search import SearchSource
from jarvis.services.prompt_builder import PromptBuilder
from tests.mocks.search_mocks import make_result


@pytest.fixture
def builder(test_config):
    return PromptBuilder(test_config)


@pytest.fixture
def analysis():
    return QueryAnalysis(type="question", category="tech", topics=["python", "fastapi"])


class TestPromptBuilder:
    """Test PromptBuilder."""

    def test_should_start_with_persona(self, builder, analysis):
        """Test owner and style sections."""
        prompt = builder.build(analysis)

        assert prompt.startswith("You are JARVIS")
        assert "Name: Doston Davlatov" in prompt
        assert "STYLE:" in prompt

    def test_should_include_query_analysis(self, builder, analysis):
        """Test analysis section."""
        prompt = builder.build(analysis)

        assert "QUERY ANALYSIS:" in prompt
        assert "Type: question" in prompt
        assert "Topics: python, fastapi" in prompt

    def test_should_omit_empty_sections(self, builder, analysis):
        """Test optional sections."""
        prompt = builder.build(analysis)

        assert "LOCAL INFORMATION" not in prompt
        assert "WEB SEARCH RESULTS" not in prompt
        assert "PREVIOUS CONVERSATION" not in prompt

    def test_should_group_local_records_by_kind(self, builder, analysis):
        """Test local information section."""
        records = [
            LocalRecord(kind="project", title="Portfolio", description="Personal site"),
            LocalRecord(kind="skill", title="Python", description="Backend"),
            LocalRecord(kind="project", title="JARVIS", description="Chatbot"),
        ]

        prompt = builder.build(analysis, local_records=records)

        section = prompt.split("LOCAL INFORMATION:\n", 1)[1]
        assert section.startswith(
            "PROJECT:\n- Portfolio: Personal site\n- JARVIS: Chatbot\nSKILL:\n- Python: Backend"
        )

    def test_should_list_search_results_in_order(self, builder, analysis):
        """Test web search section."""
        results = [
            make_result("https://w.example", SearchSource.WIKIPEDIA, "Tashkent"),
            make_result("https://d.example", SearchSource.DUCKDUCKGO, "Uzbekistan"),
        ]

        prompt = builder.build(analysis, search_results=results)

        assert (
            "WEB SEARCH RESULTS:\n"
            "- [wikipedia] Tashkent: Snippet for Tashkent\n"
            "- [duckduckgo] Uzbekistan: Snippet for Uzbekistan"
        ) in prompt

    def test_should_keep_only_recent_turns(self, analysis):
        """Test conversation window."""
        builder = PromptBuilder(AppConfig(max_context_turns=2))
        context = [ConversationTurn(query=f"q{i}", response=f"r{i}") for i in range(4)]

        prompt = builder.build(analysis, context=context)

        assert "User: q1" not in prompt
        assert "User: q2\nJARVIS: r2\nUser: q3\nJARVIS: r3" in prompt

    def test_should_skip_conversation_when_window_is_zero(self, analysis):
        """Test disabled conversation window."""
        builder = PromptBuilder(AppConfig(max_context_turns=0))

        prompt = builder.build(analysis, context=[ConversationTurn(query="hi")])

        assert "PREVIOUS CONVERSATION" not in prompt

    def test_should_truncate_to_max_length(self, analysis):
        """Test hard cutoff."""
        builder = PromptBuilder(AppConfig(max_prompt_length=200))
        records = [LocalRecord(title=f"Record {i}", description="x" * 100) for i in range(5)]

        prompt = builder.build(analysis, local_records=records)

        assert len(prompt) == 200

    def test_should_be_deterministic(self, builder, analysis):
        """Test same inputs give the same prompt."""
        context = [ConversationTurn(query="hi", response="hello")]

        assert builder.build(analysis, context=context) == builder.build(analysis, context=context)

"""Test search provider request building and parsing."""

import httpx
import pytest

from jarvis.models.search import ResultKind, SearchSource
from jarvis.search.providers import (
    DuckDuckGoProvider,
    GitHubProvider,
    NewsProvider,
    StackOverflowProvider,
    WikipediaProvider,
)


def client_returning(payload, status_code=200, seen=None):
    """HTTP client answering every request with payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDuckDuckGoProvider:
    """Test DuckDuckGo instant answers."""

    def test_should_parse_abstract_and_related_topics(self):
        """Test abstract first, then related topics."""
        data = {
            "Heading": "Python",
            "AbstractText": "Python is a programming language.",
            "AbstractURL": "https://en.wikipedia.org/wiki/Python",
            "RelatedTopics": [
                {"Text": "Django - web framework", "FirstURL": "https://duckduckgo.com/Django"},
                {"Name": "Group", "Topics": []},
                {"Text": "Flask - microframework", "FirstURL": "https://duckduckgo.com/Flask"},
            ],
        }

        results = DuckDuckGoProvider().parse(data)

        assert [r.url for r in results] == [
            "https://en.wikipedia.org/wiki/Python",
            "https://duckduckgo.com/Django",
            "https://duckduckgo.com/Flask",
        ]
        assert results[0].confidence == 0.70
        assert results[0].extra == {"type": "abstract"}
        assert results[1].confidence == 0.60
        assert all(r.source == SearchSource.DUCKDUCKGO for r in results)

    def test_should_respect_max_results(self):
        """Test related topic cap."""
        topics = [
            {"Text": f"Topic {i}", "FirstURL": f"https://duckduckgo.com/{i}"} for i in range(10)
        ]

        results = DuckDuckGoProvider(max_results=3).parse({"RelatedTopics": topics})

        assert len(results) == 3

    def test_should_return_nothing_for_empty_answer(self):
        """Test no abstract, no topics."""
        assert DuckDuckGoProvider().parse({"AbstractText": "", "RelatedTopics": []}) == []

    @pytest.mark.asyncio
    async def test_should_send_query_and_user_agent(self):
        """Test request shape."""
        seen = []
        async with client_returning({"RelatedTopics": []}, seen=seen) as client:
            await DuckDuckGoProvider(user_agent="JARVIS-test").fetch(client, "python")

        request = seen[0]
        assert request.url.host == "api.duckduckgo.com"
        assert request.url.params["q"] == "python"
        assert request.url.params["format"] == "json"
        assert request.headers["User-Agent"] == "JARVIS-test"

    @pytest.mark.asyncio
    async def test_should_raise_on_http_error(self):
        """Test status failures propagate to the aggregator."""
        async with client_returning({}, status_code=503) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await DuckDuckGoProvider().fetch(client, "python")


class TestWikipediaProvider:
    """Test Wikipedia extracts."""

    def test_should_parse_pages(self):
        """Test encyclopedia results."""
        data = {
            "query": {
                "pages": {
                    "1": {
                        "pageid": 1,
                        "title": "Tashkent",
                        "extract": "Tashkent is the capital of Uzbekistan.",
                        "fullurl": "https://en.wikipedia.org/wiki/Tashkent",
                    },
                    "-1": {"title": "Missing", "missing": ""},
                }
            }
        }

        results = WikipediaProvider().parse(data)

        assert len(results) == 1
        assert results[0].kind == ResultKind.ENCYCLOPEDIA
        assert results[0].confidence == 0.95
        assert results[0].url == "https://en.wikipedia.org/wiki/Tashkent"

    def test_should_truncate_long_extracts(self):
        """Test snippet length."""
        data = {"query": {"pages": {"1": {"title": "Long Page", "extract": "x" * 400}}}}

        result = WikipediaProvider().parse(data)[0]

        assert result.snippet == "x" * 300 + "..."
        assert result.url == "https://en.wikipedia.org/wiki/Long_Page"


class TestNewsProvider:
    """Test NewsAPI articles."""

    def test_should_send_api_key_header(self):
        """Test authentication header."""
        assert NewsProvider(api_key="secret").headers()["X-Api-Key"] == "secret"

    def test_should_parse_articles(self):
        """Test news results."""
        data = {
            "articles": [
                {
                    "title": "AI news",
                    "description": "Something happened",
                    "url": "https://news.example.com/1",
                    "source": {"name": "Example"},
                    "publishedAt": "2026-01-01T00:00:00Z",
                }
            ]
        }

        result = NewsProvider(api_key="k").parse(data)[0]

        assert result.kind == ResultKind.NEWS
        assert result.confidence == 0.80
        assert result.extra["publisher"] == "Example"


class TestGitHubProvider:
    """Test GitHub repository search."""

    def test_should_parse_repositories(self):
        """Test code results."""
        data = {
            "items": [
                {
                    "full_name": "psf/requests",
                    "description": None,
                    "html_url": "https://github.com/psf/requests",
                    "stargazers_count": 50000,
                    "language": "Python",
                    "forks_count": 9000,
                }
            ]
        }

        result = GitHubProvider().parse(data)[0]

        assert result.title == "psf/requests"
        assert result.snippet == "GitHub repository"
        assert result.kind == ResultKind.CODE
        assert result.confidence == 0.85
        assert result.extra["stars"] == 50000

    def test_should_request_by_stars(self):
        """Test request params."""
        url, params = GitHubProvider().build_request("fastapi")

        assert url == "https://api.github.com/search/repositories"
        assert params["sort"] == "stars"
        assert params["per_page"] == 3


class TestStackOverflowProvider:
    """Test Stack Overflow question search."""

    def test_should_unescape_titles_and_strip_excerpt_tags(self):
        """Test technical results."""
        data = {
            "items": [
                {
                    "title": "How to use &quot;async&quot; in Python?",
                    "excerpt": "Use <span>await</span> inside",
                    "link": "https://stackoverflow.com/q/1",
                    "score": 10,
                }
            ]
        }

        result = StackOverflowProvider().parse(data)[0]

        assert result.title == 'How to use "async" in Python?'
        assert result.snippet == "Use await inside"
        assert result.kind == ResultKind.TECHNICAL
        assert result.confidence == 0.80

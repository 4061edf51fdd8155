"""
Pytest configuration and shared fixtures for testing the profile README generator.
"""

import random
import textwrap

import pytest
import responses


@pytest.fixture
def sample_repo_response():
    """Sample GitHub REST response for a repository lookup."""
    return {
        "id": 123456,
        "full_name": "wuhan005/Elaina",
        "html_url": "https://github.com/wuhan005/Elaina",
        "stargazers_count": 57,
        "forks_count": 3,
    }


@pytest.fixture
def profile_file(tmp_path):
    """A two-project profile.yml: one GitHub repo, one external site."""
    path = tmp_path / "profile.yml"
    path.write_text(
        textwrap.dedent(
            """\
            projects:
              - icon: "🔮"
                link: https://github.com/wuhan005/Elaina
                desc: Docker-based remote code runner
                tags: [Docker, Go]
              - icon: "📝"
                name: Blog
                link: https://github.red/
                desc: My personal blog
            """
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def template_file(tmp_path):
    """A README template with both placeholders exactly once."""
    path = tmp_path / "README_template.md"
    path.write_bytes(b"# Hi there\n\n{{PROJECTS}}\n<!-- tarots -->\n{{TAROTS}}\n")
    return path


@pytest.fixture
def seeded_rng():
    """Deterministic generator for shuffle and coin flips."""
    return random.Random(20240101)


@pytest.fixture
def mocked_responses():
    """Activate responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps

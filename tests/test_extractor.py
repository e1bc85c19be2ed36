import time

import pytest

from sessionstellar.extractor import SignalExtractor, derive_complexity
from sessionstellar.signals import NOT_SPECIFIED


@pytest.fixture
def extractor():
    return SignalExtractor()


def test_inline_decision_block(extractor):
    signals = extractor.extract("Decision: Use caching\nTradeoffs: complexity, cost\nChosen Path: Redis")

    assert len(signals.decision_points) == 1
    decision = signals.decision_points[0]
    assert decision.description == "Use caching"
    assert decision.tradeoffs == ["complexity", "cost"]
    assert decision.chosen_path == "Redis"


def test_inline_decision_defaults(extractor):
    decisions = extractor.extract_decisions("Decision Point: Keep the monolith")

    assert len(decisions) == 1
    assert decisions[0].tradeoffs == []
    assert decisions[0].chosen_path == NOT_SPECIFIED


def test_skills_from_mentions_directives_and_callouts(extractor):
    text = (
        "Ran /tdd-workflow then /code-review.\n"
        "Skill: systematic-debugging\n"
        "🔧 Skill Activation: `brainstorming`\n"
    )
    assert extractor.extract_skills(text) == [
        "tdd-workflow", "code-review", "systematic-debugging", "brainstorming",
    ]


def test_skill_invoke_trace(extractor):
    text = '<invoke name="Skill">\n<parameter name="skill">writing-plans</parameter>\n</invoke>'
    assert "writing-plans" in extractor.extract_skills(text)


def test_invoke_trace_stays_inside_its_block(extractor):
    text = (
        '<invoke name="Skill">\n<parameter name="query">x</parameter>\n</invoke>\n'
        '<invoke name="Task">\n<parameter name="subagent_type">explorer</parameter>\n</invoke>\n'
        '<invoke name="Skill">\n<parameter name="skill">brainstorming</parameter>\n</invoke>'
    )
    assert "brainstorming" in extractor.extract_skills(text)
    assert extractor.extract_agents(text) == ["explorer"]


def test_unclosed_invoke_openers_scale_linearly(extractor):
    text = '<invoke name="Skill">\n<invoke name="Task">\n' * 25000

    started = time.perf_counter()
    assert extractor.extract_skills(text) == []
    assert extractor.extract_agents(text) == []
    assert time.perf_counter() - started < 5


def test_skills_are_lowercased_and_deduplicated(extractor):
    assert extractor.extract_skills("/TDD-Workflow and again /tdd-workflow") == ["tdd-workflow"]


def test_path_like_text_yields_no_skills(extractor):
    assert extractor.extract_skills("Touched ./src/api/types and ./src/lib") == []


def test_skills_section_list(extractor):
    text = "## Skills Invoked\n- brainstorming\n- test-driven-development\n"
    assert extractor.extract_skills(text) == ["brainstorming", "test-driven-development"]


def test_agents_from_traces_callouts_and_phrases(extractor):
    text = (
        '<invoke name="Task">\n'
        '<parameter name="subagent_type">code-reviewer</parameter>\n'
        '</invoke>\n'
        '🤖 Agent spawned: `explorer`\n'
        'Now spawning the planner agent to outline work.\n'
    )
    assert extractor.extract_agents(text) == ["code-reviewer", "explorer", "planner"]


def test_agents_section_numbered_and_bullets(extractor):
    text = (
        "### Agents Spawned\n"
        "1. researcher - gathered docs\n"
        "- tester (ran suite)\n"
        "* reviewer\n"
    )
    assert extractor.extract_agents(text) == ["researcher", "tester", "reviewer"]


def test_agents_section_ignores_title_echo_words(extractor):
    assert extractor.extract_agents("## Agents Spawned\n- No agents this session\n") == []


def test_heading_decision_with_tradeoffs_considered(extractor):
    text = (
        "### Decision 1: Caching layer\n"
        "**Description**: Add a cache\n"
        "**Tradeoffs Considered**:\n"
        "- memory use\n"
        "- stale reads\n"
        "**Chosen Path**: Redis with TTL\n"
    )
    decisions = extractor.extract_decisions(text)

    assert len(decisions) == 1
    assert decisions[0].description == "Caching layer: Add a cache"
    assert decisions[0].tradeoffs == ["memory use", "stale reads"]
    assert decisions[0].chosen_path == "Redis with TTL"


def test_heading_decision_without_description_is_dropped(extractor):
    assert extractor.extract_decisions("### Decision 1: Unfinished thought\nnothing else\n") == []


def test_markdown_decision_also_counted_by_heading_form(extractor):
    text = (
        "#### Decision 1: Storage\n"
        "- **Description**: Pick a database\n"
        "- **Tradeoffs**:\n"
        "  - cost\n"
        "  - latency\n"
        "- **Chosen Path**: Postgres"
    )
    decisions = extractor.extract_decisions(text)

    # Both structural forms match the same block; counted twice
    assert len(decisions) == 2
    assert decisions[0].description == "Pick a database"
    assert decisions[0].tradeoffs == ["cost", "latency"]
    assert decisions[0].chosen_path == "Postgres"
    assert decisions[1].description == "Storage: Pick a database"
    assert decisions[1].chosen_path == "Postgres"


def test_heading_errors_take_precedence(extractor):
    text = (
        "### Error 1: Build failure\n"
        "**Error**: Module not found\n"
        "**Recovery**: Installed the missing package\n"
        "\n"
        "### Error 2: Flaky test\n"
        "**Error**: Timeout in CI\n"
    )
    errors = extractor.extract_errors(text)

    assert [(e.error, e.recovery) for e in errors] == [
        ("Build failure: Module not found", "Installed the missing package"),
        ("Flaky test: Timeout in CI", NOT_SPECIFIED),
    ]


def test_inline_errors(extractor):
    text = "Error: npm install failed\nRecovery: cleared the cache\n\nError: port in use"
    errors = extractor.extract_errors(text)

    assert [(e.error, e.recovery) for e in errors] == [
        ("npm install failed", "cleared the cache"),
        ("port in use", NOT_SPECIFIED),
    ]


def test_inline_learnings(extractor):
    text = (
        "Pattern learned: Write the failing test first\n"
        "🔄 Compound Learning: Cache invalidation needs versioned keys\n"
        "Key insight: Small commits ease review\n"
        "Key insight: Small commits ease review\n"
    )
    assert extractor.extract_learnings(text) == [
        "Write the failing test first",
        "Cache invalidation needs versioned keys",
        "Small commits ease review",
    ]


def test_learnings_section(extractor):
    text = "## Compound Learnings\n1. **Pattern**: Spawn reviewers early\n2. **Pattern**: Keep plans short\n"
    assert extractor.extract_learnings(text) == ["Spawn reviewers early", "Keep plans short"]


def test_learning_headings(extractor):
    text = (
        "### Learning 1: Prefer small PRs\n"
        "They are reviewed faster.\n"
        "\n"
        "More detail here.\n"
        "### Learning 2: Measure first"
    )
    assert extractor.extract_learnings(text) == [
        "Prefer small PRs: They are reviewed faster.",
        "Measure first",
    ]


def test_explicit_metadata(extractor):
    text = "**Duration**: 45 minutes\n**Project Type**: web-app\n**Complexity**: Complex\n"
    metadata = extractor.extract(text).metadata

    assert metadata.duration == 45
    assert metadata.project_type == "web-app"
    assert metadata.complexity == "complex"


def test_plain_metadata_labels(extractor):
    metadata = extractor.extract("Duration: 12 mins\nComplexity: simple").metadata

    assert metadata.duration == 12
    assert metadata.complexity == "simple"


@pytest.mark.parametrize("count,expected", [
    (0, "simple"),
    (4, "simple"),
    (5, "moderate"),
    (14, "moderate"),
    (15, "complex"),
])
def test_derive_complexity(count, expected):
    assert derive_complexity(count) == expected


def test_derived_complexity_uses_extracted_counts(extractor):
    text = " ".join(f"/skill-{i}" for i in range(15))
    signals = extractor.extract(text)

    assert len(signals.skills_invoked) == 15
    assert signals.metadata.complexity == "complex"


def test_signal_free_text_yields_empty_signals(extractor):
    signals = extractor.extract("Just some notes about lunch.")

    assert signals.skills_invoked == []
    assert signals.agents_spawned == []
    assert signals.decision_points == []
    assert signals.errors_recovered == []
    assert signals.compound_learnings == []
    assert signals.metadata.complexity == "simple"
    assert signals.metadata.duration is None


def test_full_session(extractor, sample_session):
    signals = extractor.extract(sample_session)

    assert signals.skills_invoked == [
        "tdd-workflow", "code-review", "systematic-debugging", "brainstorming", "writing-plans",
    ]
    assert signals.agents_spawned == ["code-reviewer", "explorer"]
    assert len(signals.decision_points) == 1
    assert signals.decision_points[0].tradeoffs == ["churn", "review load", "safer deploys"]
    assert [e.error for e in signals.errors_recovered] == ["Type mismatch: Amount typed as string"]
    assert signals.compound_learnings == ["Validate money at the edge", "Small PRs merge faster"]
    assert signals.metadata.duration == 90
    assert signals.metadata.project_type == "web-app"
    assert signals.metadata.complexity == "moderate"


def test_extraction_is_repeatable(extractor, sample_session):
    first = extractor.extract(sample_session)
    second = extractor.extract(sample_session)

    assert set(first.skills_invoked) == set(second.skills_invoked)
    assert set(first.agents_spawned) == set(second.agents_spawned)
    assert set(first.compound_learnings) == set(second.compound_learnings)
    assert first == second

"""Shared fixtures for the SessionStellar test suite."""

import pytest


SAMPLE_SESSION = """# Session: checkout refactor

**Duration**: 90 minutes
**Project Type**: web-app

Started with /tdd-workflow and /code-review.

🔧 Skill Activation: `systematic-debugging`

## Skills Invoked
- brainstorming
- writing-plans

### 🤖 Agents Spawned
1. code-reviewer
- explorer (mapped the codebase)

Decision: Split the payment module
Tradeoffs: churn, review load; safer deploys
Chosen Path: Extract a service

### Error 1: Type mismatch
**Error**: Amount typed as string
**Recovery**: Added a parser at the boundary

Pattern learned: Validate money at the edge
Key insight: Small PRs merge faster
"""


SAMPLE_RECORDS = "\n".join([
    '{"type": "skill", "name": "TDD"}',
    '{"type": "skill", "name": "tdd"}',
    '{"type": "agent", "name": "reviewer"}',
    '{"type": "decision", "description": "Use caching", "tradeoffs": ["cost"], "chosenPath": "Redis"}',
    '{"type": "error", "error": "boom"}',
    '{"type": "learning", "pattern": "p1"}',
    '{"type": "learning", "learning": "l1"}',
])


@pytest.fixture
def sample_session():
    return SAMPLE_SESSION


@pytest.fixture
def sample_records():
    return SAMPLE_RECORDS

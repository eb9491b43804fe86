"""Shared fixtures: a small article publishing workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import pytest

from workflow_sm.state_machine import StateMachine, TransitionGraph

ARTICLE_CONFIG = {
    "graph": "article",
    "states": ["draft", "review", "published"],
    "transitions": {
        "submit": {"from": ["draft"], "to": "review"},
        "publish": {"from": ["review"], "to": "published"},
    },
}


@dataclass
class Article:
    state: str = "draft"
    id: int = 7


@dataclass
class ArticleWorkflow:
    """Workflow with conventional hooks that records every call."""

    config: Any = field(default_factory=lambda: dict(ARTICLE_CONFIG))
    veto: bool = False
    calls: List[Tuple[str, Any, Any]] = field(default_factory=list)
    after_error: Optional[Exception] = None

    def beforeSubmit(self, subject, previous_state):
        self.calls.append(("beforeSubmit", subject.state, previous_state))
        return False if self.veto else None

    def afterSubmit(self, subject, previous_state):
        self.calls.append(("afterSubmit", subject.state, previous_state))
        if self.after_error is not None:
            raise self.after_error

    def beforePublish(self, subject, previous_state):
        self.calls.append(("beforePublish", subject.state, previous_state))
        return True

    def afterPublish(self, subject, previous_state):
        self.calls.append(("afterPublish", subject.state, previous_state))


@pytest.fixture
def article_graph() -> TransitionGraph:
    return TransitionGraph.from_config(ARTICLE_CONFIG)


@pytest.fixture
def article() -> Article:
    return Article()


@pytest.fixture
def workflow() -> ArticleWorkflow:
    return ArticleWorkflow()


@pytest.fixture
def machine(article, workflow) -> StateMachine:
    return StateMachine(article, workflow)

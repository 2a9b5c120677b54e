"""Shared fixtures for claude-all tests."""

import json
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from claude_all.constants import COMPLETION_SIGNAL
from claude_all.models.agent import AgentResult
from claude_all.models.config import create_config


def make_story(number: int, passes: bool = False, **overrides) -> dict:
    story = {
        "id": f"US-{number:03d}",
        "title": f"Story {number}",
        "description": f"As a user, I want feature {number}",
        "acceptanceCriteria": ["Typecheck passes"],
        "priority": number,
        "passes": passes,
        "notes": "",
    }
    story.update(overrides)
    return story


def make_prd(story_count: int = 2, branch_name: str = "ralph/test-app", **overrides) -> dict:
    prd = {
        "project": "Test App",
        "branchName": branch_name,
        "description": "A test application",
        "userStories": [make_story(n) for n in range(1, story_count + 1)],
    }
    prd.update(overrides)
    return prd


def write_prd(path: Path, prd: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(prd, indent=2), encoding="utf-8")
    return path


class FakeAgent:
    """Stands in for AgentClient: replays scripted outputs and records each call.

    ``on_run`` lets a test mutate the working directory during a call, the way
    the real agent writes prd.json.
    """

    def __init__(
        self,
        outputs: Optional[List[str]] = None,
        exit_code: int = 0,
        on_run: Optional[Callable[[str, Optional[Path]], None]] = None,
    ):
        self.outputs = list(outputs or [])
        self.exit_code = exit_code
        self.on_run = on_run
        self.prompts: List[str] = []
        self.cwds: List[Optional[Path]] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def run(self, prompt, cwd=None, on_output=None):
        self.prompts.append(prompt)
        self.cwds.append(Path(cwd) if cwd is not None else None)
        if self.on_run:
            self.on_run(prompt, self.cwds[-1])
        output = self.outputs.pop(0) if self.outputs else "working on it\n"
        if on_output and output:
            on_output(output)
        return AgentResult(output=output, exit_code=self.exit_code)


@pytest.fixture
def working_dir(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def install_dir(tmp_path):
    path = tmp_path / "install"
    (path / "templates").mkdir(parents=True)
    (path / "templates" / "prompt.md").write_text(
        f"Pick the next story. Print {COMPLETION_SIGNAL} when done.\n", encoding="utf-8"
    )
    return path


@pytest.fixture
def config(working_dir, install_dir):
    return create_config(working_dir, install_dir)

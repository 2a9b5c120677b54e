"""Unit tests for the agent loop state machine."""

from unittest.mock import MagicMock, call, patch

import pytest

from claude_all.clients.agent import AgentError
from claude_all.constants import COMPLETION_SIGNAL
from claude_all.models.loop import LoopState
from claude_all.services.loop_service import LoopObserver, run_agent_loop
from conftest import FakeAgent


@pytest.fixture(autouse=True)
def mock_sleep():
    with patch("claude_all.services.loop_service.time.sleep") as mocked:
        yield mocked


class TestLoopTermination:
    def test_completes_on_signal(self, config):
        agent = FakeAgent(outputs=["story 1 done\n", f"all done {COMPLETION_SIGNAL}\n"])

        result = run_agent_loop(config, agent, max_iterations=5)

        assert agent.calls == 2
        assert result.state == LoopState.COMPLETED
        assert result.completed is True
        assert result.iteration == 2
        assert result.max_iterations == 5

    def test_exhausts_without_signal(self, config, mock_sleep):
        agent = FakeAgent(outputs=["a", "b", "c"])

        result = run_agent_loop(config, agent, max_iterations=3, pause_seconds=2.0)

        assert agent.calls == 3
        assert result.state == LoopState.EXHAUSTED
        assert result.completed is False
        assert result.iteration == 3
        assert mock_sleep.call_args_list == [call(2.0), call(2.0)]

    def test_signal_on_first_iteration(self, config, mock_sleep):
        agent = FakeAgent(outputs=[COMPLETION_SIGNAL])

        result = run_agent_loop(config, agent, max_iterations=1)

        assert result.completed is True
        assert result.iteration == 1
        mock_sleep.assert_not_called()

    def test_signal_is_plain_substring(self, config):
        agent = FakeAgent(outputs=[f"noise{COMPLETION_SIGNAL}noise"])

        assert run_agent_loop(config, agent, max_iterations=2).completed is True

    def test_partial_signal_does_not_complete(self, config):
        agent = FakeAgent(outputs=["<promise>COMPLETE", "</promise>"])

        assert run_agent_loop(config, agent, max_iterations=2).completed is False

    def test_exit_code_ignored(self, config):
        failing = FakeAgent(outputs=[COMPLETION_SIGNAL], exit_code=1)
        assert run_agent_loop(config, failing, max_iterations=1).completed is True

        quiet = FakeAgent(outputs=["ok"], exit_code=0)
        assert run_agent_loop(config, quiet, max_iterations=1).completed is False

    def test_rejects_non_positive_budget(self, config):
        with pytest.raises(ValueError):
            run_agent_loop(config, FakeAgent(), max_iterations=0)


class TestLoopPrompt:
    def test_same_template_every_iteration(self, config):
        agent = FakeAgent(outputs=["x", "y"])

        run_agent_loop(config, agent, max_iterations=2)

        template = config.prompt_file.read_text(encoding="utf-8")
        assert agent.prompts == [template, template]
        assert agent.cwds == [config.working_dir, config.working_dir]

    def test_template_read_once(self, config):
        original = config.prompt_file.read_text(encoding="utf-8")

        def rewrite_template(_prompt, _cwd):
            config.prompt_file.write_text("changed", encoding="utf-8")

        agent = FakeAgent(outputs=["x", "y"], on_run=rewrite_template)
        run_agent_loop(config, agent, max_iterations=2)

        assert agent.prompts == [original, original]

    def test_missing_template_is_fatal(self, config):
        config.prompt_file.unlink()
        agent = FakeAgent()

        with pytest.raises(FileNotFoundError):
            run_agent_loop(config, agent, max_iterations=3)
        assert agent.calls == 0


class TestLoopFailures:
    def test_spawn_error_propagates(self, config):
        agent = MagicMock()
        agent.run.side_effect = AgentError("Failed to start agent 'claude'")

        with pytest.raises(AgentError):
            run_agent_loop(config, agent, max_iterations=3)
        assert agent.run.call_count == 1

    def test_spawn_error_after_progress(self, config):
        agent = MagicMock()
        agent.run.side_effect = [FakeAgent(outputs=["x"]).run("p"), AgentError("boom")]

        with pytest.raises(AgentError, match="boom"):
            run_agent_loop(config, agent, max_iterations=5)
        assert agent.run.call_count == 2


class TestLoopPause:
    def test_pause_from_env(self, config, monkeypatch, mock_sleep):
        monkeypatch.setenv("CLAUDE_ALL_ITERATION_PAUSE", "0.25")

        run_agent_loop(config, FakeAgent(), max_iterations=2)

        mock_sleep.assert_called_once_with(0.25)

    def test_default_pause(self, config, monkeypatch, mock_sleep):
        monkeypatch.delenv("CLAUDE_ALL_ITERATION_PAUSE", raising=False)

        run_agent_loop(config, FakeAgent(), max_iterations=2)

        mock_sleep.assert_called_once_with(2.0)

    def test_negative_pause_clamped(self, config, mock_sleep):
        run_agent_loop(config, FakeAgent(), max_iterations=2, pause_seconds=-1)

        mock_sleep.assert_called_once_with(0.0)


class RecordingObserver(LoopObserver):
    def __init__(self):
        self.events = []

    def on_loop_start(self, max_iterations):
        self.events.append(("start", max_iterations))

    def on_iteration(self, iteration, max_iterations):
        self.events.append(("iteration", iteration, max_iterations))

    def on_agent_output(self, text):
        self.events.append(("output", text))

    def on_pause(self, iteration, max_iterations):
        self.events.append(("pause", iteration))

    def on_complete(self, iteration, max_iterations):
        self.events.append(("complete", iteration))

    def on_exhausted(self, max_iterations):
        self.events.append(("exhausted", max_iterations))


class TestLoopObserver:
    def test_events_on_completion(self, config):
        observer = RecordingObserver()
        agent = FakeAgent(outputs=["first\n", COMPLETION_SIGNAL])

        run_agent_loop(config, agent, max_iterations=3, observer=observer)

        assert observer.events == [
            ("start", 3),
            ("iteration", 1, 3),
            ("output", "first\n"),
            ("pause", 1),
            ("iteration", 2, 3),
            ("output", COMPLETION_SIGNAL),
            ("complete", 2),
        ]

    def test_events_on_exhaustion(self, config):
        observer = RecordingObserver()

        run_agent_loop(config, FakeAgent(outputs=["a", "b"]), max_iterations=2, observer=observer)

        assert observer.events == [
            ("start", 2),
            ("iteration", 1, 2),
            ("output", "a"),
            ("pause", 1),
            ("iteration", 2, 2),
            ("output", "b"),
            ("exhausted", 2),
        ]

    def test_default_observer_is_silent(self, config, capsys):
        run_agent_loop(config, FakeAgent(outputs=[COMPLETION_SIGNAL]), max_iterations=1)

        assert capsys.readouterr().out == ""

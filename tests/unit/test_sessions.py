import time

import pytest

from services.sessions import SessionExistsError, SessionNotFoundError, SessionRegistry


def _wait_until(condition, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def test_lookup_missing_room_returns_none(completion) -> None:
    registry = SessionRegistry(completion)
    assert registry.lookup("nonexistent-room") is None
    assert "nonexistent-room" not in registry
    with pytest.raises(SessionNotFoundError):
        registry.get("nonexistent-room")


def test_create_registers_agent_and_logs_start(completion, session_params) -> None:
    registry = SessionRegistry(completion)

    agent = registry.create(session_params, auto_start=False)

    assert registry.lookup("R1") is agent
    assert len(registry) == 1
    assert agent.state == "created"
    first = agent.get_conversation_log()[0]
    assert first.type == "session_started"
    assert first.metadata == {"role": "Backend Engineer", "room": "R1"}


def test_create_rejects_duplicate_room(completion, session_params) -> None:
    registry = SessionRegistry(completion)
    original = registry.create(session_params, auto_start=False)

    with pytest.raises(SessionExistsError):
        registry.create(session_params, auto_start=False)

    assert registry.lookup("R1") is original


def test_remove_logs_session_end_and_evicts(completion, session_params) -> None:
    registry = SessionRegistry(completion)
    agent = registry.create(session_params, auto_start=False)

    registry.remove("R1")

    assert registry.lookup("R1") is None
    assert agent.get_conversation_log()[-1].type == "session_ended"
    registry.remove("R1")


def test_backend_engineer_scenario(completion, session_params) -> None:
    completion.queue("Q1", "F1", "Overall strong. Rating 8/10. Recommendation: Yes.")
    registry = SessionRegistry(completion)
    agent = registry.create(session_params, auto_start=False)

    assert agent.ask_question() == "Q1"
    assert agent.question_count == 1
    assert agent.provide_feedback("I used a hash map") == "F1"
    assert [(m.role, m.content) for m in agent.conversation_history] == [
        ("assistant", "Q1"),
        ("user", "I used a hash map"),
        ("assistant", "F1"),
    ]

    assessment = agent.generate_final_feedback()

    assert assessment
    assert registry.lookup("R1") is None
    types = [entry.type for entry in agent.get_conversation_log()]
    assert types[-2:] == ["final_feedback_produced", "session_ended"]
    assert [entry.type for entry in agent.assessment_log()] == types[:-1]


def test_automatic_first_question_fires_after_delay(completion, session_params) -> None:
    completion.queue("Welcome aboard! What have you built recently?")
    registry = SessionRegistry(completion, first_question_delay_s=0.01)
    agent = registry.create(session_params)

    assert _wait_until(lambda: agent.state == "in_dialogue")
    assert agent.question_count == 1
    assert agent.conversation_history[0].content == "Welcome aboard! What have you built recently?"


def test_automatic_first_question_failure_keeps_session(session_params) -> None:
    class Failing:
        def complete(self, messages, **kwargs):
            raise RuntimeError("upstream unavailable")

    registry = SessionRegistry(Failing(), first_question_delay_s=0.01)
    agent = registry.create(session_params)

    assert _wait_until(lambda: agent.get_conversation_log()[-1].type == "error")
    assert registry.lookup("R1") is agent
    assert agent.question_count == 0


def test_manual_question_cancels_pending_timer(completion, session_params) -> None:
    completion.queue("Q1")
    registry = SessionRegistry(completion, first_question_delay_s=60.0)
    agent = registry.create(session_params)
    assert agent.state == "awaiting_first_question"

    agent.ask_question()

    assert agent.cancel_first_question() is False
    assert agent.question_count == 1
    assert len(completion.calls) == 1


def test_close_all_retires_every_agent(completion, make_params) -> None:
    registry = SessionRegistry(completion, first_question_delay_s=60.0)
    agents = [registry.create(make_params(f"room-{index}")) for index in range(3)]

    registry.close_all()

    assert len(registry) == 0
    assert all(agent.state == "terminated" for agent in agents)

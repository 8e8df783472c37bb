import pytest

from note_agent.domain.conversation import ConversationHistory, tail_truncate
from note_agent.domain.models import Message


def _history(n: int, max_chars: int = 100_000) -> ConversationHistory:
    h = ConversationHistory(max_context_chars=max_chars)
    for i in range(n):
        role = "user" if i % 2 == 0 else "assistant"
        h.append(Message(role=role, content=f"msg-{i}"))
    return h


def test_message_is_immutable():
    m = Message(role="user", content="hi")
    with pytest.raises(AttributeError):
        m.content = "changed"  # type: ignore[misc]
    assert m.timestamp.tzinfo is not None


def test_recent_window_keeps_last_entries_in_order():
    h = _history(25)
    window = h.recent_window(20)
    assert len(window) == 20
    assert window[0].content == "msg-5"
    assert window[-1].content == "msg-24"
    assert h.recent_window(0) == []


def test_build_prompt_includes_only_last_twenty():
    h = _history(25)
    prompt = h.build_prompt("new question")
    assert "user: msg-4\n" not in prompt
    assert prompt.startswith("assistant: msg-5\n")
    assert "user: msg-24\n" in prompt
    assert prompt.endswith("\n\nnew question")


def test_build_prompt_layout_with_context():
    h = ConversationHistory(max_context_chars=1000)
    h.append(Message(role="user", content="a"))
    h.append(Message(role="assistant", content="b"))
    assert h.build_prompt("c", "note body") == "user: a\nassistant: b\nnote body\nc"


def test_build_prompt_tail_truncates_to_budget():
    h = _history(10)
    context = "x" * 50
    untruncated = "\n".join(f"{m.role}: {m.content}" for m in h.recent_window()) + f"\n{context}\nquestion"
    h.max_context_chars = 40
    prompt = h.build_prompt("question", context)
    assert len(prompt) == 40
    assert prompt == untruncated[-40:]


def test_attached_context_truncated_before_concatenation():
    h = ConversationHistory(max_context_chars=10)
    prompt = h.build_prompt("", "0123456789ABCDEF")
    # 附加上下文先保留末尾 10 个字符，拼接后整体再截断一次
    assert prompt == "789ABCDEF\n"


def test_history_keeps_untruncated_text():
    h = ConversationHistory(max_context_chars=5)
    h.build_prompt("a very long user message")
    h.append(Message(role="user", content="a very long user message"))
    assert h.messages[0].content == "a very long user message"


def test_tail_truncate():
    assert tail_truncate("abcdef", 3) == "def"
    assert tail_truncate("abc", 3) == "abc"
    assert tail_truncate("abc", 0) == ""

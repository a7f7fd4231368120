from __future__ import annotations

from memory import ConversationStore, SQLiteMemoryDB, estimate_tokens


def _store(tmp_path) -> ConversationStore:
    return ConversationStore(SQLiteMemoryDB(str(tmp_path / "history.sqlite")))


def test_lines_are_prefixed_and_chronological(tmp_path):
    store = _store(tmp_path)
    store.append_line(conversation_id="c1", role="user", text="How did I sleep?")
    store.append_line(conversation_id="c1", role="assistant", text="Your sleep score was 83.")
    store.append_line(conversation_id="c2", role="user", text="other conversation")

    assert store.recent_lines("c1") == ["User: How did I sleep?", "Assistant: Your sleep score was 83."]
    assert store.history_text("c1", 2000, "\n\n") == "User: How did I sleep?\n\nAssistant: Your sleep score was 83."


def test_history_text_keeps_newest_lines_within_budget(tmp_path):
    store = _store(tmp_path)
    for idx in range(5):
        store.append_line(conversation_id="c1", role="user", text=f"question {idx} " + "x" * 30)

    newest = store.recent_lines("c1")[-2:]
    budget = sum(estimate_tokens(line) for line in newest)

    assert store.history_text("c1", budget, "|") == "|".join(newest)


def test_history_text_always_keeps_newest_line(tmp_path):
    store = _store(tmp_path)
    store.append_line(conversation_id="c1", role="user", text="y" * 400)

    assert store.history_text("c1", 1) == "User: " + "y" * 400


def test_history_text_empty_conversation(tmp_path):
    assert _store(tmp_path).history_text("missing") == ""


def test_trim_keeps_last_turns_per_conversation(tmp_path):
    store = _store(tmp_path)
    for idx in range(4):
        store.append_line(conversation_id="c1", role="user", text=f"q{idx}")
        store.append_line(conversation_id="c1", role="assistant", text=f"a{idx}")
    store.append_line(conversation_id="c2", role="user", text="keep me")

    store.trim(conversation_id="c1", max_turns=2)

    assert store.recent_lines("c1") == ["User: q2", "Assistant: a2", "User: q3", "Assistant: a3"]
    assert store.recent_lines("c2") == ["User: keep me"]


def test_recent_lines_limit(tmp_path):
    store = _store(tmp_path)
    for idx in range(3):
        store.append_line(conversation_id="c1", role="assistant", text=f"a{idx}")
    assert store.recent_lines("c1", limit=2) == ["Assistant: a1", "Assistant: a2"]

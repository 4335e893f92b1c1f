from pathlib import Path

import config
import utils
import wizard
from questions import QUESTIONS


def test_format_question_adds_mode_hint():
    single = utils.format_question(QUESTIONS[0], 1, len(QUESTIONS))
    multi = utils.format_question(QUESTIONS[3], 4, len(QUESTIONS))
    free = utils.format_question(QUESTIONS[5], 6, len(QUESTIONS))

    assert single == f"❓ (1/6) {QUESTIONS[0].text}"
    assert "Continue" in multi
    assert "Skip" in free


def test_callback_data_carries_session_token():
    data = utils.make_callback_data("opt", 17, 3, 1)

    assert data == "opt:17:3:1"
    assert utils.parse_callback_data(data) == ("opt", 17, [3, 1])
    assert utils.parse_callback_data(utils.make_callback_data("generate", 5)) == ("generate", 5, [])


def test_callback_data_from_reset_session_does_not_match():
    old = wizard.start_session()
    fresh = wizard.reset_session(old)

    _, token, _ = utils.parse_callback_data(utils.make_callback_data("restart", old.token))

    assert token != fresh.token
    assert len(utils.make_callback_data("opt", fresh.token, 5, 6).encode()) <= 64


def test_render_transcript_marks_waiting_question():
    session = wizard.start_session()
    wizard.submit_answer(session, "business_type", "Blog")

    transcript = utils.render_transcript(session.events)

    assert transcript.startswith("🤖 Hi!")
    assert "👤 Blog" in transcript
    assert transcript.endswith(f"❓ {QUESTIONS[1].text} (waiting for answer)")
    assert f"❓ {QUESTIONS[0].text}\n" in transcript


def test_split_message_prefers_line_breaks():
    text = "\n".join(["a" * 8] * 5)

    chunks = utils.split_message(text, limit=20)

    assert chunks == ["aaaaaaaa\naaaaaaaa", "aaaaaaaa\naaaaaaaa", "aaaaaaaa"]


def test_split_message_short_text():
    assert utils.split_message("hello", limit=20) == ["hello"]
    assert utils.split_message("", limit=20) == [""]


def test_split_message_without_line_breaks():
    assert utils.split_message("x" * 25, limit=10) == ["x" * 10, "x" * 10, "x" * 5]


def test_create_export_file(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "EXPORT_DIR", tmp_path / "exports")

    path = Path(utils.create_export_file("<html>café</html>", 42))

    assert path.parent == tmp_path / "exports"
    assert path.name.startswith("website_42_")
    assert path.suffix == ".html"
    assert path.read_text(encoding="utf-8") == "<html>café</html>"

from __future__ import annotations

from unittest.mock import MagicMock, patch

from feed_assistant.safety import (
    STREAM_REDACTION_MARKER,
    JsonPatternDetector,
    sanitize_stream,
    sanitize_stream_text,
)


def test_object_split_across_fragments_is_redacted():
    detector = JsonPatternDetector()
    first = detector.process_chunk('{"secret": ')
    second = detector.process_chunk('"x"}')
    assert first == '{"secret": '
    assert second == STREAM_REDACTION_MARKER


def test_single_fragment_gives_same_final_text():
    split = list(sanitize_stream(['{"secret": ', '"x"}']))
    whole = list(sanitize_stream(['{"secret": "x"}']))
    assert split[-1] == whole[-1] == STREAM_REDACTION_MARKER


def test_surrounding_prose_is_kept():
    out = list(sanitize_stream(["Result: ", '{"id": 42, "ok": true}', " done."]))
    assert out[-1] == f"Result: {STREAM_REDACTION_MARKER} done."


def test_array_of_objects_is_redacted():
    out = list(sanitize_stream(['See [{"a": 1}, ', '{"b": 2}] here']))
    # Objects are matched first, so each element is replaced on its own.
    assert out[-1] == f"See [{STREAM_REDACTION_MARKER}, {STREAM_REDACTION_MARKER}] here"


def test_array_pattern_catches_nested_objects():
    out = list(sanitize_stream(['[{"items": [1, 2]}, {"x": "y"}]']))
    assert STREAM_REDACTION_MARKER in out[-1]
    assert '"items"' not in out[-1]


def test_plain_text_passes_through():
    detector = JsonPatternDetector()
    assert detector.process_chunk("Hooks let you use state ") == "Hooks let you use state "
    assert detector.process_chunk("{not json}") == "Hooks let you use state {not json}"


def test_buffer_stays_bounded():
    detector = JsonPatternDetector()
    fragment = "lorem ipsum " * 40
    total = 0
    while total < 50_000:
        detector.process_chunk(fragment)
        total += len(fragment)
        assert len(detector.buffer) <= 10_000
    assert total >= 50_000


def test_oversized_fragment_truncates_to_tail():
    detector = JsonPatternDetector()
    out = detector.process_chunk("a" * 12_000 + "tail")
    assert len(out) == 12_004
    assert len(detector.buffer) == 1_000
    assert detector.buffer.endswith("tail")
    assert detector.released == []


def test_released_head_is_kept_when_requested():
    detector = JsonPatternDetector(release=True)
    detector.process_chunk('{"id": 1} ' + "a" * 12_000)
    released = detector.pop_released()
    assert len(released) == 1
    assert released[0].startswith(STREAM_REDACTION_MARKER + " aaa")
    assert detector.released == []
    assert detector.flush() == "a" * 1_000
    assert detector.buffer == ""


def test_bytes_fragments_are_decoded():
    data = '{"nome": "José"}'.encode("utf-8")
    out = list(sanitize_stream([data[:13], data[13:]]))
    assert out[-1] == STREAM_REDACTION_MARKER


def test_redaction_failure_fails_open():
    broken = MagicMock()
    broken.sub.side_effect = RuntimeError("regex engine exploded")
    with patch("feed_assistant.safety.STREAM_PATTERNS", [broken]):
        detector = JsonPatternDetector()
        assert detector.process_chunk('{"secret": "x"}') == '{"secret": "x"}'


def test_truncated_utf8_tail_is_flushed():
    data = "Olá".encode("utf-8")
    out = list(sanitize_stream([data[:-1]]))
    assert out[-1] == "Ol\ufffd"


def test_stream_text_covers_input_past_the_buffer():
    lines = [f"line {n:05d} with some filler text\n" for n in range(600)]
    lines[3] = 'line 00003 {"id": 7}\n'
    out = "".join(sanitize_stream_text(lines))
    assert out == "".join(lines).replace('{"id": 7}', STREAM_REDACTION_MARKER)


def test_stream_text_short_input_is_one_piece():
    assert list(sanitize_stream_text(['Result: {"id":', " 1}"])) == [
        f"Result: {STREAM_REDACTION_MARKER}"
    ]

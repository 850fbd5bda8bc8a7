from django.test import SimpleTestCase

from chat.conversation import (
    APOLOGY_MESSAGE,
    DONE,
    ConversationLog,
    IdGenerator,
    LineBuffer,
    Message,
    StreamParseError,
    StreamReconciler,
    apology,
    parse_event_line,
    reconcile,
)
from chat.relay import DONE_EVENT, encode_delta


def _stream(*fragments, done=True) -> bytes:
    body = "".join(encode_delta(f) for f in fragments)
    if done:
        body += DONE_EVENT
    return body.encode("utf-8")


def _split(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


class ConversationLogTests(SimpleTestCase):
    def test_apply_appends_new_ids(self):
        log = ConversationLog()
        log.apply(Message("1", "user", "Hi"))
        log.apply(Message("2", "assistant", "Hello"))
        self.assertEqual([m.id for m in log], ["1", "2"])

    def test_apply_replaces_existing_id_in_place(self):
        log = ConversationLog([
            Message("1", "user", "Hi"),
            Message("2", "assistant", "Hel"),
            Message("3", "user", "later"),
        ])
        log.apply(Message("2", "assistant", "Hello"))
        self.assertEqual(len(log), 3)
        self.assertEqual([m.id for m in log], ["1", "2", "3"])
        self.assertEqual(log.get("2").content, "Hello")

    def test_visible_hides_system(self):
        log = ConversationLog([Message("s", "system", "pre"), Message("1", "user", "Hi")])
        self.assertEqual([m.id for m in log.visible()], ["1"])
        self.assertEqual(log.as_history()[0], {"role": "system", "content": "pre"})
        self.assertIn("s", log)

    def test_message_dict_round_trip_uses_wire_names(self):
        m = Message("7", "assistant", "x", include_quick_questions=True)
        self.assertEqual(m.to_dict()["includeQuickQuestions"], True)
        self.assertEqual(Message.from_dict(m.to_dict()), m)


class IdGeneratorTests(SimpleTestCase):
    def test_ids_increase_even_with_a_frozen_clock(self):
        ids = IdGenerator(clock=lambda: 1700000000.0)
        a, b, c = ids(), ids(), ids()
        self.assertEqual(a, "1700000000000")
        self.assertLess(int(a), int(b))
        self.assertLess(int(b), int(c))


class ParseEventLineTests(SimpleTestCase):
    def test_delta(self):
        self.assertEqual(parse_event_line(encode_delta("hi").strip()), "hi")

    def test_done(self):
        self.assertIs(parse_event_line("data: [DONE]"), DONE)

    def test_non_data_lines_are_ignored(self):
        for line in ("", ": keep-alive", "event: ping"):
            with self.subTest(line=line):
                self.assertIsNone(parse_event_line(line))

    def test_role_only_delta_is_empty_fragment(self):
        self.assertEqual(parse_event_line('data: {"choices":[{"delta":{"role":"assistant"}}]}'), "")

    def test_bad_payloads_raise(self):
        for line in ("data: {not json", 'data: {"choices": []}', 'data: {"foo": 1}',
                     'data: {"choices":[{"delta":{"content":5}}]}',
                     'data: {"choices":[{"delta":{"content":["a"]}}]}'):
            with self.subTest(line=line):
                with self.assertRaises(StreamParseError):
                    parse_event_line(line)


class LineBufferTests(SimpleTestCase):
    def test_multibyte_character_split_across_chunks(self):
        buf = LineBuffer()
        data = "café\n".encode("utf-8")
        lines = []
        for piece in _split(data, 1):
            lines.extend(buf.feed(piece))
        self.assertEqual(lines, ["café"])
        self.assertEqual(buf.flush(), [])

    def test_flush_returns_unterminated_tail(self):
        buf = LineBuffer()
        self.assertEqual(buf.feed("data: x"), [])
        self.assertEqual(buf.flush(), ["data: x"])


class ReconcileTests(SimpleTestCase):
    def test_chunk_boundaries_do_not_change_the_result(self):
        data = _stream("Hello", ", ", "wörld", " 💎")
        results = []
        for size in (1, 2, 3, 7, 64, len(data)):
            log = ConversationLog([Message("1", "user", "Hi")])
            rec = reconcile(_split(data, size), log, "2")
            self.assertTrue(rec.completed)
            results.append([m.to_dict() for m in log])
        for r in results[1:]:
            self.assertEqual(r, results[0])
        self.assertEqual(results[0][-1]["content"], "Hello, wörld 💎")

    def test_streamed_answer_is_one_message(self):
        log = ConversationLog([Message("1", "user", "Hi")])
        rec = StreamReconciler(log, "2")
        seen = []
        for chunk in _split(_stream("a", "b", "c"), 5):
            seen.extend(m.content for m in rec.feed(chunk))
        rec.finish()
        self.assertEqual(len(log), 2)
        self.assertEqual(seen, ["a", "ab", "abc"])
        self.assertEqual(rec.message, Message("2", "assistant", "abc", False))

    def test_malformed_line_is_skipped(self):
        data = (encode_delta("ok ") + "data: {broken\n\n" + encode_delta("still") + DONE_EVENT).encode()
        log = ConversationLog()
        with self.assertLogs("chat.conversation", level="WARNING"):
            rec = reconcile([data], log, "9")
        self.assertEqual(rec.skipped_lines, 1)
        self.assertEqual(log.get("9").content, "ok still")
        self.assertTrue(rec.completed)

    def test_numeric_content_is_skipped_not_stringified(self):
        data = (encode_delta("a") + 'data: {"choices":[{"delta":{"content":5}}]}\n\n' + DONE_EVENT).encode()
        log = ConversationLog()
        with self.assertLogs("chat.conversation", level="WARNING"):
            rec = reconcile([data], log, "6")
        self.assertEqual(log.get("6").content, "a")
        self.assertEqual(rec.skipped_lines, 1)

    def test_abrupt_close_keeps_partial_content(self):
        log = ConversationLog()
        with self.assertLogs("chat.conversation", level="WARNING"):
            rec = reconcile([_stream("partial", done=False)], log, "3")
        self.assertFalse(rec.completed)
        self.assertEqual(log.get("3").content, "partial")

    def test_lines_after_done_are_ignored(self):
        data = _stream("a") + encode_delta("late").encode()
        log = ConversationLog()
        rec = reconcile([data], log, "4")
        self.assertEqual(log.get("4").content, "a")
        self.assertTrue(rec.completed)

    def test_done_without_content_creates_no_message(self):
        log = ConversationLog()
        rec = reconcile([DONE_EVENT.encode()], log, "5")
        self.assertTrue(rec.completed)
        self.assertIsNone(rec.message)

    def test_apology(self):
        m = apology("8")
        self.assertEqual((m.role, m.content), ("assistant", APOLOGY_MESSAGE))

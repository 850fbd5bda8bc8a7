from django.test import SimpleTestCase

from chat.prompts import OFF_TOPIC_REPLY, build_spec_preamble, build_system_message
from chat.service import ChatService, history_as_dicts


class RecordingLLM:
    def __init__(self):
        self.calls = []

    def complete(self, system, contents, *, json_mode=False):
        self.calls.append((system, contents))
        return "It is colorless."

    def stream(self, system, contents):
        self.calls.append((system, contents))
        return iter(["It is ", "colorless."])


class ChatServiceTests(SimpleTestCase):
    def test_reply_builds_certificate_grounded_system(self):
        llm = RecordingLLM()
        out = ChatService(llm).reply("What does F mean?", "GIA Color Grade F")
        self.assertEqual(out, "It is colorless.")
        system, contents = llm.calls[0]
        self.assertIn("GIA Color Grade F", system)
        self.assertIn(OFF_TOPIC_REPLY, system)
        self.assertEqual(contents, [{"role": "user", "parts": ["What does F mean?"]}])

    def test_history_is_sent_in_order_and_system_entries_are_folded(self):
        llm = RecordingLLM()
        history = [
            {"role": "system", "content": "Preamble about this stone"},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
        ]
        list(ChatService(llm).stream_reply("Is it eye-clean?", "cert", history))
        system, contents = llm.calls[0]
        self.assertTrue(system.endswith("Preamble about this stone"))
        self.assertEqual(
            [(c["role"], c["parts"][0]) for c in contents],
            [("user", "Hi"), ("model", "Hello!"), ("user", "Is it eye-clean?")],
        )

    def test_history_as_dicts_drops_extra_keys(self):
        out = history_as_dicts([{"id": "1", "role": "user", "content": "x", "includeQuickQuestions": True}])
        self.assertEqual(out, [{"role": "user", "content": "x"}])
        self.assertEqual(history_as_dicts(None), [])


class PromptTests(SimpleTestCase):
    def test_system_message_embeds_text(self):
        self.assertIn("CERT TEXT", build_system_message("CERT TEXT"))

    def test_spec_preamble_lists_specs(self):
        text = build_spec_preamble({"laboratory": "GIA", "type": "Natural", "carat": 1.01}, "raw")
        self.assertIn("Certificate Type: GIA Natural Diamond Certificate", text)
        self.assertIn("Carat Weight: 1.01", text)
        self.assertTrue(text.endswith("raw"))

import json
import unittest

from trustgraph.core.log import build_processors


def _render(processors, event: str, **fields):
    event_dict = dict(fields, event=event)
    for processor in processors:
        event_dict = processor(None, "warning", event_dict)
    return event_dict


class LogProcessorTests(unittest.TestCase):
    def test_json_lines_carry_event_type_level_and_timestamp(self) -> None:
        line = _render(build_processors("json"), "edge_sync_failed", total=3)

        payload = json.loads(line)
        self.assertEqual(payload["event_type"], "edge_sync_failed")
        self.assertNotIn("event", payload)
        self.assertEqual(payload["level"], "warning")
        self.assertEqual(payload["total"], 3)
        self.assertIn("T", payload["timestamp"])

    def test_console_format_keeps_the_event_name(self) -> None:
        line = _render(build_processors("console"), "edges_synced", added=2)

        self.assertIn("edges_synced", line)
        self.assertIn("added", line)


if __name__ == "__main__":
    unittest.main()

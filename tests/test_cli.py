import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from trustgraph.adapters.store.sqlite_edge_store import SqliteEdgeStore
from trustgraph.cli.main import main
from trustgraph.core.dto import RawAccount, RawHolding, RawTrustLimit
from trustgraph.io.output_writer import write_accounts_json

UNIT = 10**18
A, B, C = ("0x%040x" % n for n in (0xA1, 0xB2, 0xC3))


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.db = str(self.tmp / "edges.db")
        self.out = str(self.tmp / "out")
        self.snapshot = write_accounts_json(
            [
                RawAccount(address=A, holdings=(RawHolding("0x%040x" % 0x7B, B, 5 * UNIT),)),
                RawAccount(address=B, outgoing=(RawTrustLimit(B, C, 100 * UNIT),)),
            ],
            str(self.tmp / "accounts.json"),
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> int:
        with mock.patch("sys.argv", ["trustgraph", "--db", self.db, "--out", self.out, *argv]):
            with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
                return main()

    def _graph(self):
        with open(Path(self.out) / "graph.json", "r", encoding="utf-8") as f:
            return json.load(f)

    def test_sync_from_snapshot_writes_graph_and_summary(self) -> None:
        code = self._run("--source-file", self.snapshot, "--summary")

        self.assertEqual(code, 0)
        self.assertEqual(len(self._graph()["edges"]), 2)
        self.assertEqual(len(SqliteEdgeStore(self.db).list_edges()), 2)
        summary = (Path(self.out) / "summary.md").read_text(encoding="utf-8")
        self.assertIn("- Added: 2", summary)

    def test_dry_run_does_not_create_the_store(self) -> None:
        code = self._run("--source-file", self.snapshot, "--dry-run", "--summary")

        self.assertEqual(code, 0)
        self.assertEqual(len(self._graph()["edges"]), 2)
        self.assertFalse(Path(self.db).exists())

    def test_conflicting_flags(self) -> None:
        self.assertEqual(self._run("--dry-run", "--export-only"), 2)

    def test_bad_snapshot_exits_with_error(self) -> None:
        self.assertEqual(self._run("--source-file", str(self.tmp / "missing.json")), 1)

    def test_transfer_metrics_are_stored(self) -> None:
        metrics_file = self.tmp / "metrics.json"
        metrics_file.write_text(json.dumps({"steps": 4}), encoding="utf-8")

        code = self._run("--source-file", self.snapshot, "--set-transfer-metrics", str(metrics_file))

        self.assertEqual(code, 0)
        with mock.patch("sys.argv", ["trustgraph", "--db", self.db, "--source-file", self.snapshot,
                                     "--show-transfer-metrics"]):
            buf = io.StringIO()
            with redirect_stdout(buf):
                self.assertEqual(main(), 0)
        self.assertEqual(json.loads(buf.getvalue()), {"steps": 4})


if __name__ == "__main__":
    unittest.main()

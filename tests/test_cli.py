from unittest.mock import patch

from semantic_memory.__main__ import build_parser, main
from semantic_memory.core.db import Database
from semantic_memory.core.memory_store import MemoryStore
from semantic_memory.vector.embeddings import DeterministicHashEmbedding


def test_parser_defaults():
    args = build_parser().parse_args(["serve"])
    assert args.transport == "stdio"
    assert args.host == "127.0.0.1"


def test_stats_command(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    db_path = str(tmp_path / "cli.db")
    with Database(db_path) as database:
        MemoryStore(database, DeterministicHashEmbedding()).save("x", "hello")

    assert main(["--db-path", db_path, "stats"]) == 0
    out = capsys.readouterr().out
    assert "Memories: 1" in out
    assert "Biography: not set" in out


def test_invalid_config_refuses_to_start(monkeypatch, tmp_path):
    monkeypatch.setenv("EMBED_PROVIDER", "unknown")
    assert main(["--db-path", str(tmp_path / "cli.db"), "stats"]) == 1


def test_startup_failure_exits_nonzero(monkeypatch, tmp_path):
    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert main(["--db-path", str(blocker / "memory.db"), "stats"]) == 1


def test_serve_closes_database_on_interrupt(monkeypatch, tmp_path):
    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    opened = []

    def fake_serve(service, transport, host, port):
        opened.append(service)
        assert service.db.is_open
        raise KeyboardInterrupt

    with patch("semantic_memory.__main__.serve", side_effect=fake_serve):
        assert main(["--db-path", str(tmp_path / "cli.db"), "serve"]) == 0

    assert not opened[0].db.is_open

"""Tests for the file-splitter command line."""

import json
import logging
import os
import pytest
import platformdirs
from pathlib import Path
from unittest.mock import Mock

from file_splitter.chunking import cli
from file_splitter.chunking.cli import (
    EXIT_ERROR,
    EXIT_MISSING_FILE,
    EXIT_OK,
    build_parser,
    console_confirm,
    main,
    merge_command,
    split_command,
)
from file_splitter.chunking.config import FileSplitterConfig
from file_splitter.chunking.summary_store import load_summary

CONTENT = os.urandom(5000)


def _never_called(prompt: str) -> bool:
    raise AssertionError(f"Unexpected confirmation: {prompt}")


@pytest.fixture
def config():
    return FileSplitterConfig(**{"split": {"chunk_size": "2KB"}})


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "movie.mkv"
    path.write_bytes(CONTENT)
    return path


@pytest.fixture
def split_output(config, source, tmp_path):
    """Chunks and summary of ``source`` in tmp_path/parts."""
    output_dir = tmp_path / "parts"
    assert split_command(config, source, output_dir_override=output_dir, assume_yes=True) == EXIT_OK
    return output_dir


@pytest.fixture
def restore_root_logger():
    """main() reconfigures the root logger; put the original handlers back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSplitCommand:
    """Tests for split_command."""
    
    def test_split_writes_chunks_and_summary(self, split_output):
        summary = load_summary(split_output / "movie.mkv.sum")
        
        assert summary.chunk_count == 3
        assert summary.total_size == 5000
        assert summary.chunk_size == 2048
        assert sorted(p.name for p in split_output.glob("*.part")) == [
            "movie.mkv.1.part", "movie.mkv.2.part", "movie.mkv.3.part"
        ]
    
    def test_defaults_to_source_directory(self, config, source, tmp_path):
        assert split_command(config, source, assume_yes=True) == EXIT_OK
        assert (tmp_path / "movie.mkv.sum").exists()
        assert (tmp_path / "movie.mkv.1.part").exists()
    
    def test_chunk_size_override(self, config, source, tmp_path):
        output_dir = tmp_path / "out"
        assert split_command(config, source, output_dir, chunk_size_override="1 KB", assume_yes=True) == EXIT_OK
        assert load_summary(output_dir / "movie.mkv.sum").chunk_count == 5
    
    def test_confirmation_prompt_describes_plan(self, config, source, tmp_path):
        confirm = Mock(return_value=True)
        
        split_command(config, source, tmp_path / "out", confirm=confirm)
        
        prompt = confirm.call_args[0][0]
        assert str(source) in prompt
        assert "2048 bytes" in prompt
        assert "3 total chunk(s)" in prompt
    
    def test_declined_confirmation_writes_nothing(self, config, source, tmp_path):
        output_dir = tmp_path / "out"
        
        result = split_command(config, source, output_dir, confirm=Mock(return_value=False))
        
        assert result == EXIT_OK
        assert not output_dir.exists()
    
    def test_missing_source(self, config, tmp_path):
        result = split_command(config, tmp_path / "nope.bin", assume_yes=True)
        assert result == EXIT_MISSING_FILE
    
    def test_invalid_chunk_size_override(self, config, source):
        result = split_command(config, source, chunk_size_override="0 MB", assume_yes=True)
        assert result == EXIT_ERROR
    
    def test_existing_summary_stops_split(self, config, source, tmp_path):
        """Test that an earlier summary is kept and no chunk is written."""
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        summary_file = output_dir / "movie.mkv.sum"
        summary_file.write_text("earlier")

        result = split_command(config, source, output_dir, assume_yes=True)

        assert result == EXIT_ERROR
        assert summary_file.read_text() == "earlier"
        assert list(output_dir.glob("*.part")) == []

    def test_existing_chunk_is_error(self, config, source, split_output):
        result = split_command(config, source, output_dir_override=split_output, assume_yes=True)
        assert result == EXIT_ERROR


class TestMergeCommand:
    """Tests for merge_command."""
    
    def test_merge_restores_file(self, config, split_output, tmp_path):
        restored = tmp_path / "restored"
        
        result = merge_command(config, split_output / "movie.mkv.sum", restored, assume_yes=True)
        
        assert result == EXIT_OK
        assert (restored / "movie.mkv").read_bytes() == CONTENT
    
    def test_merge_defaults_to_summary_directory(self, config, split_output):
        result = merge_command(config, split_output / "movie.mkv.sum", assume_yes=True)
        
        assert result == EXIT_OK
        assert (split_output / "movie.mkv").read_bytes() == CONTENT
    
    def test_inconsistent_summary_never_opens_chunks(self, config, split_output, tmp_path, monkeypatch):
        """Test that a bad chunk count is rejected before merging starts."""
        summary_path = split_output / "movie.mkv.sum"
        data = json.loads(summary_path.read_text())
        data["chunk_count"] = 4
        summary_path.write_text(json.dumps(data))
        merger_class = Mock()
        monkeypatch.setattr(cli, "ChunkMerger", merger_class)
        restored = tmp_path / "restored"
        
        result = merge_command(config, summary_path, restored, assume_yes=True)
        
        assert result == EXIT_ERROR
        merger_class.assert_not_called()
        assert not (restored / "movie.mkv").exists()
    
    def test_missing_chunk_file(self, config, split_output, tmp_path):
        (split_output / "movie.mkv.2.part").unlink()
        
        result = merge_command(config, split_output / "movie.mkv.sum", tmp_path / "restored", assume_yes=True)
        
        assert result == EXIT_ERROR
        assert not (tmp_path / "restored" / "movie.mkv").exists()
    
    def test_missing_summary(self, config, tmp_path):
        result = merge_command(config, tmp_path / "missing.sum", assume_yes=True)
        assert result == EXIT_MISSING_FILE
    
    def test_malformed_summary(self, config, tmp_path):
        summary_path = tmp_path / "broken.sum"
        summary_path.write_text("{")
        assert merge_command(config, summary_path, assume_yes=True) == EXIT_ERROR
    
    def test_declined_mismatch_cancels(self, config, split_output, tmp_path):
        """Test that declining a checksum mismatch stops with exit 0."""
        chunk = split_output / "movie.mkv.1.part"
        data = bytearray(chunk.read_bytes())
        data[0] ^= 0xFF
        chunk.write_bytes(bytes(data))
        answers = iter([True, False])
        
        result = merge_command(
            config, split_output / "movie.mkv.sum", tmp_path / "restored",
            confirm=lambda prompt: next(answers)
        )
        
        assert result == EXIT_OK
        assert (tmp_path / "restored" / "movie.mkv").stat().st_size < len(CONTENT)
    
    def test_accepted_mismatch_reports_error(self, config, split_output, tmp_path):
        """Test that a corrupted merge finishes but exits 1."""
        chunk = split_output / "movie.mkv.3.part"
        data = bytearray(chunk.read_bytes())
        data[-1] ^= 0xFF
        chunk.write_bytes(bytes(data))
        
        result = merge_command(config, split_output / "movie.mkv.sum", tmp_path / "restored", assume_yes=True)
        
        assert result == EXIT_ERROR
        assert (tmp_path / "restored" / "movie.mkv").stat().st_size == len(CONTENT)
    
    def test_config_assume_yes_accepts_mismatches(self, split_output, tmp_path):
        config = FileSplitterConfig(**{"merge": {"assume_yes": True}})
        chunk = split_output / "movie.mkv.2.part"
        data = bytearray(chunk.read_bytes())
        data[5] ^= 0xFF
        chunk.write_bytes(bytes(data))
        answers = iter([True])
        
        result = merge_command(
            config, split_output / "movie.mkv.sum", tmp_path / "restored",
            confirm=lambda prompt: next(answers)
        )
        
        assert result == EXIT_ERROR
        assert (tmp_path / "restored" / "movie.mkv").stat().st_size == len(CONTENT)


class TestConsoleConfirm:
    """Tests for the console confirmation prompt."""
    
    @pytest.mark.parametrize("answer,expected", [
        ("y\n", True),
        ("YES\n", True),
        ("true\n", True),
        ("n\n", False),
        ("\n", False),
        ("", False),
    ])
    def test_answers(self, monkeypatch, capsys, answer, expected):
        monkeypatch.setattr("sys.stdin", _Stdin(answer))
        
        assert console_confirm("Continue?") is expected
        assert "Continue? [y/N]" in capsys.readouterr().err


class _Stdin:
    def __init__(self, text: str):
        self.text = text
    
    def readline(self) -> str:
        return self.text


class TestParser:
    """Tests for argument parsing."""
    
    def test_size_words_joined(self):
        args = build_parser().parse_args(["-p", "a.bin", "-s", "10", "MB"])
        assert args.size == ["10", "MB"]
    
    def test_merge_flags(self):
        args = build_parser().parse_args(["--path", "a.bin.sum", "--merge", "--yes", "-e", "out"])
        
        assert args.merge and args.yes
        assert args.export == Path("out")
    
    def test_path_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    """End-to-end runs through main()."""
    
    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path, monkeypatch, restore_root_logger):
        user_dir = tmp_path / "user_config"
        user_dir.mkdir()
        monkeypatch.setattr(platformdirs, "user_config_dir", lambda *args, **kwargs: str(user_dir))
        monkeypatch.chdir(tmp_path)
        for key in list(os.environ):
            if key.startswith("FILE_SPLITTER_"):
                monkeypatch.delenv(key)
    
    def test_split_then_merge(self, source, tmp_path):
        parts = tmp_path / "parts"
        restored = tmp_path / "restored"
        
        assert main(["-p", str(source), "-e", str(parts), "-s", "1", "KB", "-y"]) == EXIT_OK
        assert main(["-p", str(parts / "movie.mkv.sum"), "-e", str(restored), "-m", "-y"]) == EXIT_OK
        
        assert (restored / "movie.mkv").read_bytes() == CONTENT
        assert len(list(parts.glob("movie.mkv.*.part"))) == 5
    
    def test_missing_input(self, tmp_path):
        assert main(["-p", str(tmp_path / "ghost.bin"), "-y"]) == EXIT_MISSING_FILE
    
    def test_missing_config_file(self, source, tmp_path):
        assert main(["-p", str(source), "-y", "--config", str(tmp_path / "none.toml")]) == EXIT_ERROR
    
    def test_config_file_sets_chunk_size(self, source, tmp_path):
        config_file = tmp_path / "defaults.toml"
        config_file.write_text('[split]\nchunk_size = "4KB"\n')
        
        assert main(["-p", str(source), "-y", "--config", str(config_file)]) == EXIT_OK
        
        assert load_summary(tmp_path / "movie.mkv.sum").chunk_count == 2
    
    def test_env_override(self, source, tmp_path, monkeypatch):
        monkeypatch.setenv("FILE_SPLITTER_SPLIT__CHUNK_SIZE", "1MB")
        
        assert main(["-p", str(source), "-y"]) == EXIT_OK
        
        assert load_summary(tmp_path / "movie.mkv.sum").chunk_count == 1

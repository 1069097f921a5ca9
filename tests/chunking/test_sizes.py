"""Tests for chunk size parsing and chunk-boundary arithmetic."""

import pytest

from file_splitter.common import ConfigurationError
from file_splitter.chunking.sizes import (
    GB,
    KB,
    MAX_BUFFER_SIZE,
    MAX_CHUNK_SIZE,
    MB,
    chunk_name,
    count_chunks,
    expected_chunk_size,
    format_duration,
    format_size,
    parse_chunk_size,
    validate_buffer_size,
)


class TestParseChunkSize:
    """Tests for parse_chunk_size."""
    
    def test_units(self):
        """Test the three supported units."""
        assert parse_chunk_size("4KB") == 4 * KB
        assert parse_chunk_size("10MB") == 10 * MB
        assert parse_chunk_size("1GB") == GB
    
    def test_separators_and_case(self):
        """Test colon, space and lower-case spellings."""
        assert parse_chunk_size("10:MB") == 10 * MB
        assert parse_chunk_size("10 MB") == 10 * MB
        assert parse_chunk_size("10mb") == 10 * MB
    
    def test_unknown_unit_defaults_to_kb(self):
        """Test that unrecognized or missing units mean KB."""
        assert parse_chunk_size("7TB") == 7 * KB
        assert parse_chunk_size("7") == 7 * KB
    
    def test_rejects_non_positive(self):
        """Test that zero and negative sizes are rejected."""
        with pytest.raises(ConfigurationError):
            parse_chunk_size("0MB")
        with pytest.raises(ConfigurationError):
            parse_chunk_size("-5KB")
    
    def test_rejects_malformed(self):
        """Test that non-integer magnitudes are rejected."""
        for text in ("", "MB", "1.5MB", "ten MB"):
            with pytest.raises(ConfigurationError):
                parse_chunk_size(text)
    
    def test_rejects_too_large(self):
        """Test the single-run integer range limit."""
        assert parse_chunk_size("1GB") < MAX_CHUNK_SIZE
        with pytest.raises(ConfigurationError):
            parse_chunk_size("2GB")


class TestChunkArithmetic:
    """Tests for chunk count and expected sizes."""
    
    def test_count_is_ceiling(self):
        """Test count_chunks equals ceil(total / chunk)."""
        assert count_chunks(25 * MB, 10 * MB) == 3
        assert count_chunks(20 * MB, 10 * MB) == 2
        assert count_chunks(1, 10 * MB) == 1
        assert count_chunks(0, 10) == 0
    
    def test_count_rejects_non_positive_chunk(self):
        """Test that a zero chunk size is a configuration error."""
        with pytest.raises(ConfigurationError):
            count_chunks(100, 0)
    
    def test_expected_sizes_with_remainder(self):
        """Test 25 MB split at 10 MB gives 10, 10 and 5 MB."""
        sizes = [expected_chunk_size(25 * MB, 10 * MB, 3, i) for i in (1, 2, 3)]
        assert sizes == [10 * MB, 10 * MB, 5 * MB]
    
    def test_expected_sizes_exact_multiple(self):
        """Test that the last chunk is full when sizes divide evenly."""
        assert expected_chunk_size(20, 10, 2, 2) == 10
    
    def test_expected_sizes_sum_to_total(self):
        """Test that expected sizes always add up to the total."""
        for total in (1, 9, 10, 11, 99, 100, 101):
            count = count_chunks(total, 10)
            assert sum(expected_chunk_size(total, 10, count, i) for i in range(1, count + 1)) == total
    
    def test_chunk_name(self):
        """Test the <filename>.<index>.part convention."""
        assert chunk_name("movie.mkv", 1) == "movie.mkv.1.part"
        assert chunk_name("movie.mkv", 12) == "movie.mkv.12.part"


class TestBufferSize:
    """Tests for validate_buffer_size."""
    
    def test_bounds(self):
        assert validate_buffer_size(1) == 1
        assert validate_buffer_size(MAX_BUFFER_SIZE) == MAX_BUFFER_SIZE
        with pytest.raises(ConfigurationError):
            validate_buffer_size(0)
        with pytest.raises(ConfigurationError):
            validate_buffer_size(MAX_BUFFER_SIZE + 1)


class TestFormatting:
    """Tests for human-readable formatting."""
    
    def test_format_size(self):
        assert format_size(512) == "512.00 B"
        assert format_size(25 * MB) == "25.00 MiB"
        assert format_size(3 * GB) == "3.00 GiB"
    
    def test_format_duration(self):
        assert format_duration(0) == "0s"
        assert format_duration(0.5) == "0.5s"
        assert format_duration(65) == "1m 5s"
        assert format_duration(3600) == "1h"
        assert format_duration(8130) == "2h 15m 30s"

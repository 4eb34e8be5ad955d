from datetime import date

import pytest

from detection.formatting import format_file_size, format_ip_address, format_last_seen, format_percent
from detection.hashing import filename_hash


def test_empty_filename_hashes_to_zero():
    assert filename_hash("") == 0


def test_hash_is_sum_of_code_units():
    assert filename_hash("a") == 97
    assert filename_hash("default.csv") == 1119


def test_hash_counts_surrogate_pairs_for_non_bmp_characters():
    # U+1F600 -> D83D DE00
    assert filename_hash("\U0001F600") == 0xD83D + 0xDE00


def test_hash_handles_long_names_exactly():
    name = "x" * 100_000
    assert filename_hash(name) == ord("x") * 100_000
    assert filename_hash(name) == filename_hash(name)


@pytest.mark.parametrize("size, expected", [
    (0, "0 Bytes"),
    (512, "512 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (1234, "1.21 KB"),
    (2 * 1024 ** 2, "2 MB"),
    (3 * 1024 ** 3, "3 GB"),
    (1024 ** 4, "1024 GB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_percent_and_dates():
    assert format_percent(85) == "85.0%"
    assert format_last_seen(date(2025, 9, 3)) == "9/3/2025"
    assert format_ip_address(4, 250) == "192.168.4.250"


def test_hash_accepts_lone_surrogate():
    # undecodable argv byte 0xff arrives as U+DCFF
    name = b"\xff.csv".decode("utf-8", "surrogateescape")
    assert filename_hash(name) == 0xDCFF + filename_hash(".csv")

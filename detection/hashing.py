"""Filename hashing used as the seed for every generated value."""


def filename_hash(filename: str) -> int:
    """
    Fold a filename into a non-negative integer seed.

    The fold sums UTF-16 code units, so a character outside the BMP counts
    as its surrogate pair. Python ints don't overflow, so the sum is exact
    for any length. The empty string hashes to 0.
    """
    data = filename.encode("utf-16-le", errors="surrogatepass")
    return sum(int.from_bytes(data[pos:pos + 2], "little") for pos in range(0, len(data), 2))

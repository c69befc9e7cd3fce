from __future__ import annotations

import pytest

from bwrep.replay.implode import ImplodeError, ImplodeSizeExceeded, explode, looks_like_implode_header

# Reference stream from Mark Adler's blast.c: ASCII literals, 4 KiB window.
BLAST_VECTOR = bytes([0x00, 0x04, 0x82, 0x24, 0x25, 0x8F, 0x80, 0x7F])


def test_explode_reference_vector() -> None:
    assert explode(BLAST_VECTOR, max_size=1024) == b"AIAIAIAIAIAIA"


def test_explode_rejects_bad_literal_mode() -> None:
    with pytest.raises(ImplodeError, match="literal mode"):
        explode(bytes([0x02, 0x04, 0x00, 0x00]), max_size=1024)


def test_explode_rejects_bad_dictionary_size() -> None:
    with pytest.raises(ImplodeError, match="dictionary size"):
        explode(bytes([0x00, 0x07, 0x00, 0x00]), max_size=1024)


def test_explode_truncated_stream() -> None:
    with pytest.raises(ImplodeError):
        explode(BLAST_VECTOR[:-2], max_size=1024)


def test_explode_enforces_output_cap() -> None:
    with pytest.raises(ImplodeSizeExceeded):
        explode(BLAST_VECTOR, max_size=5)


def test_implode_header_probe() -> None:
    assert looks_like_implode_header(BLAST_VECTOR, 0)
    assert not looks_like_implode_header(bytes([0x00, 0x07]), 0)
    assert not looks_like_implode_header(bytes([0x02, 0x04]), 0)
    assert not looks_like_implode_header(bytes([0x00]), 0)

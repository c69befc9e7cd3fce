"""
PKWare Data Compression Library "implode" streams (pre-1.18 replays).

Stream layout:
  - u8 literal mode: 0 = raw 8-bit literals, 1 = Huffman-coded literals
  - u8 dictionary bits: 4, 5 or 6 (1 KiB, 2 KiB or 4 KiB window)
  - LSB-first bit stream of tokens:
      0 + literal
      1 + length code (+ extra bits) + distance code (+ low distance bits)
    length 519 terminates the stream.

Huffman codes are stored bit-inverted and the code tables are fixed; they are
expanded from the compact (repeat << 4 | bit length) form below.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_BITS = 13
END_OF_STREAM = 519

_LITERAL_LENGTHS = bytes(
    (
        11, 124, 8, 7, 28, 7, 188, 13, 76, 4, 10, 8, 12, 10, 12, 10, 8, 23, 8,
        9, 7, 6, 7, 8, 7, 6, 55, 8, 23, 24, 12, 11, 7, 9, 11, 12, 6, 7, 22, 5,
        7, 24, 6, 11, 9, 6, 7, 22, 7, 11, 38, 7, 9, 8, 25, 11, 8, 11, 9, 12,
        8, 12, 5, 38, 5, 38, 5, 11, 7, 5, 6, 21, 6, 10, 53, 8, 7, 24, 10, 27,
        44, 253, 253, 253, 252, 252, 252, 13, 12, 45, 12, 45, 12, 61, 12, 45,
        44, 173,
    )
)
_LENGTH_LENGTHS = bytes((2, 35, 36, 53, 38, 23))
_DISTANCE_LENGTHS = bytes((2, 20, 53, 230, 247, 151, 248))

_LENGTH_BASE = (3, 2, 4, 5, 6, 7, 8, 9, 10, 12, 16, 24, 40, 72, 136, 264)
_LENGTH_EXTRA = (0, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 4, 5, 6, 7, 8)


class ImplodeError(ValueError):
    pass


class ImplodeSizeExceeded(ImplodeError):
    pass


@dataclass(frozen=True, slots=True)
class _Huffman:
    count: tuple[int, ...]
    symbol: tuple[int, ...]


def _build_huffman(compact: bytes) -> _Huffman:
    lengths: list[int] = []
    for rep in compact:
        lengths.extend([rep & 0x0F] * ((rep >> 4) + 1))

    count = [0] * (MAX_BITS + 1)
    for length in lengths:
        count[length] += 1

    offsets = [0] * (MAX_BITS + 1)
    for length in range(1, MAX_BITS):
        offsets[length + 1] = offsets[length] + count[length]

    symbol = [0] * len(lengths)
    for sym, length in enumerate(lengths):
        if length:
            symbol[offsets[length]] = sym
            offsets[length] += 1
    return _Huffman(count=tuple(count), symbol=tuple(symbol))


_LITERAL_CODE = _build_huffman(_LITERAL_LENGTHS)
_LENGTH_CODE = _build_huffman(_LENGTH_LENGTHS)
_DISTANCE_CODE = _build_huffman(_DISTANCE_LENGTHS)


class _BitReader:
    __slots__ = ("data", "pos", "bitbuf", "bitcnt")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self.bitbuf = 0
        self.bitcnt = 0

    def bits(self, need: int) -> int:
        val = self.bitbuf
        while self.bitcnt < need:
            if self.pos >= len(self.data):
                raise ImplodeError("unexpected end of implode stream")
            val |= self.data[self.pos] << self.bitcnt
            self.pos += 1
            self.bitcnt += 8
        self.bitbuf = val >> need
        self.bitcnt -= need
        return val & ((1 << need) - 1)

    def decode(self, table: _Huffman) -> int:
        code = first = index = 0
        for length in range(1, MAX_BITS + 1):
            code |= self.bits(1) ^ 1
            count = table.count[length]
            if code < first + count:
                return table.symbol[index + (code - first)]
            index += count
            first = (first + count) << 1
            code <<= 1
        raise ImplodeError("invalid huffman code in implode stream")


def explode(data: bytes, *, max_size: int) -> bytes:
    """Decompress one PKWare DCL stream, refusing output larger than `max_size`."""

    reader = _BitReader(bytes(data))
    literal_mode = reader.bits(8)
    if literal_mode > 1:
        raise ImplodeError(f"invalid literal mode: {literal_mode}")
    dict_bits = reader.bits(8)
    if not (4 <= dict_bits <= 6):
        raise ImplodeError(f"invalid dictionary size: {dict_bits} bits")

    out = bytearray()
    while True:
        if reader.bits(1):
            symbol = reader.decode(_LENGTH_CODE)
            length = _LENGTH_BASE[symbol] + reader.bits(_LENGTH_EXTRA[symbol])
            if length == END_OF_STREAM:
                break
            shift = 2 if length == 2 else dict_bits
            dist = (reader.decode(_DISTANCE_CODE) << shift) + reader.bits(shift) + 1
            if dist > len(out):
                raise ImplodeError(f"distance too far back: {dist} > {len(out)}")
            if len(out) + length > max_size:
                raise ImplodeSizeExceeded(f"implode output exceeds {max_size} bytes")
            start = len(out) - dist
            # Matches may overlap their own output.
            for i in range(length):
                out.append(out[start + i])
        else:
            symbol = reader.decode(_LITERAL_CODE) if literal_mode else reader.bits(8)
            if len(out) >= max_size:
                raise ImplodeSizeExceeded(f"implode output exceeds {max_size} bytes")
            out.append(symbol)
    return bytes(out)


def looks_like_implode_header(data: bytes, pos: int) -> bool:
    if pos + 1 >= len(data):
        return False
    return data[pos] in (0, 1) and 4 <= data[pos + 1] <= 6

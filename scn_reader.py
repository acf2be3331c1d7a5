"""
scn_reader.py — lecture séquentielle little-endian d'un flux binaire.

- ScnReader : curseur en avant uniquement (pas de seek arrière) sur un objet
  fichier ou un io.BytesIO ; chaque lecture courte lève UnexpectedEndOfStream.
- read_array / read_counted_array : le motif « N, puis N enregistrements »
  utilisé partout dans le format.
"""
from __future__ import annotations
import struct
from typing import BinaryIO, Callable, List, Tuple, TypeVar

from scn_errors import MalformedField, UnexpectedEndOfStream

# ------------------ constantes ------------------
TEXT_ENCODING = "cp1252"   # textes des scénarios (briefing, noms de joueurs)

T = TypeVar("T")

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_F32 = struct.Struct("<f")


class ScnReader:
    def __init__(self, stream: BinaryIO, encoding: str = TEXT_ENCODING):
        self.stream = stream
        self.encoding = encoding
        self.offset = 0   # octets consommés depuis la création du lecteur

    def read_bytes(self, length: int) -> bytes:
        if length < 0:
            raise MalformedField(f"negative read size {length} at 0x{self.offset:x}")
        data = self.stream.read(length)
        if len(data) != length:
            raise UnexpectedEndOfStream(self.offset, length, len(data))
        self.offset += length
        return data

    def _unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.read_bytes(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_f32(self) -> float:
        return self._unpack(_F32)

    def read_sized_str(self, length: int) -> str:
        """Lit `length` octets, coupe au premier NUL et décode.
        Un octet non décodable lève MalformedField (pas de remplacement silencieux)."""
        start = self.offset
        raw = self.read_bytes(length)
        nul = raw.find(b"\x00")
        if nul >= 0:
            raw = raw[:nul]
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise MalformedField(f"undecodable {self.encoding} text at 0x{start:x}: {e.reason}") from e


# ------------------ tableaux préfixés ------------------

def read_array(reader: ScnReader, count: int, read_one: Callable[[ScnReader], T]) -> Tuple[T, ...]:
    """Lit exactement `count` enregistrements, dans l'ordre.
    La première erreur remonte telle quelle : pas de liste partielle."""
    return tuple(read_one(reader) for _ in range(count))


def read_counted_array(reader: ScnReader, read_one: Callable[[ScnReader], T]) -> Tuple[T, ...]:
    """u32 count, puis `count` enregistrements."""
    count = reader.read_u32()
    return read_array(reader, count, read_one)


# ------------------ outils debug ------------------

_PRINTABLE = bytes(b if 32 <= b < 127 else ord('.') for b in range(256))


def hexdump(data: bytes, limit: int, base: int = 0, width: int = 16) -> List[str]:
    """Lignes de hexdump des `limit` premiers octets de `data`.
    `base` = position de data[0] dans le fichier (ou dans le corps décompressé)."""
    shown = data[:max(limit, 0)]
    lines = [
        f"0x{base + i:08x}  {shown[i:i+width].hex(' '):<{width*3}}  |{shown[i:i+width].translate(_PRINTABLE).decode('ascii')}|"
        for i in range(0, len(shown), width)
    ]
    if len(data) > len(shown):
        lines.append(f"... ({len(data) - len(shown)} more bytes)")
    return lines

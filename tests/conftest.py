"""Fixtures et constructeurs de scénarios synthétiques pour les tests."""

from __future__ import annotations

import struct
import sys
import zlib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from scn_sections import PLAYER_NAME_LENGTH, PLAYER_SLOTS


def pack_header(
    version: bytes = b"1.11",
    length: int = 0,
    save_type: int = -1,
    last_save_time: int = 0x5A000000,
    instructions: bytes = b"",
    victory_type: int = 0,
    player_count: int = 1,
    instructions_length: int | None = None,
) -> bytes:
    if instructions_length is None:
        instructions_length = len(instructions)
    return (
        version
        + struct.pack("<IiII", length, save_type, last_save_time, instructions_length)
        + instructions
        + struct.pack("<II", victory_type, player_count)
    )


def pack_player_data(names=(), civs=(), data_version: float = 1.5) -> bytes:
    out = bytearray(struct.pack("<f", data_version))
    for i in range(PLAYER_SLOTS):
        name = names[i] if i < len(names) else b""
        out += name.ljust(PLAYER_NAME_LENGTH, b"\x00")
    for i in range(PLAYER_SLOTS):
        civ = civs[i] if i < len(civs) else (0, 0, 0, 0)
        out += struct.pack("<IIII", *civ)
    return bytes(out)


def pack_map(width: int = 0, height: int = 0, tiles=None) -> bytes:
    out = bytearray(struct.pack("<II", width, height))
    for y in range(height):
        for x in range(width):
            tile = tiles[y][x] if tiles else (0, 0, 0)
            out += struct.pack("<BBB", *tile)
    return bytes(out)


def pack_resources(records) -> bytes:
    out = bytearray(struct.pack("<I", len(records)))
    for rec in records:
        out += struct.pack("<ffff", *rec)
    return bytes(out)


def pack_unit(x=1.5, y=2.5, z=0.0, spawn_id=0, unit_id=83, state=2, rotation=0.5) -> bytes:
    return struct.pack("<fffIHBf", x, y, z, spawn_id, unit_id, state, rotation)


def pack_body(
    unit_groups=((),),
    resources=((200.0, 200.0, 0.0, 150.0),),
    player_data: bytes | None = None,
    map_bytes: bytes | None = None,
    reserved: int = 0,
    trailer: bytes = b"",
) -> bytes:
    out = bytearray(struct.pack("<I", reserved))
    out += player_data if player_data is not None else pack_player_data()
    out += map_bytes if map_bytes is not None else pack_map()
    out += struct.pack("<I", len(unit_groups))
    out += pack_resources(resources)
    for group in unit_groups:
        out += struct.pack("<I", len(group))
        for unit in group:
            out += unit
    out += trailer
    return bytes(out)


def deflate(raw: bytes) -> bytes:
    c = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)
    return c.compress(raw) + c.flush()


def build_scenario(header: bytes | None = None, body: bytes | None = None) -> bytes:
    if header is None:
        header = pack_header()
    if body is None:
        body = pack_body()
    return header + deflate(body)


@pytest.fixture
def minimal_scn() -> bytes:
    return build_scenario()


@pytest.fixture
def two_unit_scn() -> bytes:
    body = pack_body(unit_groups=((pack_unit(spawn_id=1, unit_id=83), pack_unit(x=4.0, spawn_id=2, unit_id=11)),))
    return build_scenario(body=body)

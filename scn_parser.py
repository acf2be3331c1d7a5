#!/usr/bin/env python3
"""
scn_parser.py — décodeur de scénarios (.scn, version "1.11").

Structure du fichier :
- en-tête non compressé (version, méta-données, briefing) ;
- reste du fichier = flux deflate brut ; une fois décompressé :
  u32 réservé, données joueurs, carte, u32 nombre de groupes d'unités,
  ressources par joueur, puis pour chaque groupe : u32 nombre d'unités + unités.
- les déclencheurs (triggers) et ce qui suit ne sont PAS lus.

Le décodage est un pipeline linéaire : la première erreur (ScenarioError)
remonte jusqu'à l'appelant, aucun scénario partiel n'est renvoyé.

Usage :
    python scn_parser.py --scn scenarios/exemple.scn
    python scn_parser.py --scn scenarios/exemple.scn --player 1 --list 10
    python scn_parser.py --scn scenarios/exemple.scn --debug --dump 256
"""
from __future__ import annotations
import argparse
import io
import zlib
from dataclasses import dataclass
from typing import BinaryIO, List, Tuple

from scn_errors import (
    DecompressionFailure,
    InstructionsTooLarge,
    ScenarioError,
    UnrecognizedVersion,
)
from scn_reader import ScnReader, hexdump, read_array
from scn_sections import (
    Map,
    PlayerData,
    PlayerResources,
    PlayerUnit,
    read_map,
    read_player_data,
    read_player_resources,
    read_player_unit,
)

# ------------------ constantes ------------------
SUPPORTED_VERSION = "1.11"
VERSION_LENGTH = 4
REASONABLE_INSTRUCTION_LIMIT = 512 * 1024   # 0.5 Mio, borne incluse

# ------------------ dataclasses ------------------
@dataclass(frozen=True)
class ScenarioHeader:
    version: str
    length: int           # taille déclarée du corps, informative
    save_type: int
    last_save_time: int
    instructions: str
    victory_type: int
    player_count: int     # non recoupé avec le nombre de groupes d'unités

@dataclass(frozen=True)
class Scenario:
    header: ScenarioHeader
    player_data: PlayerData
    player_resources: Tuple[PlayerResources, ...]
    player_units: Tuple[Tuple[PlayerUnit, ...], ...]
    map: Map

    def player_ids(self) -> List[int]:
        """Identifiants des joueurs ayant un groupe d'unités."""
        return list(range(len(self.player_units)))

    def resources_of(self, player_id: int) -> PlayerResources:
        return self.player_resources[_check_player_id(player_id)]

    def units_of(self, player_id: int) -> Tuple[PlayerUnit, ...]:
        return self.player_units[_check_player_id(player_id)]

    def civilization_of(self, player_id: int) -> int:
        return self.player_data.player_civs[_check_player_id(player_id)].civilization_id


def _check_player_id(player_id: int) -> int:
    # pas d'indexation négative : -1 ne doit pas désigner le dernier joueur
    if player_id < 0:
        raise IndexError(f"invalid player id {player_id}")
    return player_id

# ------------------ en-tête ------------------

def read_header(stream: BinaryIO, instructions_limit: int = REASONABLE_INSTRUCTION_LIMIT) -> ScenarioHeader:
    """`instructions_limit` peut seulement abaisser la borne, jamais la relever."""
    instructions_limit = min(instructions_limit, REASONABLE_INSTRUCTION_LIMIT)
    reader = ScnReader(stream)

    raw_version = reader.read_bytes(VERSION_LENGTH)
    if raw_version != SUPPORTED_VERSION.encode("ascii"):
        raise UnrecognizedVersion(raw_version.decode("latin-1"))

    length = reader.read_u32()
    save_type = reader.read_i32()
    last_save_time = reader.read_u32()

    # la borne est vérifiée AVANT de lire (ou d'allouer) le briefing
    instructions_length = reader.read_u32()
    if instructions_length > instructions_limit:
        raise InstructionsTooLarge(instructions_length, instructions_limit)
    instructions = reader.read_sized_str(instructions_length)

    return ScenarioHeader(
        version=SUPPORTED_VERSION,
        length=length,
        save_type=save_type,
        last_save_time=last_save_time,
        instructions=instructions,
        victory_type=reader.read_u32(),
        player_count=reader.read_u32(),
    )

# ------------------ décompression ------------------

def read_and_decompress(stream: BinaryIO) -> bytes:
    """Décompresse (deflate brut) tout ce qui reste dans `stream`."""
    compressed = stream.read()
    d = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        body = d.decompress(compressed) + d.flush()
    except zlib.error as e:
        raise DecompressionFailure(f"corrupt deflate stream: {e}") from e
    if not d.eof:
        raise DecompressionFailure(f"truncated deflate stream ({len(compressed)} compressed bytes)")
    return body

# ------------------ corps ------------------

def read_unit_group(reader: ScnReader) -> Tuple[PlayerUnit, ...]:
    unit_count = reader.read_u32()
    return read_array(reader, unit_count, read_player_unit)


def read_body(reader: ScnReader, header: ScenarioHeader) -> Scenario:
    reader.read_u32()   # « next unit id » ? inutilisé
    player_data = read_player_data(reader)
    map_ = read_map(reader)
    player_unit_group_count = reader.read_u32()
    player_resources = read_player_resources(reader)
    # index du groupe == index du joueur
    player_units = read_array(reader, player_unit_group_count, read_unit_group)
    return Scenario(
        header=header,
        player_data=player_data,
        player_resources=player_resources,
        player_units=player_units,
        map=map_,
    )

# ------------------ points d'entrée ------------------

def read_scenario_stream(stream: BinaryIO, instructions_limit: int = REASONABLE_INSTRUCTION_LIMIT) -> Scenario:
    header = read_header(stream, instructions_limit=instructions_limit)
    body = read_and_decompress(stream)
    return read_body(ScnReader(io.BytesIO(body)), header)


def read_scenario_file(path: str, instructions_limit: int = REASONABLE_INSTRUCTION_LIMIT) -> Scenario:
    with open(path, "rb") as f:
        return read_scenario_stream(f, instructions_limit=instructions_limit)

# ------------------ CLI ------------------

def preview(text: str, limit: int) -> str:
    return text.replace('\r', ' ').replace('\n', ' ').strip()[:limit]


def print_debug(path: str, dump: int, instructions_limit: int) -> None:
    with open(path, "rb") as f:
        data = f.read()
    stream = io.BytesIO(data)
    header = read_header(stream, instructions_limit=instructions_limit)
    header_end = stream.tell()
    print(f"[header] {header_end} bytes (0x{header_end:x})")
    print("\n".join(hexdump(data[:header_end], dump)))
    body = read_and_decompress(stream)
    print(f"\n[body] compressed: {len(data) - header_end}  decompressed: {len(body)}  declared length: {header.length}")
    print("\n".join(hexdump(body, dump)))


def print_player(scenario: Scenario, pid: int, list_units: int) -> None:
    units = scenario.units_of(pid)
    civ = scenario.civilization_of(pid) if pid < len(scenario.player_data.player_civs) else None
    name = scenario.player_data.player_names[pid] if pid < len(scenario.player_data.player_names) else ""
    print(f"[player {pid}] name={name!r} civ={civ} units={len(units)}")
    if pid < len(scenario.player_resources):
        r = scenario.resources_of(pid)
        print(f"  resources: food={r.food:g} wood={r.wood:g} gold={r.gold:g} stone={r.stone:g}")
    for u in units[:list_units]:
        print(f"  - unit_id={u.unit_id:<4d} spawn_id={u.spawn_id:<5d} "
              f"@({u.position_x:.2f}, {u.position_y:.2f}, {u.position_z:.2f}) "
              f"state={u.state} rot={u.rotation:.2f}")


def main(argv: List[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Decode an Age of Empires scenario (.scn, version 1.11)")
    ap.add_argument("--scn", required=True, help="Path to scenario file")
    ap.add_argument("--player", type=int, help="Show only this player (0-based unit group index)")
    ap.add_argument("--list", type=int, default=0, help="List first N units per player")
    ap.add_argument("--instr-snippet", type=int, default=120, help="Chars of instructions preview to print")

    # Debug & limites
    ap.add_argument("--debug", action="store_true", help="Hexdump header + head of decompressed body and exit")
    ap.add_argument("--dump", type=int, default=256, help="Bytes to dump in --debug mode (default 256)")
    ap.add_argument("--instructions-limit", type=int, default=REASONABLE_INSTRUCTION_LIMIT,
                    help="Max accepted instructions length in bytes, can only lower the default 524288")

    args = ap.parse_args(argv)

    try:
        if args.debug:
            print_debug(args.scn, args.dump, args.instructions_limit)
            return
        scenario = read_scenario_file(args.scn, instructions_limit=args.instructions_limit)
    except ScenarioError as e:
        raise SystemExit(f"[!] decode failed ({e.kind}): {e}")

    h = scenario.header
    print(f"[header] version={h.version} save_type={h.save_type} last_save_time={h.last_save_time} "
          f"victory_type={h.victory_type} player_count={h.player_count}")
    print(f"[header] instructions ({len(h.instructions)} chars): {preview(h.instructions, args.instr_snippet)!r}")
    print(f"[map] {scenario.map.width}x{scenario.map.height}")
    print(f"[body] unit groups: {len(scenario.player_units)}  resource records: {len(scenario.player_resources)}")

    if args.player is not None:
        if not 0 <= args.player < len(scenario.player_units):
            raise SystemExit(f"No unit group for player {args.player}")
        print_player(scenario, args.player, args.list)
        return

    for pid in scenario.player_ids():
        print_player(scenario, pid, args.list)

if __name__ == "__main__":
    main()

"""
scn_sections.py — sections du corps décompressé d'un scénario.

Chaque lecteur consomme sa section à partir de la position courante du
ScnReader partagé et renvoie une valeur figée ; aucune interprétation des
valeurs (civilisations, états d'unités…) n'est faite ici.

Disposition (little-endian) :
    PlayerData      f32 data_version
                    16 x nom (256 octets, NUL-padded)
                    16 x (u32 active, u32 human, u32 civilization_id, u32 unknown)
    Map             u32 width, u32 height, height x width x (u8 terrain, u8 elevation, u8 zone)
    PlayerResources u32 count, count x (f32 food, f32 wood, f32 gold, f32 stone)
    PlayerUnit      f32 x, f32 y, f32 z, u32 spawn_id, u16 unit_id, u8 state, f32 rotation
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from scn_reader import ScnReader, read_array, read_counted_array

# ------------------ constantes ------------------
PLAYER_SLOTS = 16
PLAYER_NAME_LENGTH = 256

# ------------------ dataclasses ------------------
@dataclass(frozen=True)
class PlayerCiv:
    active: int
    human: int
    civilization_id: int
    unknown: int

@dataclass(frozen=True)
class PlayerData:
    data_version: float
    player_names: Tuple[str, ...]
    player_civs: Tuple[PlayerCiv, ...]

@dataclass(frozen=True)
class MapTile:
    terrain_id: int
    elevation: int
    zone: int

@dataclass(frozen=True)
class Map:
    width: int
    height: int
    tiles: Tuple[Tuple[MapTile, ...], ...]   # tiles[y][x]

    def tile(self, x: int, y: int) -> MapTile:
        if x < 0 or y < 0:
            raise IndexError(f"invalid tile position ({x}, {y})")
        return self.tiles[y][x]

@dataclass(frozen=True)
class PlayerResources:
    food: float
    wood: float
    gold: float
    stone: float

@dataclass(frozen=True)
class PlayerUnit:
    position_x: float
    position_y: float
    position_z: float
    spawn_id: int
    unit_id: int
    state: int
    rotation: float

# ------------------ lecteurs ------------------

def read_player_civ(reader: ScnReader) -> PlayerCiv:
    return PlayerCiv(
        active=reader.read_u32(),
        human=reader.read_u32(),
        civilization_id=reader.read_u32(),
        unknown=reader.read_u32(),
    )


def read_player_data(reader: ScnReader) -> PlayerData:
    data_version = reader.read_f32()
    names = read_array(reader, PLAYER_SLOTS, lambda r: r.read_sized_str(PLAYER_NAME_LENGTH))
    civs = read_array(reader, PLAYER_SLOTS, read_player_civ)
    return PlayerData(data_version=data_version, player_names=names, player_civs=civs)


def read_map_tile(reader: ScnReader) -> MapTile:
    return MapTile(terrain_id=reader.read_u8(), elevation=reader.read_u8(), zone=reader.read_u8())


def read_map(reader: ScnReader) -> Map:
    width = reader.read_u32()
    height = reader.read_u32()
    # une ligne = un tableau de `width` tuiles ; `height` lignes
    tiles = read_array(reader, height, lambda r: read_array(r, width, read_map_tile))
    return Map(width=width, height=height, tiles=tiles)


def read_resources(reader: ScnReader) -> PlayerResources:
    return PlayerResources(
        food=reader.read_f32(),
        wood=reader.read_f32(),
        gold=reader.read_f32(),
        stone=reader.read_f32(),
    )


def read_player_resources(reader: ScnReader) -> Tuple[PlayerResources, ...]:
    """Un enregistrement par joueur, préfixé par son nombre."""
    return read_counted_array(reader, read_resources)


def read_player_unit(reader: ScnReader) -> PlayerUnit:
    return PlayerUnit(
        position_x=reader.read_f32(),
        position_y=reader.read_f32(),
        position_z=reader.read_f32(),
        spawn_id=reader.read_u32(),
        unit_id=reader.read_u16(),
        state=reader.read_u8(),
        rotation=reader.read_f32(),
    )

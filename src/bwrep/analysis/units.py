from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..replay.types import Race


@dataclass(frozen=True, slots=True)
class UnitInfo:
    name: str
    race: Race
    minerals: int = 0
    gas: int = 0
    supply: int = 0
    supply_provided: int = 0
    is_building: bool = False


def _unit(name: str, race: Race, minerals: int, gas: int, supply: int = 0) -> UnitInfo:
    return UnitInfo(name=name, race=race, minerals=minerals, gas=gas, supply=supply)


def _building(name: str, race: Race, minerals: int, gas: int, provides: int = 0) -> UnitInfo:
    return UnitInfo(
        name=name,
        race=race,
        minerals=minerals,
        gas=gas,
        supply_provided=provides,
        is_building=True,
    )


_T, _Z, _P = Race.TERRAN, Race.ZERG, Race.PROTOSS

# Unit type ids as recorded in build/train/morph commands. Zerg pair units
# (Zergling, Scourge) list the supply of one egg.
UNITS: Final[dict[int, UnitInfo]] = {
    0x00: _unit("Marine", _T, 50, 0, 1),
    0x01: _unit("Ghost", _T, 25, 75, 1),
    0x02: _unit("Vulture", _T, 75, 0, 2),
    0x03: _unit("Goliath", _T, 100, 50, 2),
    0x05: _unit("Siege Tank", _T, 150, 100, 2),
    0x07: _unit("SCV", _T, 50, 0, 1),
    0x08: _unit("Wraith", _T, 150, 100, 2),
    0x09: _unit("Science Vessel", _T, 100, 225, 2),
    0x0B: _unit("Dropship", _T, 100, 100, 2),
    0x0C: _unit("Battlecruiser", _T, 400, 300, 6),
    0x0E: _unit("Nuclear Missile", _T, 200, 200, 0),
    0x20: _unit("Firebat", _T, 50, 25, 1),
    0x22: _unit("Medic", _T, 50, 25, 1),
    0x3A: _unit("Valkyrie", _T, 250, 125, 3),
    0x25: _unit("Zergling", _Z, 50, 0, 1),
    0x26: _unit("Hydralisk", _Z, 75, 25, 1),
    0x27: _unit("Ultralisk", _Z, 200, 200, 4),
    0x29: _unit("Drone", _Z, 50, 0, 1),
    0x2A: UnitInfo(name="Overlord", race=_Z, minerals=100, supply_provided=8),
    0x2B: _unit("Mutalisk", _Z, 100, 100, 2),
    0x2C: _unit("Guardian", _Z, 50, 100, 0),
    0x2D: _unit("Queen", _Z, 100, 100, 2),
    0x2E: _unit("Defiler", _Z, 50, 150, 2),
    0x2F: _unit("Scourge", _Z, 25, 75, 1),
    0x32: _unit("Infested Terran", _Z, 100, 50, 1),
    0x3E: _unit("Devourer", _Z, 150, 50, 0),
    0x67: _unit("Lurker", _Z, 50, 100, 0),
    0x3C: _unit("Corsair", _P, 150, 100, 2),
    0x3D: _unit("Dark Templar", _P, 125, 100, 2),
    0x3F: _unit("Dark Archon", _P, 0, 0, 0),
    0x40: _unit("Probe", _P, 50, 0, 1),
    0x41: _unit("Zealot", _P, 100, 0, 2),
    0x42: _unit("Dragoon", _P, 125, 50, 2),
    0x43: _unit("High Templar", _P, 50, 150, 2),
    0x44: _unit("Archon", _P, 0, 0, 0),
    0x45: _unit("Shuttle", _P, 200, 0, 2),
    0x46: _unit("Scout", _P, 275, 125, 3),
    0x47: _unit("Arbiter", _P, 100, 350, 4),
    0x48: _unit("Carrier", _P, 350, 250, 6),
    0x49: _unit("Interceptor", _P, 25, 0, 0),
    0x53: _unit("Reaver", _P, 200, 100, 4),
    0x54: _unit("Observer", _P, 25, 75, 1),
    0x55: _unit("Scarab", _P, 15, 0, 0),
    0x6A: _building("Command Center", _T, 400, 0, provides=10),
    0x6B: _building("Comsat Station", _T, 50, 50),
    0x6C: _building("Nuclear Silo", _T, 100, 100),
    0x6D: _building("Supply Depot", _T, 100, 0, provides=8),
    0x6E: _building("Refinery", _T, 100, 0),
    0x6F: _building("Barracks", _T, 150, 0),
    0x70: _building("Academy", _T, 150, 0),
    0x71: _building("Factory", _T, 200, 100),
    0x72: _building("Starport", _T, 150, 100),
    0x73: _building("Control Tower", _T, 50, 50),
    0x74: _building("Science Facility", _T, 100, 150),
    0x75: _building("Covert Ops", _T, 50, 50),
    0x76: _building("Physics Lab", _T, 50, 50),
    0x78: _building("Machine Shop", _T, 50, 50),
    0x7A: _building("Engineering Bay", _T, 125, 0),
    0x7B: _building("Armory", _T, 100, 50),
    0x7C: _building("Missile Turret", _T, 75, 0),
    0x7D: _building("Bunker", _T, 100, 0),
    0x83: _building("Hatchery", _Z, 300, 0, provides=1),
    0x84: _building("Lair", _Z, 150, 100),
    0x85: _building("Hive", _Z, 200, 150),
    0x86: _building("Nydus Canal", _Z, 150, 0),
    0x87: _building("Hydralisk Den", _Z, 100, 50),
    0x88: _building("Defiler Mound", _Z, 100, 100),
    0x89: _building("Greater Spire", _Z, 100, 150),
    0x8A: _building("Queen's Nest", _Z, 150, 100),
    0x8B: _building("Evolution Chamber", _Z, 75, 0),
    0x8C: _building("Ultralisk Cavern", _Z, 150, 200),
    0x8D: _building("Spire", _Z, 200, 150),
    0x8E: _building("Spawning Pool", _Z, 200, 0),
    0x8F: _building("Creep Colony", _Z, 75, 0),
    0x90: _building("Spore Colony", _Z, 50, 0),
    0x92: _building("Sunken Colony", _Z, 50, 0),
    0x95: _building("Extractor", _Z, 50, 0),
    0x9A: _building("Nexus", _P, 400, 0, provides=9),
    0x9B: _building("Robotics Facility", _P, 200, 200),
    0x9C: _building("Pylon", _P, 100, 0, provides=8),
    0x9D: _building("Assimilator", _P, 100, 0),
    0x9F: _building("Observatory", _P, 50, 100),
    0xA0: _building("Gateway", _P, 150, 0),
    0xA2: _building("Photon Cannon", _P, 150, 0),
    0xA3: _building("Citadel of Adun", _P, 150, 100),
    0xA4: _building("Cybernetics Core", _P, 200, 0),
    0xA5: _building("Templar Archives", _P, 150, 200),
    0xA6: _building("Forge", _P, 150, 0),
    0xA7: _building("Stargate", _P, 150, 150),
    0xA9: _building("Fleet Beacon", _P, 300, 200),
    0xAA: _building("Arbiter Tribunal", _P, 200, 150),
    0xAB: _building("Robotics Support Bay", _P, 150, 100),
    0xAC: _building("Shield Battery", _P, 100, 0),
}

TECHS: Final[dict[int, str]] = {
    0: "Stim Packs",
    1: "Lockdown",
    2: "EMP Shockwave",
    3: "Spider Mines",
    4: "Scanner Sweep",
    5: "Tank Siege Mode",
    6: "Defensive Matrix",
    7: "Irradiate",
    8: "Yamato Gun",
    9: "Cloaking Field",
    10: "Personnel Cloaking",
    11: "Burrowing",
    12: "Infestation",
    13: "Spawn Broodlings",
    14: "Dark Swarm",
    15: "Plague",
    16: "Consume",
    17: "Ensnare",
    18: "Parasite",
    19: "Psionic Storm",
    20: "Hallucination",
    21: "Recall",
    22: "Stasis Field",
    23: "Archon Warp",
    24: "Restoration",
    25: "Disruption Web",
    27: "Mind Control",
    28: "Dark Archon Meld",
    29: "Feedback",
    30: "Optical Flare",
    31: "Maelstrom",
    32: "Lurker Aspect",
    34: "Healing",
}

UPGRADES: Final[dict[int, str]] = {
    0: "Terran Infantry Armor",
    1: "Terran Vehicle Plating",
    2: "Terran Ship Plating",
    3: "Zerg Carapace",
    4: "Zerg Flyer Carapace",
    5: "Protoss Ground Armor",
    6: "Protoss Air Armor",
    7: "Terran Infantry Weapons",
    8: "Terran Vehicle Weapons",
    9: "Terran Ship Weapons",
    10: "Zerg Melee Attacks",
    11: "Zerg Missile Attacks",
    12: "Zerg Flyer Attacks",
    13: "Protoss Ground Weapons",
    14: "Protoss Air Weapons",
    15: "Protoss Plasma Shields",
    16: "U-238 Shells",
    17: "Ion Thrusters",
    19: "Titan Reactor",
    20: "Ocular Implants",
    21: "Moebius Reactor",
    22: "Apollo Reactor",
    23: "Colossus Reactor",
    24: "Ventral Sacs",
    25: "Antennae",
    26: "Pneumatized Carapace",
    27: "Metabolic Boost",
    28: "Adrenal Glands",
    29: "Muscular Augments",
    30: "Grooved Spines",
    31: "Gamete Meiosis",
    32: "Metasynaptic Node",
    33: "Singularity Charge",
    34: "Leg Enhancements",
    35: "Scarab Damage",
    36: "Reaver Capacity",
    37: "Gravitic Drive",
    38: "Sensor Array",
    39: "Gravitic Boosters",
    40: "Khaydarin Amulet",
    41: "Apial Sensors",
    42: "Gravitic Thrusters",
    43: "Carrier Capacity",
    44: "Khaydarin Core",
    47: "Argus Jewel",
    49: "Argus Talisman",
    51: "Caduceus Reactor",
    52: "Chitinous Plating",
    53: "Anabolic Synthesis",
    54: "Charon Boosters",
}

# Supply available before any provider is built: the main building's own
# supply (Hatchery 1 + starting Overlord 8 for Zerg).
STARTING_SUPPLY_CAP: Final[dict[Race, int]] = {
    Race.TERRAN: 10,
    Race.PROTOSS: 9,
    Race.ZERG: 9,
}


UNKNOWN_NAME: Final[str] = "Unknown"


def unknown_name(type_id: int | None) -> str:
    if type_id is None:
        return UNKNOWN_NAME
    return f"Unknown (0x{int(type_id):02X})"


def unit_info(unit_type: int | None) -> UnitInfo | None:
    if unit_type is None:
        return None
    return UNITS.get(int(unit_type))


def unit_name(unit_type: int | None) -> str:
    info = unit_info(unit_type)
    if info is not None:
        return info.name
    return unknown_name(unit_type)


def tech_name(tech_type: int | None) -> str:
    if tech_type is None:
        return UNKNOWN_NAME
    return TECHS.get(int(tech_type), unknown_name(tech_type))


def upgrade_name(upgrade_type: int | None) -> str:
    if upgrade_type is None:
        return UNKNOWN_NAME
    return UPGRADES.get(int(upgrade_type), unknown_name(upgrade_type))

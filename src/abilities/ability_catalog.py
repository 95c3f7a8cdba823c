"""
Static catalogs of learnable abilities.

Each category maps ability names to a short description. The engine treats
these as lookup data only.
"""

from src.data_models import AbilityType


METAMAGIC_DESCRIPTIONS: dict[str, str] = {
    "Aura": "Area of effect is centered on you",
    "Cascade": "The spell overwhelms with rapid, repeated impacts",
    "Cloak": "Wreathe yourself in the spell's effects",
    "Distant": "Increase the range of the spell",
    "Empowered": "Increase spell damage or effect potency",
    "Glyph": "Inscribe a textual representation of the spell's effects",
    "Grasp": "Envelop, smother or secure the spell's powers",
    "Heighten": "Cast spell as if from a higher level",
    "Hypnotic": "Add a charm/mesmerizing effect to a spell",
    "Orb": "Shape spell into a floating orb that follows commands",
    "Orbit": "Create multiple smaller versions that circle the target",
    "Precise": "Spell automatically hits or has enhanced accuracy",
    "Quick": "Cast spell as a bonus action instead of full action",
    "Sculpt": "Shape or paint the area of effect precisely",
    "Subtle": "Cast without verbal or somatic components, provide nuance",
    "Twin": "Double, mirror or repeat",
    "Wall": "A barrier, a ledge or a fortress",
}

SPELLWORD_DESCRIPTIONS: dict[str, str] = {
    "Chill": "Freeze or slow targets, create ice effects",
    "Confound": "Confuse enemies, scramble thoughts or senses",
    "Counterspell": "Cancel or redirect enemy magic",
    "Deafen": "Remove hearing, create zones of silence",
    "Flametongue": "Create and control fire effects",
    "Growth": "Increase size of objects or creatures",
    "Heat": "Create warmth, melt ice, cause fever",
    "Illusion": "Create false images or sounds",
    "Light": "Illuminate areas, create blinding flashes",
    "Mend": "Repair objects, heal minor wounds",
    "Push/Pull": "Move objects or creatures with force",
    "Rain": "Control weather, create water effects",
    "Reflect": "Bounce attacks or spells back at attackers",
    "Shadow": "Manipulate darkness and shadows",
    "Shield": "Create protective barriers",
    "Soothe": "Calm emotions, reduce pain or fear",
    "Spark": "Create electricity, power devices",
    "Thread": "Bind or connect objects and creatures",
    "Vision": "See distant places, reveal hidden things",
}

COMBAT_MANEUVER_DESCRIPTIONS: dict[str, str] = {
    "Blinding": "Strike to temporarily blind opponent",
    "Cleave": "Hit multiple adjacent enemies with one attack",
    "Command": "Force enemy to follow a simple command",
    "Daring": "Gain advantage through risky maneuvers",
    "Disarming": "Remove weapon from enemy's grasp",
    "Enraged": "Enter fury state for increased damage",
    "Goading": "Force enemy to attack you instead of allies",
    "Grappling": "Grab and restrain an opponent",
    "Leaping": "Jump attack for extra damage and mobility",
    "Menace": "Intimidate enemies to reduce their effectiveness",
    "Precision": "Target weak points for extra damage",
    "Preparation": "Set up advantageous position for next attack",
    "Reckless": "All-out attack with increased risk and reward",
    "Riposte": "Counter-attack after successful defense",
    "Stampede": "Charge through multiple enemies",
    "Throw": "Hurl objects or enemies as weapons",
    "Trip": "Knock opponent prone",
}

METAMAGIC: list[str] = list(METAMAGIC_DESCRIPTIONS)
SPELLWORDS: list[str] = list(SPELLWORD_DESCRIPTIONS)
COMBAT_MANEUVERS: list[str] = list(COMBAT_MANEUVER_DESCRIPTIONS)

ABILITY_CATALOG: dict[AbilityType, dict[str, str]] = {
    AbilityType.METAMAGIC: METAMAGIC_DESCRIPTIONS,
    AbilityType.SPELLWORD: SPELLWORD_DESCRIPTIONS,
    AbilityType.COMBAT_MANEUVER: COMBAT_MANEUVER_DESCRIPTIONS,
}

_FALLBACK_DESCRIPTIONS: dict[AbilityType, str] = {
    AbilityType.METAMAGIC: "A metamagic technique: {name}",
    AbilityType.SPELLWORD: "A magical word of power: {name}",
    AbilityType.COMBAT_MANEUVER: "A combat technique: {name}",
}


def get_master_ability_list(ability_type: AbilityType) -> list[str]:
    return list(ABILITY_CATALOG[AbilityType(ability_type)])


def get_ability_description(name: str, ability_type: AbilityType) -> str:
    ability_type = AbilityType(ability_type)
    description = ABILITY_CATALOG[ability_type].get(name)
    if description is None:
        return _FALLBACK_DESCRIPTIONS[ability_type].format(name=name)
    return description

"""
Character Sheet Engine - Main Entry Point

Command line front end for creating, inspecting, leveling, listing and
deleting saved characters.

Examples:
  python -m src.main create Mira --high dex --mid str --race elf
  python -m src.main level-up Mira dex
  python -m src.main level-up Mira dex int     # split the points
  python -m src.main show Mira
  python -m src.main list
"""

import sys
from pathlib import Path

# Add the project root to the Python path for module discovery
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from src.character.character import Character
from src.data_models import DiceSettings, Race, Stat
from src.observability import CharacterLogHandler, CharacterLogManager
from src.storage import (
    CharacterManager,
    CharacterSaveError,
    CharacterStorage,
    HybridCharacterStorage,
    JsonFileCharacterStorage,
    RemoteCharacterStorage,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


STAT_CHOICES = [s.value for s in Stat]
RACE_CHOICES = [r.value for r in Race]


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class CharacterSheetConfig:
    """Configuration for a CLI run."""

    data_dir: Path = field(default_factory=lambda: Path("saves"))
    use_dice_rolls: bool = False

    # Remote storage; used only when both are set
    remote_url: Optional[str] = None
    api_token: Optional[str] = None

    # Per-character log history file
    log_file: Optional[Path] = None

    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url and self.api_token)


def build_storage(config: CharacterSheetConfig) -> CharacterStorage:
    """JSON file storage, wrapped in a hybrid with remote storage when configured."""
    local = JsonFileCharacterStorage(config.data_dir)
    if not config.remote_enabled:
        return local
    remote = RemoteCharacterStorage(config.remote_url, config.api_token)
    return HybridCharacterStorage(local, remote)


def attach_character_log(config: CharacterSheetConfig) -> Optional[CharacterLogHandler]:
    """Route engine log records into a per-character history file."""
    if config.log_file is None:
        return None
    # The file is written once, when main() closes the handler
    handler = CharacterLogHandler(CharacterLogManager(config.log_file, autosave=False))
    logging.getLogger("src").addHandler(handler)
    return handler


# =============================================================================
# COMMANDS
# =============================================================================

def format_character(name: str, character: Character, hash_value: Optional[str] = None) -> str:
    """Render a character sheet for the terminal."""
    summary = character.summary()
    lines = [
        "=" * 60,
        f"{name.upper()}  (level {summary['level']} {summary['race'] or 'no race'})",
        "=" * 60,
        f"HP: {summary['hp']}   AC: {summary['ac']}   Hide: {character.hide()}",
    ]
    for stat in Stat:
        effective = summary["effective_stats"][stat.value]
        base = summary["stats"][stat.value]
        shown = f"{effective}" if effective == base else f"{effective} (base {base})"
        lines.append(f"  {stat.value.upper()}: {shown}  [{summary['modifiers'][stat.value]:+d}]")
    lines.append(f"Sorcery: {summary['sorcery_points']}   Finesse: {summary['finesse_points']}   "
                 f"Combat: {summary['combat_maneuver_points']}")
    lines.append(f"Armor: {summary['armor']}   Weapon: {summary['weapon']}   "
                 f"Shield: {'yes' if summary['shield'] else 'no'}")
    if summary["equipped"]:
        lines.append(f"Equipped: {', '.join(summary['equipped'])}")

    attack = character.combat.attack_with_breakdown("main-hand")
    damage = character.combat.damage_with_breakdown("main-hand")
    if attack.result:
        lines.append(f"Attack: {attack}")
        lines.append(f"Damage: {damage}")
        lines.append(f"Attacks per round: {character.combat.attacks_per_round()}")

    if summary["abilities"] or summary["learned_abilities"]:
        lines.append(f"Abilities: {', '.join(summary['abilities'] + summary['learned_abilities'])}")
    if summary["pending_level_up_points"]:
        lines.append(f"Pending level-up points: {summary['pending_level_up_points']}")
    if character.get_notes():
        lines.append(f"Notes: {character.get_notes()}")
    if hash_value:
        lines.append(f"Hash: {hash_value}")
    return "\n".join(lines)


async def cmd_create(manager: CharacterManager, args: argparse.Namespace) -> int:
    if await manager.character_exists(args.name) and not args.overwrite:
        print(f"Character '{args.name}' already exists (use --overwrite to replace it)")
        return 1

    character = Character(args.high, args.mid, args.race, args.bonus or [])
    if args.notes:
        character.set_notes(args.notes)

    saved = await manager.save_character(character, args.name)
    print(format_character(args.name, character, saved.hash))
    return 0


async def cmd_show(manager: CharacterManager, args: argparse.Namespace) -> int:
    result = await manager.load_character(args.name)
    if result is None:
        print(f"Character '{args.name}' not found")
        return 1

    if args.json:
        print(json.dumps(result.character.summary(), indent=2))
    else:
        print(format_character(result.name, result.character, result.saved.hash))
    if not result.hash_valid:
        print("Warning: saved hash does not match the rebuilt character")
    return 0


async def cmd_level_up(manager: CharacterManager, args: argparse.Namespace) -> int:
    result = await manager.load_character(args.name)
    if result is None:
        print(f"Character '{args.name}' not found")
        return 1

    character = result.character
    if len(args.stats) == 1:
        leveled = character.level_up(args.stats[0])
    else:
        leveled = character.start_level_up()
        for stat in args.stats:
            leveled = leveled and character.allocate_point(stat)
    if not leveled:
        print("Level up failed: finish the pending level-up first")
        return 1

    saved = await manager.save_character(
        character, result.name, result.high, result.mid, result.racial_bonuses
    )
    print(format_character(result.name, character, saved.hash))
    return 0


async def cmd_list(manager: CharacterManager, args: argparse.Namespace) -> int:
    characters = await manager.list_characters()
    if not characters:
        print("No saved characters")
        return 0
    for saved in characters:
        saved_at = datetime.fromtimestamp(saved.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        race = saved.data.race.value if saved.data.race else "-"
        print(f"{saved.name:<24} level {saved.data.level:<3} {race:<11} {saved_at}  {saved.hash}")
    return 0


async def cmd_delete(manager: CharacterManager, args: argparse.Namespace) -> int:
    if await manager.delete_character(args.name):
        print(f"Deleted '{args.name}'")
        return 0
    print(f"Could not delete '{args.name}'")
    return 1


COMMANDS = {
    "create": cmd_create,
    "show": cmd_show,
    "level-up": cmd_level_up,
    "list": cmd_list,
    "delete": cmd_delete,
}


# =============================================================================
# ARGUMENTS
# =============================================================================

def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Character Sheet Engine - create, level and store characters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src.main create Mira --high dex --mid str --race elf
  python -m src.main create Tam --high str --mid int --race human --bonus str --bonus dex
  python -m src.main level-up Mira dex
  python -m src.main show Mira --json
  python -m src.main --dice show Mira          # roll dice instead of averages
        """
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("saves"),
        help="Directory for saved characters (default: saves)",
    )
    parser.add_argument(
        "--dice",
        action="store_true",
        help="Roll dice instead of using average values",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Keep a per-character log history in this JSON file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    remote_group = parser.add_argument_group("Remote Storage Options")
    remote_group.add_argument(
        "--remote-url",
        type=str,
        default=None,
        help="Base URL of a character API; local files are the fallback",
    )
    remote_group.add_argument(
        "--api-token",
        type=str,
        default=None,
        help="Bearer token for the character API",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create and save a level 1 character")
    create.add_argument("name")
    create.add_argument("--high", required=True, choices=STAT_CHOICES, help="Stat starting at 16")
    create.add_argument("--mid", required=True, choices=STAT_CHOICES, help="Stat starting at 10")
    create.add_argument("--race", choices=RACE_CHOICES, default=None)
    create.add_argument(
        "--bonus",
        action="append",
        choices=STAT_CHOICES,
        help="Stat for a racial 'any' bonus (repeat for each bonus)",
    )
    create.add_argument("--notes", default="")
    create.add_argument("--overwrite", action="store_true", help="Replace an existing character")

    show = subparsers.add_parser("show", help="Show a saved character")
    show.add_argument("name")
    show.add_argument("--json", action="store_true", help="Print the summary as JSON")

    level_up = subparsers.add_parser("level-up", help="Level up a saved character")
    level_up.add_argument("name")
    level_up.add_argument(
        "stats",
        nargs="+",
        choices=STAT_CHOICES,
        help="One stat for +2, or two stats for +1 each",
    )

    subparsers.add_parser("list", help="List saved characters")

    delete = subparsers.add_parser("delete", help="Delete a saved character")
    delete.add_argument("name")

    args = parser.parse_args(argv)
    if args.command == "level-up" and len(args.stats) > 2:
        parser.error("level-up takes one or two stats")
    if args.command == "create" and args.high == args.mid:
        parser.error("--high and --mid must be different stats")
    return args


def create_config_from_args(args: argparse.Namespace) -> CharacterSheetConfig:
    """Create CharacterSheetConfig from parsed arguments."""
    return CharacterSheetConfig(
        data_dir=args.data_dir,
        use_dice_rolls=args.dice,
        remote_url=args.remote_url,
        api_token=args.api_token,
        log_file=args.log_file,
        verbose=args.verbose,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    config = create_config_from_args(args)
    DiceSettings.set_use_dice_rolls(config.use_dice_rolls)

    log_handler = attach_character_log(config)
    if log_handler is not None and getattr(args, "name", None):
        log_handler.manager.set_active_character(args.name)

    manager = CharacterManager(build_storage(config))
    try:
        return asyncio.run(COMMANDS[args.command](manager, args))
    except CharacterSaveError as e:
        logger.error(f"Save failed: {e}")
        print(f"Save failed: {e}")
        return 1
    finally:
        if log_handler is not None:
            logging.getLogger("src").removeHandler(log_handler)
            log_handler.close()


if __name__ == "__main__":
    sys.exit(main())

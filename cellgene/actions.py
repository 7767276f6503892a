"""
Actions - What an organism can do

Every action an organism owns comes from its genome. Actions are plain values:
a kind from a closed set, a level (how often the granting gene occurs) and a
target direction. Resolving an action against the game world is the job of
the turn scheduler, which dispatches on `Action.kind`.

USAGE:
    from cellgene.actions import Action, ActionKind, Target

    move = Action(ActionKind.MOVE, level=2)
    east = move.with_target(Target.EAST)
    east.to_text()  # "move to EAST"
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple


# =============================================================================
# TARGETING
# =============================================================================

class TargetCategory(Enum):
    """What an action may be aimed at. NONE means the actor itself."""
    ANY = "any"
    BLOCKING_OBJECT = "blocking_object"
    EMPTY_OBJECT = "empty_object"
    NONE = "none"


class Target(Enum):
    """Adjacent target directions, or the acting object itself."""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    CENTER = "center"

    def to_offset(self) -> Tuple[int, int]:
        return _TARGET_OFFSETS[self]

    @classmethod
    def from_offset(cls, dx: int, dy: int) -> 'Target':
        """Direction for an offset between two adjacent positions."""
        for target, offset in _TARGET_OFFSETS.items():
            if offset == (dx, dy):
                return target
        raise ValueError(f"offset ({dx}, {dy}) is not adjacent")


_TARGET_OFFSETS: Dict[Target, Tuple[int, int]] = {
    Target.NORTH: (0, -1),
    Target.SOUTH: (0, 1),
    Target.EAST: (1, 0),
    Target.WEST: (-1, 0),
    Target.CENTER: (0, 0),
}


# =============================================================================
# ACTION KINDS
# =============================================================================

class ActionKind(Enum):
    """
    Closed set of actions. The value is the identifier shown to the player
    and used to match actions across organisms.
    """
    PASS = "pass"
    MOVE = "move"
    ATTACK = "attack"
    REPAIR_STRUCTURE = "repair"
    INJECT_RNA_VIRUS = "inject RNA virus"
    INJECT_RETROVIRUS = "inject retrovirus"
    PRODUCE_VIRION = "produce virus"
    EDIT_GENOME = "Manipulate Genome"
    KILL_SWITCH = "killswitch"
    BINARY_FISSION = "bin. fission"
    PICK_UP_ITEM = "pick up item"
    DROP_ITEM = "drop item"

    @property
    def target_category(self) -> TargetCategory:
        return _TARGET_CATEGORIES.get(self, TargetCategory.NONE)


_TARGET_CATEGORIES: Dict[ActionKind, TargetCategory] = {
    ActionKind.MOVE: TargetCategory.EMPTY_OBJECT,
    ActionKind.ATTACK: TargetCategory.BLOCKING_OBJECT,
    ActionKind.KILL_SWITCH: TargetCategory.ANY,
    ActionKind.BINARY_FISSION: TargetCategory.EMPTY_OBJECT,
}

# Descriptors used by object templates. Injection actions belong to virions,
# item actions to inventory entries; no gene grants them.
_DESCRIPTORS: Dict[str, ActionKind] = {
    "ActPass": ActionKind.PASS,
    "ActMove": ActionKind.MOVE,
    "ActRepairStructure": ActionKind.REPAIR_STRUCTURE,
    "ActAttack": ActionKind.ATTACK,
    "ActEditGenome": ActionKind.EDIT_GENOME,
    "ActInjectRnaVirus": ActionKind.INJECT_RNA_VIRUS,
    "ActInjectRetrovirus": ActionKind.INJECT_RETROVIRUS,
    "ActPickUpItem": ActionKind.PICK_UP_ITEM,
    "ActDropItem": ActionKind.DROP_ITEM,
}


# =============================================================================
# ACTION
# =============================================================================

@dataclass(frozen=True)
class Action:
    """
    An action instance owned by an organism.

    level is the number of times the granting gene occurs in the genome; it is
    the only strength modifier. Energy cost equals the level.
    """
    kind: ActionKind
    level: int = 1
    target: Target = Target.CENTER

    @property
    def identifier(self) -> str:
        return self.kind.value

    @property
    def target_category(self) -> TargetCategory:
        return self.kind.target_category

    @property
    def energy_cost(self) -> int:
        if self.kind == ActionKind.PASS:
            return 0
        return self.level

    def with_level(self, level: int) -> 'Action':
        return replace(self, level=level)

    def with_target(self, target: Target) -> 'Action':
        return replace(self, target=target)

    def to_text(self) -> str:
        """Player-facing description."""
        kind = self.kind
        if kind == ActionKind.MOVE:
            return f"move to {self.target.name}"
        if kind == ActionKind.ATTACK:
            return f"attack {self.target.name}"
        if kind == ActionKind.KILL_SWITCH:
            return f"killswitch {self.target.name}"
        if kind == ActionKind.BINARY_FISSION:
            return f"binary fission into {self.target.name}"
        if kind == ActionKind.REPAIR_STRUCTURE:
            return "repair cell structure"
        if kind == ActionKind.PRODUCE_VIRION:
            return "produces virus"
        return kind.value

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.name,
            'level': self.level,
            'target': self.target.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'Action':
        return cls(
            kind=ActionKind[d['kind']],
            level=d.get('level', 1),
            target=Target(d.get('target', Target.CENTER.value)),
        )


def action_from_string(descriptor: str) -> Action:
    """
    Build an action from a template descriptor such as "ActMove".

    Raises:
        ValueError: if no action is known for the descriptor
    """
    kind = _DESCRIPTORS.get(descriptor)
    if kind is None:
        raise ValueError(f"cannot find action for {descriptor}")
    return Action(kind)

"""
Trait Catalog - The vocabulary of the genome

Every gene in a genome names one trait from a fixed, ordered catalog. A trait
belongs to one of three families (sensing, processing, actuating) and may
raise an attribute, grant an action, or both. Two further families exist that
are never expressed: LTR markers, which flank embedded virus sequences, and
junk, which is what an unknown symbol decodes to.

Each catalog entry is written into the genome as a one-byte symbol taken from
a 4 bit gray code, so a single bit flip always moves a symbol to a
neighbouring code. Symbol 0 is reserved; catalog entry i gets gray[i + 1].

USAGE:
    from cellgene.traits import build_catalog, build_symbol_table

    catalog = build_catalog()
    table = build_symbol_table(catalog)

    table.symbol_for("Move")          # 0x0f
    table.trait_for(0x0f).name        # "Move"

The symbol assignment depends on catalog order. Genomes stay portable only as
long as the order does; catalogs serialize to JSON so a save can carry its own.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .actions import ActionKind
from .errors import CatalogOverflowError, InvalidCatalogError, UnknownTraitError


# =============================================================================
# TRAIT FAMILIES AND ATTRIBUTES
# =============================================================================

class TraitFamily(Enum):
    """Broad capability category of a trait."""
    SENSING = "sensing"          # Gathering information about the environment
    PROCESSING = "processing"    # Decision making, energy, life cycle
    ACTUATING = "actuating"      # Interacting with objects and the world
    LTR = "ltr"                  # Long terminal repeat, flanks virus DNA
    JUNK = "junk"                # Undecodable symbol

    @property
    def is_expressed(self) -> bool:
        """Only the three capability families contribute to a phenotype."""
        return self in (TraitFamily.SENSING, TraitFamily.PROCESSING, TraitFamily.ACTUATING)


class TraitAttribute(Enum):
    """Which capability field a trait increments."""
    SENSING_RANGE = "sensing_range"
    HP = "hp"
    VOLUME = "volume"
    METABOLISM = "metabolism"
    STORAGE = "storage"
    RECEPTOR = "receptor"
    LIFE_EXPECTANCY = "life_expectancy"
    NONE = "none"


# =============================================================================
# GENETIC TRAIT
# =============================================================================

JUNK_NAME = "junk"


@dataclass
class GeneticTrait:
    """
    A catalog entry, or one decoded gene of a genome.

    position is the gene index within the genome. It is assigned at decode
    time and is not stored in the raw bytes; catalog templates keep 0.
    junk_symbol is only set for junk genes and holds the byte that could not
    be decoded, so that re-encoding reproduces it exactly.
    """
    name: str
    family: TraitFamily
    attribute: TraitAttribute = TraitAttribute.NONE
    action: Optional[ActionKind] = None
    position: int = 0
    junk_symbol: Optional[int] = None
    description: str = ""

    @property
    def is_junk(self) -> bool:
        return self.family == TraitFamily.JUNK

    @property
    def is_ltr(self) -> bool:
        return self.family == TraitFamily.LTR

    def at(self, position: int) -> 'GeneticTrait':
        """Copy of this trait placed at a gene position."""
        return replace(self, position=position)

    @classmethod
    def junk(cls, symbol: int, position: int = 0) -> 'GeneticTrait':
        return cls(
            name=JUNK_NAME,
            family=TraitFamily.JUNK,
            position=position,
            junk_symbol=symbol,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        d = {
            'name': self.name,
            'family': self.family.value,
            'attribute': self.attribute.value,
            'action': self.action.name if self.action is not None else None,
            'position': self.position,
        }
        if self.junk_symbol is not None:
            d['junk_symbol'] = self.junk_symbol
        if self.description:
            d['description'] = self.description
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'GeneticTrait':
        """Deserialize from dictionary."""
        action = d.get('action')
        return cls(
            name=d['name'],
            family=TraitFamily(d['family']),
            attribute=TraitAttribute(d.get('attribute', TraitAttribute.NONE.value)),
            action=ActionKind[action] if action else None,
            position=d.get('position', 0),
            junk_symbol=d.get('junk_symbol'),
            description=d.get('description', ''),
        )


# =============================================================================
# TRAIT LIBRARY - The traits shipped with the game
# =============================================================================

class TraitLibrary:
    """
    Definitions of all shipped traits.
    Catalog order is given by ORDER, not by attribute name.
    """

    # =========================================================================
    # SENSING
    # =========================================================================

    OPTICAL_SENSOR = GeneticTrait(
        name="Optical Sensor", family=TraitFamily.SENSING,
        attribute=TraitAttribute.SENSING_RANGE,
        description="Light-sensitive patch, extends sensing range"
    )

    # =========================================================================
    # PROCESSING
    # =========================================================================

    RECEPTOR = GeneticTrait(
        name="Receptor", family=TraitFamily.PROCESSING,
        attribute=TraitAttribute.RECEPTOR,
        description="Surface receptor, its type depends on its gene position"
    )

    ENERGY_STORE = GeneticTrait(
        name="Energy Store", family=TraitFamily.PROCESSING,
        attribute=TraitAttribute.STORAGE,
        description="Increases energy storage capacity"
    )

    METABOLISM = GeneticTrait(
        name="Metabolism", family=TraitFamily.PROCESSING,
        attribute=TraitAttribute.METABOLISM,
        description="Increases energy gained per turn"
    )

    LIFE_EXPECTANCY = GeneticTrait(
        name="Life Expectancy", family=TraitFamily.PROCESSING,
        attribute=TraitAttribute.LIFE_EXPECTANCY,
        description="Delays cell death by old age"
    )

    KILL_SWITCH = GeneticTrait(
        name="Kill Switch", family=TraitFamily.PROCESSING,
        action=ActionKind.KILL_SWITCH,
        description="Triggers apoptosis in self or a cell with matching receptor"
    )

    BINARY_FISSION = GeneticTrait(
        name="Binary Fission", family=TraitFamily.PROCESSING,
        action=ActionKind.BINARY_FISSION,
        description="Asexual reproduction into an adjacent free cell"
    )

    PRODUCE_VIRION = GeneticTrait(
        name="Produce Virion", family=TraitFamily.PROCESSING,
        action=ActionKind.PRODUCE_VIRION,
        description="Assembles virions from LTR-flanked DNA"
    )

    EDIT_GENOME = GeneticTrait(
        name="Edit Genome", family=TraitFamily.PROCESSING,
        action=ActionKind.EDIT_GENOME,
        description="Allows manipulating the own genome"
    )

    # =========================================================================
    # ACTUATING
    # =========================================================================

    MOVE = GeneticTrait(
        name="Move", family=TraitFamily.ACTUATING,
        action=ActionKind.MOVE,
        description="Flagellum, allows moving to an adjacent cell"
    )

    ATTACK = GeneticTrait(
        name="Attack", family=TraitFamily.ACTUATING,
        action=ActionKind.ATTACK,
        description="Damages an adjacent blocking object"
    )

    CELL_MEMBRANE = GeneticTrait(
        name="Cell Membrane", family=TraitFamily.ACTUATING,
        attribute=TraitAttribute.HP,
        description="Increases hit points"
    )

    CYTOPLASM = GeneticTrait(
        name="Cytoplasm", family=TraitFamily.ACTUATING,
        attribute=TraitAttribute.VOLUME,
        description="Increases cell volume, i.e. inventory space"
    )

    REPAIR_STRUCTURE = GeneticTrait(
        name="Repair Structure", family=TraitFamily.ACTUATING,
        action=ActionKind.REPAIR_STRUCTURE,
        description="Restores hit points"
    )

    # =========================================================================
    # MARKERS
    # =========================================================================

    LTR = GeneticTrait(
        name="LTR", family=TraitFamily.LTR,
        description="Long terminal repeat, delimits retrovirus DNA"
    )

    ORDER = (
        OPTICAL_SENSOR,
        RECEPTOR,
        ENERGY_STORE,
        METABOLISM,
        LIFE_EXPECTANCY,
        KILL_SWITCH,
        BINARY_FISSION,
        PRODUCE_VIRION,
        EDIT_GENOME,
        MOVE,
        ATTACK,
        CELL_MEMBRANE,
        CYTOPLASM,
        REPAIR_STRUCTURE,
        LTR,
    )

    @classmethod
    def get_all_traits(cls) -> List[GeneticTrait]:
        """Return copies of all trait definitions in catalog order."""
        return [deepcopy(t) for t in cls.ORDER]


# =============================================================================
# CATALOG
# =============================================================================

class TraitCatalog:
    """
    Ordered, read-only collection of trait templates.
    Names must be unique; they are how genomes are written by hand.
    """

    def __init__(self, traits: List[GeneticTrait]):
        self._traits = [t.at(0) for t in traits]
        self._by_name: Dict[str, int] = {}
        for index, t in enumerate(self._traits):
            if t.is_junk:
                raise InvalidCatalogError(f"junk trait '{t.name}' cannot be part of a catalog")
            if t.name in self._by_name:
                raise InvalidCatalogError(f"duplicate trait name '{t.name}'")
            self._by_name[t.name] = index

    def __len__(self) -> int:
        return len(self._traits)

    def __iter__(self) -> Iterator[GeneticTrait]:
        return iter(self._traits)

    def __getitem__(self, index: int) -> GeneticTrait:
        return self._traits[index]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def names(self) -> List[str]:
        return [t.name for t in self._traits]

    def index_of(self, name: str) -> int:
        """Catalog index of a trait name."""
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownTraitError(name) from None

    def get(self, name: str) -> Optional[GeneticTrait]:
        index = self._by_name.get(name)
        return self._traits[index] if index is not None else None

    def by_name(self, name: str) -> GeneticTrait:
        return self._traits[self.index_of(name)]

    def by_family(self, family: TraitFamily) -> List[GeneticTrait]:
        return [t for t in self._traits if t.family == family]

    def to_dicts(self) -> List[dict]:
        return [t.to_dict() for t in self._traits]

    @classmethod
    def from_dicts(cls, dicts: List[dict]) -> 'TraitCatalog':
        """
        Raises:
            InvalidCatalogError: on a missing field or an unknown family,
                attribute or action
        """
        try:
            traits = [GeneticTrait.from_dict(d) for d in dicts]
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidCatalogError(f"bad trait entry: {e}") from e
        return cls(traits)

    def to_json(self) -> str:
        return json.dumps(self.to_dicts(), indent=2)

    @classmethod
    def from_json(cls, s: str) -> 'TraitCatalog':
        try:
            dicts = json.loads(s)
        except json.JSONDecodeError as e:
            raise InvalidCatalogError(f"catalog is not valid JSON: {e}") from e
        return cls.from_dicts(dicts)

    def __repr__(self) -> str:
        return f"TraitCatalog(traits={len(self._traits)})"


def build_catalog() -> TraitCatalog:
    """The catalog shipped with the game."""
    return TraitCatalog(TraitLibrary.get_all_traits())


# =============================================================================
# SYMBOL TABLE
# =============================================================================

def generate_gray_code(n_bits: int) -> List[int]:
    """
    Reflected binary gray code with 2**n_bits entries.
    Neighbouring entries differ in exactly one bit.
    """
    return [i ^ (i >> 1) for i in range(1 << n_bits)]


class SymbolTable:
    """
    Bijection between catalog traits and one-byte genome symbols.

    Catalog entry i is encoded as gray[i + 1]; gray[0] (0x00) is reserved as
    "no trait". Lookups are dictionary based in both directions.
    """

    def __init__(self, catalog: TraitCatalog, n_bits: int = 4):
        if n_bits > 8:
            raise CatalogOverflowError(f"symbols are single bytes, got {n_bits} bits")
        self.catalog = catalog
        self.n_bits = n_bits
        self.gray_code = generate_gray_code(n_bits)

        capacity = len(self.gray_code) - 1
        if len(catalog) > capacity:
            raise CatalogOverflowError(
                f"{len(catalog)} traits do not fit into {capacity} symbols"
            )

        self._symbol_by_name: Dict[str, int] = {}
        self._trait_by_symbol: Dict[int, GeneticTrait] = {}
        for index, t in enumerate(catalog):
            symbol = self.gray_code[index + 1]
            self._symbol_by_name[t.name] = symbol
            self._trait_by_symbol[symbol] = t

    def __len__(self) -> int:
        return len(self._trait_by_symbol)

    def __contains__(self, symbol: int) -> bool:
        return symbol in self._trait_by_symbol

    def symbol_for(self, name: str) -> int:
        """Symbol byte of a trait name."""
        try:
            return self._symbol_by_name[name]
        except KeyError:
            raise UnknownTraitError(name) from None

    def trait_for(self, symbol: int) -> Optional[GeneticTrait]:
        """Catalog trait of a symbol byte, None for junk."""
        return self._trait_by_symbol.get(symbol)

    def symbols(self) -> Dict[str, int]:
        return dict(self._symbol_by_name)

    def __repr__(self) -> str:
        return f"SymbolTable(symbols={len(self)}, bits={self.n_bits})"


def build_symbol_table(catalog: TraitCatalog, n_bits: int = 4) -> SymbolTable:
    return SymbolTable(catalog, n_bits)

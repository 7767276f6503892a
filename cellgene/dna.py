"""
DNA Engine - Gene windows in, phenotype out

A genome is a string of bytes. Genes are written as fixed three byte windows:

    +--------+--------+--------+
    | marker | length | symbol |
    +--------+--------+--------+

The marker is written as 0x00 and the length as 0x01, but the parser accepts
any values there: genomes are mutated bit by bit and must stay decodable no
matter what. The symbol is looked up in the symbol table; unknown symbols
become junk genes, which are kept so the genome can be written back exactly.

The phenotype is built by counting. Every occurrence of an attribute gene
raises its attribute by one, and every action gene adds one to a counter for
its (family, trait) pair. Each counter becomes one action whose level is the
count. The more often a gene occurs, the stronger its trait.

LAYERS:
1. Raw DNA      - bytes, the only thing that is inherited and mutated
2. Traits       - decoded gene stream, one entry per window (junk included)
3. Phenotype    - Sensors, Processors and Actuators built from the stream

USAGE:
    from cellgene.dna import DnaType, decode_dna

    sensors, processors, actuators, dna = decode_dna(raw, DnaType.NUCLEUS, table)
"""

import hashlib
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from .actions import Action, ActionKind
from .errors import EmptyGenomeError
from .traits import GeneticTrait, SymbolTable, TraitAttribute, TraitFamily

logger = logging.getLogger(__name__)

GENE_WIDTH = 3
GENE_MARKER = 0x00
GENE_LENGTH = 0x01


class DnaType(Enum):
    """Kind of genetic material an object carries."""
    NUCLEUS = "nucleus"      # Eukaryotic cell
    NUCLEOID = "nucleoid"    # Bacterium
    RNA = "rna"              # Virus
    PLASMID = "plasmid"      # Free floating ring of DNA

    @property
    def is_cell(self) -> bool:
        return self in (DnaType.NUCLEUS, DnaType.NUCLEOID)


# =============================================================================
# PHENOTYPE BLOCKS
# =============================================================================

@dataclass(frozen=True)
class Receptor:
    """A surface receptor. Its type is the gene position that produced it."""
    type_id: int


@dataclass
class Sensors:
    """
    Gathering information about the environment.
    A sensing range of 1 means only adjacent cells can be perceived.
    """
    actions: List[Action] = field(default_factory=list)
    sensing_range: int = 1

    def to_dict(self) -> dict:
        return {
            'actions': [a.to_dict() for a in self.actions],
            'sensing_range': self.sensing_range,
        }


@dataclass
class Processors:
    """Decision making, energy household and life cycle."""
    actions: List[Action] = field(default_factory=list)
    metabolism: int = 0
    energy_storage: int = 0
    energy: int = 0
    life_expectancy: int = 0
    life_elapsed: int = 0
    receptors: List[Receptor] = field(default_factory=list)

    def receptor_matches(self, other: 'Processors') -> bool:
        """True if both share at least one receptor type."""
        own = {r.type_id for r in self.receptors}
        return any(r.type_id in own for r in other.receptors)

    def to_dict(self) -> dict:
        return {
            'actions': [a.to_dict() for a in self.actions],
            'metabolism': self.metabolism,
            'energy_storage': self.energy_storage,
            'energy': self.energy,
            'life_expectancy': self.life_expectancy,
            'life_elapsed': self.life_elapsed,
            'receptors': [r.type_id for r in self.receptors],
        }


@dataclass
class Actuators:
    """Interacting with other objects and the game world."""
    actions: List[Action] = field(default_factory=list)
    max_hp: int = 0
    hp: int = 0
    volume: int = 0

    def to_dict(self) -> dict:
        return {
            'actions': [a.to_dict() for a in self.actions],
            'max_hp': self.max_hp,
            'hp': self.hp,
            'volume': self.volume,
        }


# =============================================================================
# DNA
# =============================================================================

@dataclass
class Dna:
    """
    Genetic material of an object.

    raw is the inherited byte string. simplified is the decoded trait stream,
    a cache derived from raw; it is rebuilt whenever raw changes.
    """
    dna_type: DnaType = DnaType.NUCLEUS
    raw: bytes = b""
    simplified: List[GeneticTrait] = field(default_factory=list)

    @property
    def id(self) -> str:
        """Short content hash of type and raw bytes."""
        content = self.dna_type.value.encode() + b"|" + bytes(self.raw)
        return hashlib.md5(content).hexdigest()[:16]

    @property
    def gene_count(self) -> int:
        """Number of whole gene windows in raw."""
        return len(self.raw) // GENE_WIDTH

    def ltr_segment(self) -> List[GeneticTrait]:
        """
        Traits strictly between the first and the last LTR marker.
        Empty unless there are at least two markers.
        """
        markers = [i for i, t in enumerate(self.simplified) if t.is_ltr]
        if len(markers) < 2:
            return []
        return self.simplified[markers[0] + 1:markers[-1]]

    def ltr_segment_raw(self, table: SymbolTable) -> bytes:
        """Raw bytes of the LTR-flanked segment, e.g. to build a virion."""
        return encode_traits(self.ltr_segment(), table)

    def to_dict(self, include_traits: bool = True) -> dict:
        """Serialize. The decoded traits are optional, they can be re-derived."""
        d = {
            'dna_type': self.dna_type.value,
            'raw': list(self.raw),
        }
        if include_traits:
            d['simplified'] = [t.to_dict() for t in self.simplified]
        return d

    @classmethod
    def from_dict(cls, d: dict, table: Optional[SymbolTable] = None) -> 'Dna':
        """
        Deserialize. If the decoded traits were not stored and a symbol table
        is given, they are decoded from raw.
        """
        dna_type = DnaType(d['dna_type'])
        raw = bytes(d['raw'])
        if 'simplified' in d:
            simplified = [GeneticTrait.from_dict(t) for t in d['simplified']]
        elif table is not None:
            simplified = decode_traits(raw, table)
        else:
            simplified = []
        return cls(dna_type=dna_type, raw=raw, simplified=simplified)

    def to_json(self, include_traits: bool = True) -> str:
        return json.dumps(self.to_dict(include_traits))

    @classmethod
    def from_json(cls, s: str, table: Optional[SymbolTable] = None) -> 'Dna':
        return cls.from_dict(json.loads(s), table)

    def __repr__(self) -> str:
        return f"Dna(type={self.dna_type.value}, id={self.id}, genes={self.gene_count})"


class Phenotype(NamedTuple):
    """Result of expressing a genome. Unpacks as (sensors, processors, actuators, dna)."""
    sensors: Sensors
    processors: Processors
    actuators: Actuators
    dna: Dna


# =============================================================================
# ENCODING
# =============================================================================

def encode_gene(symbol: int) -> bytes:
    """One gene window for a symbol."""
    return bytes((GENE_MARKER, GENE_LENGTH, symbol & 0xFF))


def encode_traits(traits: Iterable[GeneticTrait], table: SymbolTable) -> bytes:
    """
    Write a trait stream back into raw DNA.
    Junk genes are written with the symbol they were decoded from.

    Raises:
        UnknownTraitError: if a non-junk trait is not in the symbol table
    """
    out = bytearray()
    for t in traits:
        if t.is_junk:
            out += encode_gene(t.junk_symbol if t.junk_symbol is not None else 0)
        else:
            out += encode_gene(table.symbol_for(t.name))
    return bytes(out)


# =============================================================================
# DECODING
# =============================================================================

def decode_traits(raw: bytes, table: SymbolTable) -> List[GeneticTrait]:
    """
    Parse raw DNA into one trait per gene window.

    Never fails. Marker and length bytes are read but not interpreted, and a
    trailing partial window is ignored.
    """
    traits: List[GeneticTrait] = []
    cursor = 0
    position = 0
    size = len(raw)

    while cursor + 2 < size:
        # marker at cursor, length at cursor + 1
        symbol = raw[cursor + 2]
        template = table.trait_for(symbol)
        if template is not None:
            traits.append(template.at(position))
        else:
            traits.append(GeneticTrait.junk(symbol, position))
        position += 1
        cursor += GENE_WIDTH

    return traits


# =============================================================================
# PHENOTYPE BUILDING
# =============================================================================

class TraitBuilder:
    """
    Accumulates a decoded trait stream into the three capability blocks.
    Feed traits in genome order with add(), then call finalize(). Calling
    finalize() again does not duplicate actions.
    """

    def __init__(self):
        self.sensors = Sensors()
        self.processors = Processors()
        self.actuators = Actuators()
        self.simplified: List[GeneticTrait] = []
        # (family, trait name) -> occurrences
        self._action_counts: Counter = Counter()
        self._action_kinds: Dict[Tuple[TraitFamily, str], ActionKind] = {}

    def add(self, t: GeneticTrait):
        self.simplified.append(t)
        if not t.family.is_expressed:
            return

        if t.attribute != TraitAttribute.NONE:
            self._apply_attribute(t)

        if t.action is not None:
            key = (t.family, t.name)
            self._action_kinds[key] = t.action
            self._action_counts[key] += 1

    def _apply_attribute(self, t: GeneticTrait):
        attr = t.attribute
        if attr == TraitAttribute.SENSING_RANGE:
            self.sensors.sensing_range += 1
        elif attr == TraitAttribute.HP:
            self.actuators.max_hp += 1
        elif attr == TraitAttribute.VOLUME:
            self.actuators.volume += 1
        elif attr == TraitAttribute.METABOLISM:
            self.processors.metabolism += 1
        elif attr == TraitAttribute.STORAGE:
            self.processors.energy_storage += 1
        elif attr == TraitAttribute.LIFE_EXPECTANCY:
            self.processors.life_expectancy += 1
        elif attr == TraitAttribute.RECEPTOR:
            self.processors.receptors.append(Receptor(type_id=t.position))

    def finalize(self, dna_type: DnaType, raw: bytes = b"") -> Phenotype:
        """Instantiate one action per counted trait, level = occurrences."""
        blocks = {
            TraitFamily.SENSING: self.sensors,
            TraitFamily.PROCESSING: self.processors,
            TraitFamily.ACTUATING: self.actuators,
        }
        for key, count in self._action_counts.items():
            family, _ = key
            blocks[family].actions.append(Action(self._action_kinds[key], level=count))
        # counted actions now live in the blocks
        self._action_counts.clear()

        # Cells can always take up items, viruses and plasmids cannot.
        if dna_type.is_cell and not any(
            a.kind == ActionKind.PICK_UP_ITEM for a in self.actuators.actions
        ):
            self.actuators.actions.append(Action(ActionKind.PICK_UP_ITEM))

        for block in blocks.values():
            block.actions.sort(key=lambda a: (a.identifier, a.level))

        # freshly expressed organisms start whole
        self.actuators.hp = self.actuators.max_hp
        self.processors.energy = self.processors.energy_storage

        dna = Dna(dna_type=dna_type, raw=bytes(raw), simplified=self.simplified)
        return Phenotype(self.sensors, self.processors, self.actuators, dna)


def build_phenotype(traits: Iterable[GeneticTrait],
                    dna_type: DnaType,
                    raw: bytes = b"") -> Phenotype:
    """Aggregate a decoded trait stream into a phenotype."""
    builder = TraitBuilder()
    for t in traits:
        builder.add(t)
    return builder.finalize(dna_type, raw)


def decode_dna(raw: bytes, dna_type: DnaType, table: SymbolTable) -> Phenotype:
    """
    Derive the phenotype of an existing genome.

    Raises:
        EmptyGenomeError: if raw is empty
    """
    if len(raw) == 0:
        raise EmptyGenomeError("cannot express an empty genome")

    traits = decode_traits(raw, table)
    phenotype = build_phenotype(traits, dna_type, raw)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "decoded %s genome %s: %d genes, %d junk",
            dna_type.value, phenotype.dna.id, len(traits),
            sum(1 for t in traits if t.is_junk),
        )
    return phenotype

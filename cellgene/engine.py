"""
Genetics Engine - Entry point for spawning and re-expressing organisms

GeneticsEngine holds everything the genome functions need: the trait catalog,
its symbol table and the session random generator. It is created once per
game session and handed to whoever spawns objects.

USAGE:
    from cellgene import create_engine, DnaType

    engine = create_engine(seed=42)
    sensors, processors, actuators, dna = engine.generate_and_decode(DnaType.NUCLEOID)

    child_raw = engine.mutate(dna.raw)
    child = engine.decode(child_raw, DnaType.NUCLEOID)
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .dna import DnaType, Phenotype, decode_dna
from .errors import GeneticsError
from .generator import (
    DnaTemplate,
    genome_from_template,
    template_from_dict,
    random_genome,
)
from .generator import from_trait_names as _from_trait_names
from .mutation import MutationRecord, mutate as _mutate, mutate_with_record
from .traits import SymbolTable, TraitCatalog, build_catalog, build_symbol_table

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class GeneticsConfig:
    """
    Settings of the genome engine.
    Use create_engine(**overrides) to change any of them.
    """
    seed: Optional[int] = None          # None draws fresh OS entropy
    genome_len: int = 10                # Genes per random genome, markers excluded
    gray_code_bits: int = 4             # Symbol space is 2**bits - 1 traits
    catalog_file: Optional[str] = None  # JSON catalog, None for the shipped one

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> 'GeneticsConfig':
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(**known)


# =============================================================================
# BOUNDARY FUNCTIONS
# =============================================================================

def generate_and_decode(rng: np.random.Generator,
                        table: SymbolTable,
                        dna_type: DnaType,
                        has_ltr: bool,
                        length: int) -> Phenotype:
    """Write a random genome and express it, for spawning a fresh entity."""
    raw = random_genome(rng, table, has_ltr, length)
    return decode_dna(raw, dna_type, table)


def load_catalog(path: str) -> TraitCatalog:
    """Read a catalog written by TraitCatalog.to_json()."""
    return TraitCatalog.from_json(Path(path).read_text(encoding="utf-8"))


# =============================================================================
# ENGINE
# =============================================================================

class GeneticsEngine:
    """Catalog, symbol table and random generator of one game session."""

    def __init__(self,
                 config: Optional[GeneticsConfig] = None,
                 catalog: Optional[TraitCatalog] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or GeneticsConfig()

        if catalog is None:
            if self.config.catalog_file:
                catalog = load_catalog(self.config.catalog_file)
            else:
                catalog = build_catalog()
        self.catalog = catalog
        self.table = build_symbol_table(catalog, self.config.gray_code_bits)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        logger.debug("genetics engine ready: %r, %r", self.catalog, self.table)

    def generate_and_decode(self,
                            dna_type: DnaType,
                            has_ltr: Optional[bool] = None,
                            length: Optional[int] = None) -> Phenotype:
        """
        Spawn a fresh random genome and express it.

        Args:
            dna_type: Kind of genetic material
            has_ltr: Flank with LTR markers; defaults to True for RNA only
            length: Number of genes; defaults to config.genome_len
        """
        if has_ltr is None:
            has_ltr = dna_type == DnaType.RNA
        if length is None:
            length = self.config.genome_len
        return generate_and_decode(self.rng, self.table, dna_type, has_ltr, length)

    def decode(self, raw: bytes, dna_type: DnaType) -> Phenotype:
        """Re-derive the phenotype of an existing genome."""
        return decode_dna(raw, dna_type, self.table)

    def mutate(self, raw: bytes) -> bytes:
        return _mutate(raw, self.rng)

    def mutate_with_record(self, raw: bytes) -> Tuple[bytes, Optional[MutationRecord]]:
        return mutate_with_record(raw, self.rng, self.table)

    def from_trait_names(self, names: Sequence[str], dna_type: DnaType) -> Phenotype:
        return decode_dna(_from_trait_names(self.table, names), dna_type, self.table)

    def from_template(self, template: DnaTemplate, dna_type: DnaType) -> Phenotype:
        raw = genome_from_template(self.rng, self.table, template, dna_type)
        return decode_dna(raw, dna_type, self.table)

    def spawn_many(self,
                   templates: Iterable[Tuple[Union[DnaTemplate, dict], DnaType]]) -> List[Phenotype]:
        """
        Express a batch of templates. Templates may also be given in their
        dict form, as read from an object file. A template that fails to load
        or to express is logged and skipped, the rest of the batch is still
        spawned.
        """
        spawned = []
        for template, dna_type in templates:
            try:
                if isinstance(template, dict):
                    template = template_from_dict(template)
                spawned.append(self.from_template(template, dna_type))
            except GeneticsError as e:
                logger.warning("skipping %s template %s: %s", dna_type.value, template, e)
        return spawned

    def __repr__(self) -> str:
        return f"GeneticsEngine(traits={len(self.catalog)}, seed={self.config.seed})"


def create_engine(**overrides) -> GeneticsEngine:
    """
    Factory for a GeneticsEngine.

    Args:
        **overrides: Any GeneticsConfig field, e.g. seed=42, genome_len=16
    """
    return GeneticsEngine(GeneticsConfig(**overrides))

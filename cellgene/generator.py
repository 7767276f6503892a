"""
Genome Generator - Writing new DNA

Three ways to write a genome:

1. random_genome       - every gene is a uniformly chosen catalog trait
2. distributed_genome  - a trait family is drawn per gene from a weight
                         table, then a trait of that family
3. from_trait_names    - an explicit list of trait names, in order

Object templates pick one of these through a DnaTemplate.

All randomness comes from the numpy Generator handed in by the caller, so a
seeded generator always writes the same genome.
"""

import logging
from dataclasses import asdict, dataclass, field
from numbers import Integral
from typing import List, Sequence, Union

import numpy as np

from .dna import DnaType, encode_gene
from .errors import InvalidDistributionError, InvalidTemplateError, UnknownTraitError
from .traits import SymbolTable, TraitFamily

logger = logging.getLogger(__name__)

CELL_FAMILIES = (TraitFamily.SENSING, TraitFamily.PROCESSING, TraitFamily.ACTUATING)


def _ltr_gene(table: SymbolTable) -> bytes:
    ltr = table.catalog.by_family(TraitFamily.LTR)
    if not ltr:
        raise UnknownTraitError("LTR")
    return encode_gene(table.symbol_for(ltr[0].name))


def _flank(body: bytearray, table: SymbolTable, has_ltr: bool) -> bytes:
    if has_ltr:
        marker = _ltr_gene(table)
        return marker + bytes(body) + marker
    return bytes(body)


# =============================================================================
# GENERATION STRATEGIES
# =============================================================================

def random_genome(rng: np.random.Generator,
                  table: SymbolTable,
                  has_ltr_markers: bool,
                  length: int) -> bytes:
    """
    Write `length` genes of uniformly chosen traits.

    Args:
        rng: Random generator
        table: Symbol table of the catalog in use
        has_ltr_markers: Flank the genes with an LTR marker on each side
        length: Number of genes, not counting markers
    """
    catalog = table.catalog
    body = bytearray()
    for _ in range(length):
        t = catalog[int(rng.integers(0, len(catalog)))]
        body += encode_gene(table.symbol_for(t.name))
    return _flank(body, table, has_ltr_markers)


def distributed_genome(rng: np.random.Generator,
                       table: SymbolTable,
                       family_weights: Sequence[int],
                       families: Sequence[TraitFamily],
                       has_ltr: bool,
                       length: int) -> bytes:
    """
    Write `length` genes, choosing each gene's family by weight first.

    Args:
        rng: Random generator
        table: Symbol table of the catalog in use
        family_weights: One non-negative weight per family
        families: The families the weights refer to
        has_ltr: Flank the genes with an LTR marker on each side
        length: Number of genes, not counting markers

    Raises:
        InvalidDistributionError: for empty, negative, all-zero or mismatched
            weights, or a weighted family without any catalog trait
    """
    if len(family_weights) == 0 or len(family_weights) != len(families):
        raise InvalidDistributionError(
            f"{len(family_weights)} weights for {len(families)} families"
        )
    weights = np.asarray(family_weights, dtype=float)
    if np.any(weights < 0):
        raise InvalidDistributionError(f"negative weight in {list(family_weights)}")
    total = weights.sum()
    if total <= 0:
        raise InvalidDistributionError("all family weights are zero")

    pools = [table.catalog.by_family(f) for f in families]
    for family, weight, pool in zip(families, weights, pools):
        if weight > 0 and not pool:
            raise InvalidDistributionError(f"no traits of family {family.value}")

    p = weights / total
    body = bytearray()
    for _ in range(length):
        pool = pools[int(rng.choice(len(pools), p=p))]
        t = pool[int(rng.integers(0, len(pool)))]
        body += encode_gene(table.symbol_for(t.name))
    return _flank(body, table, has_ltr)


def from_trait_names(table: SymbolTable, names: Sequence[str]) -> bytes:
    """
    Write one gene per trait name, in the given order.

    Raises:
        UnknownTraitError: naming the first name that is not in the catalog
    """
    out = bytearray()
    for name in names:
        out += encode_gene(table.symbol_for(name))
    return bytes(out)


# =============================================================================
# DNA TEMPLATES
# =============================================================================

def _check_count(kind: str, field_name: str, value) -> None:
    # bool is an int subclass but never a sensible count
    if isinstance(value, bool) or not isinstance(value, Integral) or value < 0:
        raise InvalidTemplateError(
            f"{kind} template: {field_name} must be a non-negative integer, got {value!r}")


@dataclass
class RandomTemplate:
    genome_len: int = 10

    def __post_init__(self):
        _check_count("Random", "genome_len", self.genome_len)


@dataclass
class DistributedTemplate:
    """Relative sensing / processing / actuating rates."""
    s_rate: int = 1
    p_rate: int = 1
    a_rate: int = 1
    genome_len: int = 10

    def __post_init__(self):
        for name in ("s_rate", "p_rate", "a_rate", "genome_len"):
            _check_count("Distributed", name, getattr(self, name))


@dataclass
class DefinedTemplate:
    traits: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.traits, (list, tuple)) or not all(
            isinstance(name, str) for name in self.traits
        ):
            raise InvalidTemplateError(
                f"Defined template: traits must be a list of names, got {self.traits!r}")
        self.traits = list(self.traits)


DnaTemplate = Union[RandomTemplate, DistributedTemplate, DefinedTemplate]

_TEMPLATE_KINDS = {
    'Random': RandomTemplate,
    'Distributed': DistributedTemplate,
    'Defined': DefinedTemplate,
}


def template_from_dict(d: dict) -> DnaTemplate:
    """
    Read a template written as {"Random": {"genome_len": 13}} and the like.

    Raises:
        InvalidTemplateError: unknown kind or bad fields
    """
    if not isinstance(d, dict) or len(d) != 1:
        raise InvalidTemplateError(f"expected a single template kind, got {d!r}")
    kind, params = next(iter(d.items()))
    cls = _TEMPLATE_KINDS.get(kind)
    if cls is None:
        raise InvalidTemplateError(f"unknown template kind '{kind}'")
    try:
        return cls(**(params or {}))
    except TypeError as e:
        raise InvalidTemplateError(f"bad fields for {kind} template: {e}") from e


def template_to_dict(template: DnaTemplate) -> dict:
    for kind, cls in _TEMPLATE_KINDS.items():
        if isinstance(template, cls):
            return {kind: asdict(template)}
    raise InvalidTemplateError(f"not a DNA template: {template!r}")


def genome_from_template(rng: np.random.Generator,
                         table: SymbolTable,
                         template: DnaTemplate,
                         dna_type: DnaType) -> bytes:
    """Write raw DNA as described by an object template. Only RNA carries LTR markers."""
    has_ltr = dna_type == DnaType.RNA
    logger.debug("writing %s genome from %s", dna_type.value, template)
    if isinstance(template, RandomTemplate):
        return random_genome(rng, table, has_ltr, template.genome_len)
    if isinstance(template, DistributedTemplate):
        return distributed_genome(
            rng, table,
            [template.s_rate, template.p_rate, template.a_rate],
            CELL_FAMILIES,
            has_ltr,
            template.genome_len,
        )
    if isinstance(template, DefinedTemplate):
        return from_trait_names(table, template.traits)
    raise InvalidTemplateError(f"not a DNA template: {template!r}")

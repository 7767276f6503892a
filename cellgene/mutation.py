"""
Mutation - Single bit flips in raw DNA

A mutation picks one whole gene window, one byte inside it and one bit of
that byte, and flips the bit. The genome keeps its length. The change only
shows once the genome is decoded again, e.g. when the cell divides.

Only whole windows are candidates. If the genome length is not a multiple of
three, the trailing bytes can never mutate, and a genome shorter than one
window comes back unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .dna import GENE_WIDTH, decode_traits
from .errors import EmptyGenomeError
from .traits import SymbolTable

logger = logging.getLogger(__name__)

BIT_MASKS = (1, 2, 4, 8, 16, 32, 64, 128)
JUNK_LABEL = "junk?"


@dataclass
class MutationRecord:
    """What a mutation changed. gene_no counts from 1, as shown to the player."""
    gene_no: int
    position: int
    old_byte: int
    new_byte: int
    old_trait_name: str = JUNK_LABEL
    new_trait_name: str = JUNK_LABEL

    @property
    def changed_trait(self) -> bool:
        return self.old_trait_name != self.new_trait_name

    def describe(self) -> str:
        if self.changed_trait:
            return f"gene {self.gene_no} mutated from {self.old_trait_name} to {self.new_trait_name}"
        return f"gene {self.gene_no} ({self.old_trait_name}) mutated silently"


def random_bit(rng: np.random.Generator) -> int:
    """A single-bit mask, uniformly chosen."""
    return BIT_MASKS[int(rng.integers(0, len(BIT_MASKS)))]


def _flip(raw: bytes, rng: np.random.Generator) -> Optional[Tuple[bytearray, int, int]]:
    if len(raw) == 0:
        raise EmptyGenomeError("cannot mutate an empty genome")
    trait_count = len(raw) // GENE_WIDTH
    if trait_count == 0:
        return None

    trait_start = int(rng.integers(0, trait_count)) * GENE_WIDTH
    position = trait_start + int(rng.integers(0, GENE_WIDTH))
    mutated = bytearray(raw)
    mutated[position] ^= random_bit(rng)
    return mutated, trait_start, position


def mutate(raw: bytes, rng: np.random.Generator) -> bytes:
    """
    Return a copy of raw with exactly one bit flipped. A genome without a
    whole gene window is returned unchanged.

    Raises:
        EmptyGenomeError: if raw is empty
    """
    flipped = _flip(raw, rng)
    if flipped is None:
        return bytes(raw)
    mutated, _, position = flipped
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("flipping gene byte %d from %s to %s", position,
                     format(raw[position], "08b"), format(mutated[position], "08b"))
    return bytes(mutated)


def _trait_name(window: bytes, table: SymbolTable) -> str:
    traits = decode_traits(window, table)
    if not traits or traits[0].is_junk:
        return JUNK_LABEL
    return traits[0].name


def mutate_with_record(raw: bytes,
                       rng: np.random.Generator,
                       table: Optional[SymbolTable] = None) -> Tuple[bytes, Optional[MutationRecord]]:
    """
    Like mutate(), but also report which gene changed and into what.
    Trait names are only resolved when a symbol table is given.

    Draws the same random numbers as mutate(), so both give the same result
    for the same generator state. The record is None when nothing could
    mutate.
    """
    flipped = _flip(raw, rng)
    if flipped is None:
        return bytes(raw), None
    mutated, trait_start, position = flipped
    record = MutationRecord(
        gene_no=trait_start // GENE_WIDTH + 1,
        position=position,
        old_byte=raw[position],
        new_byte=mutated[position],
    )
    if table is not None:
        trait_end = trait_start + GENE_WIDTH
        record.old_trait_name = _trait_name(bytes(raw[trait_start:trait_end]), table)
        record.new_trait_name = _trait_name(bytes(mutated[trait_start:trait_end]), table)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("mutation: %s", record.describe())
    return bytes(mutated), record

"""
Genetics Errors

Recoverable error conditions raised by the genome engine. Decoding never
raises; everything below is reported to the caller, which decides whether to
skip the entity, substitute a default, or abort.
"""


class GeneticsError(Exception):
    """Base class for all genome engine errors."""


class UnknownTraitError(GeneticsError, KeyError):
    """A requested trait name is not part of the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"unknown trait '{self.name}'"


class EmptyGenomeError(GeneticsError, ValueError):
    """Phenotype building or mutation was invoked on an empty genome."""


class InvalidDistributionError(GeneticsError, ValueError):
    """Family weight table is empty, all-zero, negative or mismatched."""


class CatalogOverflowError(GeneticsError, ValueError):
    """The catalog has more traits than the gray code can address."""


class InvalidTemplateError(GeneticsError, ValueError):
    """A DNA template description could not be understood."""


class InvalidCatalogError(GeneticsError, ValueError):
    """A trait catalog has duplicate, junk or unreadable entries."""

# Cell Genome Engine
#
# Every object in the world carries DNA. The DNA is a byte string that decodes
# into sensors, processors and actuators: what the object perceives, how it
# manages energy and life, and which actions it can take.
#
# MODULES:
# ├── traits.py      - Trait catalog, families, attributes, gray-code symbols
# ├── actions.py     - Closed set of actions with level and target
# ├── dna.py         - Gene windows, decoder and phenotype builder
# ├── generator.py   - Random, distributed, named and template genomes
# ├── mutation.py    - Single bit flips
# ├── engine.py      - Session engine and configuration
# └── errors.py      - Recoverable error types

# =============================================================================
# PRIMARY EXPORTS: Engine
# =============================================================================

from .engine import (
    GeneticsEngine,
    GeneticsConfig,
    create_engine,  # Primary factory function
    generate_and_decode,
    load_catalog,
)

# =============================================================================
# GENOME MODEL
# =============================================================================

from .dna import (
    DnaType,
    Dna,
    Sensors,
    Processors,
    Actuators,
    Receptor,
    Phenotype,
    TraitBuilder,
    decode_traits,
    build_phenotype,
    decode_dna,
    encode_gene,
    encode_traits,
    GENE_WIDTH,
)

# Re-derive a phenotype from raw bytes
decode = decode_dna

from .traits import (
    TraitFamily,
    TraitAttribute,
    GeneticTrait,
    TraitLibrary,
    TraitCatalog,
    SymbolTable,
    build_catalog,
    build_symbol_table,
    generate_gray_code,
)

from .actions import (
    Action,
    ActionKind,
    Target,
    TargetCategory,
    action_from_string,
)

# =============================================================================
# GENERATION AND MUTATION
# =============================================================================

from .generator import (
    random_genome,
    distributed_genome,
    from_trait_names,
    RandomTemplate,
    DistributedTemplate,
    DefinedTemplate,
    template_from_dict,
    template_to_dict,
    genome_from_template,
)

from .mutation import (
    mutate,
    mutate_with_record,
    MutationRecord,
)

# =============================================================================
# ERRORS
# =============================================================================

from .errors import (
    GeneticsError,
    UnknownTraitError,
    EmptyGenomeError,
    InvalidDistributionError,
    CatalogOverflowError,
    InvalidTemplateError,
    InvalidCatalogError,
)


__all__ = [
    # Primary exports
    'GeneticsEngine',
    'GeneticsConfig',
    'create_engine',
    'generate_and_decode',
    'load_catalog',

    # Genome model
    'DnaType',
    'Dna',
    'Sensors',
    'Processors',
    'Actuators',
    'Receptor',
    'Phenotype',
    'TraitBuilder',
    'decode_traits',
    'build_phenotype',
    'decode_dna',
    'decode',
    'encode_gene',
    'encode_traits',
    'GENE_WIDTH',

    # Traits
    'TraitFamily',
    'TraitAttribute',
    'GeneticTrait',
    'TraitLibrary',
    'TraitCatalog',
    'SymbolTable',
    'build_catalog',
    'build_symbol_table',
    'generate_gray_code',

    # Actions
    'Action',
    'ActionKind',
    'Target',
    'TargetCategory',
    'action_from_string',

    # Generation / mutation
    'random_genome',
    'distributed_genome',
    'from_trait_names',
    'RandomTemplate',
    'DistributedTemplate',
    'DefinedTemplate',
    'template_from_dict',
    'template_to_dict',
    'genome_from_template',
    'mutate',
    'mutate_with_record',
    'MutationRecord',

    # Errors
    'GeneticsError',
    'UnknownTraitError',
    'EmptyGenomeError',
    'InvalidDistributionError',
    'CatalogOverflowError',
    'InvalidTemplateError',
    'InvalidCatalogError',
]

__version__ = "0.1.0"

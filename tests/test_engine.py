import logging

import numpy as np
import pytest

from cellgene import (
    ActionKind,
    DefinedTemplate,
    DistributedTemplate,
    DnaType,
    EmptyGenomeError,
    GeneticsConfig,
    GeneticsEngine,
    RandomTemplate,
    TraitFamily,
    UnknownTraitError,
    build_catalog,
    create_engine,
    decode,
    generate_and_decode,
)


def test_generate_and_decode_is_deterministic():
    a = create_engine(seed=42).generate_and_decode(DnaType.NUCLEUS)
    b = create_engine(seed=42).generate_and_decode(DnaType.NUCLEUS)
    assert a.dna.raw == b.dna.raw
    assert a == b


def test_generate_and_decode_defaults():
    engine = create_engine(seed=1, genome_len=12)
    cell = engine.generate_and_decode(DnaType.NUCLEOID)
    assert len(cell.dna.raw) == 3 * 12
    assert cell.dna.dna_type == DnaType.NUCLEOID
    assert any(a.kind == ActionKind.PICK_UP_ITEM for a in cell.actuators.actions)

    virus = engine.generate_and_decode(DnaType.RNA)
    assert len(virus.dna.raw) == 3 * 14
    assert virus.dna.simplified[0].family == TraitFamily.LTR
    assert virus.dna.simplified[-1].family == TraitFamily.LTR

    plasmid = engine.generate_and_decode(DnaType.PLASMID, has_ltr=True, length=3)
    assert len(plasmid.dna.raw) == 3 * 5


def test_generate_and_decode_function(table):
    s, p, a, dna = generate_and_decode(np.random.default_rng(8), table, DnaType.RNA, False, 6)
    assert len(dna.simplified) == 6
    assert dna.raw and not any(t.is_junk for t in dna.simplified)


def test_action_levels_match_occurrences():
    engine = create_engine(seed=3, genome_len=60)
    s, p, a, dna = engine.generate_and_decode(DnaType.PLASMID)
    for block, family in ((s, TraitFamily.SENSING), (p, TraitFamily.PROCESSING), (a, TraitFamily.ACTUATING)):
        for action in block.actions:
            count = sum(1 for t in dna.simplified if t.family == family and t.action == action.kind)
            assert action.level == count


def test_decode_after_mutation():
    engine = create_engine(seed=9)
    parent = engine.from_trait_names(["Move", "Receptor", "Optical Sensor"], DnaType.NUCLEUS)
    child_raw = engine.mutate(parent.dna.raw)
    child = engine.decode(child_raw, DnaType.NUCLEUS)
    assert len(child.dna.simplified) == 3
    assert child.dna.raw == child_raw
    assert decode(child_raw, DnaType.NUCLEUS, engine.table) == child


def test_mutate_with_record():
    engine = create_engine(seed=9)
    raw = engine.from_trait_names(["Move"] * 4, DnaType.RNA).dna.raw
    mutated, record = engine.mutate_with_record(raw)
    assert len(mutated) == len(raw)
    assert record.old_trait_name == "Move"


def test_from_trait_names_errors():
    engine = create_engine(seed=0)
    with pytest.raises(UnknownTraitError):
        engine.from_trait_names(["Move", "Wings"], DnaType.NUCLEUS)
    with pytest.raises(EmptyGenomeError):
        engine.from_trait_names([], DnaType.NUCLEUS)


def test_from_template():
    engine = create_engine(seed=0)
    virus = engine.from_template(DistributedTemplate(0, 1, 0, 5), DnaType.RNA)
    inner = virus.dna.simplified[1:-1]
    assert len(inner) == 5
    assert all(t.family == TraitFamily.PROCESSING for t in inner)


def test_spawn_many_skips_broken_templates(caplog):
    engine = create_engine(seed=0)
    batch = [
        (RandomTemplate(5), DnaType.NUCLEUS),
        (DefinedTemplate(["foo"]), DnaType.NUCLEUS),
        (DistributedTemplate(0, 0, 0, 5), DnaType.RNA),
        (DefinedTemplate([]), DnaType.PLASMID),
        (DefinedTemplate(["Move"]), DnaType.RNA),
    ]
    with caplog.at_level(logging.WARNING, logger="cellgene.engine"):
        spawned = engine.spawn_many(batch)
    assert len(spawned) == 2
    assert len(caplog.records) == 3
    assert "foo" in caplog.records[0].getMessage()


def test_config_round_trip():
    config = GeneticsConfig(seed=5, genome_len=7)
    assert GeneticsConfig.from_dict(config.to_dict()) == config
    assert GeneticsConfig.from_dict({'seed': 5, 'unknown': True}).seed == 5


def test_engine_loads_catalog_file(tmp_path):
    path = tmp_path / "genes.json"
    path.write_text(build_catalog().to_json(), encoding="utf-8")
    engine = GeneticsEngine(GeneticsConfig(seed=1, catalog_file=str(path)))
    default = create_engine(seed=1)
    assert engine.table.symbols() == default.table.symbols()
    assert engine.generate_and_decode(DnaType.NUCLEUS) == default.generate_and_decode(DnaType.NUCLEUS)


def test_engine_accepts_rng():
    engine = GeneticsEngine(rng=np.random.default_rng(77))
    other = GeneticsEngine(rng=np.random.default_rng(77))
    assert engine.mutate(b"\x00\x01\x0f" * 5) == other.mutate(b"\x00\x01\x0f" * 5)


def test_spawn_many_skips_mistyped_template_dicts(caplog):
    engine = create_engine(seed=0)
    batch = [
        ({"Random": {"genome_len": "ten"}}, DnaType.NUCLEUS),
        (RandomTemplate(3), DnaType.NUCLEUS),
        ({"Defined": {"traits": "Move"}}, DnaType.NUCLEUS),
        ({"Defined": {"traits": ["Move", "Attack"]}}, DnaType.NUCLEUS),
    ]
    with caplog.at_level(logging.WARNING, logger="cellgene.engine"):
        spawned = engine.spawn_many(batch)
    assert len(spawned) == 2
    assert len(spawned[0].dna.simplified) == 3
    assert [t.name for t in spawned[1].dna.simplified] == ["Move", "Attack"]
    assert len(caplog.records) == 2
    assert "genome_len" in caplog.records[0].getMessage()
    assert "unknown trait" not in caplog.records[1].getMessage()

import logging

import numpy as np
import pytest

from cellgene import (
    Action,
    ActionKind,
    Actuators,
    Dna,
    DnaType,
    EmptyGenomeError,
    Processors,
    Receptor,
    Sensors,
    TraitBuilder,
    TraitFamily,
    build_phenotype,
    decode_dna,
    decode_traits,
    encode_traits,
    from_trait_names,
)


def test_decode_is_total(table):
    rng = np.random.default_rng(99)
    samples = [b"", b"\x00", b"\xff\xff", bytes(30), b"\xff" * 31]
    samples += [bytes(rng.integers(0, 256, size=n).astype(np.uint8)) for n in range(64)]
    for raw in samples:
        traits = decode_traits(raw, table)
        assert len(traits) == len(raw) // 3
        for dna_type in DnaType:
            build_phenotype(traits, dna_type, raw)
            if raw:
                decode_dna(raw, dna_type, table)


def test_short_genome_has_no_genes(table):
    assert decode_traits(b"\x00\x01", table) == []
    _, _, _, dna = decode_dna(b"\x00\x01", DnaType.RNA, table)
    assert dna.simplified == []
    assert dna.raw == b"\x00\x01"


def test_trailing_bytes_are_ignored(table):
    raw = from_trait_names(table, ["Move"]) + b"\x00\x01"
    traits = decode_traits(raw, table)
    assert [t.name for t in traits] == ["Move"]


def test_marker_and_length_bytes_are_not_checked(table):
    move = table.symbol_for("Move")
    traits = decode_traits(bytes([0x7F, 0x09, move]), table)
    assert traits[0].name == "Move"


def test_unknown_symbol_is_junk(table):
    sensors, processors, actuators, dna = decode_dna(b"\x00\x01\xff", DnaType.RNA, table)
    assert len(dna.simplified) == 1
    junk = dna.simplified[0]
    assert junk.family == TraitFamily.JUNK
    assert junk.junk_symbol == 0xFF
    assert junk.position == 0
    assert sensors == Sensors()
    assert processors == Processors()
    assert actuators == Actuators()


def test_move_round_trip(table):
    raw = from_trait_names(table, ["Move"])
    assert raw == bytes([0x00, 0x01, 0x0F])
    _, _, actuators, dna = decode_dna(raw, DnaType.RNA, table)
    assert len(dna.simplified) == 1
    assert dna.simplified[0].name == "Move"
    assert dna.simplified[0].family == TraitFamily.ACTUATING
    assert actuators.actions == [Action(ActionKind.MOVE, level=1)]
    assert actuators.actions[0].identifier == "move"


def test_occurrence_scales_attributes(table):
    baseline = Sensors().sensing_range
    raw = from_trait_names(table, ["Optical Sensor"] * 3 + ["Cell Membrane"] * 2)
    sensors, _, actuators, _ = decode_dna(raw, DnaType.PLASMID, table)
    assert sensors.sensing_range == baseline + 3
    assert actuators.max_hp == 2
    assert actuators.hp == 2


def test_occurrence_scales_action_level(table):
    names = ["Attack", "Move", "Attack", "Kill Switch", "Attack", "Move"]
    _, processors, actuators, _ = decode_dna(
        from_trait_names(table, names), DnaType.RNA, table
    )
    assert actuators.actions == [
        Action(ActionKind.ATTACK, level=3),
        Action(ActionKind.MOVE, level=2),
    ]
    assert processors.actions == [Action(ActionKind.KILL_SWITCH, level=1)]


def test_processor_attributes(table):
    names = ["Energy Store", "Energy Store", "Metabolism", "Life Expectancy", "Cytoplasm"]
    _, processors, actuators, _ = decode_dna(
        from_trait_names(table, names), DnaType.NUCLEUS, table
    )
    assert processors.energy_storage == 2
    assert processors.energy == 2
    assert processors.metabolism == 1
    assert processors.life_expectancy == 1
    assert processors.life_elapsed == 0
    assert actuators.volume == 1


def test_receptor_type_is_gene_position(table):
    raw = from_trait_names(table, ["Move", "Receptor", "Attack", "Receptor"])
    _, processors, _, _ = decode_dna(raw, DnaType.NUCLEUS, table)
    assert processors.receptors == [Receptor(1), Receptor(3)]


def test_receptor_matching(table):
    a = decode_dna(from_trait_names(table, ["Receptor"]), DnaType.NUCLEUS, table)
    b = decode_dna(from_trait_names(table, ["Receptor", "Move"]), DnaType.RNA, table)
    c = decode_dna(from_trait_names(table, ["Move", "Receptor"]), DnaType.RNA, table)
    assert a.processors.receptor_matches(b.processors)
    assert not a.processors.receptor_matches(c.processors)
    assert not Processors().receptor_matches(a.processors)


def test_pick_up_item_only_for_cells(table):
    raw = b"\x00\x01\xff"
    for dna_type in (DnaType.NUCLEUS, DnaType.NUCLEOID):
        actuators = decode_dna(raw, dna_type, table).actuators
        assert Action(ActionKind.PICK_UP_ITEM) in actuators.actions
    for dna_type in (DnaType.RNA, DnaType.PLASMID):
        actuators = decode_dna(raw, dna_type, table).actuators
        assert all(a.kind != ActionKind.PICK_UP_ITEM for a in actuators.actions)


def test_ltr_and_junk_do_not_express(table):
    raw = from_trait_names(table, ["LTR", "LTR"]) + b"\x00\x01\xee"
    sensors, processors, actuators, dna = decode_dna(raw, DnaType.RNA, table)
    assert len(dna.simplified) == 3
    assert sensors == Sensors()
    assert processors == Processors()
    assert actuators == Actuators()


def test_positions_are_sequential(table):
    raw = from_trait_names(table, ["Move", "LTR"]) + b"\x00\x01\xff" + from_trait_names(table, ["Attack"])
    traits = decode_traits(raw, table)
    assert [t.position for t in traits] == [0, 1, 2, 3]


def test_decode_is_deterministic(table):
    raw = from_trait_names(table, ["Attack", "Receptor", "Move", "Optical Sensor"])
    assert decode_dna(raw, DnaType.NUCLEUS, table) == decode_dna(raw, DnaType.NUCLEUS, table)


def test_empty_genome_raises(table):
    with pytest.raises(EmptyGenomeError):
        decode_dna(b"", DnaType.NUCLEUS, table)


def test_encode_traits_restores_raw(table):
    raw = from_trait_names(table, ["Move", "Receptor"]) + b"\x00\x01\xfe" + from_trait_names(table, ["LTR"])
    assert encode_traits(decode_traits(raw, table), table) == raw


def test_ltr_segment(table):
    inner = ["Move", "Attack"]
    raw = from_trait_names(table, ["Receptor", "LTR"] + inner + ["LTR"])
    dna = decode_dna(raw, DnaType.NUCLEUS, table).dna
    assert [t.name for t in dna.ltr_segment()] == inner
    assert dna.ltr_segment_raw(table) == from_trait_names(table, inner)

    single = decode_dna(from_trait_names(table, ["LTR", "Move"]), DnaType.RNA, table).dna
    assert single.ltr_segment() == []


def test_dna_serialization(table):
    raw = from_trait_names(table, ["Move", "Receptor"]) + b"\x00\x01\xff"
    dna = decode_dna(raw, DnaType.NUCLEOID, table).dna

    assert Dna.from_json(dna.to_json()) == dna

    stripped = dna.to_dict(include_traits=False)
    assert 'simplified' not in stripped
    assert Dna.from_dict(stripped, table) == dna
    assert Dna.from_dict(stripped).simplified == []


def test_dna_id_depends_on_content(table):
    a = Dna(DnaType.NUCLEUS, from_trait_names(table, ["Move"]))
    b = Dna(DnaType.NUCLEUS, from_trait_names(table, ["Attack"]))
    c = Dna(DnaType.RNA, from_trait_names(table, ["Move"]))
    assert a.id != b.id
    assert a.id != c.id
    assert a.id == Dna(DnaType.NUCLEUS, from_trait_names(table, ["Move"])).id
    assert a.gene_count == 1


def test_finalize_twice_does_not_duplicate_actions(table):
    builder = TraitBuilder()
    for t in decode_traits(from_trait_names(table, ["Move", "Move", "Attack"]), table):
        builder.add(t)
    first = builder.finalize(DnaType.NUCLEUS)
    second = builder.finalize(DnaType.NUCLEUS)
    kinds = [a.kind for a in second.actuators.actions]
    assert len(kinds) == len(set(kinds))
    assert Action(ActionKind.MOVE, level=2) in second.actuators.actions
    assert first.actuators.actions == second.actuators.actions


def test_decode_logs_only_at_debug(table, caplog):
    raw = from_trait_names(table, ["Move"]) + b"\x00\x01\xee"
    with caplog.at_level(logging.INFO, logger="cellgene.dna"):
        decode_dna(raw, DnaType.NUCLEUS, table)
    assert not caplog.records
    with caplog.at_level(logging.DEBUG, logger="cellgene.dna"):
        phenotype = decode_dna(raw, DnaType.NUCLEUS, table)
    assert phenotype.dna.id in caplog.records[-1].getMessage()
    assert "1 junk" in caplog.records[-1].getMessage()

"""Shared fixtures: a small synthetic CoreSEED data directory.

Genomes:
- 83333.1: ferric uptake role with drifted capitalization, ferrous iron
  transporter, siderophore receptor (with comment), a deleted feature
- 83333.2: only a misspelled ferric uptake role (not a known synonym)
- 83333.3: hypothetical regulator only

Subsystems:
- Iron Transport: MATCH, MISMATCH_SERIOUS, INVALID and an unknown genome
- Iron Acquisition: MISMATCH_NAMING via a definition
- Heme Uptake: two identical serious (2, 0) pairs, one unknown role
- Siderophore Import: a bad rule id, so its mismatch is downgraded
- No Rules Here: public subsystem without rules
- Broken Rules: unparseable rule text
"""

from pathlib import Path

import pytest

ROLE_LINES = [
    ("R001", "c1", "Ferric Uptake Protein"),
    ("R001", "c1", "Iron uptake protein FeuA"),
    ("R002", "c2", "Ferrous iron transporter B"),
    ("R003", "c3", "Siderophore receptor"),
    ("R004", "c4", "Hypothetical regulator"),
]

GENOMES = {
    "83333.1": (
        "Escherichia coli K-12",
        [
            ("fig|83333.1.peg.1", "Ferric uptake protein"),
            ("fig|83333.1.peg.2", "Ferrous iron transporter B"),
            ("fig|83333.1.peg.3", "Siderophore receptor # putative"),
            ("fig|83333.1.peg.9", "Hypothetical regulator"),
            ("fig|83333.1.rna.1", "16S rRNA"),
        ],
        ["fig|83333.1.peg.9"],
    ),
    "83333.2": (
        "Escherichia coli O157",
        [("fig|83333.2.peg.1", "ferric-uptake protien")],
        [],
    ),
    "83333.3": (
        "Escherichia coli B",
        [("fig|83333.3.peg.1", "Hypothetical regulator")],
        [],
    ),
}

SUBSYSTEMS = {
    "Iron_Transport": {
        "roles": [("FeuA", "Ferric Uptake Protein"), ("FeoB", "Ferrous iron transporter B")],
        "rows": [("83333.1", "1"), ("83333.2", "1"), ("83333.3", "-1"), ("99999.9", "1")],
        "rules": "1 means FeuA\n0 means not FeuA\n",
    },
    "Iron_Acquisition": {
        "roles": [("FeuA", "Ferric Uptake Protein"), ("FeoB", "Ferrous iron transporter B")],
        "rows": [("83333.1", "2")],
        "definitions": "both means FeuA and FeoB\n",
        "rules": "3 means both\n2 means FeoB\n",
    },
    "Heme_Uptake": {
        "roles": [("HmuA", "Heme uptake protein HmuA"), ("HmuB", "Hypothetical regulator")],
        "rows": [("83333.2", "2"), ("83333.3", "2")],
        "rules": "2 means HmuA and HmuB\n0 means not HmuA\n",
    },
    "Siderophore_Import": {
        "roles": [("SidR", "Siderophore receptor")],
        "rows": [("83333.1", "1")],
        "rules": "1 means SidR and Xyz\n0 means not SidR\n",
    },
    "No_Rules_Here": {
        "roles": [("FeoB", "Ferrous iron transporter B")],
        "rows": [("83333.1", "active")],
        "classification": "Transport\tIron\tSiderophores\n",
        "version": "3\n",
        "exchangable": True,
    },
    "Broken_Rules": {
        "roles": [("FeuA", "Ferric Uptake Protein")],
        "rows": [("83333.1", "1")],
        "rules": "1 means (FeuA and\n",
    },
}


def write_spreadsheet(path: Path, roles: list[tuple[str, str]], rows: list[tuple[str, str]]) -> None:
    lines = [f"{abbr}\t{name}" for abbr, name in roles]
    lines += ["//", "//"]
    lines += [f"{genome_id}\t{code}\t1\t2" for genome_id, code in rows]
    path.write_text("\n".join(lines) + "\n")


def build_core_dir(root: Path) -> Path:
    """Write the synthetic CoreSEED tree under root and return its path."""
    core_dir = root / "Data"
    core_dir.mkdir()

    (core_dir / "subsystem.roles").write_text(
        "".join(f"{rid}\t{check}\t{name}\n" for rid, check, name in ROLE_LINES)
    )

    for genome_id, (name, functions, deleted) in GENOMES.items():
        genome_dir = core_dir / "Organisms" / genome_id
        (genome_dir / "Features" / "peg").mkdir(parents=True)
        (genome_dir / "GENOME").write_text(name + "\n")
        (genome_dir / "assigned_functions").write_text(
            "".join(f"{fid}\t{function}\n" for fid, function in functions)
        )
        if deleted:
            (genome_dir / "Features" / "peg" / "deleted.features").write_text(
                "".join(f"{fid}\n" for fid in deleted)
            )

    for dir_name, layout in SUBSYSTEMS.items():
        sub_dir = core_dir / "Subsystems" / dir_name
        sub_dir.mkdir(parents=True)
        write_spreadsheet(sub_dir / "spreadsheet", layout["roles"], layout["rows"])
        if "definitions" in layout:
            (sub_dir / "checkvariant_definitions").write_text(layout["definitions"])
        if "rules" in layout:
            (sub_dir / "checkvariant_rules").write_text(layout["rules"])
        if "classification" in layout:
            (sub_dir / "CLASSIFICATION").write_text(layout["classification"])
        if "version" in layout:
            (sub_dir / "VERSION").write_text(layout["version"])
        if layout.get("exchangable"):
            (sub_dir / "EXCHANGABLE").write_text("1\n")

    return core_dir


@pytest.fixture
def core_dir(tmp_path):
    """Synthetic CoreSEED data directory."""
    return build_core_dir(tmp_path)


@pytest.fixture
def roles(core_dir):
    from subsystem_audit.roles import RoleIdentity

    return RoleIdentity.load(core_dir / "subsystem.roles")


@pytest.fixture
def corpus(core_dir):
    from subsystem_audit.corpus import GenomeRepository, load_corpus

    return load_corpus(GenomeRepository(core_dir / "Organisms"), ["peg", "rna"])


@pytest.fixture
def repository(core_dir):
    from subsystem_audit.corpus import SubsystemRepository

    return SubsystemRepository(core_dir / "Subsystems")


@pytest.fixture
def audit_config_path(tmp_path, core_dir):
    """Config YAML pointing at the synthetic CoreSEED directory."""
    config_path = tmp_path / "audit.yaml"
    config_path.write_text(f"""
core_dir: {core_dir}
output_dir: {tmp_path / "reports"}
validation:
  workers: 3
  feature_types: [peg, rna]
  progress_interval_seconds: 5.0
""")
    return config_path

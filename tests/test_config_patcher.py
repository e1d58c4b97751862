import stat

import pytest

from client_setup.setup.config_patcher import (
    JOB_ID,
    ORACLE_ADDRESS,
    patch_migration_file,
    set_or_append_key,
    substitute_template_value,
)
from client_setup.setup.errors import VerificationFailed

from tests.conftest import JOB_ID_NO_HYPHENS, MIGRATION_TEMPLATE, OPERATOR_ADDRESS


# ---- set_or_append_key ------------------------------------------------------

def test_set_key_creates_missing_file(tmp_path):
    target = tmp_path / "sub" / ".contracts"
    set_or_append_key(target, "CLIENT_ADDRESS", "0xabc")
    assert target.read_text() == 'CLIENT_ADDRESS="0xabc"\n'


def test_set_key_twice_is_idempotent(tmp_path):
    target = tmp_path / ".env"
    target.write_text('# comment\nINSTALL_DIR="/opt/node"\n\nOTHER=1\n')

    set_or_append_key(target, "K", "v1")
    first = target.read_text()
    set_or_append_key(target, "K", "v1")

    assert target.read_text() == first
    assert [l for l in first.splitlines() if l.startswith("K=")] == ['K="v1"']


def test_set_key_updates_in_place_without_reordering(tmp_path):
    target = tmp_path / ".env"
    target.write_text('A=1\nK="v1"\n# keep me\nB=2\n')

    set_or_append_key(target, "K", "v2")

    assert target.read_text() == 'A=1\nK="v2"\n# keep me\nB=2\n'


def test_set_key_leaves_similar_keys_alone(tmp_path):
    target = tmp_path / ".env"
    target.write_text('FUNDER_PRIVATE_KEY="aaa"\n')

    set_or_append_key(target, "PRIVATE_KEY", "bbb")

    assert target.read_text() == 'FUNDER_PRIVATE_KEY="aaa"\nPRIVATE_KEY="bbb"\n'


def test_set_key_collapses_duplicates(tmp_path):
    target = tmp_path / ".contracts"
    target.write_text('CLIENT_ADDRESS="0x1"\nX=1\nCLIENT_ADDRESS="0x2"\n')

    set_or_append_key(target, "CLIENT_ADDRESS", "0x3")

    assert target.read_text() == 'CLIENT_ADDRESS="0x3"\nX=1\n'


def test_set_key_matches_export_prefix(tmp_path):
    target = tmp_path / ".env"
    target.write_text("export PRIVATE_KEY=old\n")

    set_or_append_key(target, "PRIVATE_KEY", "new")

    assert target.read_text() == 'PRIVATE_KEY="new"\n'


def test_set_key_appends_after_missing_trailing_newline(tmp_path):
    target = tmp_path / ".env"
    target.write_text("A=1")

    set_or_append_key(target, "B", "2")

    assert target.read_text() == 'A=1\nB="2"\n'


def test_set_key_applies_mode(tmp_path):
    target = tmp_path / ".env"
    set_or_append_key(target, "PRIVATE_KEY", "abc", mode=0o600)
    assert stat.S_IMODE(target.stat().st_mode) == 0o600


@pytest.mark.parametrize("value", ['has"quote', "two\nlines"])
def test_set_key_rejects_unescapable_values(tmp_path, value):
    with pytest.raises(ValueError):
        set_or_append_key(tmp_path / ".env", "K", value)


def test_set_key_rejects_bad_key(tmp_path):
    with pytest.raises(ValueError):
        set_or_append_key(tmp_path / ".env", "BAD KEY", "v")


# ---- substitute_template_value ----------------------------------------------

def test_substitution_is_exact_and_backed_up(tmp_path):
    target = tmp_path / "2_deploy_contract.js"
    original = 'const a = 1;\nconst oracleAddress = "OLD";\nconst b = 2;\n'
    target.write_text(original)

    backup = substitute_template_value(target, ORACLE_ADDRESS, "NEW")

    text = target.read_text()
    assert 'const oracleAddress = "NEW";' in text
    assert '"OLD"' not in text
    assert text == original.replace('"OLD"', '"NEW"')
    assert backup.name == "2_deploy_contract.js.backup"
    assert backup.read_bytes() == original.encode()


def test_substitution_replaces_every_occurrence(tmp_path):
    target = tmp_path / "m.js"
    target.write_text('web3.utils.fromAscii("a")\nweb3.utils.toHex("b")\n')

    substitute_template_value(target, JOB_ID, "cafe")

    assert target.read_text() == 'web3.utils.fromAscii("cafe")\nweb3.utils.toHex("cafe")\n'


def test_substitution_keeps_value_literal(tmp_path):
    target = tmp_path / "m.js"
    target.write_text('const oracleAddress = "x";\n')

    substitute_template_value(target, ORACLE_ADDRESS, r"a\1b")

    assert target.read_text() == 'const oracleAddress = "a\\1b";\n'


def test_backup_tracks_content_before_each_substitution(tmp_path):
    target = tmp_path / "m.js"
    target.write_text('const oracleAddress = "A";\n')

    substitute_template_value(target, ORACLE_ADDRESS, "B")
    backup = substitute_template_value(target, ORACLE_ADDRESS, "C")

    assert backup.read_text() == 'const oracleAddress = "B";\n'
    assert target.read_text() == 'const oracleAddress = "C";\n'


def test_leftover_backup_is_replaced(tmp_path):
    target = tmp_path / "m.js"
    target.write_text(MIGRATION_TEMPLATE)
    (tmp_path / "m.js.backup").write_text("unrelated leftover\n")

    backup = substitute_template_value(target, ORACLE_ADDRESS, OPERATOR_ADDRESS)

    assert backup.read_text() == MIGRATION_TEMPLATE


def test_substitution_without_backup(tmp_path):
    target = tmp_path / "m.js"
    target.write_text(MIGRATION_TEMPLATE)

    substitute_template_value(target, ORACLE_ADDRESS, OPERATOR_ADDRESS, backup=False)

    assert not (tmp_path / "m.js.backup").exists()


def test_patch_migration_keeps_one_backup_of_the_template(tmp_path):
    target = tmp_path / "m.js"
    target.write_text(MIGRATION_TEMPLATE)

    backup = patch_migration_file(target, OPERATOR_ADDRESS, JOB_ID_NO_HYPHENS)

    assert backup.read_text() == MIGRATION_TEMPLATE


def test_missing_placeholder_fails_verification(tmp_path):
    target = tmp_path / "m.js"
    target.write_text("module.exports = function() {};\n")

    with pytest.raises(VerificationFailed):
        substitute_template_value(target, ORACLE_ADDRESS, OPERATOR_ADDRESS)
    assert target.read_text() == "module.exports = function() {};\n"


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        substitute_template_value(tmp_path / "nope.js", ORACLE_ADDRESS, "x")


def test_patch_migration_file_end_to_end(tmp_path):
    target = tmp_path / "2_deploy_contract.js"
    target.write_text(MIGRATION_TEMPLATE)

    patch_migration_file(target, OPERATOR_ADDRESS, JOB_ID_NO_HYPHENS)

    text = target.read_text()
    assert f'const oracleAddress = "{OPERATOR_ADDRESS}";' in text
    assert f'web3.utils.fromAscii("{JOB_ID_NO_HYPHENS}")' in text
    assert "0x565d2Be50501f7eCbaAD81d388530Bf8032f51dD" not in text
    # untouched literals
    assert 'const linkTokenAddress = "0xE4aB69C077896252FAFBD49EFD26B5D171A32410";' in text
    assert 'web3.utils.toWei("0.05", "ether")' in text

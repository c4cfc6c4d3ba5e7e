"""Tests for output schema comparison policies."""

import pyarrow as pa
import pytest

from foreach_batch_sink.schema import describe_mismatch, schemas_match, validate_policy

BASE = pa.schema([pa.field("id", pa.int64(), nullable=False), pa.field("val", pa.string())])


def test_identical_schemas_match_under_every_policy():
    for policy in ("names", "names_and_types", "strict"):
        assert schemas_match(BASE, BASE, policy)


def test_renamed_field_never_matches():
    renamed = pa.schema([pa.field("key", pa.int64(), nullable=False), pa.field("val", pa.string())])

    for policy in ("names", "names_and_types", "strict"):
        assert not schemas_match(BASE, renamed, policy)


def test_reordered_fields_do_not_match():
    reordered = pa.schema([pa.field("val", pa.string()), pa.field("id", pa.int64(), nullable=False)])
    assert not schemas_match(BASE, reordered, "names")


def test_field_count_must_be_equal():
    shorter = pa.schema([pa.field("id", pa.int64(), nullable=False)])

    assert not schemas_match(BASE, shorter, "names")
    assert "field count differs" in describe_mismatch(BASE, shorter)


def test_type_change_only_matters_beyond_names_policy():
    widened = pa.schema([pa.field("id", pa.int32(), nullable=False), pa.field("val", pa.string())])

    assert schemas_match(BASE, widened, "names")
    assert not schemas_match(BASE, widened, "names_and_types")
    assert not schemas_match(BASE, widened, "strict")


def test_nullability_only_matters_under_strict_policy():
    nullable = pa.schema([pa.field("id", pa.int64()), pa.field("val", pa.string())])

    assert schemas_match(BASE, nullable, "names_and_types")
    assert not schemas_match(BASE, nullable, "strict")


def test_metadata_is_ignored():
    with_metadata = BASE.with_metadata({"origin": "upstream"})
    assert schemas_match(BASE, with_metadata, "strict")


def test_describe_mismatch_names_the_position():
    changed = pa.schema([pa.field("id", pa.int64(), nullable=False), pa.field("val", pa.binary())])

    message = describe_mismatch(BASE, changed, "names_and_types")

    assert message.startswith("field 1 differs")
    assert "names_and_types" in message


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError, match="Unsupported schema policy"):
        validate_policy("loose")

    with pytest.raises(ValueError):
        schemas_match(BASE, BASE, "loose")

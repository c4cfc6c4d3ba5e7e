"""Positional comparison of Arrow output schemas."""

import pyarrow as pa

SCHEMA_POLICIES = ("names", "names_and_types", "strict")
DEFAULT_SCHEMA_POLICY = "names_and_types"


def validate_policy(policy: str) -> str:
    """Return ``policy`` if it is known, otherwise raise ValueError."""
    if policy not in SCHEMA_POLICIES:
        raise ValueError(
            f"Unsupported schema policy: {policy} (expected one of {', '.join(SCHEMA_POLICIES)})"
        )
    return policy


def _field_matches(expected: pa.Field, actual: pa.Field, policy: str) -> bool:
    if expected.name != actual.name:
        return False
    if policy == "names":
        return True
    if not expected.type.equals(actual.type):
        return False
    if policy == "strict":
        return expected.nullable == actual.nullable
    return True


def schemas_match(
    expected: pa.Schema, actual: pa.Schema, policy: str = DEFAULT_SCHEMA_POLICY
) -> bool:
    """
    Compare two output schemas field by field.

    Field and schema metadata are never compared.

    Args:
        expected: Schema the consumer is entitled to see
        actual: Schema derived from the analyzed plan
        policy: 'names', 'names_and_types' or 'strict' (adds nullability)

    Returns:
        True if both schemas have the same fields in the same positions
    """
    validate_policy(policy)
    if len(expected) != len(actual):
        return False
    return all(_field_matches(e, a, policy) for e, a in zip(expected, actual))


def describe_mismatch(
    expected: pa.Schema, actual: pa.Schema, policy: str = DEFAULT_SCHEMA_POLICY
) -> str:
    """Describe the first difference between two schemas."""
    if len(expected) != len(actual):
        return (
            f"field count differs: expected {len(expected)} {expected.names}, "
            f"got {len(actual)} {actual.names}"
        )
    for position, (e, a) in enumerate(zip(expected, actual)):
        if not _field_matches(e, a, policy):
            return f"field {position} differs under '{policy}' policy: expected {e}, got {a}"
    return "schemas match"

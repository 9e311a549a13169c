"""User id normalization shared by every comparison of user identities."""


def normalize_user_id(value: str) -> str:
    """Normalize a user id for comparison (trimmed, lower-case)."""
    return value.strip().lower()


def normalize_presence_identity(identity: str) -> str:
    """Reduce a voice identity of the form ``userId::device`` to a normalized user id."""
    raw_user_id, _, _ = identity.partition("::")
    return normalize_user_id(raw_user_id or identity)

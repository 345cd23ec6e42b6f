"""Business context layers and their merge precedence.

A conversation's effective context is built from three layers, lowest
precedence first:

1. base: the account profile (role, stage, niche, region)
2. conversation: the persisted per-conversation context
3. filters: transient overrides sent with a single message

Each of the six fields resolves independently. A layer only overrides a
field it actually sets; a missing value never clears a lower layer.

Example:
    effective = merge_contexts(base, conversation=stored, filters=request_filters)
"""

from dataclasses import dataclass, fields, replace

CONTEXT_FIELDS: tuple[str, ...] = (
    "user_role",
    "business_stage",
    "goal",
    "urgency",
    "region",
    "business_niche",
)


@dataclass(frozen=True)
class BusinessContext:
    """Six independently optional classification fields."""

    user_role: str | None = None
    business_stage: str | None = None
    goal: str | None = None
    urgency: str | None = None
    region: str | None = None
    business_niche: str | None = None

    def is_empty(self) -> bool:
        """Return True when no field is set."""
        return all(getattr(self, f.name) is None for f in fields(self))

    def as_dict(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in CONTEXT_FIELDS}

    @classmethod
    def from_object(cls, source: object | None) -> "BusinessContext":
        """Build a context from any object exposing the six attributes.

        Works for ORM rows and pydantic request models alike; attributes
        the source lacks are treated as unset.
        """
        if source is None:
            return cls()
        return cls(**{name: getattr(source, name, None) for name in CONTEXT_FIELDS})


def overlay(lower: BusinessContext, upper: BusinessContext | None) -> BusinessContext:
    """Return lower with every non-null field of upper written over it."""
    if upper is None:
        return lower
    updates = {
        name: getattr(upper, name)
        for name in CONTEXT_FIELDS
        if getattr(upper, name) is not None
    }
    return replace(lower, **updates) if updates else lower


def merge_contexts(
    base: BusinessContext,
    conversation: BusinessContext | None = None,
    filters: BusinessContext | None = None,
) -> BusinessContext:
    """Merge the three context layers, filters > conversation > base.

    Args:
        base: Account profile layer.
        conversation: Persisted conversation layer, if any.
        filters: Per-message override layer, if any.

    Returns:
        The effective context. Never raises and never persists.
    """
    return overlay(overlay(base, conversation), filters)

"""Attribute sets: the named axes a product varies along (Color, Size, ...).

An attribute set is immutable. Editing helpers return a new set and reject
duplicates at the point of insertion, so a set built through them is always
valid apart from possibly having no values yet. `validate_attribute_set`
checks a whole set at once before generation.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


# ── Errors ─────────────────────────────────────────

class VariantMatrixError(Exception):
    """Base class for variant matrix errors."""


class AttributeSetError(VariantMatrixError):
    """The attribute set cannot be used to generate variants."""


class NoAttributeValuesError(AttributeSetError):
    def __init__(self, message: str = "Add at least one value to an attribute before generating variants"):
        super().__init__(message)


class InvalidAttributeSetError(NoAttributeValuesError):
    """Generator called on a set that validation should have rejected."""

    def __init__(self, message: str = "Attribute set has no values to combine"):
        super().__init__(message)


class DuplicateAttributeNameError(AttributeSetError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Attribute '{name}' already exists")


class DuplicateAttributeValueError(AttributeSetError):
    def __init__(self, attribute: str, value: str):
        self.attribute = attribute
        self.value = value
        super().__init__(f"{value} already exists for {attribute}")


# ── Models ─────────────────────────────────────────

COLOR_ATTRIBUTE_NAMES = {"color", "colour"}


class Attribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=100)
    values: tuple[str, ...] = ()
    is_color_like: bool = False

    @property
    def is_color(self) -> bool:
        return self.is_color_like or self.name.strip().lower() in COLOR_ATTRIBUTE_NAMES

    def has_value(self, value: str) -> bool:
        folded = value.strip().casefold()
        return any(v.strip().casefold() == folded for v in self.values)


class AttributeSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: tuple[Attribute, ...] = ()

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.attributes]

    @property
    def non_empty(self) -> list[Attribute]:
        return [a for a in self.attributes if a.values]

    def find(self, name: str) -> int | None:
        """Index of the attribute called `name` (case-insensitive), or None."""
        folded = name.strip().casefold()
        for i, attr in enumerate(self.attributes):
            if attr.name.strip().casefold() == folded:
                return i
        return None

    @classmethod
    def from_mapping(cls, mapping: dict[str, Iterable[str]]) -> "AttributeSet":
        """Build without insertion checks: {"Color": ["Red"], "Size": ["S"]}."""
        return cls(attributes=tuple(
            Attribute(name=name, values=tuple(values)) for name, values in mapping.items()
        ))


# ── Validation ─────────────────────────────────────

def validate_attribute_set(attribute_set: AttributeSet) -> None:
    """Raise if the set cannot be used for generation."""
    seen_names: set[str] = set()
    for attr in attribute_set.attributes:
        folded = attr.name.strip().casefold()
        if folded in seen_names:
            raise DuplicateAttributeNameError(attr.name)
        seen_names.add(folded)

        seen_values: set[str] = set()
        for value in attr.values:
            folded_value = value.strip().casefold()
            if folded_value in seen_values:
                raise DuplicateAttributeValueError(attr.name, value)
            seen_values.add(folded_value)

    if not attribute_set.non_empty:
        raise NoAttributeValuesError()


# ── Editing ────────────────────────────────────────

def add_attribute(
    attribute_set: AttributeSet,
    name: str,
    values: Iterable[str] = (),
    is_color_like: bool = False,
) -> AttributeSet:
    name = name.strip()
    if not name:
        raise ValueError("Attribute name must not be empty")
    if attribute_set.find(name) is not None:
        raise DuplicateAttributeNameError(name)

    result = AttributeSet(attributes=attribute_set.attributes + (
        Attribute(name=name, is_color_like=is_color_like),
    ))
    for value in values:
        result = add_attribute_value(result, name, value)
    return result


def add_attribute_value(attribute_set: AttributeSet, name: str, value: str) -> AttributeSet:
    index = attribute_set.find(name)
    if index is None:
        raise KeyError(name)

    value = value.strip()
    if not value:
        raise ValueError("Please enter a value to add")

    attr = attribute_set.attributes[index]
    if attr.has_value(value):
        raise DuplicateAttributeValueError(attr.name, value)

    updated = attr.model_copy(update={"values": attr.values + (value,)})
    return _replace(attribute_set, index, updated)


def remove_attribute(attribute_set: AttributeSet, index: int) -> AttributeSet:
    _check_index(attribute_set.attributes, index)
    return AttributeSet(attributes=tuple(
        a for i, a in enumerate(attribute_set.attributes) if i != index
    ))


def remove_attribute_value(attribute_set: AttributeSet, attribute_index: int, value_index: int) -> AttributeSet:
    _check_index(attribute_set.attributes, attribute_index)
    attr = attribute_set.attributes[attribute_index]
    _check_index(attr.values, value_index)
    values = tuple(v for i, v in enumerate(attr.values) if i != value_index)
    return _replace(attribute_set, attribute_index, attr.model_copy(update={"values": values}))


def build_attribute_set(raw: Iterable[tuple[str, Iterable[str], bool]]) -> AttributeSet:
    """Build a set from (name, values, is_color_like) triples via the insertion checks."""
    result = AttributeSet()
    for name, values, is_color_like in raw:
        result = add_attribute(result, name, values, is_color_like=is_color_like)
    return result


def _replace(attribute_set: AttributeSet, index: int, attr: Attribute) -> AttributeSet:
    attrs = list(attribute_set.attributes)
    attrs[index] = attr
    return AttributeSet(attributes=tuple(attrs))


def _check_index(seq: tuple, index: int) -> None:
    if not 0 <= index < len(seq):
        raise IndexError(f"Index {index} out of range")

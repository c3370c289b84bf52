"""Action templates and named variants received from a classifier provider.

Everything in here arrives from outside and is validated on the way in.
One bad extra or template never invalidates its siblings: a variant that
cannot be typed becomes an UnsupportedVariant, and a template that does not
validate is dropped from the classification result.
"""

import enum
import logging
from typing import Annotated, Any, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError, field_validator


logger = logging.getLogger(__name__)

INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1
FLOAT_MAX = 3.4028234663852886e38


class VariantKind(str, enum.Enum):
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOL = "bool"
    STRING = "string"


class _Variant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class IntVariant(_Variant):
    kind: Literal[VariantKind.INT] = VariantKind.INT
    value: Annotated[int, Field(strict=True, ge=INT_MIN, le=INT_MAX)]


class LongVariant(_Variant):
    kind: Literal[VariantKind.LONG] = VariantKind.LONG
    value: Annotated[int, Field(strict=True, ge=LONG_MIN, le=LONG_MAX)]


class FloatVariant(_Variant):
    kind: Literal[VariantKind.FLOAT] = VariantKind.FLOAT
    value: Annotated[float, Field(ge=-FLOAT_MAX, le=FLOAT_MAX)]


class DoubleVariant(_Variant):
    kind: Literal[VariantKind.DOUBLE] = VariantKind.DOUBLE
    value: float


class BoolVariant(_Variant):
    kind: Literal[VariantKind.BOOL] = VariantKind.BOOL
    value: StrictBool


class StringVariant(_Variant):
    kind: Literal[VariantKind.STRING] = VariantKind.STRING
    value: StrictStr


class UnsupportedVariant(_Variant):
    """A variant whose tag is unknown or whose value does not fit its tag."""

    kind: str
    value: Any = None
    reason: str = ""


NamedVariant = Union[
    IntVariant,
    LongVariant,
    FloatVariant,
    DoubleVariant,
    BoolVariant,
    StringVariant,
    UnsupportedVariant,
]

_VARIANT_TYPES = {
    VariantKind.INT: IntVariant,
    VariantKind.LONG: LongVariant,
    VariantKind.FLOAT: FloatVariant,
    VariantKind.DOUBLE: DoubleVariant,
    VariantKind.BOOL: BoolVariant,
    VariantKind.STRING: StringVariant,
}


def parse_named_variant(payload: Any) -> NamedVariant:
    """
    Build a typed variant from its wire form ``{name, type, value}``.

    Args:
        payload: Untrusted mapping

    Returns:
        The matching variant, or UnsupportedVariant if the tag is unknown or
        the value does not fit it
    """
    if not isinstance(payload, Mapping):
        return UnsupportedVariant(name="", kind=type(payload).__name__, reason="not a mapping")

    name = payload.get("name")
    tag = payload.get("type")
    value = payload.get("value")
    if not isinstance(name, str) or not name:
        return UnsupportedVariant(name="", kind=str(tag), value=value, reason="missing name")

    try:
        kind = VariantKind(str(tag).lower())
    except ValueError:
        return UnsupportedVariant(name=name, kind=str(tag), value=value, reason="unknown type")

    try:
        return _VARIANT_TYPES[kind](name=name, value=value)
    except ValidationError:
        return UnsupportedVariant(
            name=name, kind=kind.value, value=value, reason=f"value does not fit {kind.value}"
        )


class ActionTemplate(BaseModel):
    """Provider description of an action, independent of any concrete app."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str
    description: str
    action: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="type")
    flags: Optional[int] = None
    categories: Optional[List[str]] = Field(default=None, alias="category")
    request_code: Optional[int] = Field(default=None, alias="requestCode")
    package_name: Optional[str] = Field(default=None, alias="packageName")
    extras: List[NamedVariant] = Field(default_factory=list)

    @field_validator("extras", mode="before")
    @classmethod
    def _parse_extras(cls, value: Any) -> List[NamedVariant]:
        if value is None:
            return []
        if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
            raise ValueError("extras must be a list")
        return [
            item if isinstance(item, _Variant) else parse_named_variant(item)
            for item in value
        ]


class ClassificationResult(BaseModel):
    """Entity classification returned by a classifier, with its action templates."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    collection: Optional[str] = None
    score: float = 0.0
    remote_action_templates: List[ActionTemplate] = Field(
        default_factory=list, alias="remoteActionTemplates"
    )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ClassificationResult":
        """
        Build a result from an untrusted payload, dropping malformed templates.

        Args:
            payload: Mapping with ``collection``, ``score`` and
                ``remoteActionTemplates``

        Returns:
            ClassificationResult holding only the templates that validated;
            an unusable collection or score is dropped with a warning
        """
        collection = payload.get("collection")
        if collection is not None and not isinstance(collection, str):
            logger.warning(f"Ignoring non-string collection {collection!r}")
            collection = None

        score = payload.get("score")
        try:
            score = float(score) if score is not None else 0.0
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid score {score!r}")
            score = 0.0

        raw_templates = payload.get("remoteActionTemplates")
        if raw_templates is None:
            raw_templates = []
        elif isinstance(raw_templates, (str, bytes, Mapping)) or not isinstance(raw_templates, Iterable):
            logger.warning(f"Ignoring action templates of type {type(raw_templates).__name__}")
            raw_templates = []

        templates = []
        for index, raw in enumerate(raw_templates):
            try:
                templates.append(ActionTemplate.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Dropping malformed action template #{index}: {e.error_count()} errors")

        return cls(
            collection=collection,
            score=score,
            remote_action_templates=templates,
        )

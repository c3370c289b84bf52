"""Action templates and the factories turning them into actions."""

from .factory import (
    DEFAULT_REQUEST_CODE,
    EXTRA_FROM_TEXT_CLASSIFIER,
    ActionFactory,
    ActionIntent,
    DefaultTranslateActionProvider,
    ExecutableAction,
    TemplateActionFactory,
    TranslateActionProvider,
)
from .legacy import LegacyActionFactory
from .templates import (
    ActionTemplate,
    ClassificationResult,
    NamedVariant,
    UnsupportedVariant,
    VariantKind,
    parse_named_variant,
)

__all__ = [
    "DEFAULT_REQUEST_CODE",
    "EXTRA_FROM_TEXT_CLASSIFIER",
    "ActionFactory",
    "ActionIntent",
    "ActionTemplate",
    "ClassificationResult",
    "DefaultTranslateActionProvider",
    "ExecutableAction",
    "LegacyActionFactory",
    "NamedVariant",
    "TemplateActionFactory",
    "TranslateActionProvider",
    "UnsupportedVariant",
    "VariantKind",
    "parse_named_variant",
]

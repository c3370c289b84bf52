"""Turn classification results into executable actions."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Union

from ..errors import TemplateRejected, UnsupportedVariantKind
from .templates import (
    ActionTemplate,
    BoolVariant,
    ClassificationResult,
    DoubleVariant,
    FloatVariant,
    IntVariant,
    LongVariant,
    NamedVariant,
    StringVariant,
    UnsupportedVariant,
)


logger = logging.getLogger(__name__)

DEFAULT_REQUEST_CODE = 0

# Set on every action built by this pipeline
EXTRA_FROM_TEXT_CLASSIFIER = "from_text_classifier"
EXTRA_TEXT = "text"

ACTION_TRANSLATE = "action.TRANSLATE"

ExtraValue = Union[int, float, bool, str]


@dataclass
class ActionIntent:
    """A generic, app-independent description of what an action does."""

    action: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None
    flags: int = 0
    categories: List[str] = field(default_factory=list)
    extras: Dict[str, ExtraValue] = field(default_factory=dict)

    def add_category(self, category: str) -> None:
        if category not in self.categories:
            self.categories.append(category)

    def put_extra(self, name: str, value: ExtraValue) -> None:
        self.extras[name] = value


@dataclass
class ExecutableAction:
    """An action ready to be offered to the user."""

    title: str
    description: str
    intent: ActionIntent
    request_code: int = DEFAULT_REQUEST_CODE


class ActionFactory(Protocol):
    """Protocol for strategies building actions from a classification."""

    def create(
        self,
        context: Any,
        text: str,
        is_foreign_text: bool,
        reference_time: Optional[datetime],
        classification: Optional[ClassificationResult],
    ) -> List[ExecutableAction]:
        """Return the actions for the classified text, in display order."""
        ...


class TranslateActionProvider(Protocol):
    """
    Protocol for the collaborator building the translation action.

    Returning None means the collaborator has nothing better to offer; the
    plain translate action is used in its place.
    """

    def create_translate_action(self, context: Any, text: str) -> Optional[ExecutableAction]:
        ...


class DefaultTranslateActionProvider:
    """Builds a plain translate action carrying the text as an extra."""

    def create_translate_action(self, context: Any, text: str) -> ExecutableAction:
        return ExecutableAction(
            title="Translate",
            description="Translate text",
            intent=ActionIntent(action=ACTION_TRANSLATE, extras={EXTRA_TEXT: text}),
        )


def insert_translate_action(
    actions: List[ExecutableAction],
    context: Any,
    text: str,
    translator: TranslateActionProvider,
) -> None:
    """Append the translation action for text, always as the last action."""
    action = translator.create_translate_action(context, text)
    if action is None:
        action = DefaultTranslateActionProvider().create_translate_action(context, text)
    actions.append(action)


def mark_from_text_classifier(actions: List[ExecutableAction]) -> List[ExecutableAction]:
    for action in actions:
        action.intent.put_extra(EXTRA_FROM_TEXT_CLASSIFIER, True)
    return actions


def extra_value(variant: NamedVariant) -> ExtraValue:
    """
    Convert a named variant to the value stored in an action's extras.

    Raises:
        UnsupportedVariantKind: If the variant could not be typed
    """
    if isinstance(variant, (IntVariant, LongVariant)):
        return int(variant.value)
    if isinstance(variant, (FloatVariant, DoubleVariant)):
        return float(variant.value)
    if isinstance(variant, BoolVariant):
        return bool(variant.value)
    if isinstance(variant, StringVariant):
        return str(variant.value)
    if isinstance(variant, UnsupportedVariant):
        raise UnsupportedVariantKind(f"{variant.name!r} of type {variant.kind}: {variant.reason}")
    raise UnsupportedVariantKind(f"Unknown variant {type(variant).__name__}")


def create_extras(variants: List[NamedVariant]) -> Dict[str, ExtraValue]:
    extras: Dict[str, ExtraValue] = {}
    for variant in variants:
        try:
            extras[variant.name] = extra_value(variant)
        except UnsupportedVariantKind as e:
            logger.warning(f"Unsupported type found in extras: {e}")
    return extras


def create_intent(template: ActionTemplate) -> ActionIntent:
    """
    Build the intent described by a template.

    Only fields present on the template are applied.

    Raises:
        TemplateRejected: If the template targets a specific package
    """
    if template.package_name:
        raise TemplateRejected(f"Template {template.title!r} sets package name {template.package_name}")

    intent = ActionIntent()
    if template.action:
        intent.action = template.action
    if template.data or template.mime_type:
        intent.data = template.data or None
        intent.mime_type = template.mime_type or None
    if template.flags is not None:
        intent.flags = template.flags
    if template.categories is not None:
        for category in template.categories:
            intent.add_category(category)
    intent.extras.update(create_extras(template.extras))
    return intent


class TemplateActionFactory:
    """
    Builds actions from the templates carried by a classification result.

    When the result has no templates the fallback factory is used instead,
    and its output is returned as is.
    """

    def __init__(
        self,
        fallback: ActionFactory,
        translator: Optional[TranslateActionProvider] = None,
    ):
        """
        Initialize template factory.

        Args:
            fallback: Factory used for results without templates
            translator: Builds the translation action for foreign text
        """
        if fallback is None:
            raise ValueError("fallback factory is required")
        self.fallback = fallback
        self.translator = translator or DefaultTranslateActionProvider()

    def create(
        self,
        context: Any,
        text: str,
        is_foreign_text: bool,
        reference_time: Optional[datetime],
        classification: Optional[ClassificationResult],
    ) -> List[ExecutableAction]:
        if classification is None:
            return []

        templates = classification.remote_action_templates
        if not templates:
            logger.warning("Action templates are missing, falling back to the legacy factory")
            return self.fallback.create(
                context, text, is_foreign_text, reference_time, classification
            )

        actions = self.create_from_templates(templates)
        if is_foreign_text:
            insert_translate_action(actions, context, text.strip(), self.translator)
        return mark_from_text_classifier(actions)

    @staticmethod
    def create_from_templates(templates: List[ActionTemplate]) -> List[ExecutableAction]:
        actions = []
        for template in templates:
            try:
                intent = create_intent(template)
            except TemplateRejected as e:
                logger.warning(f"An action template is skipped: {e}")
                continue

            actions.append(
                ExecutableAction(
                    title=template.title,
                    description=template.description,
                    intent=intent,
                    request_code=(
                        DEFAULT_REQUEST_CODE
                        if template.request_code is None
                        else template.request_code
                    ),
                )
            )
        return actions

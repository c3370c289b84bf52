"""Action factory for classifiers that send no action templates."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote, urlsplit

from .factory import (
    ActionIntent,
    ExecutableAction,
    DefaultTranslateActionProvider,
    TranslateActionProvider,
    insert_translate_action,
    mark_from_text_classifier,
)
from .templates import ClassificationResult

ACTION_VIEW = "action.VIEW"
ACTION_SENDTO = "action.SENDTO"
ACTION_DIAL = "action.DIAL"
ACTION_INSERT_CONTACT = "action.INSERT_CONTACT"

EXTRA_EMAIL = "email"
EXTRA_PHONE = "phone"


def _email_actions(text: str) -> List[ExecutableAction]:
    return [
        ExecutableAction(
            title="Email",
            description="Compose an email",
            intent=ActionIntent(action=ACTION_SENDTO, data=f"mailto:{text}"),
        ),
        ExecutableAction(
            title="Add contact",
            description="Add this address to contacts",
            intent=ActionIntent(action=ACTION_INSERT_CONTACT, extras={EXTRA_EMAIL: text}),
        ),
    ]


def _phone_actions(text: str) -> List[ExecutableAction]:
    return [
        ExecutableAction(
            title="Call",
            description="Dial this number",
            intent=ActionIntent(action=ACTION_DIAL, data=f"tel:{text}"),
        ),
        ExecutableAction(
            title="Add contact",
            description="Add this number to contacts",
            intent=ActionIntent(action=ACTION_INSERT_CONTACT, extras={EXTRA_PHONE: text}),
        ),
        ExecutableAction(
            title="Message",
            description="Send a message",
            intent=ActionIntent(action=ACTION_SENDTO, data=f"smsto:{text}"),
        ),
    ]


def _url_actions(text: str) -> List[ExecutableAction]:
    url = text if urlsplit(text).scheme else f"http://{text}"
    return [
        ExecutableAction(
            title="Open",
            description="Open in browser",
            intent=ActionIntent(action=ACTION_VIEW, data=url),
        )
    ]


def _address_actions(text: str) -> List[ExecutableAction]:
    return [
        ExecutableAction(
            title="Map",
            description="Locate on map",
            intent=ActionIntent(action=ACTION_VIEW, data=f"geo:0,0?q={quote(text)}"),
        )
    ]


_BUILDERS: Dict[str, Callable[[str], List[ExecutableAction]]] = {
    "email": _email_actions,
    "phone": _phone_actions,
    "url": _url_actions,
    "address": _address_actions,
}


class LegacyActionFactory:
    """Builds fixed actions from the entity type of a classification."""

    def __init__(self, translator: Optional[TranslateActionProvider] = None):
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

        text = text.strip()
        builder = _BUILDERS.get((classification.collection or "").lower())
        actions = builder(text) if builder else []
        if is_foreign_text:
            insert_translate_action(actions, context, text, self.translator)
        return mark_from_text_classifier(actions)

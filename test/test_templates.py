"""Tests for action templates and the factories built on them."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from document_contract.textclassifier import (
    DEFAULT_REQUEST_CODE,
    EXTRA_FROM_TEXT_CLASSIFIER,
    ActionTemplate,
    ClassificationResult,
    LegacyActionFactory,
    TemplateActionFactory,
    UnsupportedVariant,
    parse_named_variant,
)
from document_contract.textclassifier.factory import ACTION_TRANSLATE, EXTRA_TEXT
from document_contract.textclassifier.templates import (
    BoolVariant,
    DoubleVariant,
    IntVariant,
    LongVariant,
    StringVariant,
)

NOW = datetime(2024, 1, 29, 14, 30, tzinfo=timezone.utc)


def template(**fields):
    payload = {"title": "Open", "description": "Open it"}
    payload.update(fields)
    return ActionTemplate.model_validate(payload)


def classification(*templates, collection="url"):
    return ClassificationResult(collection=collection, remote_action_templates=list(templates))


class TestNamedVariant:
    @pytest.mark.parametrize(
        "payload, expected_type",
        [
            ({"name": "n", "type": "int", "value": 7}, IntVariant),
            ({"name": "n", "type": "long", "value": 2**40}, LongVariant),
            ({"name": "n", "type": "double", "value": 1.5}, DoubleVariant),
            ({"name": "n", "type": "Bool", "value": True}, BoolVariant),
            ({"name": "n", "type": "STRING", "value": "x"}, StringVariant),
        ],
    )
    def test_known_kinds(self, payload, expected_type):
        assert isinstance(parse_named_variant(payload), expected_type)

    def test_unknown_kind(self):
        variant = parse_named_variant({"name": "n", "type": "uuid", "value": "x"})
        assert isinstance(variant, UnsupportedVariant)
        assert variant.reason == "unknown type"

    def test_int_out_of_range(self):
        variant = parse_named_variant({"name": "n", "type": "int", "value": 2**40})
        assert isinstance(variant, UnsupportedVariant)

    def test_bool_is_not_an_int(self):
        variant = parse_named_variant({"name": "n", "type": "int", "value": True})
        assert isinstance(variant, UnsupportedVariant)

    def test_missing_name(self):
        assert isinstance(parse_named_variant({"type": "int", "value": 1}), UnsupportedVariant)

    def test_not_a_mapping(self):
        assert isinstance(parse_named_variant(["n", "int", 1]), UnsupportedVariant)


class TestClassificationResult:
    def test_wire_aliases(self):
        result = ClassificationResult.from_payload(
            {
                "collection": "url",
                "score": 0.9,
                "remoteActionTemplates": [
                    {
                        "title": "Open",
                        "description": "Open link",
                        "action": "action.VIEW",
                        "data": "https://example.com",
                        "type": "text/html",
                        "category": ["browsable"],
                        "requestCode": 5,
                        "extras": [{"name": "n", "type": "int", "value": 1}],
                    }
                ],
            }
        )

        parsed = result.remote_action_templates[0]
        assert parsed.mime_type == "text/html"
        assert parsed.categories == ["browsable"]
        assert parsed.request_code == 5
        assert isinstance(parsed.extras[0], IntVariant)

    def test_malformed_template_is_dropped(self):
        result = ClassificationResult.from_payload(
            {
                "remoteActionTemplates": [
                    {"description": "no title"},
                    {"title": "Ok", "description": "fine"},
                ]
            }
        )

        assert [t.title for t in result.remote_action_templates] == ["Ok"]

    def test_invalid_score_keeps_templates(self):
        result = ClassificationResult.from_payload(
            {
                "collection": "url",
                "score": "high",
                "remoteActionTemplates": [{"title": "Ok", "description": "fine"}],
            }
        )

        assert result.score == 0.0
        assert result.collection == "url"
        assert [t.title for t in result.remote_action_templates] == ["Ok"]

    def test_numeric_score_string_is_coerced(self):
        assert ClassificationResult.from_payload({"score": "0.75"}).score == 0.75

    def test_invalid_collection_is_dropped(self):
        result = ClassificationResult.from_payload(
            {"collection": 42, "remoteActionTemplates": [{"title": "Ok", "description": "fine"}]}
        )

        assert result.collection is None
        assert len(result.remote_action_templates) == 1

    @pytest.mark.parametrize("templates", [7, "oops", {"title": "Ok", "description": "fine"}])
    def test_templates_not_a_list(self, templates):
        result = ClassificationResult.from_payload({"collection": "url", "remoteActionTemplates": templates})

        assert result.remote_action_templates == []
        assert result.collection == "url"

    def test_missing_templates(self):
        assert ClassificationResult.from_payload({"collection": "email"}).remote_action_templates == []


class TestTemplateActionFactory:
    @pytest.fixture
    def fallback(self):
        return MagicMock()

    @pytest.fixture
    def factory(self, fallback):
        return TemplateActionFactory(fallback)

    def test_absent_classification(self, factory, fallback):
        assert factory.create(None, "text", False, NOW, None) == []
        fallback.create.assert_not_called()

    def test_no_templates_delegates_to_fallback(self, factory, fallback):
        result = classification()
        context = object()

        actions = factory.create(context, "text", True, NOW, result)

        assert actions is fallback.create.return_value
        fallback.create.assert_called_once_with(context, "text", True, NOW, result)

    def test_maps_template_fields(self, factory):
        actions = factory.create(
            None,
            "example.com",
            False,
            NOW,
            classification(
                template(
                    action="action.VIEW",
                    data="https://example.com",
                    type="text/html",
                    flags=268435456,
                    category=["browsable", "browsable", "default"],
                    requestCode=42,
                    extras=[
                        {"name": "count", "type": "int", "value": 3},
                        {"name": "big", "type": "long", "value": 2**40},
                        {"name": "ratio", "type": "float", "value": 0.5},
                        {"name": "precise", "type": "double", "value": 0.25},
                        {"name": "enabled", "type": "bool", "value": False},
                        {"name": "label", "type": "string", "value": "hi"},
                    ],
                )
            ),
        )

        assert len(actions) == 1
        action = actions[0]
        assert (action.title, action.description, action.request_code) == ("Open", "Open it", 42)
        intent = action.intent
        assert intent.action == "action.VIEW"
        assert intent.data == "https://example.com"
        assert intent.mime_type == "text/html"
        assert intent.flags == 268435456
        assert intent.categories == ["browsable", "default"]
        assert intent.extras == {
            "count": 3,
            "big": 2**40,
            "ratio": 0.5,
            "precise": 0.25,
            "enabled": False,
            "label": "hi",
            EXTRA_FROM_TEXT_CLASSIFIER: True,
        }

    def test_absent_fields_are_not_defaulted(self, factory):
        action = factory.create(None, "x", False, NOW, classification(template()))[0]

        assert action.request_code == DEFAULT_REQUEST_CODE
        assert action.intent.action is None
        assert action.intent.data is None
        assert action.intent.mime_type is None
        assert action.intent.flags == 0
        assert action.intent.categories == []

    def test_unsupported_extra_is_skipped(self, factory):
        action = factory.create(
            None,
            "x",
            False,
            NOW,
            classification(
                template(
                    extras=[
                        {"name": "weird", "type": "bytes", "value": "AAEC"},
                        {"name": "kept", "type": "string", "value": "yes"},
                    ]
                )
            ),
        )[0]

        assert "weird" not in action.intent.extras
        assert action.intent.extras["kept"] == "yes"

    def test_template_with_package_is_skipped(self, factory):
        actions = factory.create(
            None,
            "x",
            False,
            NOW,
            classification(
                template(title="First"),
                template(title="Pinned", packageName="com.example.app"),
                template(title="Last"),
            ),
        )

        assert [a.title for a in actions] == ["First", "Last"]

    def test_foreign_text_appends_translation_last(self, factory):
        actions = factory.create(
            None,
            "  bonjour  ",
            True,
            NOW,
            classification(template(title="A"), template(title="B")),
        )

        assert [a.title for a in actions][:2] == ["A", "B"]
        translate = actions[-1]
        assert translate.intent.action == ACTION_TRANSLATE
        assert translate.intent.extras[EXTRA_TEXT] == "bonjour"
        assert translate.intent.extras[EXTRA_FROM_TEXT_CLASSIFIER] is True

    def test_translator_without_action_uses_default(self, fallback):
        translator = MagicMock()
        translator.create_translate_action.return_value = None
        factory = TemplateActionFactory(fallback, translator)

        actions = factory.create("ctx", " hola ", True, NOW, classification(template()))

        translator.create_translate_action.assert_called_once_with("ctx", "hola")
        assert len(actions) == 2
        assert actions[-1].intent.action == ACTION_TRANSLATE
        assert actions[-1].intent.extras[EXTRA_TEXT] == "hola"

    def test_custom_translation_action(self, fallback):
        translator = MagicMock()
        factory = TemplateActionFactory(fallback, translator)

        actions = factory.create("ctx", "hola", True, NOW, classification(template()))

        assert actions[-1] is translator.create_translate_action.return_value

    def test_blank_foreign_text_still_gets_translation(self, factory):
        actions = factory.create(None, "   ", True, NOW, classification(template(title="A")))

        assert [a.title for a in actions][0] == "A"
        assert actions[-1].intent.action == ACTION_TRANSLATE
        assert actions[-1].intent.extras[EXTRA_TEXT] == ""

    def test_fallback_is_required(self):
        with pytest.raises(ValueError):
            TemplateActionFactory(None)


class TestLegacyActionFactory:
    def test_email(self):
        actions = LegacyActionFactory().create(
            None, " a@example.com ", False, NOW, classification(collection="email")
        )

        assert actions[0].intent.data == "mailto:a@example.com"
        assert all(a.intent.extras[EXTRA_FROM_TEXT_CLASSIFIER] for a in actions)

    def test_url_without_scheme(self):
        actions = LegacyActionFactory().create(
            None, "example.com", False, NOW, classification(collection="url")
        )

        assert actions[0].intent.data == "http://example.com"

    def test_blank_foreign_text(self):
        actions = LegacyActionFactory().create(
            None, "  ", True, NOW, classification(collection="email")
        )

        assert actions[-1].intent.action == ACTION_TRANSLATE

    def test_unknown_collection_with_foreign_text(self):
        actions = LegacyActionFactory().create(
            None, "guten tag", True, NOW, classification(collection="other")
        )

        assert [a.intent.action for a in actions] == [ACTION_TRANSLATE]

    def test_used_as_fallback(self):
        factory = TemplateActionFactory(LegacyActionFactory())

        actions = factory.create(None, "555 0100", False, NOW, classification(collection="phone"))

        assert actions[0].intent.data == "tel:555 0100"

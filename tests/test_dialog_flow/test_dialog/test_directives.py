import pytest
from dialog_flow.dialog.directives import (
    Directive,
    DirectiveEvent,
    DirectiveKind,
    EventBusDirectiveSink,
    parse_text,
    resolve_text,
)


def test_modifiers_stripped_and_fired_in_order(presenters):
    sink = presenters.directives

    text = resolve_text("Hello {+50stress} there {animation:wave}", sink)

    assert text == "Hello there"
    assert sink.calls == [("stress", 50), ("animation", "wave")]


def test_negative_stress_and_optional_space():
    parsed = parse_text("{-20stress}Calm down. {+5 stress}")

    assert parsed.text == "Calm down."
    assert parsed.directives == (
        Directive(DirectiveKind.STRESS_DELTA, -20),
        Directive(DirectiveKind.STRESS_DELTA, 5),
    )


def test_scene_and_spawn_modifiers():
    parsed = parse_text("Look.{scene:Day2}\n  {spawn:crib} It's here.")

    assert parsed.text == "Look.\nIt's here."
    assert [d.kind for d in parsed.directives] == [
        DirectiveKind.SCENE_CHANGE,
        DirectiveKind.PREFAB_SPAWN,
    ]
    assert [d.payload for d in parsed.directives] == ["Day2", "crib"]


def test_prefix_directives(presenters):
    sink = presenters.directives

    text = resolve_text("<<goto:Kitchen>> <<timeline:door_slam>>  <<charge>>Go.", sink)

    assert text == "Go."
    assert sink.calls == [
        ("navigate", "Kitchen"),
        ("timeline", "door_slam"),
        ("charge", None),
    ]


def test_exit_and_charge_argument():
    parsed = parse_text("<<exit>><<charge:fast>>")

    assert parsed.text == ""
    assert parsed.directives == (
        Directive(DirectiveKind.EXIT),
        Directive(DirectiveKind.CHARGE_METER, "fast"),
    )


def test_prefix_directives_only_at_start():
    parsed = parse_text("Wait <<goto:Kitchen>> here")

    assert parsed.text == "Wait <<goto:Kitchen>> here"
    assert parsed.directives == ()


def test_plain_text_untouched():
    # No modifiers removed, so whitespace is left as authored
    assert parse_text("  Two  spaces  ").text == "  Two  spaces  "
    assert parse_text("Braces {like this} stay").text == "Braces {like this} stay"


def test_parse_text_has_no_side_effects(presenters):
    parse_text("{+1stress}")
    assert presenters.directives.calls == []


def test_resolve_without_sink_still_strips():
    assert resolve_text("Hi {animation:nod}", None) == "Hi"


def test_event_bus_sink_publishes(event_bus):
    received = []
    def handler(event):
        received.append((event.type, dict(event.data)))

    for event_type in (DirectiveEvent.STRESS_DELTA, DirectiveEvent.NAVIGATE, DirectiveEvent.EXIT_APPLICATION):
        event_bus.subscribe(event_type, handler)

    resolve_text("<<goto:Garden>><<exit>>Bye {-10stress}", EventBusDirectiveSink(event_bus))

    assert received == [
        (DirectiveEvent.NAVIGATE, {"location": "Garden"}),
        (DirectiveEvent.EXIT_APPLICATION, {}),
        (DirectiveEvent.STRESS_DELTA, {"delta": -10}),
    ]

import json

import pytest

from app.core.errors import SprintPlanFormatError
from app.services.sprint_plan import parse_sprint_plan, sum_story_points

TICKETS = [
    {"id": "a", "title": "Login page", "story_points": 3},
    {"id": "b", "title": "Password reset", "story_points": 5},
    {"id": "c", "title": "Audit log", "story_points": None},
]


@pytest.mark.parametrize(
    "body, shape",
    [
        ({"sprint_tickets": TICKETS}, "sprint_tickets"),
        ({"tickets": TICKETS}, "tickets"),
        (TICKETS, "array"),
        ([{"sprint_tickets": TICKETS}], "sprint_tickets"),
    ],
)
def test_known_shapes_yield_same_tickets(body, shape):
    plan = parse_sprint_plan(body)
    assert plan.tickets == TICKETS
    assert plan.source_shape == shape
    assert plan.total_points == 8
    assert plan.ticket_ids == ["a", "b", "c"]


@pytest.mark.parametrize("body", [{"sprint_tickets": TICKETS}, {"tickets": TICKETS}, TICKETS])
def test_json_encoded_string_is_decoded(body):
    plan = parse_sprint_plan(json.dumps(body))
    assert plan.tickets == TICKETS
    assert plan.total_points == 8


def test_doubly_encoded_string_is_decoded():
    plan = parse_sprint_plan(json.dumps(json.dumps({"tickets": TICKETS})))
    assert plan.ticket_ids == ["a", "b", "c"]


def test_upstream_total_wins_over_computed_sum():
    plan = parse_sprint_plan({"tickets": TICKETS[:1], "total_points": 5})
    assert plan.total_points == 5


def test_total_story_points_alias_is_accepted():
    plan = parse_sprint_plan({"sprint_tickets": TICKETS, "total_story_points": "13"})
    assert plan.total_points == 13


def test_encoded_ticket_list_inside_wrapper():
    plan = parse_sprint_plan({"sprint_tickets": json.dumps(TICKETS)})
    assert len(plan.tickets) == 3


def test_sprint_tickets_takes_priority_over_tickets():
    plan = parse_sprint_plan({"sprint_tickets": TICKETS[:1], "tickets": TICKETS})
    assert plan.ticket_ids == ["a"]


def test_empty_selection_is_a_valid_plan():
    plan = parse_sprint_plan({"sprint_tickets": []})
    assert plan.tickets == []
    assert plan.total_points == 0


@pytest.mark.parametrize(
    "body",
    [
        {"foo": 1},
        json.dumps({"foo": 1}),
        "not json at all",
        42,
        None,
        {"tickets": "nope"},
        {"sprint_tickets": [1, 2]},
        [{"id": "a"}, "b"],
    ],
)
def test_unrecognized_shapes_raise(body):
    with pytest.raises(SprintPlanFormatError):
        parse_sprint_plan(body)


def test_error_names_the_unexpected_keys():
    with pytest.raises(SprintPlanFormatError, match="foo"):
        parse_sprint_plan({"foo": 1})


def test_sum_story_points_ignores_missing_and_non_numeric():
    assert sum_story_points([{"story_points": 2}, {"story_points": "3"}, {"story_points": "x"}, {}]) == 5


@pytest.mark.parametrize(
    "raw",
    [
        '{"tickets": [], "total_points": NaN}',
        '{"sprint_tickets": [], "total_story_points": Infinity}',
        '[{"id": "a", "story_points": NaN}]',
        '{"tickets": [{"id": "a", "story_points": -Infinity}]}',
    ],
)
def test_non_finite_numbers_are_format_errors(raw):
    with pytest.raises(SprintPlanFormatError, match="not a finite number"):
        parse_sprint_plan(raw)

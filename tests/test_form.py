# tests/test_form.py
from __future__ import annotations

import math

import pytest
from conftest import FakeFormView
from fitness_map.form import AWAITING_SUBMISSION, HIDDEN, FormController, parse_number
from fitness_map.workouts import ValidationError


@pytest.fixture
def form(form_view: FakeFormView) -> FormController:
    return FormController(form_view)


def test_starts_hidden(form: FormController, form_view: FakeFormView) -> None:
    assert form.state == HIDDEN
    assert form.coords is None
    assert not form_view.visible


def test_open_captures_click_and_shows_cleared_form(
    form: FormController, form_view: FakeFormView
) -> None:
    form_view.fill(distance=3)
    form.open((10, 20))
    assert form.state == AWAITING_SUBMISSION
    assert form.coords == (10.0, 20.0)
    assert form_view.visible
    assert form_view.values == {}
    assert form_view.focused == 1
    assert form_view.extra_field == "cadence"


def test_open_matches_extra_field_to_selected_kind(
    form: FormController, form_view: FakeFormView
) -> None:
    form.select_kind("cycling")
    form.open((1, 2))
    assert form_view.extra_field == "elevation"


def test_kind_toggle_works_while_hidden_or_open(
    form: FormController, form_view: FakeFormView
) -> None:
    form.select_kind("cycling")
    assert form_view.extra_field == "elevation"
    assert form.state == HIDDEN

    form.open((1, 2))
    form.select_kind("running")
    assert form_view.extra_field == "cadence"
    assert form.state == AWAITING_SUBMISSION


def test_unknown_kind_selection_is_rejected(form: FormController) -> None:
    with pytest.raises(ValueError):
        form.select_kind("rowing")


def test_second_click_moves_pending_location(form: FormController) -> None:
    form.open((1, 2))
    form.open((3, 4))
    assert form.coords == (3.0, 4.0)


def test_valid_submit_returns_record_and_hides(
    form: FormController, form_view: FakeFormView
) -> None:
    form.open((10, 20))
    form_view.fill(distance="5", duration="30", cadence="150")
    record = form.submit()

    assert record is not None
    assert record.kind == "running"
    assert record.coords == (10.0, 20.0)
    assert record.pace == 6.0
    assert form.state == HIDDEN
    assert form.coords is None
    assert not form_view.visible
    assert form_view.values == {}


def test_cycling_submit_reads_elevation(form: FormController, form_view: FakeFormView) -> None:
    form_view.kind = "cycling"
    form.select_kind("cycling")
    form.open((10, 20))
    form_view.fill(distance="20", duration="60", elevation="400", cadence="junk")
    record = form.submit()
    assert record.kind == "cycling"
    assert record.speed == 20.0
    assert record.elevation_gain == 400.0


@pytest.mark.parametrize(
    "values",
    [
        {"distance": "-5", "duration": "30", "cadence": "150"},
        {"distance": "", "duration": "30", "cadence": "150"},
        {"distance": "five", "duration": "30", "cadence": "150"},
        {"distance": "5", "duration": "0", "cadence": "150"},
        {"distance": "5", "duration": "30", "cadence": ""},
        {"distance": "5", "duration": "30", "cadence": "-1"},
    ],
)
def test_invalid_submit_keeps_form_open_and_entries(
    form: FormController, form_view: FakeFormView, values: dict
) -> None:
    form.open((10, 20))
    form_view.fill(**values)
    with pytest.raises(ValidationError):
        form.submit()
    assert form.state == AWAITING_SUBMISSION
    assert form.coords == (10.0, 20.0)
    assert form_view.visible
    assert form_view.values == values


def test_blank_elevation_is_a_flat_ride(form: FormController, form_view: FakeFormView) -> None:
    form_view.kind = "cycling"
    form.select_kind("cycling")
    form.open((0, 0))
    form_view.fill(distance="10", duration="30", elevation="")
    record = form.submit()
    assert record.elevation_gain == 0.0


def test_submit_while_hidden_does_nothing(form: FormController, form_view: FakeFormView) -> None:
    form_view.fill(distance="5", duration="30", cadence="150")
    assert form.submit() is None
    assert form.state == HIDDEN


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5", 5.0), (" 7.5 ", 7.5), ("", 0.0), ("   ", 0.0), (None, 0.0), (3, 3.0), ("1e3", 1000.0)],
)
def test_parse_number(raw, expected: float) -> None:
    assert parse_number(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "5km", "--1"])
def test_parse_number_garbage_is_nan(raw: str) -> None:
    assert math.isnan(parse_number(raw))


def test_kind_read_at_submit_updates_extra_field(
    form: FormController, form_view: FakeFormView
) -> None:
    form.open((10, 20))
    assert form_view.extra_field == "cadence"

    # The selector changed without a kind-changed callback reaching the form
    form_view.kind = "cycling"
    form_view.fill(distance="20", duration="0", elevation="400")
    with pytest.raises(ValidationError):
        form.submit()
    assert form.kind == "cycling"
    assert form_view.extra_field == "elevation"
    assert form.state == AWAITING_SUBMISSION

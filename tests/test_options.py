from typing import Any, List

import pytest

from history_stack import UNBOUNDED, HistoryStack, StackOptions, create


def test_falsy_limit_means_unbounded() -> None:
    assert StackOptions(limit=0).limit == UNBOUNDED
    assert StackOptions(limit=None).limit == UNBOUNDED
    assert StackOptions().bounded is False


def test_positive_limit_is_kept() -> None:
    options = StackOptions(limit=3)

    assert options.limit == 3
    assert options.bounded is True


@pytest.mark.parametrize("limit", [-2, 1.5, "3", True])
def test_invalid_limit_rejected(limit: Any) -> None:
    with pytest.raises(ValueError):
        StackOptions(limit=limit)


def test_non_callable_callback_rejected() -> None:
    with pytest.raises(TypeError):
        StackOptions(on_undo="not callable")  # type: ignore[arg-type]


def test_from_mapping_accepts_camel_case_callbacks() -> None:
    seen: List[Any] = []

    options = StackOptions.from_mapping(
        {"limit": 4, "onUndo": seen.append, "onRedo": seen.append}
    )

    assert options.limit == 4
    assert options.on_undo == seen.append
    assert options.on_redo == seen.append


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="maxSize"):
        StackOptions.from_mapping({"maxSize": 3})


def test_create_accepts_options_mapping_and_overrides() -> None:
    base = StackOptions(limit=2)

    assert create(base).get_limit() == 2
    assert create({"limit": 5}).get_limit() == 5
    assert create(base, limit=7).get_limit() == 7
    assert base.limit == 2


def test_overrides_are_validated() -> None:
    with pytest.raises(ValueError):
        HistoryStack(StackOptions(limit=2), limit=-5)


def test_create_wires_callbacks() -> None:
    undone: List[Any] = []
    redone: List[Any] = []
    history = create({"onUndo": undone.append}, on_redo=redone.append)
    history.add("A")
    history.add("B")

    history.undo()
    history.redo()

    assert undone == ["A"]
    assert redone == ["B"]


import pytest

from mdbrowse.core.history import NavigationHistory, Visit


def test_rejects_empty_capacity():
    with pytest.raises(ValueError):
        NavigationHistory(0)


def test_append_at_head():
    history = NavigationHistory(5)
    assert history.record(Visit(0), branch=True) is None
    assert history.visits == (Visit(0),)
    assert history.position == 0
    history.go_to_head()
    assert history.at_head
    assert history.can_go_back
    assert not history.can_go_forward


def test_target_bounds():
    history = NavigationHistory(5)
    history.record(Visit(0), branch=True)
    history.go_to_head()
    assert history.target(-1) == 0
    assert history.target(-2) is None
    assert history.target(1) is None


def test_overwrite_inside_log():
    history = NavigationHistory(5)
    for index in range(3):
        history.record(Visit(index), branch=True)
        history.go_to_head()
    history.go_to(1)
    assert history.record(Visit(7, 12.5), branch=False, target=2) == 2
    assert history.visits == (Visit(0), Visit(7, 12.5), Visit(2))


def test_branch_drops_forward_entries():
    history = NavigationHistory(5)
    for index in range(3):
        history.record(Visit(index), branch=True)
        history.go_to_head()
    history.go_to(0)
    history.record(Visit(0, 3.0), branch=True)
    assert history.visits == (Visit(0, 3.0),)
    assert not history.can_go_forward


def test_trim_rebases_target():
    history = NavigationHistory(3)
    for index in range(3):
        history.record(Visit(index), branch=True)
        history.go_to_head()
    target = history.target(-1)
    assert target == 2
    assert history.record(Visit(3), branch=False, target=target) == 1
    assert history.visits == (Visit(1), Visit(2), Visit(3))
    assert history.go_to(1) == Visit(2)


def test_trim_refuses_to_drop_target():
    history = NavigationHistory(3)
    for index in range(3):
        history.record(Visit(index), branch=True)
        history.go_to_head()
    assert history.record(Visit(3), branch=False, target=0) is None
    assert history.visits == (Visit(0), Visit(1), Visit(2))
    assert history.at_head


def test_length_never_exceeds_capacity():
    history = NavigationHistory(3)
    for index in range(10):
        history.record(Visit(index), branch=True)
        history.go_to_head()
        assert len(history) <= 3
        assert 0 <= history.position <= len(history)
    assert [v.topic_index for v in history.visits] == [7, 8, 9]


def test_go_to_out_of_range():
    history = NavigationHistory()
    with pytest.raises(IndexError):
        history.go_to(0)


def test_shift_topics():
    history = NavigationHistory()
    history.record(Visit(0), branch=True)
    history.go_to_head()
    history.record(Visit(3, 1.0), branch=True)
    history.shift_topics(2)
    assert history.visits == (Visit(0), Visit(4, 1.0))


def test_clear():
    history = NavigationHistory()
    history.record(Visit(1), branch=True)
    history.clear()
    assert history.visits == ()
    assert history.position == 0
    assert history.current_visit() is None

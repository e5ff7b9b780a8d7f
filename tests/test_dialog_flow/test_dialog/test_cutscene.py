import pytest
from unittest.mock import MagicMock
from dialog_flow.components.dialog import CutsceneSpec
from dialog_flow.dialog.cutscene import CutsceneTask, CutsceneTracker


def test_cutscene_task_completes_after_duration(scheduler):
    done = MagicMock()
    stop = MagicMock()
    scheduler.add(CutsceneTask(CutsceneSpec("door_slam", 1.0), done, stop))

    scheduler.update(0.5)
    done.assert_not_called()

    scheduler.update(0.5)
    done.assert_called_once()
    stop.assert_not_called()


def test_cancel_stops_presenter_without_completion(scheduler):
    done = MagicMock()
    stop = MagicMock()
    task = scheduler.add(CutsceneTask(CutsceneSpec("door_slam", 1.0), done, stop))

    task.cancel()
    task.cancel()
    scheduler.update(2.0)

    done.assert_not_called()
    stop.assert_called_once()


def test_task_name():
    task = CutsceneTask(CutsceneSpec("leave_house", 2.0))
    assert task.name == "cutscene:leave_house"
    assert task.duration == 2.0


def test_tracker_play_once():
    tracker = CutsceneTracker()
    once = CutsceneSpec("intro", 1.0, play_once=True)
    always = CutsceneSpec("walk", 1.0)

    assert tracker.should_play(once)
    tracker.mark_played("intro")
    tracker.mark_played("walk")

    assert not tracker.should_play(once)
    assert tracker.should_play(always)
    assert tracker.played == frozenset({"intro", "walk"})

    tracker.clear()
    assert tracker.should_play(once)

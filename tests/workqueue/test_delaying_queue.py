from __future__ import annotations

import time

import pytest

from settingsync.core.workqueue import DelayingQueue
from tests.utils import wait_until


@pytest.fixture
def queue():
    queue: DelayingQueue[str] = DelayingQueue("test")
    yield queue
    queue.shut_down()


def test_adds_the_item_once_its_delay_has_passed(queue: DelayingQueue[str]) -> None:
    queue.add_after("a", 0.05)

    assert len(queue) == 0
    assert queue.waiting == 1
    assert wait_until(lambda: len(queue) == 1)
    assert queue.waiting == 0
    assert queue.get() == ("a", False)


def test_adds_immediately_without_delay(queue: DelayingQueue[str]) -> None:
    queue.add_after("a", 0)
    queue.add_after("b", -1)

    assert len(queue) == 2
    assert queue.waiting == 0


def test_keeps_the_earliest_ready_time(queue: DelayingQueue[str]) -> None:
    queue.add_after("a", 60)
    queue.add_after("a", 0.01)
    queue.add_after("a", 30)

    assert wait_until(lambda: len(queue) == 1)
    assert queue.waiting == 0


def test_releases_items_in_ready_order(queue: DelayingQueue[str]) -> None:
    queue.add_after("late", 0.1)
    queue.add_after("early", 0.02)

    assert wait_until(lambda: len(queue) == 2)
    assert queue.get()[0] == "early"
    assert queue.get()[0] == "late"


def test_discards_waiting_items_on_shut_down(queue: DelayingQueue[str]) -> None:
    queue.add_after("a", 0.05)

    queue.shut_down()
    queue.add_after("b", 0.01)

    assert queue.waiting == 0
    time.sleep(0.1)
    assert queue.get() == (None, True)

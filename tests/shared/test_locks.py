"""Tests for the keyed record locks."""

import threading

import pytest

from marketplace.errors import StorageConflict
from marketplace.utils.locks import KeyedLocks, order_key, product_key, review_key


def test_key_formats():
    assert product_key("p1") == "product:p1"
    assert order_key("o1") == "order:o1"
    assert review_key("p1", "b1") == "review:p1:b1"


def test_reentrant():
    locks = KeyedLocks()
    with locks.hold(["product:1"]):
        with locks.hold(["product:1", "order:1"]):
            pass


def test_timeout_raises_conflict():
    locks = KeyedLocks()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(["product:1"]):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(StorageConflict):
            with locks.hold(["product:1"], timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()


def test_partial_acquisition_is_released_on_timeout():
    locks = KeyedLocks()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(["product:b"]):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(StorageConflict):
            with locks.hold(["product:a", "product:b"], timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()

    acquired = []

    def other():
        with locks.hold(["product:a"], timeout=0.5):
            acquired.append(True)

    worker = threading.Thread(target=other)
    worker.start()
    worker.join()
    assert acquired == [True]


def test_disjoint_keys_do_not_block():
    locks = KeyedLocks()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(["order:1"]):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with locks.hold(["order:2"], timeout=0.05):
            pass
    finally:
        release.set()
        thread.join()


class TestRegistrySize:
    def test_released_keys_are_dropped(self):
        locks = KeyedLocks()
        with locks.hold(["product:1", "order:1"]):
            assert len(locks) == 2
        assert len(locks) == 0

    def test_reentrant_hold_keeps_entry_until_outer_release(self):
        locks = KeyedLocks()
        with locks.hold(["product:1"]):
            with locks.hold(["product:1"]):
                pass
            assert len(locks) == 1
        assert len(locks) == 0

    def test_timed_out_waiter_leaves_no_entry(self):
        locks = KeyedLocks()
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold(["product:1"]):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(5)
        try:
            with pytest.raises(StorageConflict):
                with locks.hold(["product:1"], timeout=0.05):
                    pass
            assert len(locks) == 1
        finally:
            release.set()
            thread.join()
        assert len(locks) == 0

    def test_waiter_gets_the_same_lock_after_holder_leaves(self):
        locks = KeyedLocks()
        held = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with locks.hold(["order:1"]):
                held.set()
                release.wait(5)
                order.append("holder")

        def waiter():
            held.wait(5)
            with locks.hold(["order:1"], timeout=5):
                order.append("waiter")

        threads = [threading.Thread(target=holder), threading.Thread(target=waiter)]
        for thread in threads:
            thread.start()
        held.wait(5)
        release.set()
        for thread in threads:
            thread.join()

        assert order == ["holder", "waiter"]
        assert len(locks) == 0

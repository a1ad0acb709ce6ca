"""
Tests for SyncLoop.
"""
import pytest

from src.core.segmenter import segment
from src.core.sync_loop import SyncLoop


@pytest.fixture
def segments():
    return segment(24.0, 8)


@pytest.fixture
def loop_events():
    return []


@pytest.fixture
def loop(scheduler, loop_events):
    return SyncLoop(scheduler, on_segment_changed=loop_events.append)


class TestSyncLoop:
    """Tests for SyncLoop functionality."""

    def test_initial_state(self, loop):
        assert not loop.playing
        assert loop.active_index is None

    def test_tick_before_start_is_noop(self, loop, loop_events):
        assert loop.tick() is False
        assert loop_events == []

    def test_start_schedules_first_tick(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        assert loop.playing
        assert len(scheduler.pending) == 1
        assert slave.position is None  # Nothing happens until the frame fires

    def test_frame_snaps_slave_to_master(self, loop, scheduler, master, slave, segments):
        master.position = 7.25
        loop.start(master, slave, segments)
        scheduler.run_frame()
        assert slave.position == 7.25
        assert loop.active_index == 2

    def test_reschedules_while_playing(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        for _ in range(5):
            assert scheduler.run_frame() == 1
        assert len(scheduler.pending) == 1

    def test_follows_master_each_frame(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        for t in (0.0, 0.5, 4.2, 1.0):
            master.position = t
            scheduler.run_frame()
            assert slave.position == t

    def test_tick_is_idempotent(self, loop, master, slave, segments, loop_events):
        master.position = 10.0
        loop.start(master, slave, segments)
        loop.tick()
        first = (slave.position, loop.active_index)
        loop.tick()
        assert (slave.position, loop.active_index) == first == (10.0, 3)
        assert loop_events == [3]

    def test_highlight_constant_within_segment(self, loop, master, slave, segments, loop_events):
        loop.start(master, slave, segments)
        seg = segments[5]
        t = seg.start
        while t < seg.end:
            master.position = t
            loop.tick()
            assert loop.active_index == 5
            t += 0.05
        master.position = seg.end - 1e-9
        loop.tick()
        assert loop.active_index == 5
        assert loop_events == [5]

    def test_reports_only_changes(self, loop, master, slave, segments, loop_events):
        loop.start(master, slave, segments)
        for t in (0.0, 1.0, 3.0, 3.5, 6.1, 23.9):
            master.position = t
            loop.tick()
        assert loop_events == [0, 1, 2, 7]

    def test_no_match_keeps_previous_segment(self, loop, master, slave, segments, loop_events):
        loop.start(master, slave, segments)
        master.position = 23.5
        loop.tick()
        master.position = 24.0  # Exactly at the end
        loop.tick()
        assert slave.position == 24.0
        assert loop.active_index == 7
        assert loop_events == [7]

    def test_irregular_intervals_resync_from_master(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        master.position = 1.0
        scheduler.run_frame()
        master.position = 19.0  # A long stall between frames
        scheduler.run_frame()
        assert slave.position == 19.0
        assert loop.active_index == 6

    def test_cancel_stops_rescheduling(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        scheduler.run_frame()
        loop.cancel()
        assert not loop.playing
        # The frame queued before cancel fires but does nothing
        master.position = 12.0
        assert scheduler.run_frame() == 1
        assert slave.position == 0.0
        assert scheduler.pending == []

    def test_tick_after_cancel_is_noop(self, loop, master, slave, segments, loop_events):
        loop.start(master, slave, segments)
        master.position = 4.0
        loop.tick()
        loop.cancel()
        master.position = 20.0
        assert loop.tick() is False
        assert slave.position == 4.0
        assert loop.active_index == 1
        assert loop_events == [1]

    def test_cancel_is_idempotent(self, loop, master, slave, segments):
        loop.start(master, slave, segments)
        loop.cancel()
        generation = loop.generation
        loop.cancel()
        assert loop.generation == generation

    def test_restart_invalidates_stale_frames(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        loop.cancel()
        loop.start(master, slave, segments)
        # One stale callback, one live one; only the live one reschedules
        assert scheduler.run_frame() == 2
        assert len(scheduler.pending) == 1

    def test_restart_clears_active_index(self, loop, master, slave, segments, loop_events):
        loop.start(master, slave, segments)
        master.position = 5.0
        loop.tick()
        loop.cancel()
        loop.start(master, slave, segments)
        assert loop.active_index is None
        loop.tick()
        assert loop_events == [1, 1]

    def test_reset_forgets_active_segment(self, loop, scheduler, master, slave, segments):
        loop.start(master, slave, segments)
        master.position = 16.0
        loop.tick()
        loop.reset()
        assert not loop.playing
        assert loop.active_index is None
        assert scheduler.run_frame() == 1
        assert scheduler.pending == []

    def test_cancel_from_highlight_callback(self, scheduler, master, slave, segments):
        holder = {}
        loop = SyncLoop(scheduler, on_segment_changed=lambda i: holder["loop"].cancel())
        holder["loop"] = loop
        loop.start(master, slave, segments)
        scheduler.run_frame()
        assert not loop.playing
        assert scheduler.pending == []

"""Tests for threshold segmentation (gate) and segment statistics (segstats)."""

import math

import pytest

from streamgraph.stages import Gate, SegStats
from streamgraph.stream import ConfigurationError, StreamDescriptor

from tests.fixtures import SpyStage


QUIET = -100.0


def burst_signal() -> list[float]:
    """Silence, a 40 ms burst at 50 ms, silence until 150 ms (100 Hz)."""
    return [QUIET] * 5 + [0.0, 2.0, 4.0, 6.0] + [QUIET] * 6


class TestGate:
    """Tests for the gate stage."""

    def test_boundaries_around_burst(self, host):
        """A start above threshold and an end below offthresh."""
        host.set_graph("gate")

        receiver = host.run(burst_signal(), rate=100.0)

        assert receiver.segments == [(50.0, True), (90.0, False)]
        assert len(receiver.frames) == 15

    def test_open_segment_closed_at_finalize(self, host):
        """A segment still on at the end is closed at the end time."""
        host.set_graph("gate")

        receiver = host.run([QUIET] * 5 + [0.0] * 5, rate=100.0)

        assert receiver.segments == [(50.0, True), (100.0, False)]

    def test_mininter_delays_restart(self, host):
        """A new start needs `mininter` ms since the previous one."""
        host.set_graph("gate")

        receiver = host.run([0.0, QUIET, 0.0, QUIET, QUIET, 0.0], rate=100.0)

        assert receiver.segments == [(0.0, True), (10.0, False), (50.0, True), (60.0, False)]

    def test_offset_shifts_boundaries(self, host):
        """Boundaries are reported `offset` ms later."""
        host.set_graph("gate")
        host.set_param("gate.offset", 5)

        receiver = host.run(burst_signal(), rate=100.0)

        assert receiver.segments == [(55.0, True), (95.0, False)]

    def test_offthresh_above_threshold_is_clamped(self, host):
        """An end threshold above the start threshold warns once."""
        host.set_graph("gate")
        host.set_param("gate.offthresh", 0)

        host.run(burst_signal(), rate=100.0, block_size=4)

        assert host.get_param("gate.offthresh") == -12.0
        assert len(host.warnings) == 1

    def test_watched_column(self, host):
        """Only the selected column drives the segmentation."""
        host.set_graph("gate")
        host.set_param("gate.column", 1)
        signal = [[0.0, QUIET], [0.0, 0.0], [0.0, QUIET]]

        receiver = host.run(signal, rate=100.0)

        assert receiver.segments == [(10.0, True), (20.0, False)]

    def test_column_out_of_range(self, host):
        """A column beyond the input width is rejected."""
        host.set_graph("gate")
        host.set_param("gate.column", 2)

        with pytest.raises(ConfigurationError):
            host.run(burst_signal(), rate=100.0)

        assert [d.stage for d in host.errors] == ["gate"]

    def test_boundary_precedes_its_frame(self, receiver):
        """The segment call arrives before the frame that caused it."""
        spy = SpyStage(receiver=receiver)
        gate = Gate(receiver=spy)
        gate.configure_stream(StreamDescriptor(rate=100.0))

        gate.push_frames(0.0, 1.0, [[QUIET], [0.0]])

        assert spy.calls == ["configure", "frames", "segment", "frames"]


class TestSegStats:
    """Tests for the segstats stage."""

    def test_gate_then_segstats(self, host):
        """Statistics of the frames inside the gated segment."""
        host.set_graph("gate:segstats")

        receiver = host.run(burst_signal(), rate=100.0)

        assert receiver.times == [50.0]
        assert receiver.descriptor.labels == ("Duration", "Min", "Max", "Mean", "StdDev")
        duration, low, high, mean, stddev = receiver.values[0]
        assert (duration, low, high, mean) == (40.0, 0.0, 6.0, 3.0)
        assert stddev == pytest.approx(math.sqrt(5.0))

    def test_new_start_closes_previous_segment(self, receiver):
        """A start while on emits the running segment first."""
        stats = SegStats(receiver=receiver)
        stats.configure_stream(StreamDescriptor(rate=100.0))

        stats.push_frames(0.0, 1.0, [[100.0]])
        stats.segment(0.0, True)
        stats.push_frames(0.0, 1.0, [[1.0], [3.0]])
        stats.segment(20.0, True)
        stats.push_frames(20.0, 1.0, [[5.0]])
        stats.finalize(30.0)

        assert receiver.times == [0.0, 20.0]
        assert receiver.values.tolist() == [
            [20.0, 1.0, 3.0, 2.0, 1.0],
            [10.0, 5.0, 5.0, 5.0, 0.0],
        ]
        assert receiver.finalize_times == [30.0]

    def test_without_duration(self, receiver):
        """The duration column can be switched off."""
        stats = SegStats(receiver=receiver)
        stats.params["duration"] = False

        stats.configure_stream(StreamDescriptor(width=1, labels=("e",)))

        assert receiver.descriptor.labels == ("eMin", "eMax", "eMean", "eStdDev")

    def test_reset_discards_open_segment(self, receiver):
        """Nothing is emitted for a segment interrupted by a reset."""
        stats = SegStats(receiver=receiver)
        stats.configure_stream(StreamDescriptor(rate=100.0))
        stats.segment(0.0, True)
        stats.push_frames(0.0, 1.0, [[1.0]])

        stats.reset()
        stats.finalize(10.0)

        assert receiver.frames == []
        assert receiver.reset_count == 1

"""Tests for the Sequence and Parallel composites."""

import copy

import numpy as np
import pytest

from streamgraph.graph import Borrowed, Composite, Owned, Parallel, Sequence
from streamgraph.stages import Scale, Sum, Thru
from streamgraph.stream import ConfigurationError, StreamDescriptor

from tests.fixtures import MutatingStage, RejectingStage, SpyStage


class TestSequence:
    """Tests for serial composition."""

    def test_output_descriptor_is_last_childs(self, receiver):
        """The sequence reports the shape leaving its last child."""
        seq = Sequence([Scale(), Sum()], receiver=receiver)

        output = seq.configure_stream(StreamDescriptor(width=3))

        assert output.width == 1
        assert output.labels == ("Sum",)
        assert receiver.descriptor == output

    def test_frames_flow_through_children(self, receiver):
        """Frames pass through every child in order."""
        scale = Scale()
        scale.params["factor"] = 2.0
        seq = Sequence([scale, Sum()], receiver=receiver)
        seq.configure_stream(StreamDescriptor(width=2))

        seq.push_frames(0.0, 1.0, [[1.0, 2.0], [3.0, 4.0]])

        assert receiver.values[:, 0].tolist() == [6.0, 14.0]

    def test_lifecycle_calls_reach_every_child(self, receiver):
        """Reset, segment and finalize travel down the chain."""
        first, second = SpyStage(), SpyStage()
        seq = Sequence([first, second], receiver=receiver)
        seq.configure_stream(StreamDescriptor())

        seq.segment(5.0, True)
        seq.reset()
        seq.finalize(10.0)

        assert first.calls == second.calls == ["configure", "segment", "reset", "finalize"]
        assert receiver.segments == [(5.0, True)]
        assert receiver.reset_count == 1
        assert receiver.finalize_times == [10.0]

    def test_empty_sequence_forwards(self, receiver):
        """An empty sequence behaves like a pass-through."""
        seq = Sequence([], receiver=receiver)
        seq.configure_stream(StreamDescriptor(width=2))

        seq.push_frames(0.0, 1.0, [1.0, 2.0])
        seq.finalize(1.0)

        assert receiver.descriptor.width == 2
        assert receiver.values.tolist() == [[1.0, 2.0]]
        assert receiver.finalize_times == [1.0]

    def test_frames_before_configure(self, receiver):
        """Pushing into an unconfigured sequence fails."""
        seq = Sequence([Thru()], receiver=receiver)

        with pytest.raises(ConfigurationError) as exc_info:
            seq.push_frames(0.0, 1.0, [1.0])

        assert exc_info.value.code == "NOT_CONFIGURED"

    def test_add_rewires(self, receiver):
        """Appending a child puts it before the receiver."""
        first, second = SpyStage(), SpyStage()
        seq = Sequence([first], receiver=receiver)

        seq.add(second)

        assert first.receiver is second
        assert second.receiver is receiver


class TestParallel:
    """Tests for fan-out composition."""

    def test_every_branch_sees_the_same_input(self, receiver):
        """A branch mutating its block in place does not affect siblings."""
        spy = SpyStage()
        par = Parallel([MutatingStage(), spy], receiver=receiver)
        par.configure_stream(StreamDescriptor(width=2))
        block = np.array([[1.0, 2.0], [3.0, 4.0]])

        par.push_frames(0.0, 1.0, block)

        np.testing.assert_array_equal(spy.blocks[0], [[1.0, 2.0], [3.0, 4.0]])
        np.testing.assert_array_equal(block, [[1.0, 2.0], [3.0, 4.0]])
        assert receiver.values.tolist() == [[-1.0, -1.0], [-1.0, -1.0], [1.0, 2.0], [3.0, 4.0]]

    def test_branches_deliver_in_order(self, receiver):
        """Each branch delivers its output to the shared receiver in turn."""
        scale = Scale()
        scale.params["offset"] = 10.0
        par = Parallel([Thru(), scale], receiver=receiver)
        par.configure_stream(StreamDescriptor())

        par.push_frames(0.0, 1.0, [1.0])

        assert receiver.values[:, 0].tolist() == [1.0, 11.0]

    def test_output_descriptors_per_branch(self, receiver):
        """Every branch's output shape is kept; the last one is reported."""
        par = Parallel([Thru(), Sum()], receiver=receiver)

        output = par.configure_stream(StreamDescriptor(width=3))

        assert [d.width for d in par.output_descriptors] == [3, 1]
        assert output.width == 1
        assert receiver.configure_count == 2

    def test_branch_rejection_leaves_parallel_unconfigured(self, parent, receiver):
        """One rejecting branch fails the whole negotiation."""
        rejecting = RejectingStage(parent=parent)
        par = Parallel([Thru(), rejecting], receiver=receiver)

        with pytest.raises(ConfigurationError):
            par.configure_stream(StreamDescriptor(width=2))

        assert not par.is_configured
        assert par.output_descriptors == []
        assert len(parent.errors) == 1

    def test_lifecycle_calls_fan_out(self, receiver):
        """Reset, segment and finalize reach every branch."""
        branches = [SpyStage(), SpyStage(), SpyStage()]
        par = Parallel(branches, receiver=receiver)
        par.configure_stream(StreamDescriptor())

        par.segment(1.0, False)
        par.finalize(2.0)

        assert all(b.calls == ["configure", "segment", "finalize"] for b in branches)
        assert receiver.finalize_times == [2.0, 2.0, 2.0]

    def test_empty_parallel_forwards(self, receiver):
        """An empty parallel behaves like a pass-through."""
        par = Parallel([], receiver=receiver)
        par.configure_stream(StreamDescriptor())

        par.push_frames(0.0, 1.0, [7.0])
        par.reset()

        assert receiver.values[:, 0].tolist() == [7.0]
        assert receiver.reset_count == 1


class TestOwnership:
    """Tests for owned and borrowed children."""

    def test_bare_children_are_owned(self):
        """Stages passed directly are taken as owned."""
        seq = Sequence([Thru(), Borrowed(Thru())])

        assert [handle.owned for handle in seq.handles] == [True, False]
        assert isinstance(seq.handles[0], Owned)

    def test_close_closes_only_owned_children(self, receiver):
        """Borrowed children survive the composite's teardown."""
        owned, borrowed = SpyStage(), SpyStage()
        seq = Sequence([owned], receiver=receiver)
        seq.add_borrowed(borrowed)

        seq.close()

        assert owned.closed
        assert not borrowed.closed
        assert borrowed.receiver is None
        assert len(seq) == 0

    def test_nested_close(self):
        """Closing a tree closes owned leaves at every depth."""
        leaves = [SpyStage(), SpyStage(), SpyStage()]
        tree = Sequence([leaves[0], Parallel([leaves[1], leaves[2]])])

        tree.close()

        assert all(leaf.closed for leaf in leaves)

    @pytest.mark.parametrize("copier", [copy.copy, copy.deepcopy])
    @pytest.mark.parametrize("composite_class", [Sequence, Parallel])
    def test_composites_cannot_be_copied(self, copier, composite_class):
        """Copying a composite is refused."""
        with pytest.raises(TypeError):
            copier(composite_class([Thru()]))

    def test_iter_leaves_is_depth_first(self):
        """Leaves are listed in expression order."""
        a, b, c = Thru(), Scale(), Sum()
        tree = Sequence([a, Parallel([b, Sequence([c])])])

        assert list(tree.iter_leaves()) == [a, b, c]

    def test_composite_base_is_abstract(self):
        """Only composites that define their wiring can be built."""
        with pytest.raises(TypeError):
            Composite([Thru()])

import pytest

from dirserve.selection import InvalidTransition, Operations, OperationState


def test_operation_lifecycle() -> None:
    ops = Operations()
    assert not ops.isVisible
    op = ops.start("Download 2 files")
    assert ops.isVisible
    assert op.isPending and op.status == "Pending"
    assert (ops.pending, ops.finished, ops.selected) == (1, 0, 0)

    op.update("Downloading 1/2")
    assert op.isPending
    assert op.status == "Downloading 1/2"

    ops.finish(op)
    assert op.state is OperationState.Finished
    assert op.status == "Done"
    assert (ops.pending, ops.finished, ops.selected) == (0, 1, 0)


def test_operation_finishes_once() -> None:
    ops = Operations()
    op = ops.finish(ops.start("a"), "Failed")
    with pytest.raises(InvalidTransition):
        ops.finish(op)
    assert op.status == "Failed"


def test_pending_operations_cannot_be_selected() -> None:
    ops = Operations()
    op = ops.start("a")
    with pytest.raises(InvalidTransition):
        ops.toggle(op)
    assert ops.selectAll() == 0
    assert op.isPending


def test_toggle() -> None:
    ops = Operations()
    op = ops.finish(ops.start("a"))
    assert ops.toggle(op).isSelected
    assert ops.selected == 1
    assert not ops.toggle(op).isSelected
    assert ops.selected == 0


def test_select_all_and_hide() -> None:
    ops = Operations()
    a = ops.finish(ops.start("a"))
    b = ops.start("b")
    c = ops.finish(ops.start("c"))
    assert not ops.allSelected

    assert ops.selectAll() == 2
    assert ops.allSelected
    assert not b.isSelected

    ops.toggle(c)
    assert not ops.allSelected
    assert ops.selectAll(False) == 0
    ops.toggle(a)

    assert ops.hideSelected() == [a]
    assert list(ops) == [b, c]
    assert len(ops) == 2
    assert ops.selected <= ops.finished
    assert ops.pending + ops.finished == len(ops)


def test_all_selected_needs_finished_operations() -> None:
    ops = Operations()
    assert not ops.allSelected
    ops.start("a")
    assert not ops.allSelected

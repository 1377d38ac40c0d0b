from enum import Enum
from typing import Iterator

# --
# == Selection
#
# The operations pane of listings shows one row per operation (like
# downloading the selected files). Rows are pending until their operation
# finishes, and only finished rows can be selected, which is what the
# states below enforce. This is the Python model of the `OPERATIONS_JS` script
# from `assets`, which runs the same state machine in the browser.


class InvalidTransition(RuntimeError):
	pass


class OperationState(Enum):
	Pending = "pending"
	Finished = "finished"
	Selected = "selected"


class Operation:
	__slots__ = ["label", "status", "state"]

	def __init__(self, label: str):
		self.label: str = label
		self.status: str = "Pending"
		self.state: OperationState = OperationState.Pending

	@property
	def isPending(self) -> bool:
		return self.state is OperationState.Pending

	@property
	def isSelected(self) -> bool:
		return self.state is OperationState.Selected

	def update(self, status: str, done: bool = False) -> "Operation":
		"""Updates the status text, finishing the operation when `done`."""
		if done and not self.isPending:
			raise InvalidTransition(f"Operation already finished: {self.label}")
		self.status = status
		if done:
			self.state = OperationState.Finished
		return self

	def toggle(self) -> "Operation":
		if self.isPending:
			raise InvalidTransition(f"Operation is still pending: {self.label}")
		self.state = (
			OperationState.Finished if self.isSelected else OperationState.Selected
		)
		return self

	def __repr__(self) -> str:
		return f"(Operation {self.label!r} :{self.state.value})"


class Operations:
	"""The list of operations, where counts are derived from the states so
	that `selected <= finished` and `pending + finished == len(operations)`
	always hold."""

	def __init__(self) -> None:
		self.operations: list[Operation] = []

	def start(self, label: str) -> Operation:
		op = Operation(label)
		self.operations.append(op)
		return op

	def finish(self, op: Operation, status: str = "Done") -> Operation:
		return op.update(status, True)

	def toggle(self, op: Operation) -> Operation:
		return op.toggle()

	def selectAll(self, selected: bool = True) -> int:
		"""Selects (or unselects) every finished operation, returning the
		number of selected operations."""
		state = OperationState.Selected if selected else OperationState.Finished
		for op in self.operations:
			if not op.isPending:
				op.state = state
		return self.selected

	def hideSelected(self) -> list[Operation]:
		"""Removes the selected operations, returning them."""
		hidden = [_ for _ in self.operations if _.isSelected]
		self.operations = [_ for _ in self.operations if not _.isSelected]
		return hidden

	@property
	def pending(self) -> int:
		return sum(1 for _ in self.operations if _.isPending)

	@property
	def finished(self) -> int:
		return sum(1 for _ in self.operations if not _.isPending)

	@property
	def selected(self) -> int:
		return sum(1 for _ in self.operations if _.isSelected)

	@property
	def allSelected(self) -> bool:
		"""The state of the header checkbox."""
		return self.finished > 0 and self.selected == self.finished

	@property
	def isVisible(self) -> bool:
		"""The pane is shown as long as there is an operation."""
		return bool(self.operations)

	def __len__(self) -> int:
		return len(self.operations)

	def __iter__(self) -> Iterator[Operation]:
		return iter(self.operations)


# EOF

from typing import List


class SnapshotValidationError(ValueError):
    """An imported snapshot failed validation; `errors` lists every problem."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid snapshot")


class ManagerNameError(ValueError):
    pass


class PenaltyError(ValueError):
    pass


class MatchdayError(ValueError):
    pass

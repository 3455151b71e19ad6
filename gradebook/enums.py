import enum


class GradeStatus(enum.Enum):
    CORRECT = "Correct"
    INCORRECT = "Incorrect"
    PENDING = "Pending"
    NOT_SUBMITTED = "Not submitted"

    @property
    def label(self):
        return self.value

    @property
    def is_scored(self):
        return self in (GradeStatus.CORRECT, GradeStatus.INCORRECT)

    @property
    def counts_as_attempted(self):
        # NOT_SUBMITTED is the only status that does not count toward completion
        return self is not GradeStatus.NOT_SUBMITTED

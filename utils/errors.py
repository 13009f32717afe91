"""Exceptions raised by the analysis helpers."""


class AnalysisError(Exception):
    """Base class for every error the analysis pipeline raises on purpose."""


class InsufficientDataError(AnalysisError, ValueError):
    """A subject does not have enough observations to fit a line."""

    def __init__(self, subject_id, n_obs, required=2, reason=None):
        self.subject_id = subject_id
        self.n_obs = n_obs
        self.required = required
        msg = reason or (
            f"subject {subject_id!r} has {n_obs} usable observation(s); "
            f"at least {required} distinct time points are required"
        )
        super().__init__(msg)


class DuplicateKeyError(AnalysisError, KeyError):
    """The same subject identifier appeared more than once where it must be unique."""

    def __init__(self, keys, where="feature table"):
        self.keys = list(keys)
        self.where = where
        super().__init__(f"duplicate subject_id in {where}: {self.keys}")

    def __str__(self):
        # KeyError would repr() the message
        return self.args[0]


class ClusteringError(AnalysisError, ValueError):
    """Cluster assignment was asked for something it cannot do."""


class InvalidObservationsError(AnalysisError, ValueError):
    """Observation table is missing a column or has rows without a subject."""

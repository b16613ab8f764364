# streamingml/utils/errors.py


class StreamingMLError(RuntimeError):
    """
    Base error for the streaming classifier.
    """


class ConfigurationError(StreamingMLError):
    """
    Raised at query setup (wrong parameters, feature-count mismatch
    against an existing model).
    Fatal to that query's initialization, never recovered automatically.
    """


class ModelNotInitializedError(ConfigurationError):
    """
    Raised when a model name is used for prediction before any update.
    """


class DimensionMismatchError(ConfigurationError, ValueError):
    """
    Feature vector length disagrees with the model's fixed feature count.
    """

    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Expected {expected} features, but found {found}"
        )


class InvalidInputError(StreamingMLError, ValueError):
    """
    Non-finite or otherwise unusable input.
    The posterior is left unchanged.
    """


class UnknownClassIndexError(StreamingMLError, IndexError):
    """
    Internal invariant violation: a class index with no label.
    Should never surface in correct operation.
    """

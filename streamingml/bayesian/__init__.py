"""
Bayesian Softmax Regression (FINAL / FROZEN)

One named model = one SoftmaxRegression instance, shared through
a ModelRegistry by every pipeline stage that references the name.

------------------------------------------------------------
Model semantics
------------------------------------------------------------

- Family    = multinomial logistic (softmax) regression
- Posterior = per-class diagonal Gaussian over (features + bias)
- Update    = one incremental Bayesian step per labeled event
- Predict   = Monte-Carlo vote over posterior draws

The model IS the accumulated posterior. There is no history,
no batch re-fit and no export format.

------------------------------------------------------------
Concurrency doctrine
------------------------------------------------------------

- update():  exclusive per model, applied in lock order
- predict(): lock-free, reads one immutable posterior snapshot
- A failed update never installs a new snapshot

Writers build the next snapshot off to the side and swap a single
reference; readers therefore never observe a torn weight set.
"""
from .feature_vector import FeatureVector
from .label_set import ClassLabelSet
from .posterior import PosteriorStore, LaplacePosterior, VariationalPosterior
from .softmax_regression import SoftmaxRegression, Prediction
from .registry import ModelRegistry, model_registry, qualify_model_name

__all__ = [
    "FeatureVector",
    "ClassLabelSet",
    "PosteriorStore",
    "LaplacePosterior",
    "VariationalPosterior",
    "SoftmaxRegression",
    "Prediction",
    "ModelRegistry",
    "model_registry",
    "qualify_model_name",
]

#!filepath: streamingml/bayesian/posterior.py
"""
Posterior stores (FINAL / FROZEN)

A PosteriorStore is an IMMUTABLE snapshot of per-class diagonal
Gaussian weight distributions:

    w_k ~ N(mean[k], diag(variance[k]))     k = 0..K-1

shape(mean) == shape(variance) == (K, D), D = n_features + 1 (bias last).

Every mutation returns a NEW store. The owning model swaps one
reference, so a reader holding a snapshot never sees a torn update.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
from scipy.special import expit, log_softmax

from streamingml.bayesian.optimizers import Optimizer, OptimizerState, grow_state, resolve_optimizer


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.ascontiguousarray(arr, dtype=np.float64)
    arr.setflags(write=False)
    return arr


def _softplus(x: np.ndarray) -> np.ndarray:
    return np.logaddexp(0.0, x)


def _inv_softplus(y: float) -> float:
    return float(np.log(np.expm1(y)))


class PosteriorStore(ABC):
    """
    Abstract posterior snapshot.
    """

    kind: str = ""

    def __init__(self, dim: int, prior_variance: float):
        self.dim = dim
        self.prior_variance = prior_variance

    # --------------------------------------------------
    # parameters
    # --------------------------------------------------
    @property
    @abstractmethod
    def mean(self) -> np.ndarray:
        raise NotImplementedError

    @property
    @abstractmethod
    def variance(self) -> np.ndarray:
        raise NotImplementedError

    @property
    def n_classes(self) -> int:
        return self.mean.shape[0]

    def is_finite(self) -> bool:
        var = self.variance
        return bool(
            np.all(np.isfinite(self.mean))
            and np.all(np.isfinite(var))
            and np.all(var > 0)
        )

    # --------------------------------------------------
    # transitions
    # --------------------------------------------------
    @abstractmethod
    def with_new_class(self) -> "PosteriorStore":
        """Append one class row holding the prior."""
        raise NotImplementedError

    @abstractmethod
    def updated(
        self,
        x: np.ndarray,
        target: int,
        rng: np.random.Generator,
    ) -> Tuple["PosteriorStore", float]:
        """
        One Bayesian step for observation (x, target).

        x is the bias-augmented feature vector.
        Returns (next snapshot, negative log-likelihood of target).
        """
        raise NotImplementedError

    # --------------------------------------------------
    # sampling
    # --------------------------------------------------
    def sample_weights(self, n: int, rng: np.random.Generator) -> np.ndarray:
        """(n, K, D) weight matrices."""
        eps = rng.standard_normal((n,) + self.mean.shape)
        return self.mean + np.sqrt(self.variance) * eps

    def sample_logits(self, x: np.ndarray, n: int, rng: np.random.Generator) -> np.ndarray:
        """
        (n, K) logits w_k . x for n joint weight draws.

        w_k . x of independent Gaussian weights is Gaussian, so drawing the
        projection directly has the same distribution as projecting a full
        weight draw, at O(n * K) instead of O(n * K * D).
        """
        eps = rng.standard_normal((n, self.n_classes))
        # overflow surfaces as inf / nan; callers check finiteness
        with np.errstate(over="ignore", invalid="ignore"):
            loc = self.mean @ x
            scale = np.sqrt(self.variance @ (x * x))
            return loc + scale * eps


class LaplacePosterior(PosteriorStore):
    """
    Online diagonal Laplace (assumed-density filtering) posterior.

    Per observation:
      z_k   = m_k.x / sqrt(1 + pi/8 * v_k.x^2)     (variance-moderated logit)
      p     = softmax(z)
      prec += p_k (1 - p_k) x^2                    (diagonal Hessian, >= 0)
      m_k  += (y_k - p_k) x / prec                 (Newton step)

    Precision never decreases, so variance shrinks monotonically.
    """

    kind = "laplace"

    def __init__(
        self,
        dim: int,
        prior_variance: float,
        mean: Optional[np.ndarray] = None,
        precision: Optional[np.ndarray] = None,
    ):
        super().__init__(dim, prior_variance)
        if mean is None:
            mean = np.zeros((0, dim))
        if precision is None:
            precision = np.zeros((0, dim))
        self._mean = _frozen(mean)
        self._precision = _frozen(precision)

    @property
    def mean(self) -> np.ndarray:
        return self._mean

    @property
    def precision(self) -> np.ndarray:
        return self._precision

    @property
    def variance(self) -> np.ndarray:
        return 1.0 / self._precision

    def with_new_class(self) -> "LaplacePosterior":
        return LaplacePosterior(
            self.dim,
            self.prior_variance,
            mean=np.vstack([self._mean, np.zeros((1, self.dim))]),
            precision=np.vstack(
                [self._precision, np.full((1, self.dim), 1.0 / self.prior_variance)]
            ),
        )

    def updated(self, x, target, rng):
        x2 = x * x
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            kappa = 1.0 / np.sqrt(1.0 + np.pi / 8.0 * ((1.0 / self._precision) @ x2))
            z = (self._mean @ x) * kappa

            log_p = log_softmax(z)
            p = np.exp(log_p)

            y = np.zeros_like(p)
            y[target] = 1.0

            precision = self._precision + np.outer(p * (1.0 - p), x2)
            mean = self._mean + np.outer(y - p, x) / precision

        loss = float(-log_p[target])
        return LaplacePosterior(self.dim, self.prior_variance, mean, precision), loss


class VariationalPosterior(PosteriorStore):
    """
    Mean-field Gaussian posterior fitted by streaming variational inference.

    q(w_kd) = N(mu_kd, softplus(rho_kd)^2), prior N(0, prior_variance).

    One optimizer step per observation on
        loss = E_q[-log p(y | x, w)] + KL(q || prior) / n_observations
    with the expectation estimated by `model_samples` reparameterized draws.
    """

    kind = "variational"

    def __init__(
        self,
        dim: int,
        prior_variance: float,
        optimizer: Optimizer,
        model_samples: int = 1,
        params: Optional[np.ndarray] = None,
        opt_state: Optional[OptimizerState] = None,
        n_observations: int = 0,
    ):
        super().__init__(dim, prior_variance)
        self.optimizer = optimizer
        self.model_samples = model_samples
        self.n_observations = n_observations

        # params[0] = mu, params[1] = rho
        if params is None:
            params = np.zeros((2, 0, dim))
        self._params = _frozen(params)
        self._opt_state = opt_state if opt_state is not None else optimizer.init_state(params.shape)

    @property
    def mean(self) -> np.ndarray:
        return self._params[0]

    @property
    def sigma(self) -> np.ndarray:
        return _softplus(self._params[1])

    @property
    def variance(self) -> np.ndarray:
        return self.sigma ** 2

    def _replace(self, params, opt_state, n_observations) -> "VariationalPosterior":
        return VariationalPosterior(
            self.dim,
            self.prior_variance,
            self.optimizer,
            model_samples=self.model_samples,
            params=params,
            opt_state=opt_state,
            n_observations=n_observations,
        )

    def with_new_class(self) -> "VariationalPosterior":
        row = np.zeros((2, 1, self.dim))
        # q starts at the prior (KL = 0)
        row[1] = _inv_softplus(np.sqrt(self.prior_variance))
        params = np.concatenate([self._params, row], axis=1)
        return self._replace(params, grow_state(self._opt_state, axis=1), self.n_observations)

    def updated(self, x, target, rng):
        mu, rho = self._params
        sigma = _softplus(rho)
        n_obs = self.n_observations + 1
        kl_weight = 1.0 / n_obs
        prior_var = self.prior_variance

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            # reparameterization: w = mu + sigma * eps
            eps = rng.standard_normal((self.model_samples,) + mu.shape)
            w = mu + sigma * eps
            logits = w @ x  # (S, K)

            log_p = log_softmax(logits, axis=1)
            p = np.exp(log_p)
            y = np.zeros(mu.shape[0])
            y[target] = 1.0

            # d nll / d w  ->  (S, K, D)
            grad_w = (p - y)[:, :, None] * x[None, None, :]
            grad_mu = grad_w.mean(axis=0)
            grad_sigma = (grad_w * eps).mean(axis=0)

            # KL(N(mu, sigma^2) || N(0, prior_var))
            kl = np.sum(
                0.5 * np.log(prior_var / sigma ** 2)
                + (sigma ** 2 + mu ** 2) / (2.0 * prior_var)
                - 0.5
            )
            grad_mu = grad_mu + kl_weight * mu / prior_var
            grad_sigma = grad_sigma + kl_weight * (sigma / prior_var - 1.0 / sigma)
            grad_rho = grad_sigma * expit(rho)

            grads = np.stack([grad_mu, grad_rho])
            params, opt_state = self.optimizer.step(self._params, grads, self._opt_state)

        loss = float(-log_p[:, target].mean() + kl_weight * kl)
        return self._replace(params, opt_state, n_obs), loss


def build_posterior(cfg, dim: int) -> PosteriorStore:
    """
    ClassifierConfig -> empty PosteriorStore (zero classes).
    """
    if cfg.posterior == "laplace":
        return LaplacePosterior(dim, cfg.prior_variance)
    if cfg.posterior == "variational":
        return VariationalPosterior(
            dim,
            cfg.prior_variance,
            resolve_optimizer(cfg.optimizer, cfg.learning_rate),
            model_samples=cfg.model_samples,
        )
    raise ValueError(f"Unsupported posterior family: {cfg.posterior}")

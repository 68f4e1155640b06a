"""
Bayes factors in favour of the null hypothesis

Contingency tables use the Gunel & Dickey (1974) conjugate Dirichlet
construction; the one-sample t-test uses the JZS Bayes factor with a
Cauchy prior on the effect size (Rouder et al., 2009) as implemented by
pingouin.
"""

from typing import Dict, Any, Optional, Sequence, Union

import numpy as np
import pandas as pd
import pingouin as pg
from scipy import stats
from scipy.special import gammaln

from ...core.exceptions import InsufficientDataError
from ...config.settings import (
    MAIN_COLUMN, CONDITION_COLUMN, DEFAULT_BF_PRIOR,
    DEFAULT_PRIOR_CONCENTRATION, SAMPLING_PLANS, FIXED_MARGINS
)
from .contingency import contingency_table, expected_proportions
from .labels import format_number


def log_dirichlet_norm(alpha: np.ndarray) -> float:
    """Log of the multivariate beta function B(alpha)"""
    alpha = np.asarray(alpha, dtype=float).ravel()
    return float(gammaln(alpha).sum() - gammaln(alpha.sum()))


def _log_bf10_joint_multinomial(y: np.ndarray, a: np.ndarray) -> float:
    n_rows, n_cols = y.shape
    a_rows = a.sum(axis=1) - (n_cols - 1)
    a_cols = a.sum(axis=0) - (n_rows - 1)
    if np.any(a_rows <= 0) or np.any(a_cols <= 0):
        raise ValueError("Prior concentration is too small for this table")

    log_alt = log_dirichlet_norm(y + a) - log_dirichlet_norm(a)
    log_null = (
        log_dirichlet_norm(y.sum(axis=1) + a_rows) - log_dirichlet_norm(a_rows)
        + log_dirichlet_norm(y.sum(axis=0) + a_cols) - log_dirichlet_norm(a_cols)
    )
    return log_alt - log_null


def _log_bf10_independent_multinomial(y: np.ndarray, a: np.ndarray) -> float:
    # Row totals fixed: every row has its own distribution over columns
    n_rows = y.shape[0]
    a_cols = a.sum(axis=0) - (n_rows - 1)
    if np.any(a_cols <= 0):
        raise ValueError("Prior concentration is too small for this table")

    log_alt = sum(
        log_dirichlet_norm(y[i] + a[i]) - log_dirichlet_norm(a[i])
        for i in range(n_rows)
    )
    log_null = log_dirichlet_norm(y.sum(axis=0) + a_cols) - log_dirichlet_norm(a_cols)
    return log_alt - log_null


def _log_bf10_poisson(y: np.ndarray, a: np.ndarray) -> float:
    # Gamma(a_ij, 1) cell rates; the null total rate has shape
    # sum(a) - (I-1)(J-1) so the grand-total terms no longer cancel
    n_rows, n_cols = y.shape
    total_alt = a.sum()
    total_null = total_alt - (n_rows - 1) * (n_cols - 1)
    if total_null <= 0:
        raise ValueError("Prior concentration is too small for this table")

    n_obs = y.sum()
    log_bf = _log_bf10_joint_multinomial(y, a)
    log_bf += (gammaln(n_obs + total_alt) - gammaln(total_alt)) - (gammaln(n_obs + total_null) - gammaln(total_null))
    log_bf -= (total_alt - total_null) * np.log(2.0)
    return float(log_bf)


def contingency_log_bf10(table: Union[pd.DataFrame, np.ndarray],
                         sampling_plan: str = 'indepMulti',
                         fixed_margin: str = 'rows',
                         prior_concentration: float = DEFAULT_PRIOR_CONCENTRATION) -> float:
    """
    Natural log of BF10 for association in a two-way table

    Parameters:
    -----------
    table : array-like
        Observed counts
    sampling_plan : str
        'jointMulti', 'indepMulti' or 'poisson'
    fixed_margin : str
        'rows' or 'cols'; used by 'indepMulti'
    prior_concentration : float
        Dirichlet concentration of every cell

    Returns:
    --------
    float
        ln(BF10)
    """
    if sampling_plan not in SAMPLING_PLANS:
        raise ValueError(
            f"Unknown sampling plan '{sampling_plan}'. Available: {list(SAMPLING_PLANS)}"
        )
    if fixed_margin not in FIXED_MARGINS:
        raise ValueError(f"'fixed_margin' must be one of {FIXED_MARGINS}")
    if prior_concentration <= 0:
        raise ValueError("'prior_concentration' must be positive")

    y = np.asarray(table, dtype=float)
    a = np.full(y.shape, float(prior_concentration))

    if sampling_plan == 'jointMulti':
        return _log_bf10_joint_multinomial(y, a)
    if sampling_plan == 'poisson':
        return _log_bf10_poisson(y, a)
    if fixed_margin == 'cols':
        y, a = y.T, a.T
    return _log_bf10_independent_multinomial(y, a)


def _bf_caption(text: str, caption: Optional[str]) -> str:
    if caption:
        return f"{caption}\n{text}"
    return text


def bf_contingency_tab(data: pd.DataFrame,
                       main: str = MAIN_COLUMN,
                       condition: str = CONDITION_COLUMN,
                       sampling_plan: str = 'indepMulti',
                       fixed_margin: str = 'rows',
                       prior_concentration: float = DEFAULT_PRIOR_CONCENTRATION,
                       caption: Optional[str] = None,
                       output: str = 'caption',
                       k: int = 2) -> Union[str, Dict[str, Any]]:
    """
    Bayes factor for the association of ``main`` and ``condition``

    ``output='caption'`` returns the text placed under the chart,
    ``output='results'`` the numbers behind it.
    """
    table = contingency_table(data, main, condition)
    log_bf10 = contingency_log_bf10(table, sampling_plan, fixed_margin, prior_concentration)

    results = {
        'log_bf10': log_bf10,
        'log_bf01': -log_bf10,
        'bf10': float(np.exp(log_bf10)),
        'bf01': float(np.exp(-log_bf10)),
        'sampling_plan': sampling_plan,
        'fixed_margin': fixed_margin,
        'prior_concentration': prior_concentration,
    }
    if output == 'results':
        return results
    if output != 'caption':
        raise ValueError("'output' must be 'caption' or 'results'")

    text = (
        f"In favor of null: ln(BF01) = {format_number(-log_bf10, k)}, "
        f"sampling = {SAMPLING_PLANS[sampling_plan]}, "
        f"a = {format_number(prior_concentration, k)}"
    )
    return _bf_caption(text, caption)


def bf_onesample_proptest(data: pd.DataFrame,
                          main: str = MAIN_COLUMN,
                          ratio: Optional[Sequence[float]] = None,
                          prior_concentration: float = DEFAULT_PRIOR_CONCENTRATION,
                          caption: Optional[str] = None,
                          output: str = 'caption',
                          k: int = 2) -> Union[str, Dict[str, Any]]:
    """
    Bayes factor for level proportions of ``main`` against ``ratio``

    The alternative places a symmetric Dirichlet prior on the proportions;
    the null fixes them at ``ratio`` (equal by default).
    """
    if prior_concentration <= 0:
        raise ValueError("'prior_concentration' must be positive")

    counts = data[main].value_counts(sort=False).reindex(
        data[main].cat.categories, fill_value=0
    ).to_numpy(dtype=float)
    proportions = expected_proportions(len(counts), ratio)
    a = np.full(len(counts), float(prior_concentration))

    with np.errstate(divide='ignore'):
        log_null = float(np.sum(np.where(counts > 0, counts * np.log(proportions), 0.0)))
    log_bf10 = log_dirichlet_norm(counts + a) - log_dirichlet_norm(a) - log_null

    results = {
        'log_bf10': log_bf10,
        'log_bf01': -log_bf10,
        'bf10': float(np.exp(log_bf10)),
        'bf01': float(np.exp(-log_bf10)),
        'prior_concentration': prior_concentration,
    }
    if output == 'results':
        return results
    if output != 'caption':
        raise ValueError("'output' must be 'caption' or 'results'")

    text = (
        f"In favor of null: ln(BF01) = {format_number(-log_bf10, k)}, "
        f"a = {format_number(prior_concentration, k)}"
    )
    return _bf_caption(text, caption)


def one_sample_log_bf10(x: Sequence[float], test_value: float = 0.0,
                        bf_prior: float = DEFAULT_BF_PRIOR) -> float:
    """ln(BF10) of the JZS one-sample t-test"""
    values = pd.Series(x, dtype=float).dropna().to_numpy()
    if len(values) < 2:
        raise InsufficientDataError(
            f"One-sample Bayes factor needs at least 2 observations, got {len(values)}"
        )
    t_stat = stats.ttest_1samp(values, popmean=test_value).statistic
    bf10 = float(pg.bayesfactor_ttest(t_stat, len(values), r=bf_prior))
    return float(np.log(bf10))


def bf_one_sample_ttest(x: Sequence[float],
                        test_value: float = 0.0,
                        bf_prior: float = DEFAULT_BF_PRIOR,
                        caption: Optional[str] = None,
                        output: str = 'caption',
                        k: int = 2) -> Union[str, Dict[str, Any]]:
    """Bayes factor text (or numbers) for the one-sample t-test of ``x``"""
    log_bf10 = one_sample_log_bf10(x, test_value, bf_prior)

    results = {
        'log_bf10': log_bf10,
        'log_bf01': -log_bf10,
        'bf10': float(np.exp(log_bf10)),
        'bf01': float(np.exp(-log_bf10)),
        'bf_prior': bf_prior,
        'test_value': test_value,
    }
    if output == 'results':
        return results
    if output != 'caption':
        raise ValueError("'output' must be 'caption' or 'results'")

    text = (
        f"In favor of null: ln(BF01) = {format_number(-log_bf10, k)}, "
        f"Prior width = {format_number(bf_prior, 3)}"
    )
    return _bf_caption(text, caption)

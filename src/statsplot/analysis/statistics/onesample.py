"""One-sample location tests with subtitle formatting"""

import logging
from typing import Dict, Any, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ...core.exceptions import InsufficientDataError
from ...config.settings import (
    DEFAULT_CONFIDENCE_LEVEL, DOT_BOOTSTRAP_SAMPLES, DEFAULT_BF_PRIOR,
    TEST_TYPES, ROBUST_ESTIMATORS
)
from .bayes import one_sample_log_bf10
from .labels import format_number, format_pvalue, format_conf_int

logger = logging.getLogger(__name__)


def normalize_test_type(test_type: str) -> str:
    """Resolve abbreviations such as 'np' or 'bf' to the full test type"""
    try:
        return TEST_TYPES[test_type]
    except KeyError:
        raise ValueError(
            f"Unknown test type '{test_type}'. Available: {sorted(set(TEST_TYPES))}"
        ) from None


def robust_location(values: np.ndarray, estimator: str = 'onestep') -> float:
    """
    Robust location estimate of ``values``

    Args:
        values: Sample without missing values
        estimator: 'onestep' (one-step M-estimator, Huber psi with
            bending constant 1.28), 'mom' (modified one-step, mean of values
            within 2.24 scaled MADs of the median) or 'median'

    Returns:
        The estimate
    """
    if estimator not in ROBUST_ESTIMATORS:
        raise ValueError(f"Unknown robust estimator '{estimator}'. Available: {ROBUST_ESTIMATORS}")

    median = float(np.median(values))
    if estimator == 'median':
        return median

    madn = float(np.median(np.abs(values - median))) / 0.6745
    if madn == 0:
        return median

    scaled = (values - median) / madn

    if estimator == 'mom':
        return float(values[np.abs(scaled) <= 2.24].mean())

    n_low = int(np.sum(scaled < -1.28))
    n_high = int(np.sum(scaled > 1.28))
    middle = values[np.abs(scaled) <= 1.28]
    return float((1.28 * madn * (n_high - n_low) + middle.sum()) / (len(values) - n_low - n_high))


def _wilcoxon_signed_rank(differences: np.ndarray):
    """V statistic (sum of positive ranks) and the normal-approximation z"""
    nonzero = differences[differences != 0]
    n_nonzero = len(nonzero)
    ranks = stats.rankdata(np.abs(nonzero))
    v_stat = float(ranks[nonzero > 0].sum())
    mean_v = n_nonzero * (n_nonzero + 1) / 4
    sd_v = np.sqrt(n_nonzero * (n_nonzero + 1) * (2 * n_nonzero + 1) / 24)
    z = (v_stat - mean_v) / sd_v if sd_v > 0 else np.nan
    return v_stat, z, n_nonzero


def _wilcoxon_r(values: np.ndarray, test_value: float) -> float:
    _, z, n_nonzero = _wilcoxon_signed_rank(values - test_value)
    if n_nonzero == 0:
        return np.nan
    return float(z / np.sqrt(n_nonzero))


def _percentile_ci(replicates: np.ndarray, conf_level: float):
    replicates = replicates[np.isfinite(replicates)]
    if len(replicates) == 0:
        return np.nan, np.nan
    alpha = 1 - conf_level
    low, high = np.quantile(replicates, [alpha / 2, 1 - alpha / 2])
    return float(low), float(high)


def onesample_location_test(x: Sequence[float],
                            test_type: str = 'parametric',
                            test_value: float = 0.0,
                            bf_prior: float = DEFAULT_BF_PRIOR,
                            robust_estimator: str = 'onestep',
                            conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                            nboot: int = DOT_BOOTSTRAP_SAMPLES,
                            random_state: Optional[int] = None) -> Dict[str, Any]:
    """
    Test whether the location of ``x`` differs from ``test_value``

    Parameters:
    -----------
    x : sequence of float
        Sample; missing values are ignored
    test_type : str
        'parametric' (Student's t, Hedges' g), 'nonparametric' (Wilcoxon
        signed rank, r), 'robust' (bootstrap test of a robust location
        estimator) or 'bayes' (JZS Bayes factor). Abbreviations accepted.
    test_value : float
        Location under the null hypothesis
    bf_prior : float
        Cauchy prior width for the Bayes factor
    robust_estimator : str
        'onestep', 'mom' or 'median'
    conf_level : float
        Confidence level for intervals
    nboot : int
        Bootstrap replicates
    random_state : int, optional
        Seed for the bootstrap

    Returns:
    --------
    Dict[str, Any]
        Test results
    """
    test_type = normalize_test_type(test_type)
    values = pd.Series(x, dtype=float).dropna().to_numpy()
    n_obs = len(values)

    if n_obs < 2:
        raise InsufficientDataError(
            f"One-sample test needs at least 2 observations, got {n_obs}"
        )

    rng = np.random.default_rng(random_state)
    result = {'type': test_type, 'n': n_obs, 'test_value': test_value,
              'conf_level': conf_level}

    if test_type == 'parametric':
        t_result = stats.ttest_1samp(values, popmean=test_value)
        df = n_obs - 1
        d = (values.mean() - test_value) / values.std(ddof=1)
        correction = 1 - 3 / (4 * df - 1) if df > 1 else 1.0
        se = np.sqrt(1 / n_obs + d ** 2 / (2 * n_obs))
        z = stats.norm.ppf(0.5 + conf_level / 2)
        result.update({
            'method': "One Sample t-test",
            'statistic': float(t_result.statistic),
            'parameter': df,
            'p_value': float(t_result.pvalue),
            'effect_size_name': 'g',
            'effect_size': float(d * correction),
            'conf_low': float((d - z * se) * correction),
            'conf_high': float((d + z * se) * correction),
        })

    elif test_type == 'nonparametric':
        differences = values - test_value
        v_stat, _, n_nonzero = _wilcoxon_signed_rank(differences)
        if n_nonzero == 0:
            raise InsufficientDataError("All observations equal the test value")
        p_value = stats.wilcoxon(differences[differences != 0]).pvalue
        replicates = np.array([
            _wilcoxon_r(rng.choice(values, n_obs, replace=True), test_value)
            for _ in range(nboot)
        ])
        conf_low, conf_high = _percentile_ci(replicates, conf_level)
        result.update({
            'method': "Wilcoxon signed rank test",
            'statistic': v_stat,
            'parameter': None,
            'p_value': float(p_value),
            'effect_size_name': 'r',
            'effect_size': _wilcoxon_r(values, test_value),
            'conf_low': conf_low,
            'conf_high': conf_high,
        })

    elif test_type == 'robust':
        estimate = robust_location(values, robust_estimator)
        replicates = np.array([
            robust_location(rng.choice(values, n_obs, replace=True), robust_estimator)
            for _ in range(nboot)
        ])
        below = np.mean(replicates < test_value) + 0.5 * np.mean(replicates == test_value)
        conf_low, conf_high = _percentile_ci(replicates, conf_level)
        result.update({
            'method': f"Bootstrap test of the {robust_estimator} estimator",
            'statistic': estimate,
            'parameter': None,
            'p_value': float(2 * min(below, 1 - below)),
            'effect_size_name': f"M_{robust_estimator}",
            'effect_size': estimate,
            'conf_low': conf_low,
            'conf_high': conf_high,
            'estimator': robust_estimator,
        })

    else:
        log_bf10 = one_sample_log_bf10(values, test_value, bf_prior)
        result.update({
            'method': "Bayesian one sample t-test",
            'statistic': log_bf10,
            'parameter': None,
            'p_value': np.nan,
            'log_bf10': log_bf10,
            'bf_prior': bf_prior,
        })

    return result


def format_onesample_subtitle(result: Dict[str, Any], k: int = 2) -> str:
    """Render an ``onesample_location_test`` result as one line of text"""
    n_text = f"n = {result['n']}"

    if result['type'] == 'bayes':
        return (
            f"ln(BF10) = {format_number(result['log_bf10'], k)}, "
            f"Prior width = {format_number(result['bf_prior'], 3)}, {n_text}"
        )

    ci_text = format_conf_int(result['conf_low'], result['conf_high'], result['conf_level'], k)

    if result['type'] == 'robust':
        return (
            f"{result['effect_size_name']} = {format_number(result['effect_size'], k)}, "
            f"{ci_text}, {format_pvalue(result['p_value'], k)}, {n_text}"
        )

    if result['type'] == 'parametric':
        head = f"t({result['parameter']}) = {format_number(result['statistic'], k)}"
    else:
        head = f"V = {format_number(result['statistic'], k)}"

    return (
        f"{head}, {format_pvalue(result['p_value'], k)}, "
        f"{result['effect_size_name']} = {format_number(result['effect_size'], k)}, "
        f"{ci_text}, {n_text}"
    )


def subtitle_t_onesample(x: Sequence[float],
                         test_type: str = 'parametric',
                         test_value: float = 0.0,
                         bf_prior: float = DEFAULT_BF_PRIOR,
                         robust_estimator: str = 'onestep',
                         conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                         nboot: int = DOT_BOOTSTRAP_SAMPLES,
                         k: int = 2,
                         messages: bool = True,
                         random_state: Optional[int] = None) -> str:
    """Subtitle text for the one-sample test of ``x`` against ``test_value``"""
    result = onesample_location_test(
        x, test_type=test_type, test_value=test_value, bf_prior=bf_prior,
        robust_estimator=robust_estimator, conf_level=conf_level,
        nboot=nboot, random_state=random_state
    )

    if messages and result['type'] in ('nonparametric', 'robust'):
        logger.info(
            f"Note: {format_number(conf_level * 100, 0)}% CI for effect size estimate "
            f"was computed with {nboot} bootstrap samples."
        )

    return format_onesample_subtitle(result, k=k)

"""Contingency table and proportion tests with subtitle formatting"""

import logging
from typing import Dict, Any, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.contingency_tables import SquareTable, mcnemar

from ...core.exceptions import DataValidationError
from ...config.settings import (
    MAIN_COLUMN, CONDITION_COLUMN, DEFAULT_CONFIDENCE_LEVEL,
    PIE_BOOTSTRAP_SAMPLES, MONTE_CARLO_REPLICATES
)
from .labels import (
    format_number, format_pvalue, format_conf_int, significance_stars
)

logger = logging.getLogger(__name__)


def contingency_table(data: pd.DataFrame, main: str = MAIN_COLUMN,
                      condition: str = CONDITION_COLUMN) -> pd.DataFrame:
    """Cross-tabulate ``main`` (rows) against ``condition`` (columns), zeros included"""
    return (
        data.groupby([main, condition], observed=False)
        .size()
        .unstack(fill_value=0)
    )


def _pearson_statistic(observed: np.ndarray) -> float:
    row_totals = observed.sum(axis=1, keepdims=True)
    col_totals = observed.sum(axis=0, keepdims=True)
    expected = row_totals * col_totals / observed.sum()
    with np.errstate(divide='ignore', invalid='ignore'):
        terms = np.where(expected > 0, (observed - expected) ** 2 / expected, 0.0)
    return float(terms.sum())


def _drop_empty_margins(table: np.ndarray) -> np.ndarray:
    table = table[table.sum(axis=1) > 0]
    return table[:, table.sum(axis=0) > 0]


def cramers_v(table: np.ndarray) -> float:
    """Cramér's V of a two-way table; NaN when a margin has a single level"""
    table = _drop_empty_margins(np.asarray(table, dtype=float))
    min_dim = min(table.shape) - 1 if table.size else 0
    if min_dim < 1:
        return np.nan
    return float(np.sqrt(_pearson_statistic(table) / (table.sum() * min_dim)))


def cohens_g(table: np.ndarray) -> float:
    """Cohen's g for a square table of paired observations"""
    table = np.asarray(table, dtype=float)
    upper = np.triu(table, k=1).sum()
    lower = np.tril(table, k=-1).sum()
    if upper + lower == 0:
        return np.nan
    return float(abs(upper / (upper + lower) - 0.5))


def _tabulate(main_codes: np.ndarray, condition_codes: np.ndarray,
              shape: Sequence[int]) -> np.ndarray:
    table = np.zeros(shape, dtype=float)
    np.add.at(table, (main_codes, condition_codes), 1)
    return table


def _bootstrap_normal_ci(estimate: float, replicates: np.ndarray,
                         conf_level: float):
    """Bias-corrected normal-approximation interval"""
    replicates = replicates[np.isfinite(replicates)]
    if not np.isfinite(estimate) or len(replicates) < 2:
        return np.nan, np.nan
    z = stats.norm.ppf(0.5 + conf_level / 2)
    bias = replicates.mean() - estimate
    se = replicates.std(ddof=1)
    return float(estimate - bias - z * se), float(estimate - bias + z * se)


def contingency_tab_test(data: pd.DataFrame,
                         main: str = MAIN_COLUMN,
                         condition: str = CONDITION_COLUMN,
                         paired: bool = False,
                         conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                         nboot: int = PIE_BOOTSTRAP_SAMPLES,
                         simulate_p_value: bool = False,
                         B: int = MONTE_CARLO_REPLICATES,
                         random_state: Optional[int] = None) -> Dict[str, Any]:
    """
    Test association between two categorical columns

    Unpaired data use Pearson's chi-square test of independence without
    continuity correction (optionally with a Monte Carlo p-value from ``B``
    tables sharing the observed margins). Paired data use McNemar's test
    for 2x2 tables and Bowker's symmetry test for larger square tables.

    Parameters:
    -----------
    data : pd.DataFrame
        One row per observation, categorical ``main`` and ``condition``
    paired : bool, default False
        Whether ``main`` and ``condition`` are repeated measurements
    conf_level : float
        Confidence level of the effect size interval
    nboot : int
        Bootstrap replicates for the effect size interval
    simulate_p_value : bool
        Compute a Monte Carlo p-value (unpaired only)
    B : int
        Monte Carlo replicates
    random_state : int, optional
        Seed for bootstrap and simulation

    Returns:
    --------
    Dict[str, Any]
        Test results
    """
    rng = np.random.default_rng(random_state)
    table = contingency_table(data, main, condition)
    observed = table.to_numpy(dtype=float)
    n_obs = int(observed.sum())

    main_codes = data[main].cat.codes.to_numpy()
    condition_codes = data[condition].cat.codes.to_numpy()

    if paired:
        if observed.shape[0] != observed.shape[1]:
            raise DataValidationError(
                "Paired test needs the same number of levels in both variables, "
                f"got a {observed.shape[0]}x{observed.shape[1]} table"
            )
        if observed.shape == (2, 2):
            result = mcnemar(observed, exact=False, correction=True)
            statistic, p_value, parameter = float(result.statistic), float(result.pvalue), 1
        else:
            result = SquareTable(observed, shift_zeros=False).symmetry()
            statistic, p_value, parameter = float(result.statistic), float(result.pvalue), int(result.df)
        method = "McNemar's test"
        effect_name, effect_fn = 'g', cohens_g
        simulated = False
    else:
        chi2, p_value, dof, _ = stats.chi2_contingency(observed, correction=False)
        statistic, parameter = float(chi2), int(dof)
        method = "Pearson's chi-squared test"
        effect_name, effect_fn = 'V', cramers_v
        simulated = bool(simulate_p_value)

        if simulated:
            simulated_stats = np.array([
                _pearson_statistic(_tabulate(rng.permutation(main_codes),
                                             condition_codes, observed.shape))
                for _ in range(B)
            ])
            tolerance = 10 * np.finfo(float).eps * max(statistic, 1.0)
            p_value = float((1 + np.sum(simulated_stats >= statistic - tolerance)) / (B + 1))
            parameter = None

    effect_size = effect_fn(observed)

    replicates = []
    for _ in range(nboot):
        idx = rng.integers(0, n_obs, n_obs)
        replicates.append(effect_fn(_tabulate(main_codes[idx], condition_codes[idx], observed.shape)))
    conf_low, conf_high = _bootstrap_normal_ci(effect_size, np.array(replicates, dtype=float), conf_level)

    return {
        'method': method,
        'statistic': statistic,
        'parameter': parameter,
        'p_value': float(p_value),
        'effect_size_name': effect_name,
        'effect_size': effect_size,
        'conf_low': conf_low,
        'conf_high': conf_high,
        'conf_level': conf_level,
        'nboot': nboot,
        'n': n_obs,
        'simulated': simulated,
        'paired': paired,
        'table': table,
    }


def subtitle_contingency_tab(data: pd.DataFrame,
                             main: str = MAIN_COLUMN,
                             condition: str = CONDITION_COLUMN,
                             paired: bool = False,
                             stat_title: Optional[str] = None,
                             conf_level: float = DEFAULT_CONFIDENCE_LEVEL,
                             nboot: int = PIE_BOOTSTRAP_SAMPLES,
                             simulate_p_value: bool = False,
                             B: int = MONTE_CARLO_REPLICATES,
                             k: int = 2,
                             messages: bool = True,
                             random_state: Optional[int] = None) -> str:
    """Subtitle text for the chi-square / McNemar test of ``main`` by ``condition``"""
    result = contingency_tab_test(
        data, main, condition, paired=paired, conf_level=conf_level,
        nboot=nboot, simulate_p_value=simulate_p_value, B=B,
        random_state=random_state
    )

    if messages:
        logger.info(
            f"Note: {format_number(conf_level * 100, 0)}% CI for effect size estimate "
            f"was computed with {nboot} bootstrap samples."
        )

    return format_contingency_subtitle(result, stat_title=stat_title, k=k)


def format_contingency_subtitle(result: Dict[str, Any],
                                stat_title: Optional[str] = None,
                                k: int = 2) -> str:
    """Render a ``contingency_tab_test`` result as one line of text"""
    parameter = 'sim' if result['parameter'] is None else str(result['parameter'])
    prefix = "McNemar's χ²" if result['paired'] else 'χ²'

    text = (
        f"{prefix}({parameter}) = {format_number(result['statistic'], k)}, "
        f"{format_pvalue(result['p_value'], k)}, "
        f"{result['effect_size_name']} = {format_number(result['effect_size'], k)}, "
        f"{format_conf_int(result['conf_low'], result['conf_high'], result['conf_level'], k)}, "
        f"n = {result['n']}"
    )
    if stat_title:
        text = f"{stat_title}: {text}"
    return text


def expected_proportions(n_levels: int, ratio: Optional[Sequence[float]]) -> np.ndarray:
    if ratio is None:
        return np.full(n_levels, 1.0 / n_levels)

    ratio = np.asarray(ratio, dtype=float)
    if len(ratio) != n_levels:
        raise ValueError(
            f"'ratio' has {len(ratio)} entries but the variable has {n_levels} levels"
        )
    if np.any(ratio < 0) or not np.isclose(ratio.sum(), 1.0):
        raise ValueError("'ratio' must contain non-negative proportions that sum to 1")
    return ratio


def onesample_proptest(data: pd.DataFrame, main: str = MAIN_COLUMN,
                       ratio: Optional[Sequence[float]] = None) -> Dict[str, Any]:
    """
    Chi-square goodness-of-fit test of the level counts of ``main``

    Parameters:
    -----------
    data : pd.DataFrame
        One row per observation with a categorical ``main``
    ratio : sequence of float, optional
        Expected proportions in category order; equal by default

    Returns:
    --------
    Dict[str, Any]
        Test results including Cramér's V for goodness of fit
    """
    observed = data[main].value_counts(sort=False).reindex(
        data[main].cat.categories, fill_value=0
    )
    counts = observed.to_numpy(dtype=float)
    n_obs = int(counts.sum())
    n_levels = len(counts)
    proportions = expected_proportions(n_levels, ratio)

    if n_levels > 1:
        statistic, p_value = stats.chisquare(counts, f_exp=proportions * n_obs)
        effect_size = float(np.sqrt(statistic / (n_obs * (n_levels - 1))))
    else:
        statistic, p_value, effect_size = 0.0, np.nan, np.nan

    return {
        'method': "Chi-squared test for given probabilities",
        'statistic': float(statistic),
        'parameter': n_levels - 1,
        'p_value': float(p_value),
        'effect_size_name': 'V',
        'effect_size': effect_size,
        'n': n_obs,
        'observed': observed,
        'expected_proportions': proportions,
    }


def subtitle_onesample_proptest(data: pd.DataFrame, main: str = MAIN_COLUMN,
                                ratio: Optional[Sequence[float]] = None,
                                legend_title: Optional[str] = None,
                                k: int = 2) -> str:
    """Subtitle text for the goodness-of-fit test of ``main``"""
    result = onesample_proptest(data, main, ratio)

    text = (
        f"χ²gof({result['parameter']}) = {format_number(result['statistic'], k)}, "
        f"{format_pvalue(result['p_value'], k)}, "
        f"V = {format_number(result['effect_size'], k)}, "
        f"n = {result['n']}"
    )
    if legend_title:
        text = f"Proportion test ({legend_title}): {text}"
    return text


def grouped_proptest(data: pd.DataFrame,
                     main: str = MAIN_COLUMN,
                     condition: str = CONDITION_COLUMN,
                     k: int = 2) -> pd.DataFrame:
    """
    One-sample proportion test of ``main`` within every level of ``condition``

    Returns:
    --------
    pd.DataFrame
        One row per condition level: the percentage of each ``main`` level
        as text in a ``"<level> (%)"`` column, then ``statistic``,
        ``parameter``, ``p_value`` and ``significance``
    """
    levels = data[main].cat.categories
    rows = []

    for level, group in data.groupby(condition, observed=True, sort=True):
        counts = group[main].value_counts(sort=False).reindex(levels, fill_value=0)
        total = counts.sum()

        row = {condition: level}
        for main_level, count in counts.items():
            row[f"{main_level} (%)"] = f"{format_number(count / total * 100, k)}%"

        if len(levels) > 1:
            statistic, p_value = stats.chisquare(counts.to_numpy(dtype=float))
        else:
            statistic, p_value = 0.0, np.nan

        row.update({
            'statistic': float(statistic),
            'parameter': len(levels) - 1,
            'p_value': float(p_value),
            'significance': significance_stars(p_value),
        })
        rows.append(row)

    results = pd.DataFrame(rows)
    results[condition] = pd.Categorical(
        results[condition], categories=data[condition].cat.categories
    )
    return results

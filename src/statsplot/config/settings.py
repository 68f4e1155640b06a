"""Global configuration settings"""

from typing import Dict, Tuple

# Canonical column names produced by the column selector
MAIN_COLUMN = 'main'
CONDITION_COLUMN = 'condition'
COUNTS_COLUMN = 'counts'

# Statistical settings
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_DIGITS = 2
DEFAULT_PERCENT_DIGITS = 0
PIE_BOOTSTRAP_SAMPLES = 25
DOT_BOOTSTRAP_SAMPLES = 100
MONTE_CARLO_REPLICATES = 2000

# Shapiro-Wilk is only reported inside this sample size range
NORMALITY_SAMPLE_RANGE: Tuple[int, int] = (3, 5000)

# p-value cutoffs for significance markers, checked in order
SIGNIFICANCE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (0.001, '***'),
    (0.01, '**'),
    (0.05, '*'),
)
NOT_SIGNIFICANT_LABEL = 'ns'

# Bayes factor priors
DEFAULT_BF_PRIOR = 0.707
DEFAULT_PRIOR_CONCENTRATION = 1.0
SAMPLING_PLANS: Dict[str, str] = {
    'jointMulti': 'joint multinomial',
    'indepMulti': 'independent multinomial',
    'poisson': 'poisson',
}
FIXED_MARGINS = ('rows', 'cols')

# Accepted spellings of the one-sample test type
TEST_TYPES: Dict[str, str] = {
    'parametric': 'parametric', 'p': 'parametric',
    'nonparametric': 'nonparametric', 'np': 'nonparametric',
    'robust': 'robust', 'r': 'robust',
    'bayes': 'bayes', 'bf': 'bayes',
}
ROBUST_ESTIMATORS = ('onestep', 'mom', 'median')

# Palette
DEFAULT_PALETTE = 'Dark2'

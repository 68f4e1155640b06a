"""Test suite for contingency table and proportion tests"""

import pytest
import numpy as np
from scipy import stats

from statsplot.analysis.statistics.contingency import (
    contingency_table, contingency_tab_test, format_contingency_subtitle,
    subtitle_contingency_tab, onesample_proptest, subtitle_onesample_proptest,
    grouped_proptest, cramers_v, cohens_g, expected_proportions
)
from statsplot.core.exceptions import DataValidationError


class TestContingencyTable:
    """Test cross-tabulation"""

    def test_zero_cells_kept(self, make_observations):
        data = make_observations([[1, 1], [0, 1]], ['a', 'b'], ['x', 'y'])
        table = contingency_table(data)

        assert table.shape == (2, 2)
        assert table.loc['b', 'x'] == 0
        assert table.loc['a', 'y'] == 1

    def test_effect_sizes(self):
        assert cramers_v(np.array([[10, 0], [0, 10]])) == pytest.approx(1.0)
        assert cramers_v(np.array([[5, 5], [5, 5]])) == pytest.approx(0.0)
        assert cohens_g(np.array([[10, 5], [15, 20]])) == pytest.approx(0.25)


class TestContingencyTabTest:
    """Test the association test behind the pie subtitle"""

    def setup_method(self):
        self.table = [[10, 20], [30, 5]]

    def test_pearson_without_correction(self, make_observations):
        data = make_observations(self.table, ['a', 'b'], ['x', 'y'])
        result = contingency_tab_test(data, nboot=25, random_state=1)

        chi2, p_value, dof, _ = stats.chi2_contingency(np.array(self.table), correction=False)
        assert result['statistic'] == pytest.approx(chi2)
        assert result['p_value'] == pytest.approx(p_value)
        assert result['parameter'] == dof == 1
        assert result['effect_size_name'] == 'V'
        assert result['effect_size'] == pytest.approx(np.sqrt(chi2 / 65))
        assert result['n'] == 65
        assert result['conf_low'] <= result['conf_high']

    def test_reproducible_with_seed(self, make_observations):
        data = make_observations(self.table, ['a', 'b'], ['x', 'y'])
        first = contingency_tab_test(data, nboot=10, random_state=7)
        second = contingency_tab_test(data, nboot=10, random_state=7)
        assert first['conf_low'] == second['conf_low']

    def test_simulated_p_value(self, make_observations):
        data = make_observations(self.table, ['a', 'b'], ['x', 'y'])
        result = contingency_tab_test(data, simulate_p_value=True, B=200,
                                      nboot=5, random_state=3)

        assert result['simulated']
        assert result['parameter'] is None
        assert 1 / 201 <= result['p_value'] <= 1
        # Strong association: few permuted tables are as extreme
        assert result['p_value'] < 0.05

    def test_paired_mcnemar(self, make_observations):
        data = make_observations([[10, 5], [15, 20]], ['no', 'yes'], ['no', 'yes'])
        result = contingency_tab_test(data, paired=True, nboot=10, random_state=1)

        assert result['statistic'] == pytest.approx(81 / 20)
        assert result['parameter'] == 1
        assert result['effect_size_name'] == 'g'
        assert result['effect_size'] == pytest.approx(0.25)

    def test_paired_needs_square_table(self, make_observations):
        data = make_observations([[1, 2, 3], [4, 5, 6]], ['a', 'b'], ['x', 'y', 'z'])
        with pytest.raises(DataValidationError, match="2x3"):
            contingency_tab_test(data, paired=True)

    def test_subtitle_text(self):
        result = {
            'statistic': 4.051, 'parameter': 1, 'p_value': 0.044,
            'effect_size_name': 'V', 'effect_size': 0.25,
            'conf_low': 0.1, 'conf_high': 0.4, 'conf_level': 0.95,
            'n': 50, 'paired': False,
        }
        assert format_contingency_subtitle(result) == (
            "χ²(1) = 4.05, p = 0.044, V = 0.25, CI95% [0.10, 0.40], n = 50"
        )
        assert format_contingency_subtitle(result, stat_title='Survival').startswith(
            "Survival: χ²(1)"
        )

    def test_subtitle_paired_prefix(self, make_observations):
        data = make_observations([[10, 5], [15, 20]], ['no', 'yes'], ['no', 'yes'])
        subtitle = subtitle_contingency_tab(data, paired=True, nboot=5,
                                            messages=False, random_state=1)
        assert subtitle.startswith("McNemar's χ²(1) = 4.05")


class TestProportionTests:
    """Test goodness-of-fit tests"""

    def test_onesample_equal_proportions(self, make_observations):
        data = make_observations([[30], [10]], ['a', 'b'], ['x'])
        result = onesample_proptest(data)

        assert result['statistic'] == pytest.approx(10.0)
        assert result['parameter'] == 1
        assert result['effect_size'] == pytest.approx(0.5)
        assert result['n'] == 40

    def test_onesample_ratio(self, make_observations):
        data = make_observations([[30], [10]], ['a', 'b'], ['x'])
        result = onesample_proptest(data, ratio=[0.75, 0.25])
        assert result['statistic'] == pytest.approx(0.0)

    def test_invalid_ratio(self):
        with pytest.raises(ValueError, match="entries"):
            expected_proportions(3, [0.5, 0.5])
        with pytest.raises(ValueError, match="sum to 1"):
            expected_proportions(2, [0.5, 0.6])

    def test_onesample_subtitle(self, make_observations):
        data = make_observations([[30], [10]], ['a', 'b'], ['x'])
        subtitle = subtitle_onesample_proptest(data, legend_title='Survived')
        assert subtitle.startswith("Proportion test (Survived): χ²gof(1) = 10.00, p = 0.002")
        assert subtitle.endswith("V = 0.50, n = 40")

    def test_grouped_proptest(self, make_observations):
        data = make_observations([[30, 5], [10, 5]], ['a', 'b'], ['x', 'y'])
        results = grouped_proptest(data)

        assert list(results['condition']) == ['x', 'y']
        assert list(results['a (%)']) == ['75.00%', '50.00%']
        assert list(results['significance']) == ['**', 'ns']
        assert results['p_value'].iloc[1] == pytest.approx(1.0)

    def test_grouped_proptest_level_named_like_result(self, make_observations):
        data = make_observations([[30, 5], [10, 5]], ['significance', 'p_value'], ['x', 'y'])
        results = grouped_proptest(data)

        assert list(results['significance']) == ['**', 'ns']
        assert list(results['significance (%)']) == ['75.00%', '50.00%']
        assert results['p_value'].iloc[1] == pytest.approx(1.0)

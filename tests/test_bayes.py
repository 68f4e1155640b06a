"""Test suite for Bayes factor captions"""

import pytest
import numpy as np

from statsplot.analysis.statistics.bayes import (
    log_dirichlet_norm, contingency_log_bf10, bf_contingency_tab,
    bf_onesample_proptest, bf_one_sample_ttest
)


class TestContingencyBayesFactor:
    """Test the Gunel-Dickey contingency table Bayes factors"""

    def setup_method(self):
        self.associated = np.array([[50, 0], [0, 50]])
        self.independent = np.array([[25, 25], [25, 25]])

    def test_dirichlet_norm(self):
        assert log_dirichlet_norm([1, 1]) == pytest.approx(0.0)
        assert log_dirichlet_norm([2, 3]) == pytest.approx(np.log(1 / 12))

    @pytest.mark.parametrize('plan', ['jointMulti', 'indepMulti', 'poisson'])
    def test_association_favours_alternative(self, plan):
        assert contingency_log_bf10(self.associated, sampling_plan=plan) > 0

    @pytest.mark.parametrize('plan', ['jointMulti', 'indepMulti'])
    def test_independence_favours_null(self, plan):
        assert contingency_log_bf10(self.independent, sampling_plan=plan) < 0

    def test_fixed_margin_columns(self):
        table = np.array([[12, 3, 7], [4, 9, 2]])
        by_cols = contingency_log_bf10(table, 'indepMulti', fixed_margin='cols')
        transposed = contingency_log_bf10(table.T, 'indepMulti', fixed_margin='rows')
        assert by_cols == pytest.approx(transposed)

    def test_joint_multinomial_symmetric(self):
        table = np.array([[12, 3, 7], [4, 9, 2]])
        assert contingency_log_bf10(table, 'jointMulti') == pytest.approx(
            contingency_log_bf10(table.T, 'jointMulti')
        )

    def test_invalid_options(self):
        with pytest.raises(ValueError, match="sampling plan"):
            contingency_log_bf10(self.independent, sampling_plan='hypergeom')
        with pytest.raises(ValueError, match="fixed_margin"):
            contingency_log_bf10(self.independent, fixed_margin='both')
        with pytest.raises(ValueError, match="prior_concentration"):
            contingency_log_bf10(self.independent, prior_concentration=0)

    def test_caption(self, make_observations):
        data = make_observations(self.associated.tolist(), ['a', 'b'], ['x', 'y'])
        caption = bf_contingency_tab(data)

        assert caption.startswith("In favor of null: ln(BF01) = -")
        assert caption.endswith("sampling = independent multinomial, a = 1.00")

    def test_caption_after_user_caption(self, make_observations):
        data = make_observations(self.associated.tolist(), ['a', 'b'], ['x', 'y'])
        caption = bf_contingency_tab(data, caption='Source: survey')
        assert caption.startswith("Source: survey\nIn favor of null")

    def test_results_output(self, make_observations):
        data = make_observations(self.independent.tolist(), ['a', 'b'], ['x', 'y'])
        results = bf_contingency_tab(data, sampling_plan='jointMulti', output='results')

        assert results['log_bf01'] == pytest.approx(-results['log_bf10'])
        assert results['bf01'] > 1


class TestProportionBayesFactor:
    """Test the Dirichlet multinomial Bayes factor"""

    def test_equal_counts_favour_null(self, make_observations):
        data = make_observations([[50], [50]], ['a', 'b'], ['x'])
        results = bf_onesample_proptest(data, output='results')
        assert results['log_bf10'] < 0

    def test_unequal_counts_favour_alternative(self, make_observations):
        data = make_observations([[90], [10]], ['a', 'b'], ['x'])
        results = bf_onesample_proptest(data, output='results')
        assert results['log_bf10'] > 0

    def test_caption(self, make_observations):
        data = make_observations([[50], [50]], ['a', 'b'], ['x'])
        caption = bf_onesample_proptest(data)
        assert caption.startswith("In favor of null: ln(BF01) = 2.")
        assert caption.endswith("a = 1.00")


class TestOneSampleBayesFactor:
    """Test the JZS Bayes factor caption"""

    def test_caption(self):
        caption = bf_one_sample_ttest([1.2, 2.3, 3.1, 4.8, 5.0], test_value=2.0)
        assert caption.startswith("In favor of null: ln(BF01) = ")
        assert caption.endswith("Prior width = 0.707")

    def test_invalid_output(self):
        with pytest.raises(ValueError, match="output"):
            bf_one_sample_ttest([1.0, 2.0, 3.0], output='table')

"""Descriptive summaries, label formatting and statistical tests"""

from .descriptive import (
    calculate_basic_statistics, calculate_centrality, calculate_summary_by_group,
    summarize_proportions, summarize_ranks
)
from .labels import (
    format_slice_label, add_slice_labels, group_size_labels, first_row_only,
    significance_stars, format_number, format_rounded, format_pvalue
)
from .contingency import (
    contingency_table, contingency_tab_test, subtitle_contingency_tab,
    onesample_proptest, subtitle_onesample_proptest, grouped_proptest
)
from .onesample import onesample_location_test, subtitle_t_onesample
from .bayes import bf_contingency_tab, bf_onesample_proptest, bf_one_sample_ttest
from .normality import normality_message

"""Summary aggregation helpers.

This package contains the grouping primitives (sum, count, ratio, top N),
the month → season lookup, and the catalogue of summaries computed from the
prepared transaction table. Summaries are small pandas DataFrames computed
eagerly and handed to the chart renderer.
"""

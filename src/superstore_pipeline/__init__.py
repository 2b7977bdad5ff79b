"""superstore_pipeline package.

Contains modules for loading a retail (Superstore) sales export, cleaning and
validating transactions, deriving calendar attributes, building grouped sales
summaries, and rendering one chart per analysis question.

Architecture:
- Ingest → Clean → Summaries → Charts, recomputed from the CSV on every run
- Dask is used for partitioned CSV reads and cleaning
- Pydantic models validate transaction records
- Altair renders the charts
"""

__all__ = ["__version__"]
__version__ = "0.1.0"

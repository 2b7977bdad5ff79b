"""Loading of the raw Superstore CSV export into a Dask DataFrame."""

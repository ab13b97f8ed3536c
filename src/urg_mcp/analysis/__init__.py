"""Post-processing of scan data."""

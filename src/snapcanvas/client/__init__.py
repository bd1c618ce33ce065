"""HTTP client for the SnapCanvas proxy."""

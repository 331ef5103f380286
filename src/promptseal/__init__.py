"""promptseal — secure prompt templating and delivery pipeline."""

__version__ = "0.4.0"

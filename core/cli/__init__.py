"""Command-line interface for the trial issue tracker."""

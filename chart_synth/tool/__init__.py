"""Command line tool for chart-synth."""

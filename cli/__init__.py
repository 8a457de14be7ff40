"""Command line interface for nnet."""

"""Digit pattern analysis, strategy selection and cycle scheduling."""

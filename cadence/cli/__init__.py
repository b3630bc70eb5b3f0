"""
CLI Module - Typer commands for the review board.
"""

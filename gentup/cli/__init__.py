"""Command-line interface for gentup"""

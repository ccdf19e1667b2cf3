"""Command modules for the Todry CLI."""

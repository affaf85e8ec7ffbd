"""Rendering front ends for Pitch Coach."""

"""Pygame front-end for NeonDrop."""

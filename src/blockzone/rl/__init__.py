"""Scripted agents for the NeonDrop environment."""
